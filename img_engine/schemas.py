"""
img_engine/schemas.py

Modelos de entrada das chamadas da ponte JS -> Python (`bridge.Api`).
Campos:
- `file_id`: índice do arquivo enviado via `upload`.
- `level`: nível de compressão 10..90 (porcentagem).
- `size` + `unit`: tamanho-alvo em KB/MB.
- `strategy`: 'search' (padrão) ou 'ratio'.
- `target_format`: JPG | PNG | WEBP.
"""

# img_engine/schemas.py
from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, Field

from .engine_config import PERCENT_DEFAULT, PERCENT_MAX, PERCENT_MIN

class UploadFile(BaseModel):
    name: str = "imagem"
    type: str = ""
    bytes_b64: str

class FileRef(BaseModel):
    file_id: int = Field(ge=0)

class CompressIn(FileRef):
    level: int = Field(default=PERCENT_DEFAULT, ge=PERCENT_MIN, le=PERCENT_MAX)

class TargetSizeIn(FileRef):
    size: float = Field(gt=0)
    unit: Literal["KB", "MB"] = "KB"
    strategy: Literal["search", "ratio"] = "search"
    mime: Optional[str] = None  # None = mesmo formato do arquivo

class ConvertIn(FileRef):
    target_format: Literal["JPG", "JPEG", "PNG", "WEBP"] = "PNG"
