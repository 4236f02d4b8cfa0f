"""
img_engine/engine_config.py

Constantes de política da busca por tamanho-alvo e tabela de formatos.
- `QUALITY_SWEEP`: qualidades da fase 1 (escala 1.0), da maior para a menor.
- `DOWNSCALE_SCALES` x `DOWNSCALE_QUALITIES`: grade da fase 2.
- `TOLERANCE_RATIO`: faixa aceita sem continuar a busca (5% do alvo).
- `ESCALATION_RATIO`: só reduz dimensões se o melhor da fase 1 passar de 1.1x o alvo.
- `FORMATS`: família mime -> {pil, ext, lossy}
"""

# img_engine/engine_config.py
from __future__ import annotations
import os
from typing import Dict, Tuple

QUALITY_SWEEP: Tuple[float, ...] = (0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1)
DOWNSCALE_SCALES: Tuple[float, ...] = (0.9, 0.8, 0.7, 0.6, 0.5)
DOWNSCALE_QUALITIES: Tuple[float, ...] = (0.8, 0.6, 0.4, 0.2)

MAX_CANDIDATES = len(QUALITY_SWEEP) + len(DOWNSCALE_SCALES) * len(DOWNSCALE_QUALITIES)  # 29

TOLERANCE_RATIO = 0.05
ESCALATION_RATIO = 1.1

# estratégia "ratio" (um único encode, sem busca)
RATIO_QUALITY_MIN = 0.1
RATIO_QUALITY_MAX = 0.9
RATIO_SCALE_KNEE = 0.3     # abaixo desta razão alvo/origem também reduz dimensões
RATIO_SCALE_MIN = 0.5

# compressão por porcentagem (slider do app: 10..90, passo 5)
PERCENT_MIN = 10
PERCENT_MAX = 90
PERCENT_DEFAULT = 70

CONVERT_JPEG_QUALITY = 0.9

FORMATS: Dict[str, dict] = {
    "image/jpeg": {"pil": "JPEG", "ext": "jpeg", "lossy": True},
    "image/webp": {"pil": "WEBP", "ext": "webp", "lossy": True},
    "image/png":  {"pil": "PNG",  "ext": "png",  "lossy": False},
}

# nomes aceitos no conversor (JPG/PNG/WEBP) -> família mime
FORMAT_ALIASES: Dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}

SIZE_UNITS: Dict[str, int] = {"KB": 1024, "MB": 1024 * 1024}

THUMB_MAX_W = 200
THUMB_MAX_H = 300
THUMB_JPEG_Q = 68

TTL_MIN = int(os.getenv("TTL_MINUTES", "15"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
