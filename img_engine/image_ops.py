"""
image_ops.py

Operações puras sobre bytes de imagem (sem UI):
- Compressão por porcentagem (qualidade = (100 - nível) / 100)
- Compressão por tamanho-alvo em KB/MB (busca iterativa ou estimativa por razão)
- Conversão de formato (JPG/PNG/WEBP)
- Utilidades de tamanho e nome do arquivo de saída

Todas as funções recebem bytes + metadados simples e devolvem bytes + nome.
"""

from __future__ import annotations

import logging
import math
from typing import Tuple

from . import codec
from .engine_config import (
    CONVERT_JPEG_QUALITY,
    FORMATS,
    PERCENT_MAX,
    PERCENT_MIN,
    SIZE_UNITS,
)
from .models import CompressionRequest, CompressionResult
from .search import CancelToken, ProgressFn, compress_by_ratio, compress_to_target

log = logging.getLogger(__name__)

STRATEGIES = ("search", "ratio")


# ===========================
#   NOMES / TAMANHOS
# ===========================
def output_name(filename: str, ext: str, suffix: str = "") -> str:
    """`foto.final.png` + ext 'jpeg' + '_compressed' -> `foto_compressed.jpeg`."""
    stem = (filename or "").split(".")[0] or "imagem"
    return f"{stem}{suffix}.{ext}"


def parse_target_size(size: float, unit: str) -> int:
    """Converte o tamanho digitado (KB/MB, base 1024) em bytes.

    Raises:
        ValueError: tamanho <= 0 ou unidade desconhecida.
    """
    mult = SIZE_UNITS.get((unit or "").strip().upper())
    if mult is None:
        raise ValueError(f"unidade inválida: {unit!r} (use KB ou MB)")
    try:
        value = float(size)
    except (TypeError, ValueError) as e:
        raise ValueError(f"tamanho inválido: {size!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"tamanho deve ser > 0 (recebido {size!r})")
    return max(1, int(value * mult))


def format_file_size(n: int) -> str:
    if n <= 0:
        return "0 Bytes"
    k = 1024
    names = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(n) / math.log(k))), len(names) - 1)
    value = round(n / (k ** i), 2)
    return f"{value:g} {names[i]}"


def _ext_of(mime: str) -> str:
    return FORMATS[mime]["ext"]


# ===========================
#   COMPRESSÃO POR PORCENTAGEM
# ===========================
def compress_by_percent(data: bytes, filename: str, mime: str, level: int) -> Tuple[bytes, str]:
    """Re-encode no mesmo formato com qualidade `(100 - level) / 100`.

    Args:
        data (bytes): Imagem de entrada.
        filename (str): Nome original (só para o nome de saída).
        mime (str): Família do arquivo de entrada; a saída mantém a mesma.
        level (int): Nível de compressão 10..90 (maior = arquivo menor).

    Returns:
        Tuple[bytes, str]: (bytes comprimidos, `<nome>_compressed.<ext>`).
    """
    if not PERCENT_MIN <= int(level) <= PERCENT_MAX:
        raise ValueError(f"nível deve estar entre {PERCENT_MIN} e {PERCENT_MAX} (recebido {level})")
    family = codec.normalize_mime(mime)
    img = codec.decode(data)
    quality = (100 - int(level)) / 100
    out = codec.encode(img, family, quality)
    log.info("compressão %d%%: %d -> %d bytes", level, len(data), len(out))
    return out, output_name(filename, _ext_of(family), "_compressed")


# ===========================
#   COMPRESSÃO POR TAMANHO-ALVO
# ===========================
def compress_to_size(
    data: bytes,
    filename: str,
    mime: str,
    size: float,
    unit: str = "KB",
    strategy: str = "search",
    cancel: CancelToken | None = None,
    on_progress: ProgressFn | None = None,
) -> Tuple[CompressionResult, str]:
    """Comprime até chegar perto de `size` `unit` (melhor esforço).

    Args:
        data (bytes): Imagem de entrada.
        filename (str): Nome original.
        mime (str): Família de saída (normalmente a da entrada).
        size (float): Tamanho desejado.
        unit (str): 'KB' | 'MB'.
        strategy (str): 'search' (busca iterativa, padrão) | 'ratio' (um encode).
        cancel, on_progress: repassados para a busca.

    Returns:
        Tuple[CompressionResult, str]: Resultado (confira `achieved_size`) e nome de saída.

    Raises:
        DecodeFailed, EncodingExhausted, SearchCancelled, ValueError.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"estratégia inválida: {strategy!r}")
    target = parse_target_size(size, unit)
    family = codec.normalize_mime(mime)
    img = codec.decode(data)

    request = CompressionRequest(
        pixels=img,
        source_byte_size=len(data),
        mime_family=family,
        target_bytes=target,
    )
    if strategy == "ratio":
        result = compress_by_ratio(request)
    else:
        result = compress_to_target(request, cancel=cancel, on_progress=on_progress)

    if not result.within_target:
        log.info("alvo %d não atingido; melhor esforço = %d bytes", target, result.achieved_size)
    return result, output_name(filename, _ext_of(family), "_compressed")


# ===========================
#   CONVERSÃO DE FORMATO
# ===========================
def convert_format(data: bytes, filename: str, target_format: str) -> Tuple[bytes, str]:
    """Converte para JPG/PNG/WEBP mantendo a resolução.

    JPEG usa qualidade 0.9; os demais usam o padrão do encoder.
    O nome de saída usa o formato como digitado (`foto.jpg` para 'JPG').
    """
    family = codec.normalize_mime(target_format)
    img = codec.decode(data)
    quality = CONVERT_JPEG_QUALITY if family == "image/jpeg" else None
    out = codec.encode(img, family, quality)
    log.info("conversão %s -> %s: %d -> %d bytes", img.format, family, len(data), len(out))
    return out, output_name(filename, target_format.strip().lower().split("/")[-1])
