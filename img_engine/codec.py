"""
img_engine/codec.py

Colaboradores externos da busca, implementados com Pillow:
- `decode(bytes) -> Image` (levanta DecodeFailed)
- `resample(Image, scale) -> Image` (floor das dimensões, mínimo 1px)
- `encode(Image, mime_family, quality) -> bytes` (quality em [0, 1])

A busca (search.py) aceita qualquer função com as mesmas assinaturas.
"""

from __future__ import annotations

import io
import logging
import math

from PIL import Image, UnidentifiedImageError

from .engine_config import FORMAT_ALIASES, FORMATS
from .errors import DecodeFailed, UnsupportedFormat

log = logging.getLogger(__name__)

RESAMPLE_LANCZOS = Image.Resampling.LANCZOS


def decode(data: bytes) -> Image.Image:
    """Decodifica bytes em uma imagem Pillow totalmente carregada."""
    if not data:
        raise DecodeFailed("entrada vazia")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailed(f"não foi possível ler a imagem: {e}") from e
    if img.size[0] <= 0 or img.size[1] <= 0:
        raise DecodeFailed(f"imagem sem pixels: {img.size}")
    return img


def mime_of(img: Image.Image) -> str | None:
    """Família mime do formato de origem (None se Pillow não souber)."""
    if not img.format:
        return None
    return Image.MIME.get(img.format.upper())


def normalize_mime(value: str) -> str:
    """Aceita 'image/jpeg', 'image/jpg', 'JPG', 'webp'... e devolve a família canônica."""
    v = (value or "").strip().lower()
    if v.startswith("image/"):
        v = v.split("/", 1)[1]
    mime = FORMAT_ALIASES.get(v)
    if mime is None:
        raise UnsupportedFormat(f"formato não suportado: {value!r}")
    return mime


def resample(img: Image.Image, scale: float) -> Image.Image:
    if scale >= 1.0:
        return img
    w, h = img.size
    nw = max(1, math.floor(w * scale))
    nh = max(1, math.floor(h * scale))
    return img.resize((nw, nh), RESAMPLE_LANCZOS)


def _flatten_rgb(img: Image.Image) -> Image.Image:
    # JPEG não tem alfa: compõe sobre fundo branco
    if img.mode in ("RGBA", "LA", "P"):
        rgba = img.convert("RGBA")
        bg = Image.new("RGB", rgba.size, (255, 255, 255))
        bg.paste(rgba, mask=rgba.split()[-1])
        return bg
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def encode(img: Image.Image, mime_family: str, quality: float | None = None) -> bytes:
    """Re-encode no formato pedido.

    Args:
        img (Image.Image): Pixels de entrada (não é modificada).
        mime_family (str): 'image/jpeg' | 'image/webp' | 'image/png'.
        quality (float | None): [0, 1]; ignorada em formatos sem perdas.
            None usa o padrão do encoder.

    Returns:
        bytes: Imagem codificada.
    """
    fmt = FORMATS.get(mime_family)
    if fmt is None:
        raise UnsupportedFormat(f"sem encoder para {mime_family!r}")

    buf = io.BytesIO()
    pil_name = fmt["pil"]
    if pil_name == "JPEG":
        params = {"optimize": True, "progressive": True}
        if quality is not None:
            params["quality"] = _quality_int(quality)
        _flatten_rgb(img).save(buf, "JPEG", **params)
    elif pil_name == "WEBP":
        src = img if img.mode in ("RGB", "RGBA") else img.convert("RGBA")
        params = {"method": 4}
        if quality is not None:
            params["quality"] = _quality_int(quality)
        src.save(buf, "WEBP", **params)
    else:
        src = img if img.mode in ("1", "L", "LA", "P", "RGB", "RGBA") else img.convert("RGBA")
        src.save(buf, "PNG", optimize=True)
    return buf.getvalue()


def _quality_int(quality: float) -> int:
    return max(1, min(100, int(round(quality * 100))))
