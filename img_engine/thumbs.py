"""
img_engine/thumbs.py

Pré-visualização das imagens enviadas.
- `image_thumb(img) -> data_url` (JPEG dentro de 200x300)
"""

from __future__ import annotations
import base64, io
from PIL import Image

from .engine_config import THUMB_JPEG_Q, THUMB_MAX_H, THUMB_MAX_W

def _b64_jpeg(img: Image.Image, max_w: int, max_h: int, quality=70) -> str:
    im = img.copy()
    im.thumbnail((max_w, max_h))
    if im.mode in ("RGBA", "LA", "P"):
        rgba = im.convert("RGBA")
        bg = Image.new("RGB", rgba.size, (255, 255, 255))
        bg.paste(rgba, mask=rgba.split()[-1])
        im = bg
    buf = io.BytesIO()
    im.convert("RGB").save(buf, format="JPEG", quality=quality, optimize=True)
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

def image_thumb(img: Image.Image) -> str:
    # mantém proporção, não altera a imagem original
    return _b64_jpeg(img, THUMB_MAX_W, THUMB_MAX_H, quality=THUMB_JPEG_Q)
