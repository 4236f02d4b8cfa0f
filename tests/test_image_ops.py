import io

import pytest
from PIL import Image

from img_engine import codec
from img_engine.errors import DecodeFailed, UnsupportedFormat
from img_engine.image_ops import (
    compress_by_percent,
    compress_to_size,
    convert_format,
    format_file_size,
    output_name,
    parse_target_size,
)


def test_parse_target_size():
    assert parse_target_size(100, "KB") == 102_400
    assert parse_target_size("1.5", "mb") == 1_572_864
    for size, unit in ((0, "KB"), (-1, "KB"), ("abc", "KB"), (10, "GB")):
        with pytest.raises(ValueError):
            parse_target_size(size, unit)


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(500) == "500 Bytes"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(1024 * 1024) == "1 MB"


def test_output_name():
    assert output_name("photo.final.png", "jpeg", "_compressed") == "photo_compressed.jpeg"
    assert output_name("", "png") == "imagem.png"


def test_compress_by_percent(jpeg_bytes):
    light, name = compress_by_percent(jpeg_bytes, "foto.jpg", "image/jpeg", 10)
    heavy, _ = compress_by_percent(jpeg_bytes, "foto.jpg", "image/jpeg", 90)

    assert name == "foto_compressed.jpeg"
    assert len(heavy) < len(light)
    assert Image.open(io.BytesIO(heavy)).format == "JPEG"


def test_compress_by_percent_rejects_level(jpeg_bytes):
    with pytest.raises(ValueError):
        compress_by_percent(jpeg_bytes, "foto.jpg", "image/jpeg", 95)


def test_compress_to_size(jpeg_bytes):
    target_kb = len(jpeg_bytes) / 3 / 1024
    result, name = compress_to_size(jpeg_bytes, "foto.jpg", "image/jpeg", target_kb, "KB")

    assert name == "foto_compressed.jpeg"
    assert result.achieved_size == len(result.bytes)
    assert result.achieved_size < len(jpeg_bytes)
    assert 1 <= result.attempts <= 29
    assert codec.decode(result.bytes).format == "JPEG"


def test_compress_to_size_ratio_strategy(jpeg_bytes):
    result, _ = compress_to_size(jpeg_bytes, "foto.jpg", "image/jpeg", len(jpeg_bytes) / 2048, "KB",
                                 strategy="ratio")
    assert result.attempts == 1
    assert result.chosen_candidate.quality == 0.5


def test_compress_to_size_rejects_bad_input(jpeg_bytes):
    with pytest.raises(DecodeFailed):
        compress_to_size(b"not an image", "x.jpg", "image/jpeg", 10, "KB")
    with pytest.raises(ValueError):
        compress_to_size(jpeg_bytes, "x.jpg", "image/jpeg", 10, "KB", strategy="guess")
    with pytest.raises(UnsupportedFormat):
        compress_to_size(jpeg_bytes, "x.jpg", "image/tiff", 10, "KB")


def test_convert_png_with_alpha_to_jpg(png_rgba_bytes):
    out, name = convert_format(png_rgba_bytes, "icone.png", "JPG")
    assert name == "icone.jpg"
    assert out[:2] == b"\xff\xd8"
    assert Image.open(io.BytesIO(out)).size == (64, 48)


def test_convert_jpeg_to_png_and_webp(jpeg_bytes):
    png, name = convert_format(jpeg_bytes, "foto.jpg", "PNG")
    assert name == "foto.png"
    assert png[:8] == b"\x89PNG\r\n\x1a\n"

    webp, name = convert_format(jpeg_bytes, "foto.jpg", "WEBP")
    assert name == "foto.webp"
    assert webp[:4] == b"RIFF"


def test_decode_failures():
    with pytest.raises(DecodeFailed):
        codec.decode(b"")
    with pytest.raises(DecodeFailed):
        codec.decode(b"\x89PNG garbage")


def test_normalize_mime():
    assert codec.normalize_mime("image/jpg") == "image/jpeg"
    assert codec.normalize_mime("JPG") == "image/jpeg"
    assert codec.normalize_mime("image/webp") == "image/webp"
    with pytest.raises(UnsupportedFormat):
        codec.normalize_mime("image/gif")


def test_decompression_bomb_is_a_decode_failure(jpeg_bytes, monkeypatch):
    # acima de 2x o limite Pillow levanta DecompressionBombError ao abrir
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(DecodeFailed):
        codec.decode(jpeg_bytes)
