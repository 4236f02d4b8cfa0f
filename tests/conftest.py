import io
import random

import pytest
from PIL import Image


def _noise_image(w: int, h: int, seed: int = 0, mode: str = "RGB") -> Image.Image:
    rnd = random.Random(seed)
    channels = len(mode)
    return Image.frombytes(mode, (w, h), bytes(rnd.getrandbits(8) for _ in range(w * h * channels)))


def _photo_like(w: int, h: int) -> Image.Image:
    # gradiente + ruído leve: comprime de forma parecida com uma foto
    base = Image.linear_gradient("L").resize((w, h)).convert("RGB")
    noise = _noise_image(w, h, seed=7)
    return Image.blend(base, noise, 0.25)


class StubEncoder:
    """Encoder determinístico: tamanho vem de `sizes[(quality, scale)]` ou de `fallback`."""

    def __init__(self, sizes=None, fallback=None, fail=None):
        self.sizes = sizes or {}
        self.fallback = fallback
        self.fail = fail or (lambda q, s: False)
        self.calls = []

    def __call__(self, pixels, mime_family, quality):
        scale = getattr(pixels, "stub_scale", 1.0)
        q = round(quality, 2)
        self.calls.append((q, scale))
        if self.fail(q, scale):
            raise RuntimeError("encoder quebrou")
        size = self.sizes.get((q, scale))
        if size is None:
            size = self.fallback(q, scale)
        return b"x" * size


def stub_resample(pixels, scale):
    w, h = pixels.size
    out = pixels.resize((max(1, int(w * scale)), max(1, int(h * scale))))
    out.stub_scale = scale
    return out


@pytest.fixture
def stub_encoder():
    return StubEncoder


@pytest.fixture
def resample_stub():
    return stub_resample


@pytest.fixture
def small_image():
    return Image.new("RGB", (40, 30), (10, 20, 30))


@pytest.fixture
def noise_image():
    return _noise_image(128, 96)


@pytest.fixture
def corpus():
    return [_noise_image(96, 64, seed=1), _photo_like(160, 120)]


@pytest.fixture
def jpeg_bytes():
    buf = io.BytesIO()
    _photo_like(200, 150).save(buf, "JPEG", quality=95)
    return buf.getvalue()


@pytest.fixture
def png_rgba_bytes():
    img = _noise_image(64, 48, seed=3, mode="RGBA")
    buf = io.BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()
