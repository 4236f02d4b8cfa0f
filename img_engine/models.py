"""
img_engine/models.py

Estruturas do motor de compressão por tamanho-alvo.
- `CompressionRequest`: imagem decodificada + alvo em bytes (somente leitura).
- `Candidate`: par (qualidade, escala) a testar.
- `EncodeAttempt`: resultado efêmero de um encode.
- `CompressionResult`: saída final, montada uma vez a partir da melhor tentativa.
"""

# img_engine/models.py
from __future__ import annotations
from dataclasses import dataclass, field

from PIL import Image

QUALITY_SWEEP = "quality_sweep"
DOWNSCALE = "downscale"


@dataclass(frozen=True)
class CompressionRequest:
    pixels: Image.Image = field(repr=False)
    source_byte_size: int
    mime_family: str
    target_bytes: int

    def __post_init__(self) -> None:
        if self.target_bytes <= 0:
            raise ValueError(f"target_bytes deve ser > 0 (recebido {self.target_bytes})")
        if self.source_byte_size <= 0:
            raise ValueError(f"source_byte_size deve ser > 0 (recebido {self.source_byte_size})")
        w, h = self.pixels.size
        if w <= 0 or h <= 0:
            raise ValueError(f"imagem sem pixels: {w}x{h}")

    @property
    def width(self) -> int:
        return self.pixels.size[0]

    @property
    def height(self) -> int:
        return self.pixels.size[1]


@dataclass(frozen=True)
class Candidate:
    quality: float
    scale: float = 1.0
    phase: str = field(default=QUALITY_SWEEP, compare=False)

    def __post_init__(self) -> None:
        if not 0.0 < self.quality <= 1.0:
            raise ValueError(f"quality fora de (0, 1]: {self.quality}")
        if not 0.0 < self.scale <= 1.0:
            raise ValueError(f"scale fora de (0, 1]: {self.scale}")


@dataclass(frozen=True)
class EncodeAttempt:
    candidate: Candidate
    encoded_bytes: bytes = field(repr=False)
    target_bytes: int

    @property
    def size(self) -> int:
        return len(self.encoded_bytes)

    @property
    def distance(self) -> int:
        return abs(self.size - self.target_bytes)


@dataclass(frozen=True)
class CompressionResult:
    bytes: bytes = field(repr=False)
    chosen_candidate: Candidate
    achieved_size: int
    target_bytes: int
    attempts: int = 0

    @classmethod
    def from_attempt(cls, attempt: EncodeAttempt, attempts: int) -> "CompressionResult":
        return cls(
            bytes=attempt.encoded_bytes,
            chosen_candidate=attempt.candidate,
            achieved_size=attempt.size,
            target_bytes=attempt.target_bytes,
            attempts=attempts,
        )

    @property
    def within_target(self) -> bool:
        """True se o resultado não passou do alvo."""
        return self.achieved_size <= self.target_bytes
