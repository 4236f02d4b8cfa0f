"""
img_engine/candidates.py

Gera a trajetória de candidatos (qualidade, escala) da busca por tamanho-alvo.
- Fase 1: escala 1.0, varredura de qualidade 0.9 -> 0.1 (9 candidatos).
- Fase 2: escalas 0.9 -> 0.5, cada uma com qualidades 0.8 -> 0.2 (20 candidatos).

Não faz encode; quem decide parar ou entrar na fase 2 é o controlador (search.py).
"""

from __future__ import annotations

import math
from typing import Iterator

from .engine_config import (
    DOWNSCALE_QUALITIES,
    DOWNSCALE_SCALES,
    QUALITY_SWEEP,
    RATIO_QUALITY_MAX,
    RATIO_QUALITY_MIN,
    RATIO_SCALE_KNEE,
    RATIO_SCALE_MIN,
)
from .models import DOWNSCALE, QUALITY_SWEEP as PHASE_SWEEP, Candidate, CompressionRequest


def quality_sweep() -> Iterator[Candidate]:
    for q in QUALITY_SWEEP:
        yield Candidate(quality=q, scale=1.0, phase=PHASE_SWEEP)


def downscale_escalation() -> Iterator[Candidate]:
    for s in DOWNSCALE_SCALES:
        for q in DOWNSCALE_QUALITIES:
            yield Candidate(quality=q, scale=s, phase=DOWNSCALE)


def generate_candidates(request: CompressionRequest | None = None) -> Iterator[Candidate]:
    """Sequência preguiçosa, finita e não reiniciável (máx. 29 candidatos).

    Args:
        request (CompressionRequest | None): Não altera a trajetória; a grade é
            fixa e independe do conteúdo da imagem.

    Returns:
        Iterator[Candidate]: Fase 1 seguida da fase 2, na ordem de teste.
    """
    yield from quality_sweep()
    yield from downscale_escalation()


def ratio_candidate(request: CompressionRequest) -> Candidate:
    """Estimativa direta (sem busca) a partir de `target_bytes / source_byte_size`.

    A qualidade segue a razão; abaixo de `RATIO_SCALE_KNEE` também reduz o lado,
    usando a raiz da razão (bytes ~ pixels, pixels ~ lado²).
    """
    ratio = request.target_bytes / max(1, request.source_byte_size)
    quality = max(RATIO_QUALITY_MIN, min(RATIO_QUALITY_MAX, ratio))
    scale = 1.0
    if ratio < RATIO_SCALE_KNEE:
        scale = max(RATIO_SCALE_MIN, min(1.0, math.sqrt(ratio / RATIO_SCALE_KNEE)))
    return Candidate(quality=round(quality, 2), scale=round(scale, 2), phase=PHASE_SWEEP if scale == 1.0 else DOWNSCALE)
