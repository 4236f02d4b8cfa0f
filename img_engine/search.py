"""
img_engine/search.py

Controlador da busca por tamanho-alvo.

Percorre os candidatos de `candidates.generate_candidates`, faz um encode por
candidato e guarda a melhor tentativa:
- para tudo se um encode ficar <= alvo e a menos de 5% dele (faixa de tolerância);
- só entra na redução de dimensões se a tentativa mais perto do alvo (só
  distância) da fase 1 ainda passar de 1.1x o alvo;
- na fase 2, um encode <= alvo encerra as qualidades daquela escala, e a busca
  termina assim que a tentativa mais perto estiver <= alvo.

A tentativa devolvida prefere quem não passou do alvo além da tolerância;
a escolha da fase 2 usa só a distância.

Falha de encode num candidato só pula o candidato. Sem nenhum encode válido ao
final, levanta EncodingExhausted.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from PIL import Image

from . import codec
from .candidates import generate_candidates, ratio_candidate
from .engine_config import ESCALATION_RATIO, MAX_CANDIDATES, TOLERANCE_RATIO
from .errors import EncodeTrialFailed, EncodingExhausted, SearchCancelled
from .models import DOWNSCALE, Candidate, CompressionRequest, CompressionResult, EncodeAttempt

log = logging.getLogger(__name__)

EncodeFn = Callable[[Image.Image, str, float], bytes]
ResampleFn = Callable[[Image.Image, float], Image.Image]
ProgressFn = Callable[[int, int], None]


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


def _rank(attempt: EncodeAttempt) -> tuple[bool, int]:
    # passar do alvo além da tolerância sempre perde para quem não passou
    limit = attempt.target_bytes * (1.0 + TOLERANCE_RATIO)
    return (attempt.size > limit, attempt.distance)


def _in_tolerance(attempt: EncodeAttempt) -> bool:
    return (
        attempt.size <= attempt.target_bytes
        and attempt.distance < attempt.target_bytes * TOLERANCE_RATIO
    )


def _try_encode(
    request: CompressionRequest,
    cand: Candidate,
    pixels: Image.Image,
    encode: EncodeFn,
) -> EncodeAttempt:
    try:
        data = encode(pixels, request.mime_family, cand.quality)
    except Exception as e:
        raise EncodeTrialFailed(cand, str(e)) from e
    if not data:
        raise EncodeTrialFailed(cand, "encoder devolveu 0 bytes")
    return EncodeAttempt(candidate=cand, encoded_bytes=bytes(data), target_bytes=request.target_bytes)


def compress_to_target(
    request: CompressionRequest,
    encode: EncodeFn = codec.encode,
    resample: ResampleFn = codec.resample,
    cancel: Optional[CancelToken] = None,
    on_progress: Optional[ProgressFn] = None,
) -> CompressionResult:
    """Busca (qualidade, escala) cujo encode fique o mais perto possível do alvo.

    Args:
        request (CompressionRequest): Imagem decodificada, família mime e alvo.
        encode (EncodeFn): `encode(pixels, mime_family, quality) -> bytes`.
        resample (ResampleFn): `resample(pixels, scale) -> pixels`.
        cancel (CancelToken | None): Consultado antes de cada tentativa
            (ex.: `threading.Event`).
        on_progress (ProgressFn | None): Chamado com (índice do candidato, 29).

    Returns:
        CompressionResult: Melhor tentativa observada (pode ficar longe do alvo).

    Raises:
        SearchCancelled: `cancel.is_set()` ficou verdadeiro entre tentativas.
        EncodingExhausted: Nenhum candidato produziu bytes.
    """
    target = request.target_bytes
    best: EncodeAttempt | None = None
    closest: EncodeAttempt | None = None  # só distância: decide a fase 2
    attempts = 0
    last_error: EncodeTrialFailed | None = None

    escalated = False
    skip_scale: float | None = None
    scaled_for: float | None = None
    scaled: Image.Image | None = None

    for index, cand in enumerate(generate_candidates(request), start=1):
        if cand.phase == DOWNSCALE:
            if not escalated:
                if closest is not None and closest.size <= target * ESCALATION_RATIO:
                    break
                escalated = True
                log.debug(
                    "fase 1 sem alvo (mais perto=%s, alvo=%d): reduzindo dimensões",
                    closest.size if closest else None, target,
                )
            if cand.scale == skip_scale:
                continue

        if cancel is not None and cancel.is_set():
            log.info("busca cancelada antes do candidato %d", index)
            raise SearchCancelled(f"cancelada após {attempts} tentativas")

        attempts += 1
        try:
            if cand.scale < 1.0:
                if scaled_for != cand.scale:
                    scaled = resample(request.pixels, cand.scale)
                    scaled_for = cand.scale
                pixels = scaled
            else:
                pixels = request.pixels
            attempt = _try_encode(request, cand, pixels, encode)
        except Exception as e:
            # falha no resample também só descarta este candidato
            last_error = e if isinstance(e, EncodeTrialFailed) else EncodeTrialFailed(cand, str(e))
            log.warning("%s", last_error)
            if on_progress:
                on_progress(index, MAX_CANDIDATES)
            continue

        log.debug(
            "candidato q=%.2f s=%.2f -> %d bytes (alvo %d, dist %d)",
            cand.quality, cand.scale, attempt.size, target, attempt.distance,
        )
        if on_progress:
            on_progress(index, MAX_CANDIDATES)

        if best is None or _rank(attempt) < _rank(best):
            best = attempt
        if closest is None or attempt.distance < closest.distance:
            closest = attempt

        if _in_tolerance(attempt):
            best = attempt
            break

        if cand.phase == DOWNSCALE:
            if closest.size <= target:
                break
            if attempt.size <= target:
                skip_scale = cand.scale

    if best is None:
        raise EncodingExhausted(attempts, last_error)

    result = CompressionResult.from_attempt(best, attempts)
    log.info(
        "tamanho-alvo %d: escolhido q=%.2f s=%.2f -> %d bytes em %d encode(s)",
        target, result.chosen_candidate.quality, result.chosen_candidate.scale,
        result.achieved_size, attempts,
    )
    return result


def compress_by_ratio(
    request: CompressionRequest,
    encode: EncodeFn = codec.encode,
    resample: ResampleFn = codec.resample,
) -> CompressionResult:
    """Estratégia de um só encode: (qualidade, escala) estimados pela razão alvo/origem.

    Mais rápida que a busca, mas erra em imagens cuja compressibilidade foge
    da proporção do arquivo original.
    """
    cand = ratio_candidate(request)
    try:
        pixels = resample(request.pixels, cand.scale) if cand.scale < 1.0 else request.pixels
        attempt = _try_encode(request, cand, pixels, encode)
    except Exception as e:
        err = e if isinstance(e, EncodeTrialFailed) else EncodeTrialFailed(cand, str(e))
        raise EncodingExhausted(1, err) from e
    log.info(
        "razão alvo/origem: q=%.2f s=%.2f -> %d bytes (alvo %d)",
        cand.quality, cand.scale, attempt.size, request.target_bytes,
    )
    return CompressionResult.from_attempt(attempt, 1)
