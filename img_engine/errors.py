"""
img_engine/errors.py

Falhas do motor. Só `DecodeFailed` e `EncodingExhausted` chegam ao usuário
como erro; `EncodeTrialFailed` é absorvida pela busca (candidato pulado).
"""

from __future__ import annotations


class ImageEngineError(Exception):
    """Base de todas as falhas do motor."""


class DecodeFailed(ImageEngineError):
    """Bytes de entrada não são uma imagem decodificável."""


class UnsupportedFormat(ImageEngineError):
    """Formato/família mime sem encoder conhecido."""


class EncodeTrialFailed(ImageEngineError):
    """Um candidato isolado falhou no encode (ou devolveu zero bytes)."""

    def __init__(self, candidate, reason: str = "") -> None:
        self.candidate = candidate
        self.reason = reason
        super().__init__(f"encode falhou para {candidate}: {reason or 'sem dados'}")


class EncodingExhausted(ImageEngineError):
    """Nenhum candidato da sequência produziu um encode utilizável."""

    def __init__(self, attempts: int, last_error: EncodeTrialFailed | None = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"nenhum encode válido após {attempts} tentativas")


class SearchCancelled(ImageEngineError):
    """O chamador abandonou a busca entre duas tentativas."""
