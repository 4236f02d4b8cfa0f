"""
img_engine/jobs.py

Guarda as imagens finais em memória por tempo limitado (TTL) até o download.
- `save_job(data, filename, mime) -> job_id`: salva bytes e retorna um identificador.
- `pop_job(job_id) -> (bytes, filename, mime)`: retorna e apaga (download único).
- `purge_expired_jobs()`: remove itens que ultrapassaram o TTL.
"""

# img_engine/jobs.py
from __future__ import annotations
import secrets, time
from typing import Dict, Tuple

from .engine_config import TTL_MIN

# job_id -> (bytes, created_at_ts, filename, mime)
JOBS: Dict[str, Tuple[bytes, float, str, str]] = {}

def new_job_id() -> str:
    return secrets.token_urlsafe(12)

def save_job(data: bytes, filename: str, mime: str) -> str:
    purge_expired_jobs()
    job_id = new_job_id()
    JOBS[job_id] = (data, time.time(), filename, mime)
    return job_id

def pop_job(job_id: str) -> Tuple[bytes, str, str] | None:
    item = JOBS.pop(job_id, None)
    if not item:
        return None
    data, _, fname, mime = item
    return data, fname, mime

def purge_expired_jobs(ttl_minutes: int | None = None) -> None:
    now = time.time()
    ttl = (TTL_MIN if ttl_minutes is None else ttl_minutes) * 60
    for k in list(JOBS.keys()):
        item = JOBS.get(k)  # pop_job de outra thread pode ter levado
        if item is None:
            continue
        if now - item[1] > ttl:
            JOBS.pop(k, None)
