# bridge.py
from __future__ import annotations
import base64
import logging
import threading
from dataclasses import dataclass
from typing import List, Dict, Any

import webview
from pydantic import ValidationError

from img_engine import codec
from img_engine.errors import ImageEngineError, UnsupportedFormat
from img_engine.image_ops import (
    compress_by_percent,
    compress_to_size,
    convert_format,
    format_file_size,
)
from img_engine.jobs import pop_job, save_job
from img_engine.schemas import CompressIn, ConvertIn, TargetSizeIn, UploadFile
from img_engine.thumbs import image_thumb

log = logging.getLogger(__name__)

# ====== Estruturas ======
@dataclass
class SrcFile:
    name: str
    mime: str
    data: bytes  # conteúdo como bytes

class Api:
    """
    Ponte JS <-> Python do compressor de imagens (sem servidor).
    Todo método devolve dict; falhas viram {'error': mensagem}.
    """
    def __init__(self) -> None:
        self.src_files: list[SrcFile] = []   # arquivos brutos recebidos
        self._cancel = threading.Event()
        self._progress: Dict[str, int] = {'done': 0, 'total': 0}

    # ---------- helpers ----------
    def _b64_to_bytes(self, b64: str) -> bytes:
        return base64.b64decode(b64.encode('ascii'))

    def _src(self, file_id: int) -> SrcFile:
        if file_id >= len(self.src_files):
            raise ValueError(f"arquivo {file_id} não encontrado")
        return self.src_files[file_id]

    def _family_of(self, sf: SrcFile) -> str:
        # formatos sem encoder (gif, bmp...) saem como PNG
        try:
            return codec.normalize_mime(sf.mime)
        except UnsupportedFormat:
            return 'image/png'

    def _job_reply(self, data: bytes, filename: str, mime: str) -> Dict[str, Any]:
        job_id = save_job(data, filename, mime)
        return {
            'job_id': job_id,
            'filename': filename,
            'size_bytes': len(data),
            'size_label': format_file_size(len(data)),
        }

    def _on_progress(self, done: int, total: int) -> None:
        self._progress = {'done': done, 'total': total}

    def _fail(self, e: Exception) -> Dict[str, Any]:
        if isinstance(e, (ImageEngineError, ValidationError, ValueError)):
            log.error("falha: %s", e)
        else:
            log.exception("erro inesperado")
        return {'error': str(e)}

    # ---------- API: UPLOAD ----------
    def upload(self, files: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        files: [{ name, type (mime), bytes_b64 }]
        Retorna: { items: [ {file_id, filename, type, size_bytes, size_label, width, height, thumb_b64} ] }
        """
        try:
            items = []
            for raw in files:
                f = UploadFile.model_validate(raw)
                if not f.type.lower().startswith('image/'):
                    raise UnsupportedFormat(f"{f.name}: não é uma imagem ({f.type or 'tipo desconhecido'})")
                data = self._b64_to_bytes(f.bytes_b64)
                img = codec.decode(data)
                self.src_files.append(SrcFile(name=f.name, mime=f.type, data=data))
                items.append({
                    'file_id': len(self.src_files) - 1,
                    'filename': f.name,
                    'type': f.type,
                    'size_bytes': len(data),
                    'size_label': format_file_size(len(data)),
                    'width': img.size[0],
                    'height': img.size[1],
                    'thumb_b64': image_thumb(img),
                })
            return {'items': items}
        except Exception as e:
            return self._fail(e)

    # ---------- API: COMPRESS (porcentagem) ----------
    def compress(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        payload: { file_id, level }
        Retorna: { job_id, filename, size_bytes, size_label }
        """
        try:
            p = CompressIn.model_validate(payload)
            sf = self._src(p.file_id)
            mime = self._family_of(sf)
            out, fname = compress_by_percent(sf.data, sf.name, mime, p.level)
            return self._job_reply(out, fname, mime)
        except Exception as e:
            return self._fail(e)

    # ---------- API: COMPRESS TO SIZE ----------
    def compress_to_size(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        payload: { file_id, size, unit, strategy?, mime? }
        Retorna: dados do job + { quality, scale, target_bytes, achieved_size, within_target, attempts }
        `within_target=False` ainda é sucesso (melhor esforço).
        """
        try:
            p = TargetSizeIn.model_validate(payload)
            sf = self._src(p.file_id)
            mime = codec.normalize_mime(p.mime) if p.mime else self._family_of(sf)
            self._cancel = threading.Event()
            self._progress = {'done': 0, 'total': 0}
            result, fname = compress_to_size(
                sf.data, sf.name, mime, p.size, p.unit,
                strategy=p.strategy,
                cancel=self._cancel,
                on_progress=self._on_progress,
            )
            reply = self._job_reply(result.bytes, fname, mime)
            reply.update({
                'quality': result.chosen_candidate.quality,
                'scale': result.chosen_candidate.scale,
                'target_bytes': result.target_bytes,
                'achieved_size': result.achieved_size,
                'within_target': result.within_target,
                'attempts': result.attempts,
            })
            return reply
        except Exception as e:
            return self._fail(e)

    def cancel(self) -> Dict[str, Any]:
        """Abandona a busca em andamento (vale a partir da próxima tentativa)."""
        self._cancel.set()
        return {'cancelled': True}

    def progress(self) -> Dict[str, Any]:
        return dict(self._progress)

    # ---------- API: CONVERT ----------
    def convert(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        payload: { file_id, target_format }
        Retorna: { job_id, filename, size_bytes, size_label }
        """
        try:
            p = ConvertIn.model_validate(payload)
            sf = self._src(p.file_id)
            out, fname = convert_format(sf.data, sf.name, p.target_format)
            return self._job_reply(out, fname, codec.normalize_mime(p.target_format))
        except Exception as e:
            return self._fail(e)

    # ---------- API: SAVE ----------
    def save(self, job_id: str) -> Dict[str, Any]:
        """Diálogo de salvar (download único do job)."""
        try:
            item = pop_job(job_id)
            if item is None:
                return {'error': 'arquivo expirado ou já baixado'}
            data, filename, _mime = item

            dlg = webview.windows[0].create_file_dialog(
                webview.FileDialog.SAVE,
                save_filename=filename,
            )
            if not dlg:
                return {'saved': False, 'path': None}

            save_path = dlg if isinstance(dlg, str) else dlg[0]
            with open(save_path, 'wb') as f:
                f.write(data)

            return {'saved': True, 'path': save_path}
        except Exception as e:
            return self._fail(e)
