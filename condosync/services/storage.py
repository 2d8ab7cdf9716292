"""
Condo Sync - Object Storage
Upload de fotos e documentos para o diretório servido em /uploads
"""
import asyncio
import logging
import os
import re
import uuid
from pathlib import Path

from condosync.core.errors import Reason, RemoteError, ValidationError

logger = logging.getLogger(__name__)


def _safe_name(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", value).strip("._") or "arquivo"


class LocalObjectStorage:
    """Grava o arquivo em disco e devolve a URL pública"""

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    async def upload(self, filename: str, content: bytes, folder: str = "photos") -> str:
        if not content:
            raise ValidationError(Reason.MISSING_FIELD, "Arquivo vazio.")

        folder = _safe_name(folder)
        name = f"{uuid.uuid4().hex[:12]}_{_safe_name(os.path.basename(filename or ''))}"
        target = self.root / folder / name

        def write():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        try:
            await asyncio.to_thread(write)
        except OSError as e:
            logger.error(f"[STORAGE] Erro ao gravar {target}: {e}")
            raise RemoteError(Reason.STORE_FAILURE, "Erro ao enviar arquivo.") from e

        return f"{self.public_base_url}/uploads/{folder}/{name}"
