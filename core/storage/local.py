"""Local file storage backend, used in development and tests."""

import asyncio
from pathlib import Path
from typing import Optional
import logging

from core.storage.base import ResumeStorage, ObjectNotFound, InvalidKeyError

logger = logging.getLogger(__name__)


class LocalStorage(ResumeStorage):
    """Stores objects as files under ``base_path``, one directory per key prefix."""

    def __init__(self, base_path: str = "./storage"):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if self.base_path not in path.parents:
            raise InvalidKeyError(f"Key escapes storage root: {key}")
        return path

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        path = self._path(key)
        await asyncio.to_thread(self._write, path, data)
        logger.info(f"Saved file to {path}")
        return key

    async def download(self, key: str) -> bytes:
        path = self._path(key)
        if not path.exists():
            raise ObjectNotFound()
        return await asyncio.to_thread(path.read_bytes)

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted file: {path}")
        return True

    async def exists(self, key: str) -> bool:
        return self._path(key).exists()

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
