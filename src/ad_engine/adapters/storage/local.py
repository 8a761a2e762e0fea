"""Local filesystem storage backend."""

import asyncio
import hashlib
from pathlib import Path

from ad_engine.adapters.storage.base import StorageBackend
from ad_engine.config import settings
from ad_engine.domain.errors import UploadError
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class LocalStorageBackend(StorageBackend):
    """Writes objects below a base directory.

    URLs use ``public_url`` as a prefix when configured (e.g. a static file
    server in front of the directory), otherwise ``file://`` URLs.
    """

    def __init__(self, base_path: Path | None = None, public_url: str | None = None) -> None:
        self.base_path = (base_path or Path(settings.storage_base_path)).resolve()
        self.public_url = (public_url or settings.storage_public_url or "").rstrip("/") or None

    @property
    def name(self) -> str:
        return "local"

    def _path_for(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if not path.is_relative_to(self.base_path):
            raise UploadError(self.name, key, "key escapes storage root")
        return path

    def url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return self._path_for(key).as_uri()

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def upload(self, data: bytes, key: str, content_type: str = "video/mp4") -> str:
        path = self._path_for(key)

        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error("storage_upload_failed", key=key, error=str(e))
            raise UploadError(self.name, key, str(e)) from e

        logger.info(
            "storage_upload_completed",
            key=key,
            size_bytes=len(data),
            checksum=hashlib.sha256(data).hexdigest()[:16],
        )
        return self.url_for(key)

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        logger.info("storage_object_deleted", key=key)
        return True

    async def health_check(self) -> bool:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.error("storage_health_check_failed", error=str(e))
            return False
