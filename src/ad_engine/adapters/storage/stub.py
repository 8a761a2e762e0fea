"""Stub storage backend for testing."""

from ad_engine.adapters.storage.base import StorageBackend
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class StubStorageBackend(StorageBackend):
    """Keeps uploaded objects in memory."""

    def __init__(self, base_url: str = "https://storage.example.com") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, bytes] = {}

    @property
    def name(self) -> str:
        return "stub"

    async def upload(self, data: bytes, key: str, content_type: str = "video/mp4") -> str:
        self.objects[key] = data
        url = f"{self.base_url}/{key}"
        logger.info("stub_upload", key=key, size_bytes=len(data))
        return url

    async def delete(self, key: str) -> bool:
        return self.objects.pop(key, None) is not None
