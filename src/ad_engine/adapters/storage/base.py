"""Base interface for durable storage backends."""

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract base class for storage backends.

    Implementations:
    - StubStorageBackend: In-memory objects for testing
    - LocalStorageBackend: Files under a local directory
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def upload(self, data: bytes, key: str, content_type: str = "video/mp4") -> str:
        """Store ``data`` under ``key`` and return its public URL.

        Raises:
            UploadError: If the object could not be stored
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the object stored under ``key``; False if there was none."""
        ...

    async def health_check(self) -> bool:
        return True
