"""Durable storage adapters."""

from ad_engine.adapters.storage.base import StorageBackend
from ad_engine.adapters.storage.local import LocalStorageBackend
from ad_engine.adapters.storage.stub import StubStorageBackend

__all__ = ["LocalStorageBackend", "StorageBackend", "StubStorageBackend"]
