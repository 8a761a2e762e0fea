"""Adapters for external services."""

from ad_engine.adapters.avatar.base import AvatarProvider
from ad_engine.adapters.broll.base import BRollService
from ad_engine.adapters.composer.base import VideoComposer
from ad_engine.adapters.llm.base import LLMProvider
from ad_engine.adapters.script.base import ScriptProvider
from ad_engine.adapters.storage.base import StorageBackend

__all__ = [
    "AvatarProvider",
    "BRollService",
    "LLMProvider",
    "ScriptProvider",
    "StorageBackend",
    "VideoComposer",
]
