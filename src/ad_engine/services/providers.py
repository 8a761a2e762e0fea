"""Provider resolution for the generation pipeline."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ad_engine.adapters.avatar.base import AvatarProvider
from ad_engine.adapters.avatar.stub import StubAvatarProvider
from ad_engine.adapters.broll.base import BRollService
from ad_engine.adapters.broll.stub import StubBRollService
from ad_engine.adapters.composer.base import VideoComposer
from ad_engine.adapters.composer.stub import StubVideoComposer
from ad_engine.adapters.script.base import ScriptProvider
from ad_engine.adapters.script.stub import StubScriptProvider
from ad_engine.adapters.storage.base import StorageBackend
from ad_engine.adapters.storage.stub import StubStorageBackend
from ad_engine.config import Settings, get_settings
from ad_engine.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Capabilities:
    """The set of providers one pipeline run works with."""

    script: ScriptProvider
    avatar: AvatarProvider
    composer: VideoComposer
    broll: BRollService
    storage: StorageBackend

    def names(self) -> dict[str, str]:
        return {
            "script": self.script.name,
            "avatar": self.avatar.name,
            "composer": self.composer.name,
            "broll": self.broll.name,
            "storage": self.storage.name,
        }

    async def health(self) -> dict[str, bool]:
        return {
            "script": await self.script.health_check(),
            "avatar": await self.avatar.health_check(),
            "composer": await self.composer.health_check(),
            "broll": await self.broll.health_check(),
            "storage": await self.storage.health_check(),
        }


CapabilitiesResolver = Callable[[], Capabilities]


def get_script_provider(settings: Settings) -> ScriptProvider:
    """Get the configured script provider."""
    provider = settings.script_provider.lower()

    if provider == "openai":
        from ad_engine.adapters.llm.openai import OpenAIProvider
        from ad_engine.adapters.script.llm import LLMScriptProvider

        llm = OpenAIProvider(api_key=settings.openai_api_key, model=settings.openai_model)
        return LLMScriptProvider(llm)
    else:
        return StubScriptProvider()


def get_avatar_provider(settings: Settings) -> AvatarProvider:
    """Get the configured avatar provider."""
    provider = settings.avatar_provider.lower()

    if provider == "veo":
        from ad_engine.adapters.avatar.veo import VeoAvatarProvider

        return VeoAvatarProvider(model=settings.veo_model)
    else:
        return StubAvatarProvider()


def get_composer(settings: Settings) -> VideoComposer:
    """Get the configured video composer."""
    provider = settings.composer_provider.lower()

    if provider == "moviepy":
        from ad_engine.adapters.composer.moviepy_composer import MoviePyComposer

        return MoviePyComposer()
    else:
        return StubVideoComposer()


def get_broll_service(settings: Settings) -> BRollService:
    """Get the configured B-roll source."""
    provider = settings.broll_provider.lower()

    if provider == "library":
        from ad_engine.adapters.broll.library import LibraryBRollService

        return LibraryBRollService()
    else:
        return StubBRollService()


def get_storage_backend(settings: Settings) -> StorageBackend:
    """Get the configured storage backend."""
    provider = settings.storage_provider.lower()

    if provider == "local":
        from ad_engine.adapters.storage.local import LocalStorageBackend

        return LocalStorageBackend(base_path=Path(settings.storage_base_path))
    else:
        return StubStorageBackend()


def resolve_capabilities(settings: Settings | None = None) -> Capabilities:
    """Build the provider set from configuration.

    Unknown provider names fall back to the stub implementation.
    """
    settings = settings or get_settings()
    capabilities = Capabilities(
        script=get_script_provider(settings),
        avatar=get_avatar_provider(settings),
        composer=get_composer(settings),
        broll=get_broll_service(settings),
        storage=get_storage_backend(settings),
    )
    logger.debug("capabilities_resolved", **capabilities.names())
    return capabilities
