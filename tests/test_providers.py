"""Tests for provider resolution."""

import pytest

from ad_engine.adapters.avatar.stub import StubAvatarProvider
from ad_engine.adapters.avatar.veo import VeoAvatarProvider
from ad_engine.adapters.broll.library import LibraryBRollService
from ad_engine.adapters.composer.moviepy_composer import MoviePyComposer
from ad_engine.adapters.composer.stub import StubVideoComposer
from ad_engine.adapters.script.llm import LLMScriptProvider
from ad_engine.adapters.script.stub import StubScriptProvider
from ad_engine.adapters.storage.local import LocalStorageBackend
from ad_engine.config import Settings
from ad_engine.services.providers import resolve_capabilities


def test_defaults_are_stubs() -> None:
    """Test a default configuration resolves to stub providers."""
    capabilities = resolve_capabilities(Settings())

    assert capabilities.names() == {
        "script": "stub",
        "avatar": "stub",
        "composer": "stub",
        "broll": "stub",
        "storage": "stub",
    }


def test_configured_providers(tmp_path) -> None:
    """Test provider names select the real implementations."""
    settings = Settings(
        script_provider="openai",
        avatar_provider="VEO",
        composer_provider="moviepy",
        broll_provider="library",
        broll_library_url="https://library.example.com",
        storage_provider="local",
        storage_base_path=str(tmp_path),
    )

    capabilities = resolve_capabilities(settings)

    assert isinstance(capabilities.script, LLMScriptProvider)
    assert isinstance(capabilities.avatar, VeoAvatarProvider)
    assert isinstance(capabilities.composer, MoviePyComposer)
    assert isinstance(capabilities.broll, LibraryBRollService)
    assert isinstance(capabilities.storage, LocalStorageBackend)
    assert capabilities.storage.base_path == tmp_path.resolve()


def test_unknown_names_fall_back_to_stub() -> None:
    capabilities = resolve_capabilities(
        Settings(script_provider="nope", avatar_provider="nope", composer_provider="nope")
    )

    assert isinstance(capabilities.script, StubScriptProvider)
    assert isinstance(capabilities.avatar, StubAvatarProvider)
    assert isinstance(capabilities.composer, StubVideoComposer)


@pytest.mark.asyncio
async def test_stub_capabilities_are_healthy(capabilities) -> None:
    health = await capabilities.health()

    assert health == {
        "script": True,
        "avatar": True,
        "composer": True,
        "broll": True,
        "storage": True,
    }
