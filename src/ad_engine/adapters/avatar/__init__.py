"""Avatar generation adapters."""

from ad_engine.adapters.avatar.base import AvatarClip, AvatarProvider
from ad_engine.adapters.avatar.stub import StubAvatarProvider
from ad_engine.adapters.avatar.veo import VeoAvatarProvider

__all__ = ["AvatarClip", "AvatarProvider", "StubAvatarProvider", "VeoAvatarProvider"]
