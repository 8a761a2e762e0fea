"""Stub avatar provider for testing."""

from uuid import uuid4

from ad_engine.adapters.avatar.base import AvatarClip, AvatarProvider
from ad_engine.adapters.script.base import Script
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class StubAvatarProvider(AvatarProvider):
    """Returns a fixed-length placeholder clip without calling any API."""

    def __init__(self, duration_seconds: float = 30.0) -> None:
        self.duration_seconds = duration_seconds

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, script: Script) -> AvatarClip:
        logger.info("stub_avatar_generation", script_id=script.id)

        return AvatarClip(
            id=f"avatar-{uuid4().hex[:8]}",
            video_data=f"stub-avatar:{script.id}".encode(),
            duration_seconds=self.duration_seconds,
            provider=self.name,
            avatar_id="stub-avatar",
            metadata={"stub": True},
        )
