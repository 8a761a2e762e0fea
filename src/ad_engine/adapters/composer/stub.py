"""Stub video composer for testing."""

from uuid import uuid4

from ad_engine.adapters.avatar.base import AvatarClip
from ad_engine.adapters.broll.base import BRollClip
from ad_engine.adapters.composer.base import ComposedVideo, VideoComposer
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class StubVideoComposer(VideoComposer):
    """Simulates composition; output runs a fixed tail past the avatar clip."""

    TAIL_SECONDS = 5.0

    @property
    def name(self) -> str:
        return "stub"

    async def compose(self, avatar: AvatarClip, broll: list[BRollClip]) -> ComposedVideo:
        logger.info("stub_compose", avatar_id=avatar.id, broll_count=len(broll))

        return ComposedVideo(
            id=f"composed-{uuid4().hex[:8]}",
            video_data=b"STUB_COMPOSED_" + avatar.video_data[:50],
            duration_seconds=avatar.duration_seconds + self.TAIL_SECONDS,
        )
