"""Stub B-roll service for testing."""

from ad_engine.adapters.broll.base import BRollClip, BRollService
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class StubBRollService(BRollService):
    """Returns one placeholder clip per tag."""

    @property
    def name(self) -> str:
        return "stub"

    async def fetch(self, tags: list[str]) -> list[BRollClip]:
        tags = tags or self.FALLBACK_TAGS
        logger.info("stub_broll_fetch", tags=tags)

        return [
            BRollClip(
                id=f"broll-{tag}-{i}",
                url=f"https://example.com/broll/{tag}.mp4",
                tag=tag,
                duration_seconds=5.0,
            )
            for i, tag in enumerate(tags)
        ]
