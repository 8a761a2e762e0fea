"""Base interface for B-roll clip sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class BRollClip:
    """A stock clip that can be cut into an ad."""

    id: str
    url: str
    tag: str
    duration_seconds: float
    type: str = "video"


class BRollService(ABC):
    """Abstract base class for B-roll sources.

    Implementations:
    - StubBRollService: Placeholder clips for testing
    - LibraryBRollService: Clip search against a hosted clip library
    """

    # Tags used when a brief names none or the search returns nothing
    FALLBACK_TAGS = [
        "app-interface",
        "happy-child",
        "bedtime-scene",
        "family-moment",
        "story-illustration",
    ]
    FALLBACK_CLIP_BASE_URL = "https://example.com/broll"

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def fetch(self, tags: list[str]) -> list[BRollClip]:
        """Find clips matching the given tags.

        Best-effort: a miss or an unreachable source yields fewer or fallback
        clips, never an error.
        """
        ...

    def fallback_clips(self) -> list[BRollClip]:
        """Fixed clips used when no source can be reached."""
        return [
            BRollClip(
                id=f"fallback-{i}",
                url=f"{self.FALLBACK_CLIP_BASE_URL}/{tag}.mp4",
                tag=tag,
                duration_seconds=4.0,
            )
            for i, tag in enumerate(self.FALLBACK_TAGS)
        ]

    async def health_check(self) -> bool:
        return True
