"""Base interface for video composers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ad_engine.adapters.avatar.base import AvatarClip
from ad_engine.adapters.broll.base import BRollClip


@dataclass
class ComposedVideo:
    """Final rendered ad, ready for upload."""

    id: str
    video_data: bytes
    duration_seconds: float
    format: str = "mp4"
    width: int = 1080
    height: int = 1920

    @property
    def size_bytes(self) -> int:
        return len(self.video_data)


class VideoComposer(ABC):
    """Abstract base class for video composers.

    Implementations:
    - StubVideoComposer: Returns placeholder output for testing
    - MoviePyComposer: Local composition with MoviePy (bundled ffmpeg)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def compose(self, avatar: AvatarClip, broll: list[BRollClip]) -> ComposedVideo:
        """Cut avatar footage and B-roll into one vertical video.

        Raises:
            ProviderError: If composition fails
        """
        ...

    async def health_check(self) -> bool:
        return True
