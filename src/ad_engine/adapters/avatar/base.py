"""Base interface for avatar generation providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ad_engine.adapters.script.base import Script


@dataclass
class AvatarClip:
    """Talking-avatar footage for one script."""

    id: str
    video_data: bytes
    duration_seconds: float
    provider: str
    avatar_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AvatarProvider(ABC):
    """Abstract base class for avatar generation providers.

    Implementations:
    - StubAvatarProvider: Returns placeholder footage for testing
    - VeoAvatarProvider: Generates a spoken testimonial with Google Veo
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def generate(self, script: Script) -> AvatarClip:
        """Generate avatar footage speaking the given script.

        Raises:
            ProviderError: If generation fails or times out
        """
        ...

    async def health_check(self) -> bool:
        return True
