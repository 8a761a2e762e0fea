"""B-roll clip adapters."""

from ad_engine.adapters.broll.base import BRollClip, BRollService
from ad_engine.adapters.broll.library import LibraryBRollService
from ad_engine.adapters.broll.stub import StubBRollService

__all__ = ["BRollClip", "BRollService", "LibraryBRollService", "StubBRollService"]
