"""Domain enumerations."""

from enum import StrEnum


class BriefStatus(StrEnum):
    """Parsing status of a brief."""

    PENDING = "PENDING"
    PARSED = "PARSED"
    FAILED = "FAILED"


class GenerationStatus(StrEnum):
    """Furthest stage a generation batch has reached.

    Stages only move forward; FAILED may be entered from any non-terminal
    stage. The label is a coarse batch indicator, not a per-video signal.
    """

    PENDING = "PENDING"
    QUEUED = "QUEUED"
    SCRIPT_GEN = "SCRIPT_GEN"
    AVATAR_GEN = "AVATAR_GEN"
    VIDEO_GEN = "VIDEO_GEN"
    COMPOSITING = "COMPOSITING"
    UPLOADING = "UPLOADING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationStatus.COMPLETED, GenerationStatus.FAILED)

    @property
    def rank(self) -> int:
        """Position in the stage sequence (terminal states share the last rank)."""
        if self.is_terminal:
            return len(_STAGE_SEQUENCE)
        return _STAGE_SEQUENCE.index(self)

    def can_transition_to(self, target: "GenerationStatus") -> bool:
        """Check whether moving to ``target`` keeps the stage sequence monotonic."""
        if self.is_terminal:
            return False
        if target == GenerationStatus.FAILED:
            return True
        return target.rank > self.rank


_STAGE_SEQUENCE = [
    GenerationStatus.PENDING,
    GenerationStatus.QUEUED,
    GenerationStatus.SCRIPT_GEN,
    GenerationStatus.AVATAR_GEN,
    GenerationStatus.VIDEO_GEN,
    GenerationStatus.COMPOSITING,
    GenerationStatus.UPLOADING,
]


class VideoStatus(StrEnum):
    """Processing status of a single video."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (VideoStatus.COMPLETED, VideoStatus.FAILED)


class QualityStatus(StrEnum):
    """Review outcome set by the external quality process."""

    PENDING = "PENDING"
    PASSED = "PASSED"
    FAILED = "FAILED"


class ServiceType(StrEnum):
    """Kind of external service a cost row is charged to."""

    SCRIPT = "script"
    AVATAR = "avatar"
    VIDEO = "video"
    STORAGE = "storage"


class UnitType(StrEnum):
    """Unit in which a cost row's input/output usage is measured."""

    TOKENS = "tokens"
    SECONDS = "seconds"
    BYTES = "bytes"
