"""Domain exceptions.

Every error raised by the services derives from :class:`AppError` so the API
layer can translate it into an HTTP response in one place.
"""

from typing import Any


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"type": type(self).__name__, "message": self.message}


class ValidationError(AppError):
    """Request failed a business-rule check; carries field-level detail."""

    def __init__(self, fields: dict[str, str], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.fields = fields

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "fields": self.fields}


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, entity_id: Any) -> None:
        super().__init__(f"{self.entity} not found: {entity_id}")
        self.entity_id = entity_id


class BriefNotFoundError(NotFoundError):
    entity = "Brief"


class GenerationNotFoundError(NotFoundError):
    entity = "Generation"


class VideoNotFoundError(NotFoundError):
    entity = "Video"


class BriefParseError(AppError):
    """Raw brief text could not be turned into structured data."""


class BriefNotParsedError(AppError):
    """A generation was started for a brief without parsed data."""

    def __init__(self, brief_id: Any) -> None:
        super().__init__(f"Brief {brief_id} has no parsed data")
        self.brief_id = brief_id


class InvalidTransitionError(AppError):
    """A generation stage change would move backwards or leave a terminal state."""

    def __init__(self, generation_id: Any, current: str, target: str) -> None:
        super().__init__(f"Generation {generation_id} cannot move from {current} to {target}")
        self.generation_id = generation_id
        self.current = current
        self.target = target


class ProviderError(AppError):
    """An external provider call failed."""

    def __init__(self, provider: str, message: str, code: str | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.code = code


class UploadError(ProviderError):
    """Durable storage rejected an upload."""

    def __init__(self, provider: str, key: str, message: str) -> None:
        super().__init__(provider, f"upload of {key} failed: {message}")
        self.key = key


class CostLedgerError(AppError):
    """A cost row could not be recorded or rolled up."""


class DispatchError(AppError):
    """A generation could not be handed to the background worker."""
