"""Domain models, enumerations and errors."""

from ad_engine.domain.enums import (
    BriefStatus,
    GenerationStatus,
    QualityStatus,
    ServiceType,
    UnitType,
    VideoStatus,
)
from ad_engine.domain.errors import (
    AppError,
    BriefNotFoundError,
    BriefNotParsedError,
    BriefParseError,
    CostLedgerError,
    DispatchError,
    GenerationNotFoundError,
    InvalidTransitionError,
    NotFoundError,
    ProviderError,
    UploadError,
    ValidationError,
    VideoNotFoundError,
)
from ad_engine.domain.models import ParsedBrief, Persona

__all__ = [
    "AppError",
    "BriefNotFoundError",
    "BriefNotParsedError",
    "BriefParseError",
    "BriefStatus",
    "CostLedgerError",
    "DispatchError",
    "GenerationNotFoundError",
    "GenerationStatus",
    "InvalidTransitionError",
    "NotFoundError",
    "ParsedBrief",
    "Persona",
    "ProviderError",
    "QualityStatus",
    "ServiceType",
    "UnitType",
    "UploadError",
    "ValidationError",
    "VideoNotFoundError",
    "VideoStatus",
]
