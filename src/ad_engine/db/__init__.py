"""Database layer."""

from ad_engine.db.models import Base, BriefModel, CostLogModel, GenerationModel, VideoModel
from ad_engine.db.session import (
    SessionContextFactory,
    get_session,
    get_session_context,
    init_db,
    make_session_context,
)

__all__ = [
    "Base",
    "SessionContextFactory",
    "get_session",
    "get_session_context",
    "init_db",
    "make_session_context",
    # Models
    "BriefModel",
    "CostLogModel",
    "GenerationModel",
    "VideoModel",
]
