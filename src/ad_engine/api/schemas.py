"""Response models shared between route modules.

Response fields are snake_case. Request models also accept the camelCase
spelling of each field through validation aliases.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class GenerationResponse(BaseModel):
    """Generation response model."""

    id: UUID
    brief_id: UUID
    parent_generation_id: UUID | None
    target_count: int
    status: str
    total_cost: Decimal
    task_id: str | None
    error_message: str | None
    created_at: datetime | None
    completed_at: datetime | None

    model_config = {"from_attributes": True}


class VideoResponse(BaseModel):
    """Video response model."""

    id: UUID
    generation_id: UUID
    variant_index: int
    status: str
    quality_status: str
    script_provider: str
    avatar_provider: str
    generation_params: dict[str, Any] | None
    video_url: str | None
    total_cost: Decimal
    quality_note: str | None
    reviewed_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}
