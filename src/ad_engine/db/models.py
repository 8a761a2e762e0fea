"""SQLAlchemy ORM models."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ad_engine.domain.enums import BriefStatus, GenerationStatus, QualityStatus, VideoStatus

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Money columns: 18 digits, 10 after the point, never floats
MONEY_PRECISION = 18
MONEY_SCALE = 10

Money = Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BriefModel(Base):
    """Marketing brief ORM model."""

    __tablename__ = "briefs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    raw_input: Mapped[str] = mapped_column(Text, nullable=False)
    parsed_data: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=BriefStatus.PENDING,
        server_default=BriefStatus.PENDING.value,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    generations: Mapped[list["GenerationModel"]] = relationship(
        "GenerationModel", back_populates="brief", cascade="all, delete-orphan"
    )


class GenerationModel(Base):
    """Generation (one batch of videos requested from a brief) ORM model."""

    __tablename__ = "generations"
    __table_args__ = (
        CheckConstraint("target_count BETWEEN 1 AND 10", name="ck_generations_target_count"),
    )

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    brief_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("briefs.id", ondelete="CASCADE"), index=True
    )
    parent_generation_id: Mapped[PyUUID | None] = mapped_column(
        Uuid, ForeignKey("generations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    target_count: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=GenerationStatus.PENDING,
        server_default=GenerationStatus.PENDING.value,
        index=True,
    )
    total_cost: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), server_default="0")
    task_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    brief: Mapped["BriefModel"] = relationship("BriefModel", back_populates="generations")
    parent_generation: Mapped["GenerationModel | None"] = relationship(
        "GenerationModel", remote_side=[id], back_populates="child_generations"
    )
    child_generations: Mapped[list["GenerationModel"]] = relationship(
        "GenerationModel", back_populates="parent_generation"
    )
    videos: Mapped[list["VideoModel"]] = relationship(
        "VideoModel",
        back_populates="generation",
        cascade="all, delete-orphan",
        order_by="VideoModel.variant_index",
    )


class VideoModel(Base):
    """Video (one per script variant) ORM model."""

    __tablename__ = "videos"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    generation_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("generations.id", ondelete="CASCADE"), index=True
    )
    variant_index: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    status: Mapped[str] = mapped_column(
        String(20),
        default=VideoStatus.PENDING,
        server_default=VideoStatus.PENDING.value,
        index=True,
    )
    quality_status: Mapped[str] = mapped_column(
        String(20),
        default=QualityStatus.PENDING,
        server_default=QualityStatus.PENDING.value,
        index=True,
    )
    script_provider: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_provider: Mapped[str] = mapped_column(String(100), nullable=False)
    generation_params: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    quality_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    total_cost: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    generation: Mapped["GenerationModel"] = relationship(
        "GenerationModel", back_populates="videos"
    )
    # Deleting a video keeps its ledger rows; their video_id is set to NULL
    cost_logs: Mapped[list["CostLogModel"]] = relationship("CostLogModel", back_populates="video")


class CostLogModel(Base):
    """Append-only cost ledger row (one per external operation)."""

    __tablename__ = "cost_logs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    # Null for generation-scoped operations such as the batched script call
    video_id: Mapped[PyUUID | None] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="SET NULL"), nullable=True, index=True
    )
    service_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(100), nullable=False)
    operation: Mapped[str] = mapped_column(String(100), nullable=False)
    input_units: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    output_units: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    unit_type: Mapped[str] = mapped_column(String(20), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Money, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )

    # Relationships
    video: Mapped["VideoModel | None"] = relationship("VideoModel", back_populates="cost_logs")
