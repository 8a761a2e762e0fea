"""Cost ledger: append-only cost rows and their roll-ups.

Roll-ups are always full recomputations from source rows. Sums are taken on
the Python side with ``Decimal`` so the result is exact on every backend,
including SQLite where ``Numeric`` columns are stored as floating point.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ad_engine.config import Settings, get_settings
from ad_engine.db.models import MONEY_SCALE, CostLogModel, GenerationModel, VideoModel
from ad_engine.domain.enums import ServiceType, UnitType
from ad_engine.domain.errors import CostLedgerError, GenerationNotFoundError, VideoNotFoundError
from ad_engine.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")
_QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)


def quantize_cost(value: Decimal) -> Decimal:
    """Round a cost to the precision of the money columns."""
    return value.quantize(_QUANTUM)


@dataclass
class CostEntry:
    """One external operation to be recorded in the ledger."""

    service_type: ServiceType
    provider: str
    operation: str
    unit_type: UnitType
    cost: Decimal
    input_units: float = 0.0
    output_units: float = 0.0
    video_id: UUID | None = None


@dataclass
class Pricing:
    """Unit prices used to cost provider operations."""

    per_script_token: Decimal
    per_avatar_second: Decimal
    per_composition: Decimal
    per_storage_byte: Decimal

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Pricing":
        settings = settings or get_settings()
        return cls(
            per_script_token=settings.cost_per_script_token,
            per_avatar_second=settings.cost_per_avatar_second,
            per_composition=settings.cost_per_composition,
            per_storage_byte=settings.cost_per_storage_byte,
        )

    def script_cost(self, tokens: int) -> Decimal:
        return quantize_cost(self.per_script_token * tokens)

    def avatar_cost(self, seconds: float) -> Decimal:
        # str() keeps the float's shortest repr instead of its binary expansion
        return quantize_cost(self.per_avatar_second * Decimal(str(seconds)))

    def composition_cost(self) -> Decimal:
        return quantize_cost(self.per_composition)

    def storage_cost(self, size_bytes: int) -> Decimal:
        return quantize_cost(self.per_storage_byte * size_bytes)


class CostLedger:
    """Ledger operations bound to one database session.

    The caller owns the session and its transaction; writes are flushed so
    that roll-ups in the same session see them.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def log_cost(self, entry: CostEntry) -> CostLogModel:
        """Append one cost row."""
        if entry.cost < ZERO:
            raise CostLedgerError(f"Negative cost for {entry.service_type}: {entry.cost}")

        row = CostLogModel(
            video_id=entry.video_id,
            service_type=entry.service_type,
            provider=entry.provider,
            operation=entry.operation,
            input_units=entry.input_units,
            output_units=entry.output_units,
            unit_type=entry.unit_type,
            cost=quantize_cost(entry.cost),
        )
        try:
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "cost_log_failed",
                video_id=str(entry.video_id) if entry.video_id else None,
                service_type=entry.service_type,
                error=str(e),
            )
            raise CostLedgerError(f"Failed to record {entry.service_type} cost: {e}") from e

        logger.debug(
            "cost_logged",
            video_id=str(entry.video_id) if entry.video_id else None,
            service_type=entry.service_type,
            provider=entry.provider,
            cost=str(row.cost),
        )
        return row

    def rollup_video_cost(self, video_id: UUID) -> Decimal:
        """Recompute ``Video.total_cost`` from its cost rows."""
        video = self.session.get(VideoModel, video_id)
        if video is None:
            raise VideoNotFoundError(video_id)

        costs = self.session.scalars(
            select(CostLogModel.cost).where(CostLogModel.video_id == video_id)
        ).all()
        total = quantize_cost(sum(costs, ZERO))

        video.total_cost = total
        self.session.flush()

        logger.debug("video_cost_rolled_up", video_id=str(video_id), total_cost=str(total))
        return total

    def rollup_generation_cost(self, generation_id: UUID) -> Decimal:
        """Recompute ``Generation.total_cost`` as the sum of its video totals."""
        generation = self.session.get(GenerationModel, generation_id)
        if generation is None:
            raise GenerationNotFoundError(generation_id)

        totals = self.session.scalars(
            select(VideoModel.total_cost).where(VideoModel.generation_id == generation_id)
        ).all()
        total = quantize_cost(sum(totals, ZERO))

        generation.total_cost = total
        self.session.flush()

        logger.info(
            "generation_cost_rolled_up",
            generation_id=str(generation_id),
            total_cost=str(total),
        )
        return total

    def video_breakdown(self, video_id: UUID) -> tuple[list[CostLogModel], dict[str, Decimal]]:
        """Cost rows of a video and their subtotals per service type."""
        rows = list(
            self.session.scalars(
                select(CostLogModel)
                .where(CostLogModel.video_id == video_id)
                .order_by(CostLogModel.created_at)
            )
        )
        subtotals: dict[str, Decimal] = {service.value: ZERO for service in ServiceType}
        for row in rows:
            subtotals[row.service_type] = subtotals.get(row.service_type, ZERO) + row.cost
        return rows, {k: quantize_cost(v) for k, v in subtotals.items()}

    def total_since(self, since: datetime | None = None) -> Decimal:
        query = select(CostLogModel.cost)
        if since is not None:
            query = query.where(CostLogModel.created_at >= since)
        return quantize_cost(sum(self.session.scalars(query).all(), ZERO))

    def by_service_since(self, since: datetime) -> dict[str, Decimal]:
        rows = self.session.execute(
            select(CostLogModel.service_type, CostLogModel.cost).where(
                CostLogModel.created_at >= since
            )
        ).all()
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for service_type, cost in rows:
            totals[service_type] += cost
        return {k: quantize_cost(v) for k, v in totals.items()}

    def stats(self, now: datetime | None = None) -> dict[str, Any]:
        """Spend for today, the last 7 and 30 days, and all time."""
        now = now or datetime.now(UTC)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month_ago = now - timedelta(days=30)

        return {
            "today": self.total_since(start_of_day),
            "week": self.total_since(now - timedelta(days=7)),
            "month": self.total_since(month_ago),
            "all_time": self.total_since(),
            "by_service_type": self.by_service_since(month_ago),
        }
