"""Cost ledger statistics."""

from decimal import Decimal

from fastapi import APIRouter
from pydantic import BaseModel

from ad_engine.api.deps import SessionDep
from ad_engine.services.cost_ledger import CostLedger

router = APIRouter(prefix="/cost-logs", tags=["Costs"])


class CostStatsResponse(BaseModel):
    """Spend totals over standard windows."""

    today: Decimal
    week: Decimal
    month: Decimal
    all_time: Decimal
    by_service_type: dict[str, Decimal]


@router.get(
    "/stats",
    response_model=CostStatsResponse,
    summary="Cost statistics",
    description="Spend today, over the last 7 and 30 days, all time, and by service for 30 days.",
)
async def cost_stats(session: SessionDep) -> CostStatsResponse:
    return CostStatsResponse(**CostLedger(session).stats())
