"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text

from ad_engine.api.deps import CapabilitiesDep, SessionDep
from ad_engine.config import settings
from ad_engine.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    providers: dict[str, str]


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool
    components: dict[str, bool]


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Basic health check with the configured provider names."""
    from ad_engine import __version__

    return HealthResponse(
        status="healthy",
        version=__version__,
        providers={
            "script": settings.script_provider,
            "avatar": settings.avatar_provider,
            "composer": settings.composer_provider,
            "broll": settings.broll_provider,
            "storage": settings.storage_provider,
        },
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the database and every configured provider.",
)
async def readiness_check(
    session: SessionDep,
    capabilities: CapabilitiesDep,
) -> ReadinessResponse:
    database_ok = False
    try:
        session.execute(text("SELECT 1"))
        database_ok = True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))

    components = await capabilities.health()

    return ReadinessResponse(
        ready=database_ok and all(components.values()),
        database=database_ok,
        components=components,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe - is the process alive?"""
    return {"status": "alive"}
