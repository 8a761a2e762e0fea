"""FastAPI application: brief intake, generation tracking, review and spend."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ad_engine import __version__
from ad_engine.api.deps import require_api_token
from ad_engine.api.errors import register_error_handlers
from ad_engine.api.routes import briefs, costs, generations, health, videos
from ad_engine.config import settings
from ad_engine.db.session import init_db
from ad_engine.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("api_starting", version=__version__)

    try:
        init_db()
    except Exception as e:
        # /health/ready reports this; the process stays up
        logger.error("database_unavailable_at_startup", error=str(e))
    else:
        logger.info("database_connected")

    yield

    logger.info("api_stopping")


def create_app() -> FastAPI:
    """Build the application with routers and error handlers registered."""
    application = FastAPI(
        title="AI Ad Engine",
        description="Batch generation of testimonial video ads from marketing briefs",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(application)

    # Health routes stay public; everything under the API prefix needs the token
    application.include_router(health.router)
    for router in (briefs.router, generations.router, videos.router, costs.router):
        application.include_router(
            router, prefix=API_PREFIX, dependencies=[Depends(require_api_token)]
        )

    @application.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"name": "AI Ad Engine", "version": __version__, "docs": "/docs"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ad_engine.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
