"""FastAPI dependencies."""

import secrets
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ad_engine.config import settings
from ad_engine.db.session import get_session
from ad_engine.jobs.generation import CeleryGenerationDispatcher
from ad_engine.logging import get_logger
from ad_engine.services.generations import GenerationDispatcher
from ad_engine.services.providers import Capabilities, resolve_capabilities

logger = get_logger(__name__)

# Database session dependency
SessionDep = Annotated[Session, Depends(get_session)]

bearer_scheme = HTTPBearer(auto_error=False)


def require_api_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> None:
    """Check the bearer token on protected routes.

    With no ``api_token`` configured every request is let through.
    """
    expected = settings.api_token
    if not expected:
        return

    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), expected.encode()
    ):
        logger.info("api_token_rejected", has_credentials=credentials is not None)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_dispatcher() -> GenerationDispatcher:
    """Get the dispatcher that starts pipelines in the background."""
    return CeleryGenerationDispatcher()


DispatcherDep = Annotated[GenerationDispatcher, Depends(get_dispatcher)]


def get_capabilities() -> Capabilities:
    """Get the configured provider set."""
    return resolve_capabilities()


CapabilitiesDep = Annotated[Capabilities, Depends(get_capabilities)]


def parse_uuid(value: str, entity: str) -> UUID:
    """Parse a path identifier, answering 400 on malformed input."""
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {entity} ID format",
        ) from None
