"""Translation of domain errors into HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ad_engine.domain.errors import (
    AppError,
    BriefNotParsedError,
    BriefParseError,
    DispatchError,
    InvalidTransitionError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from ad_engine.logging import get_logger

logger = get_logger(__name__)

# Checked in order; first match wins
STATUS_MAP: list[tuple[type[AppError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (BriefParseError, status.HTTP_400_BAD_REQUEST),
    (BriefNotParsedError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (DispatchError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(error: AppError) -> int:
    for error_type, code in STATUS_MAP:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    code = status_for(exc)

    detail: dict[str, object] = {"message": exc.message}
    if isinstance(exc, ValidationError):
        detail["fields"] = exc.fields

    if code >= 500:
        logger.error("request_failed", path=request.url.path, status=code, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, status=code, error=exc.message)

    return JSONResponse(status_code=code, content={"detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
