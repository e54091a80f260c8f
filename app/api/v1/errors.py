"""Mapping of application exceptions to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.exceptions import (
    ConfigError,
    ContentExtractionError,
    ExternalAPIError,
    LLMError,
    PromptBlockedError,
    ResourceDisabledError,
    ResourceNotFoundError,
    SoraStudioError,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

# Checked in order; the first matching class wins
STATUS_CODES: tuple[tuple[type[SoraStudioError], int], ...] = (
    (PromptBlockedError, 400),
    (ResourceNotFoundError, 404),
    (ResourceDisabledError, 400),
    (ConfigError, 500),
    (ExternalAPIError, 502),
    (LLMError, 502),
    (ContentExtractionError, 502),
)


def status_code_for(exc: SoraStudioError) -> int:
    """HTTP status for an application exception (500 when unmapped)."""
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def error_response(exc: SoraStudioError, status_code: int | None = None) -> JSONResponse:
    """Build the JSON error envelope for an exception."""
    return JSONResponse(
        status_code=status_code or status_code_for(exc),
        content={
            "success": False,
            "error": str(exc),
            "error_type": exc.__class__.__name__,
        },
    )


async def handle_app_error(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for SoraStudioError."""
    assert isinstance(exc, SoraStudioError)
    status_code = status_code_for(exc)
    log = logger.warning if status_code < 500 else logger.error
    log("Request failed", path=request.url.path, status=status_code, **exc.to_dict())
    return error_response(exc, status_code)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the application exception handlers."""
    app.add_exception_handler(SoraStudioError, handle_app_error)


__all__ = ["STATUS_CODES", "status_code_for", "error_response", "register_exception_handlers"]
