"""
Global exception handlers for the FastAPI application.

Catches:
1. ListoraError subclasses — maps to appropriate HTTP status codes.
2. Unhandled Exception — 500 Internal Server Error with a unique
   ``error_id`` for customer-support correlation.

HTTPException is NOT handled here; FastAPI's built-in handler deals
with those, and Sentry's ``before_send`` filter drops 4xx events.
"""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from listora.core.exceptions import (
    ListoraError,
    MarketplaceAuthError,
    PlatformRejectedError,
    PublishValidationError,
    TransportFailureError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers on the FastAPI app.

    Called from ``create_app()`` after all routers are registered.
    """

    @app.exception_handler(ListoraError)
    async def handle_listora_error(request: Request, exc: ListoraError) -> JSONResponse:
        """Map ListoraError subclasses to HTTP status codes."""
        status_code = _get_status_code(exc)
        log = logger.warning if status_code < 500 else logger.error
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={"error_type": type(exc).__name__, "path": request.url.path},
        )
        content = {"detail": exc.message, "error_type": type(exc).__name__}
        if isinstance(exc, PublishValidationError):
            content["field"] = exc.field
        if isinstance(exc, PlatformRejectedError) and exc.missing_fields:
            content["missing_fields"] = exc.missing_fields
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(Exception)
    async def handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: log, return 500 with error_id."""
        error_id = uuid.uuid4().hex[:8]
        logger.exception(
            f"Unhandled exception (error_id={error_id})",
            extra={"error_id": error_id, "path": request.url.path},
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error_id": error_id,
            },
        )


def _get_status_code(exc: ListoraError) -> int:
    """Map exception type to HTTP status code."""
    if isinstance(exc, PublishValidationError):
        return 400
    if isinstance(exc, MarketplaceAuthError):
        return 401
    if isinstance(exc, (PlatformRejectedError, TransportFailureError)):
        return 502
    # Base ListoraError fallback
    return 500
