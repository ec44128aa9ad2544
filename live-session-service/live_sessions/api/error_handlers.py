# live_sessions/api/error_handlers.py
"""Global exception handlers rendering LiveSessionError as {"detail", "code"}."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from live_sessions.core.exceptions import ErrorCategory, LiveSessionError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_live_session_error_handler(app)
    _register_generic_error_handler(app)


def _register_live_session_error_handler(app: FastAPI) -> None:

    @app.exception_handler(LiveSessionError)
    async def live_session_error_handler(request: Request, exc: LiveSessionError):
        # Validation and state conflicts are expected outcomes, not faults
        level = logging.WARNING if exc.category == ErrorCategory.FORBIDDEN else logging.INFO
        logger.log(
            level,
            f"{exc.code}: {exc.message}",
            extra={"error_code": exc.code, "session_id": exc.session_id, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all, never leaks internal details."""
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"},
        )
