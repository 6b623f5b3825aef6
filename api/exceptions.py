"""Exception handlers for the simulator FastAPI application.

This module defines custom exception types and the handlers that convert
Python exceptions into consistent JSON responses.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a requested session id is not registered.

    Args:
        session_id: The session id that wasn't found.
        available_sessions: Session ids that are registered.
    """

    def __init__(self, session_id: str, available_sessions: list[str]):
        self.session_id = session_id
        self.available_sessions = available_sessions
        super().__init__(f"Session '{session_id}' not found")


async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    """Handle SessionNotFoundError with a 404 listing the known sessions."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Session Not Found",
            "detail": f"The session '{exc.session_id}' does not exist",
            "requested_session": exc.session_id,
            "available_sessions": exc.available_sessions,
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle pydantic validation errors raised outside request parsing."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False),
        },
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions as 400 Bad Request."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Value",
            "detail": str(exc),
            "type": "ValueError",
        },
    )


async def runtime_error_handler(request: Request, exc: RuntimeError):
    """Handle RuntimeError exceptions as 500 Internal Server Error."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Runtime Error",
            "detail": str(exc),
            "type": "RuntimeError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler; logs the traceback and hides it from the client."""
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
