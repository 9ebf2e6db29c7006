"""Exception handlers for the DES FastAPI application.

This module defines custom exceptions raised by route handlers and the
handlers that convert them, and core errors, into consistent JSON responses.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.errors import AlreadyExists, FileSystemError, PathNotFound, SessionBusyError

logger = logging.getLogger(__name__)


# Custom Exception Classes


class SessionNotFoundError(Exception):
    """Raised when a requested terminal session doesn't exist.

    Args:
        session_id: The identifier that wasn't found.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' not found")


class WindowNotFoundError(Exception):
    """Raised when a requested window isn't open.

    Args:
        window_id: The identifier that wasn't found.
    """

    def __init__(self, window_id: str):
        self.window_id = window_id
        super().__init__(f"Window '{window_id}' not found")


# Exception Handlers


async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    """Handle SessionNotFoundError exceptions with a 404."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Session Not Found",
            "detail": str(exc),
            "session_id": exc.session_id,
        },
    )


async def session_busy_handler(request: Request, exc: SessionBusyError):
    """Handle SessionBusyError exceptions.

    Returns a 409 (Conflict): the session is still processing a line and
    accepts exactly one in-flight submission.
    """
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "Session Busy",
            "detail": str(exc),
            "session_id": exc.session_id,
            "turn_state": exc.state,
        },
    )


async def window_not_found_handler(request: Request, exc: WindowNotFoundError):
    """Handle WindowNotFoundError exceptions with a 404."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Window Not Found",
            "detail": str(exc),
            "window_id": exc.window_id,
        },
    )


async def filesystem_error_handler(request: Request, exc: FileSystemError):
    """Handle virtual filesystem errors.

    Missing paths map to 404, name collisions to 409 and every other
    filesystem error (type mismatch, invalid operation) to 400.

    Args:
        request: The incoming request that triggered the error.
        exc: The FileSystemError exception.

    Returns:
        JSONResponse with the path and reason.
    """
    if isinstance(exc, PathNotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AlreadyExists):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "detail": exc.message,
            "path": exc.path,
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors raised outside request parsing."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False, include_context=False),
        },
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions.

    ValueErrors indicate input that passed Pydantic validation but failed
    business logic validation (unknown app, missing operation field).
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Value",
            "detail": str(exc),
            "type": "ValueError",
        },
    )


async def runtime_error_handler(request: Request, exc: RuntimeError):
    """Handle RuntimeError exceptions with a 500."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Runtime Error",
            "detail": str(exc),
            "type": "RuntimeError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    A catch-all for unexpected errors that keeps stack traces out of
    responses.
    """
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
