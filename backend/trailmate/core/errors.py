"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; the handlers registered in
``trailmate.main`` render them as ``{"error": message}``.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class TrailMateError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(TrailMateError):
    """Missing or invalid required fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required"


class ConflictError(TrailMateError):
    """Duplicate membership or already-registered resource."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"


class NotFoundError(TrailMateError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AuthorizationError(TrailMateError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class AuthenticationError(TrailMateError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ServerError(TrailMateError):
    """Unexpected persistence failure."""


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def trailmate_error_handler(request: Request, exc: TrailMateError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} failed on a database error", exc_info=exc)
    return error_response(ServerError.status_code, ServerError.default_message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} failed", exc_info=exc)
    return error_response(ServerError.status_code, ServerError.default_message)


def register_exception_handlers(app) -> None:
    """Attach the ``{"error": message}`` handlers to a FastAPI app."""
    app.add_exception_handler(TrailMateError, trailmate_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
