"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept errors escaping
the routes and return the ``{"success": false, "message": ...}`` envelope used
by every endpoint.

Design:
- AppError subclasses → appropriate HTTP status (400, 429, 500)
- Request body validation errors → 400
- Framework HTTP errors (404, 405, ...) → same status, enveloped
- Unexpected Exception → generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    AppError,
    ConfigurationAppError,
    LedgerAppError,
    RateLimitAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

_HTTP_ERROR_MESSAGES = {
    404: "Endpoint not found",
    405: "Method Not Allowed",
}


def _envelope(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors that escaped a route.

    Routes domain errors to HTTP status codes:
    - ValidationAppError → 400 Bad Request (client fault)
    - RateLimitAppError → 429 Too Many Requests
    - ConfigurationAppError, LedgerAppError → 500 (server fault, generic message)

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code.
    """
    status_code = 400
    message = exc.message
    if isinstance(exc, RateLimitAppError):
        status_code = 429
    elif isinstance(exc, (ConfigurationAppError, LedgerAppError)):
        status_code = 500
        message = "Internal server error"

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    return _envelope(status_code, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request bodies with the standard envelope."""
    logger.info(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "error_count": len(exc.errors()),
        },
    )
    return _envelope(400, "Invalid request format. Please try again.")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, wrong method) in the envelope."""
    message = _HTTP_ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
    return _envelope(exc.status_code, message, headers=getattr(exc, "headers", None))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic message.
    No stack traces or exception text reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic 500 error.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return _envelope(500, "Internal server error")


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
