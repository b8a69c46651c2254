"""Global error handling.

This module is the only place that turns exceptions into client-visible
error bodies. Every response shares the same envelope:

    {success: false, error_code, error, message, path, method, timestamp}

plus ``details`` for validation and conflict errors, and ``debug`` for
unexpected errors outside production.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.core.errors import get_error
from app.core.exceptions import AppError, ConflictError
from app.repositories.user import conflicting_field

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = {
    "auth": "/api/auth",
    "health": "/api/health",
    "testEmail": "/api/test-email",
}


def error_response(
    request: Request,
    error_code: str,
    status_code: int | None = None,
    message: str | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build the shared error envelope for a catalog code."""
    info = get_error(error_code)
    content = {
        "success": False,
        "error_code": error_code,
        "error": info["error"],
        "message": message or info["message"],
        "path": request.url.path,
        "method": request.method,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    content.update(extra)
    return JSONResponse(
        status_code=status_code or info["http_status"],
        content=jsonable_encoder(content),
    )


def _request_context(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Handle the application's own exception hierarchy.

    Args:
        request: The incoming request
        exc: Any AppError subclass

    Returns:
        JSONResponse with the catalog entry for ``exc.error_code``
    """
    extra = {"error_code": exc.error_code, **_request_context(request)}
    if exc.http_status >= 500:
        logger.error(f"Application error: {exc.error_code}", extra=extra)
    else:
        logger.info(f"Request rejected: {exc.error_code}", extra=extra)

    if exc.details:
        return error_response(request, exc.error_code, exc.http_status, details=exc.details)
    return error_response(request, exc.error_code, exc.http_status)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Args:
        request: The incoming request
        exc: The validation error

    Returns:
        JSONResponse (400) listing each failing field
    """
    details = []
    for error in exc.errors():
        loc = [str(x) for x in error.get("loc", ()) if x != "body"]
        details.append(
            {
                "field": ".".join(loc),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
                # For missing fields pydantic reports the whole parent object as input.
                "value": None if error.get("type") == "missing" else error.get("input"),
            }
        )

    extra = _request_context(request)
    if settings.debug:
        extra["errors"] = details
    logger.warning(f"Validation error on {request.url.path}", extra=extra)

    # Echoing a password back is never useful.
    for detail in details:
        if "senha" in detail["field"]:
            detail["value"] = None

    return error_response(request, "VAL_001", status.HTTP_400_BAD_REQUEST, details=details)


async def handle_integrity_error(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle database integrity errors that escaped a service.

    Args:
        request: The incoming request
        exc: The integrity error

    Returns:
        409 for unique-constraint violations, 500 otherwise
    """
    # Do not log str(exc): it can include SQL + bound parameters.
    if settings.debug:
        logger.exception(
            f"Database integrity error on {request.url.path}", extra=_request_context(request)
        )
    else:
        logger.error(
            f"Database integrity error on {request.url.path}", extra=_request_context(request)
        )

    field = conflicting_field(exc)
    if field is not None:
        return await handle_app_error(request, ConflictError(field))

    return error_response(request, "DB_001")


async def handle_no_result(request: Request, exc: NoResultFound) -> JSONResponse:
    return error_response(request, "USR_003", status.HTTP_404_NOT_FOUND)


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle any other storage-layer failure."""
    if settings.debug:
        logger.exception(f"Database error on {request.url.path}", extra=_request_context(request))
    else:
        logger.error(
            f"Database error on {request.url.path}",
            extra={"error_type": type(exc).__name__, **_request_context(request)},
        )
    return error_response(request, "DB_001")


async def handle_jwt_error(request: Request, exc: JWTError) -> JSONResponse:
    """Handle token errors raised outside the authentication dependency."""
    if isinstance(exc, ExpiredSignatureError):
        return error_response(request, "AUTH_004")
    return error_response(request, "AUTH_003")


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle framework HTTP errors (unmatched routes, wrong methods, 403s)."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(
            request,
            "API_001",
            requestedUrl=str(request.url.path),
            availableEndpoints=AVAILABLE_ENDPOINTS,
        )
    if exc.status_code == status.HTTP_403_FORBIDDEN:
        return error_response(request, "API_002")
    if 400 <= exc.status_code < 500:
        return error_response(
            request,
            "API_003",
            exc.status_code,
            message=str(exc.detail) if exc.detail else None,
        )
    return await handle_generic_error(request, exc)


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Args:
        request: The incoming request
        exc: The unexpected exception

    Returns:
        JSONResponse with a generic error; outside production the body also
        carries the exception type, message and stack.
    """
    # In non-debug: do not log str(exc) or traceback (may include sensitive data).
    extra = {"error_type": type(exc).__name__, **_request_context(request)}
    if settings.debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    if settings.is_production:
        return error_response(request, "SYS_001")

    return error_response(
        request,
        "SYS_001",
        debug={
            "name": type(exc).__name__,
            "message": str(exc),
            "stack": "".join(traceback.format_exception(exc)),
        },
    )
