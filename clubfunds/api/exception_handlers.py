"""
===============================================================================
TARJETA CRC - clubfunds/api/exception_handlers.py (centralized exception mapping)
===============================================================================

Responsibilities:
  - Translate internal exceptions into RFC7807 HTTP responses.
  - Centralize error logging with request_id + error_id.
  - Avoid leaking internal details on unhandled errors.

Patterns:
  - Exception Mapping (Presentation Layer).
  - Fail-safe: any untyped exception -> INTERNAL_ERROR (with logging).

Collaborators:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: ClubFundsError and DatabaseError
  - crosscutting.config.get_settings (decides the level of detail)

Notes:
  - Operation failures (NOT_FOUND, INVALID_STATE_TRANSITION, ...) never get
    here: routers turn them into AppHTTPException via error_mapping.
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    internal_error,
    validation_error,
)
from ..crosscutting.exceptions import ClubFundsError, DatabaseError
from ..crosscutting.logger import logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _handle_service_error(
    request: Request,
    *,
    exc: ClubFundsError,
    code: ErrorCode,
    status_code: int,
    retryable: bool = False,
) -> JSONResponse:
    """Shared helper for typed service errors."""
    request_id = _request_id_from(request)

    logger.error(
        "Service error",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "error": exc.message,
            "request_id": request_id,
        },
    )

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=[{"error_id": exc.error_id}],
        retryable=retryable,
    )
    return await app_exception_handler(request, app_exc)


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    return await _handle_service_error(
        request,
        exc=exc,
        code=ErrorCode.DATABASE_ERROR,
        status_code=503,
        retryable=True,
    )


async def clubfunds_error_handler(request: Request, exc: ClubFundsError) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.INTERNAL_ERROR, status_code=500
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return await app_exception_handler(
        request, validation_error("Request validation failed.", errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Fallback for untyped exceptions.

    - Full log (stack trace).
    - Generic response in production.
    """
    request_id = _request_id_from(request)
    settings = get_settings()

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = str(exc) if not settings.is_production() else "Internal error."

    return await app_exception_handler(request, internal_error(detail))


def register_exception_handlers(app) -> None:
    """
    Register handlers on the FastAPI app.

    AppHTTPException must be registered to keep RFC7807; the generic
    Exception handler goes last as the fallback.
    """
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(ClubFundsError, clubfunds_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
