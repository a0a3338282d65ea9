"""
===============================================================================
TARJETA CRC - error_mapping.py (OperationError -> HTTP RFC7807)
===============================================================================

Responsibilities:
  - Translate use-case OperationErrors into RFC7807 HTTP exceptions.
  - Centralize the mapping so routers never branch on error kinds.
  - Keep the domain free of HTTP.

Rules:
  - One ErrorCode per ErrorKind; the guard reason travels in errors[].
  - CONCURRENT_MODIFICATION is 412 and flagged retryable.
  - INTERNAL_ERROR never exposes internal detail (use cases already replaced
    the message with a generic one).

Collaborators:
  - application.usecases.results (OperationError, OperationResult)
  - crosscutting.error_responses (AppHTTPException, ErrorCode)
===============================================================================
"""

from __future__ import annotations

from typing import NoReturn, TypeVar

from clubfunds.application.usecases.results import OperationError, OperationResult
from clubfunds.crosscutting.error_responses import AppHTTPException, ErrorCode
from clubfunds.domain.errors import ErrorKind

T = TypeVar("T")

# kind -> (status, code)
KIND_TO_HTTP: dict[ErrorKind, tuple[int, ErrorCode]] = {
    ErrorKind.NOT_FOUND: (404, ErrorCode.NOT_FOUND),
    ErrorKind.ALREADY_EXISTS: (409, ErrorCode.ALREADY_EXISTS),
    ErrorKind.INVALID_STATE_TRANSITION: (409, ErrorCode.INVALID_STATE_TRANSITION),
    ErrorKind.PROTECTED_RESOURCE: (403, ErrorCode.PROTECTED_RESOURCE),
    ErrorKind.CONCURRENT_MODIFICATION: (412, ErrorCode.CONCURRENT_MODIFICATION),
    ErrorKind.VALIDATION_FAILURE: (422, ErrorCode.VALIDATION_ERROR),
    ErrorKind.INTERNAL_ERROR: (500, ErrorCode.INTERNAL_ERROR),
}


def to_http_exception(error: OperationError) -> AppHTTPException:
    status_code, code = KIND_TO_HTTP.get(
        error.kind, (500, ErrorCode.INTERNAL_ERROR)
    )

    detail: dict[str, str] = {}
    if error.reason is not None:
        detail["reason"] = error.reason.value
    if error.resource:
        detail["resource"] = error.resource

    return AppHTTPException(
        status_code=status_code,
        code=code,
        detail=error.message,
        errors=[detail] if detail else None,
        retryable=error.retryable,
    )


def raise_operation_error(error: OperationError) -> NoReturn:
    raise to_http_exception(error)


def unwrap(result: OperationResult[T]) -> T:
    """Payload of a successful result; raises the mapped HTTP error otherwise."""
    if result.error is not None:
        raise_operation_error(result.error)
    return result.payload  # type: ignore[return-value]
