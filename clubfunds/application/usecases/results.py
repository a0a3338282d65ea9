"""
===============================================================================
USE CASE SUPPORT: Uniform operation results
===============================================================================

Name:
    OperationResult / OperationError / guarded_operation

Responsibilities:
    - Give every public operation the same result shape: success flag,
      human-readable message, optional payload, machine-checkable error kind.
    - Translate domain and repository errors at the operation boundary so no
      internal exception leaks to callers.
    - Report unexpected failures as INTERNAL_ERROR without internal detail,
      while logging them in full.

Collaborators:
    - domain.errors: ErrorKind, GuardReason, DomainError hierarchy
    - crosscutting.metrics: failure and conflict counters
    - interfaces.api.http.error_mapping: OperationError -> HTTP
===============================================================================
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from ...crosscutting.metrics import record_concurrency_conflict, record_operation_failure
from ...domain.errors import (
    ConcurrentModificationError,
    DomainError,
    ErrorKind,
    GuardReason,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class OperationError:
    kind: ErrorKind
    message: str
    reason: GuardReason | None = None
    resource: str | None = None

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.CONCURRENT_MODIFICATION


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    payload: T | None = None
    message: str = ""
    error: OperationError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, payload: T | None = None, message: str = "OK") -> "OperationResult[T]":
        return cls(payload=payload, message=message)

    @classmethod
    def fail(cls, error: OperationError) -> "OperationResult[T]":
        return cls(message=error.message, error=error)


def error_from(exc: DomainError) -> OperationError:
    return OperationError(
        kind=exc.kind,
        message=exc.message,
        reason=exc.reason,
        resource=exc.resource,
    )


def guarded_operation(operation: str) -> Callable:
    """
    Decorator for use case execute() methods.

    DomainError -> OperationResult.fail(kind/reason)
    anything else -> INTERNAL_ERROR (logged with stacktrace)
    """

    def decorator(fn: Callable[..., OperationResult]) -> Callable[..., OperationResult]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> OperationResult:
            try:
                return fn(*args, **kwargs)
            except ConcurrentModificationError as exc:
                record_concurrency_conflict(exc.resource or "unknown")
                record_operation_failure(operation, exc.kind.value)
                logger.warning(
                    "Concurrent modification",
                    extra={"operation": operation, "resource": exc.resource},
                )
                return OperationResult.fail(error_from(exc))
            except DomainError as exc:
                record_operation_failure(operation, exc.kind.value)
                logger.info(
                    "Operation rejected",
                    extra={
                        "operation": operation,
                        "kind": exc.kind.value,
                        "reason": exc.reason.value if exc.reason else None,
                        "detail": exc.message,
                    },
                )
                return OperationResult.fail(error_from(exc))
            except Exception:
                record_operation_failure(operation, ErrorKind.INTERNAL_ERROR.value)
                logger.exception(
                    "Operation failed unexpectedly", extra={"operation": operation}
                )
                return OperationResult.fail(
                    OperationError(
                        kind=ErrorKind.INTERNAL_ERROR,
                        message=GENERIC_INTERNAL_MESSAGE,
                    )
                )

        return wrapper

    return decorator
