"""
===============================================================================
MODULE: Typed backend exceptions (internal errors)
===============================================================================

Goal
----
Internal exceptions that are consistent, with:
- a stable error_code
- an error_id for log correlation
- a human message (no secrets)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  ClubFundsError + subclasses

Responsibilities:
  - Standardize infrastructure failures that later map to HTTP or to an
    INTERNAL_ERROR operation result
  - Generate error_id for tracing

Collaborators:
  - api/exception_handlers.py
  - application/usecases/results.py (guarded_operation)
  - infrastructure/repositories/postgres (raise DatabaseError)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class ClubFundsError(Exception):
    """Base for internal (non-domain) system errors."""

    error_code: str = "CLUBFUNDS_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class DatabaseError(ClubFundsError):
    """DB failures (connection, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class ConfigurationError(ClubFundsError):
    """Invalid or missing runtime configuration."""

    error_code: str = "CONFIGURATION_ERROR"
