"""
===============================================================================
TARJETA CRC - application/usecases/users/users_results.py
===============================================================================

Responsibilities:
    - Typed results for the login flow, which sits at the identity boundary
      and is reported with its own error codes (not the core ErrorKind set).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ....domain.entities import User


class AuthErrorCode(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"


@dataclass(frozen=True)
class AuthError:
    code: AuthErrorCode
    message: str


@dataclass
class AuthenticateResult:
    user: User | None = None
    error: AuthError | None = None
