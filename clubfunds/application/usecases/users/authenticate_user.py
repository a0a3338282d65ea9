"""
===============================================================================
USE CASE: Authenticate User (login bookkeeping)
===============================================================================

Responsibilities:
    - Check credentials through an injected verifier.
    - Maintain the lockout counters: lock for account_lock_minutes after
      max_failed_logins consecutive failures; lift expired locks.
    - Stamp last_login_at / last_login_ip on success.

Notes:
    - "Unknown user" and "wrong password" are indistinguishable to callers.
    - Failed attempts are committed even though the login fails.
    - A version conflict on the user row (two logins racing) re-reads and
      retries once; a second conflict is reported as retryable.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable

from ....crosscutting.metrics import record_concurrency_conflict
from ....domain.errors import ConcurrentModificationError
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ....domain.validation import EMAIL_PATTERN
from .users_results import AuthenticateResult, AuthError, AuthErrorCode

logger = logging.getLogger(__name__)

PasswordVerifier = Callable[[str, str], bool]

_MAX_ATTEMPTS = 2


class AuthenticateUserUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        verify_password: PasswordVerifier,
        *,
        max_failed_logins: int = 5,
        account_lock_minutes: int = 60,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._verify_password = verify_password
        self._max_failed_logins = max_failed_logins
        self._account_lock_minutes = account_lock_minutes

    def execute(
        self, email: str, password: str, *, ip_address: str | None = None
    ) -> AuthenticateResult:
        normalized = (email or "").strip().lower()
        if not normalized or not EMAIL_PATTERN.match(normalized) or not password:
            return self._invalid()

        for attempt in range(1, _MAX_ATTEMPTS + 1):
            try:
                return self._attempt(normalized, password, ip_address)
            except ConcurrentModificationError:
                record_concurrency_conflict("User")
                logger.warning(
                    "Login bookkeeping raced another update",
                    extra={"email": normalized, "attempt": attempt},
                )

        return AuthenticateResult(
            error=AuthError(
                AuthErrorCode.CONCURRENT_MODIFICATION,
                "Account was updated concurrently; retry the login.",
            )
        )

    def _attempt(
        self, normalized: str, password: str, ip_address: str | None
    ) -> AuthenticateResult:
        now = self._clock.now()
        with self._uow_factory() as uow:
            user = uow.users.get_by_email(normalized)
            if user is None or user.meta.is_deleted:
                return self._invalid()

            if not user.is_enabled:
                return AuthenticateResult(
                    error=AuthError(AuthErrorCode.ACCOUNT_DISABLED, "Account is disabled.")
                )

            user.lift_expired_lock(now)
            if user.is_locked_at(now):
                logger.warning("Login refused: account locked", extra={"email": normalized})
                return AuthenticateResult(
                    error=AuthError(AuthErrorCode.ACCOUNT_LOCKED, "Account is locked.")
                )

            if not self._verify_password(password, user.password_hash):
                user.register_failed_login(
                    now,
                    max_attempts=self._max_failed_logins,
                    lock_minutes=self._account_lock_minutes,
                )
                uow.users.update(user)
                uow.commit()
                logger.warning(
                    "Login failed",
                    extra={
                        "email": normalized,
                        "failed_login_attempts": user.failed_login_attempts,
                        "locked": user.is_locked,
                    },
                )
                return self._invalid()

            user.register_successful_login(now, ip_address)
            uow.users.update(user)
            uow.commit()

        return AuthenticateResult(user=user)

    @staticmethod
    def _invalid() -> AuthenticateResult:
        return AuthenticateResult(
            error=AuthError(AuthErrorCode.INVALID_CREDENTIALS, "Invalid credentials.")
        )
