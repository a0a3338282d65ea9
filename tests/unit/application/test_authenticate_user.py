"""
Name: Login Bookkeeping Tests

Responsibilities:
  - Consecutive failures lock the account for a fixed window
  - Expired locks are lifted on the next attempt
  - Disabled accounts and unknown emails are refused
  - A lost version race on the user row is retried once, then retryable
"""

from unittest.mock import patch

import pytest
from clubfunds.application.usecases.users import AuthenticateUserUseCase
from clubfunds.application.usecases.users.users_results import AuthErrorCode
from clubfunds.domain.errors import ConcurrentModificationError
from clubfunds.infrastructure.repositories.in_memory.repositories import (
    InMemoryUserRepository,
)


@pytest.fixture
def authenticate(uow_factory, clock):
    return AuthenticateUserUseCase(
        uow_factory,
        clock,
        lambda raw, hashed: hashed == f"hashed:{raw}",
        max_failed_logins=5,
        account_lock_minutes=60,
    )


def _stored(uow_factory, user_id):
    with uow_factory() as uow:
        return uow.users.get_by_id(user_id)


@pytest.mark.unit
class TestAuthenticateUser:
    def test_success_stamps_last_login(self, authenticate, uow_factory, clock, member):
        result = authenticate.execute(
            "  MEMBER@club.example.org ", "secret", ip_address="192.0.2.10"
        )

        assert result.error is None
        stored = _stored(uow_factory, member.id)
        assert stored.last_login_at == clock.now()
        assert stored.last_login_ip == "192.0.2.10"

    def test_unknown_email_and_wrong_password_look_the_same(self, authenticate, member):
        unknown = authenticate.execute("ghost@club.example.org", "secret")
        wrong = authenticate.execute(member.email, "nope")

        assert unknown.error.code is AuthErrorCode.INVALID_CREDENTIALS
        assert wrong.error.code is AuthErrorCode.INVALID_CREDENTIALS
        assert unknown.error.message == wrong.error.message

    def test_fifth_failure_locks_the_account(self, authenticate, uow_factory, clock, member):
        for _ in range(5):
            authenticate.execute(member.email, "wrong")

        stored = _stored(uow_factory, member.id)
        assert stored.is_locked is True
        assert stored.failed_login_attempts == 5

        locked = authenticate.execute(member.email, "secret")
        assert locked.error.code is AuthErrorCode.ACCOUNT_LOCKED

    def test_lock_expires_after_window(self, authenticate, uow_factory, clock, member):
        for _ in range(5):
            authenticate.execute(member.email, "wrong")

        clock.advance(minutes=61)
        result = authenticate.execute(member.email, "secret")

        assert result.error is None
        stored = _stored(uow_factory, member.id)
        assert stored.is_locked is False
        assert stored.failed_login_attempts == 0

    def test_success_resets_failure_counter(self, authenticate, uow_factory, member):
        for _ in range(3):
            authenticate.execute(member.email, "wrong")

        authenticate.execute(member.email, "secret")

        assert _stored(uow_factory, member.id).failed_login_attempts == 0

    def test_disabled_account_is_refused(self, authenticate, uow_factory, member):
        with uow_factory() as uow:
            user = uow.users.get_by_id(member.id)
            user.is_enabled = False
            uow.users.update(user)
            uow.commit()

        result = authenticate.execute(member.email, "secret")

        assert result.error.code is AuthErrorCode.ACCOUNT_DISABLED


def _racing_update(conflicts: int):
    """users.update that loses the version race `conflicts` times."""
    original = InMemoryUserRepository.update
    calls = []

    def update(repo, user):
        calls.append(user.id)
        if len(calls) <= conflicts:
            raise ConcurrentModificationError("User", user.id, user.meta.version)
        return original(repo, user)

    return update


@pytest.mark.unit
class TestAuthenticateUserConflicts:
    def test_single_conflict_is_retried(self, authenticate, uow_factory, member):
        with patch.object(InMemoryUserRepository, "update", _racing_update(1)):
            result = authenticate.execute(member.email, "wrong")

        assert result.error.code is AuthErrorCode.INVALID_CREDENTIALS
        assert _stored(uow_factory, member.id).failed_login_attempts == 1

    def test_repeated_conflict_is_reported_as_retryable(self, authenticate, uow_factory, member):
        with patch.object(InMemoryUserRepository, "update", _racing_update(99)):
            result = authenticate.execute(member.email, "secret")

        assert result.user is None
        assert result.error.code is AuthErrorCode.CONCURRENT_MODIFICATION
        assert _stored(uow_factory, member.id).last_login_at is None
