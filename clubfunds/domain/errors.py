"""
Name: Domain Errors

Responsibilities:
  - Define the error taxonomy shared by guards, repositories and use cases
  - Carry a machine-checkable kind plus an optional guard reason
  - Keep infrastructure details out of the domain vocabulary

Collaborators:
  - domain.payment_machine / expense_machine / role_ledger: raise guard errors
  - infrastructure.repositories: raise ConcurrentModificationError and friends
  - application.usecases.results: translate errors into OperationResult

Constraints:
  - Pure Python, no framework imports
  - Every DomainError maps to exactly one ErrorKind
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification exposed to callers of every public operation."""

    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    PROTECTED_RESOURCE = "PROTECTED_RESOURCE"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GuardReason(str, Enum):
    """Sub-code for guard violations (stable, client-checkable)."""

    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    NOT_ASSIGNED = "NOT_ASSIGNED"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    CANNOT_CANCEL_VERIFIED = "CANNOT_CANCEL_VERIFIED"
    NOT_PENDING = "NOT_PENDING"
    ALREADY_APPROVED = "ALREADY_APPROVED"
    PROTECTED_ROLE = "PROTECTED_ROLE"
    ROLE_IN_USE = "ROLE_IN_USE"


class DomainError(Exception):
    """Base class: every subclass pins its ErrorKind."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        reason: GuardReason | None = None,
        resource: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.resource = resource


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, identifier: object):
        super().__init__(f"{resource} '{identifier}' not found", resource=resource)
        self.identifier = identifier


class AlreadyExistsError(DomainError):
    kind = ErrorKind.ALREADY_EXISTS


class InvalidStateTransitionError(DomainError):
    kind = ErrorKind.INVALID_STATE_TRANSITION


class ProtectedResourceError(DomainError):
    kind = ErrorKind.PROTECTED_RESOURCE


class ConcurrentModificationError(DomainError):
    """Optimistic-lock conflict: the row changed since it was read. Retryable."""

    kind = ErrorKind.CONCURRENT_MODIFICATION

    def __init__(self, resource: str, identifier: object, expected_version: int):
        super().__init__(
            f"{resource} '{identifier}' was modified concurrently "
            f"(expected version {expected_version})",
            resource=resource,
        )
        self.identifier = identifier
        self.expected_version = expected_version


class ValidationFailureError(DomainError):
    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class DuplicateKeyError(AlreadyExistsError):
    """Raised by repositories when a unique key is already taken."""

    def __init__(self, resource: str, key: str, value: object):
        super().__init__(
            f"{resource} with {key} '{value}' already exists", resource=resource
        )
        self.key = key
        self.value = value


class DuplicateActiveAssignmentError(InvalidStateTransitionError):
    """Raised when a second active grant for the same (user, role) is written."""

    def __init__(self, user_id: object, role_id: object):
        super().__init__(
            f"Role '{role_id}' is already actively assigned to user '{user_id}'",
            reason=GuardReason.ALREADY_ASSIGNED,
            resource="RoleAssignment",
        )
        self.user_id = user_id
        self.role_id = role_id
