"""
CRC - domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for users, roles, the role ledger, payments,
  expenses and the audit trail.
- Define the UnitOfWork that bundles them into one atomic transaction.
- Keep the application/domain independent from PostgreSQL or in-memory stores.

Collaborators
- domain.entities, domain.audit
- infrastructure.repositories.postgres / in_memory implementations

Constraints
- Pure interfaces only: no side effects, no SQL.
- add() stores version 0; update() writes only if the stored version equals
  the entity's version, then increments both. Otherwise it raises
  ConcurrentModificationError.
- Unique keys are enforced by the store and surface as DuplicateKeyError /
  DuplicateActiveAssignmentError.

Notes
- Listing methods return (items, total) so callers can build a Page.
"""

from __future__ import annotations

from typing import Callable, ContextManager, Protocol
from uuid import UUID

from .audit import AuditEntry
from .entities import (
    Expense,
    ExpenseCategory,
    Payment,
    PaymentStatus,
    Role,
    RoleAssignment,
    User,
)


class UserRepository(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def get_by_username(self, username: str) -> User | None: ...

    def exists_by_email(self, email: str) -> bool: ...

    def exists_by_username(self, username: str) -> bool: ...

    def add(self, user: User) -> None:
        """R: Insert; DuplicateKeyError on email/username collision."""
        ...

    def update(self, user: User) -> None:
        """R: Optimistic update guarded by user.meta.version."""
        ...

    def list_users(
        self, *, search: str | None = None, limit: int, offset: int
    ) -> tuple[list[User], int]:
        """R: Non-deleted users ordered by username; search matches names, email, username."""
        ...


class RoleRepository(Protocol):
    def get_by_id(self, role_id: UUID) -> Role | None:
        """R: Returns soft-deleted roles too; callers decide visibility."""
        ...

    def get_by_name(self, name: str) -> Role | None: ...

    def exists_by_name(self, name: str) -> bool: ...

    def add(self, role: Role) -> None: ...

    def update(self, role: Role) -> None: ...

    def count_active_assignments(self, role_id: UUID) -> int:
        """R: Number of ledger rows with is_active for this role."""
        ...

    def list_roles(
        self,
        *,
        include_inactive: bool,
        search: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Role], int]:
        """R: Non-deleted roles ordered by name; search matches display name, description."""
        ...


class RoleAssignmentRepository(Protocol):
    """
    R: The role ledger.

    Invariant enforced by the store: at most one row with is_active per
    (user_id, role_id). add()/update() raise DuplicateActiveAssignmentError
    when a write would break it.
    """

    def add(self, assignment: RoleAssignment) -> None: ...

    def update(self, assignment: RoleAssignment) -> None: ...

    def get_active(self, user_id: UUID, role_id: UUID) -> RoleAssignment | None: ...

    def get_latest_inactive(
        self, user_id: UUID, role_id: UUID
    ) -> RoleAssignment | None:
        """R: Most recently revoked row for the pair, if any."""
        ...

    def list_for_user(
        self, user_id: UUID, *, active_only: bool = True
    ) -> list[RoleAssignment]: ...

    def list_active_for_role(
        self, role_id: UUID, *, limit: int, offset: int
    ) -> tuple[list[RoleAssignment], int]: ...


class PaymentRepository(Protocol):
    def get_by_id(self, payment_id: UUID) -> Payment | None: ...

    def exists_by_reference(self, reference: str) -> bool: ...

    def add(self, payment: Payment) -> None: ...

    def update(self, payment: Payment) -> None: ...

    def list_payments(
        self,
        *,
        user_id: UUID | None = None,
        status: PaymentStatus | None = None,
        is_verified: bool | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Payment], int]:
        """R: Newest payment_date first; None filters are ignored."""
        ...


class ExpenseRepository(Protocol):
    def get_by_id(self, expense_id: UUID) -> Expense | None:
        """R: Returns soft-deleted expenses too; callers decide visibility."""
        ...

    def add(self, expense: Expense) -> None: ...

    def update(self, expense: Expense) -> None: ...

    def list_expenses(
        self,
        *,
        category: ExpenseCategory | None = None,
        is_approved: bool | None = None,
        search: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Expense], int]:
        """R: Non-deleted expenses, newest expense_date first."""
        ...


class AuditEntryRepository(Protocol):
    def audit_scope(self) -> ContextManager[None]:
        """
        R: Isolate the audit work (actor lookup + append) of one transition.

        A failure inside the scope is undone and re-raised, and leaves the
        surrounding transaction usable.
        """
        ...

    def append(self, entry: AuditEntry) -> None:
        """R: Append one entry (inside audit_scope)."""
        ...

    def list_entries(
        self,
        *,
        user_id: UUID | None = None,
        module: str | None = None,
        action: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditEntry], int]:
        """R: Newest first; None filters are ignored."""
        ...


class UnitOfWork(Protocol):
    """
    R: One atomic transaction over every repository.

    Usage:
        with uow_factory() as uow:
            ...
            uow.commit()

    Leaving the block without commit() rolls everything back.
    """

    users: UserRepository
    roles: RoleRepository
    assignments: RoleAssignmentRepository
    payments: PaymentRepository
    expenses: ExpenseRepository
    audit: AuditEntryRepository

    def __enter__(self) -> "UnitOfWork": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...

    def commit(self) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]
