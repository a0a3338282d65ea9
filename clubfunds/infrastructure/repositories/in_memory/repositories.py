"""
============================================================
TARJETA CRC - infrastructure/repositories/in_memory/repositories.py
============================================================
Classes:
  InMemoryUserRepository, InMemoryRoleRepository,
  InMemoryRoleAssignmentRepository, InMemoryPaymentRepository,
  InMemoryExpenseRepository, InMemoryAuditEntryRepository

Responsibilities:
  - Implement the domain repository contracts over a Tables working copy.
  - Replicate the PostgreSQL constraints: unique keys, single active grant
    per (user, role), optimistic version checks.
  - Keep deterministic ordering for stable tests.

Constraints / Notes:
  - Rows are copied in and out: callers never alias stored rows.
  - Thread safety comes from the unit of work lock, not from each repo.
============================================================
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, TypeVar
from uuid import UUID

from ....domain.audit import AuditEntry
from ....domain.entities import (
    Expense,
    ExpenseCategory,
    Payment,
    PaymentStatus,
    Role,
    RoleAssignment,
    User,
)
from ....domain.errors import (
    ConcurrentModificationError,
    DuplicateActiveAssignmentError,
    DuplicateKeyError,
)
from .tables import Tables

T = TypeVar("T")


def _page(rows: list[T], limit: int, offset: int) -> tuple[list[T], int]:
    return [copy.deepcopy(r) for r in rows[offset : offset + limit]], len(rows)


def _contains(values: Iterable[str | None], search: str | None) -> bool:
    """Case-insensitive substring match over any of the values (ILIKE)."""
    if not search:
        return True
    term = search.lower()
    return any(term in v.lower() for v in values if v)


class _TableRepository:
    resource: str = ""

    def __init__(self, tables: Tables) -> None:
        self._tables = tables

    def bind(self, tables: Tables) -> None:
        self._tables = tables

    def _rows(self) -> dict:
        raise NotImplementedError

    def _get(self, row_id: UUID):
        row = self._rows().get(row_id)
        return copy.deepcopy(row) if row is not None else None

    def _insert(self, entity) -> None:
        entity.meta.version = 0
        self._rows()[entity.id] = copy.deepcopy(entity)

    def _update(self, entity) -> None:
        stored = self._rows().get(entity.id)
        if stored is None or stored.meta.version != entity.meta.version:
            raise ConcurrentModificationError(self.resource, entity.id, entity.meta.version)
        entity.meta.version += 1
        self._rows()[entity.id] = copy.deepcopy(entity)

    def _first(self, predicate: Callable[[object], bool]):
        for row in self._rows().values():
            if predicate(row):
                return copy.deepcopy(row)
        return None


class InMemoryUserRepository(_TableRepository):
    resource = "User"

    def _rows(self) -> dict[UUID, User]:
        return self._tables.users

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._get(user_id)

    def get_by_email(self, email: str) -> User | None:
        needle = email.strip().lower()
        return self._first(lambda u: u.email == needle)

    def get_by_username(self, username: str) -> User | None:
        return self._first(lambda u: u.username == username)

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def exists_by_username(self, username: str) -> bool:
        return self.get_by_username(username) is not None

    def _check_unique(self, user: User) -> None:
        for other in self._rows().values():
            if other.id == user.id:
                continue
            if other.email == user.email:
                raise DuplicateKeyError("User", "email", user.email)
            if other.username == user.username:
                raise DuplicateKeyError("User", "username", user.username)

    def add(self, user: User) -> None:
        self._check_unique(user)
        self._insert(user)

    def update(self, user: User) -> None:
        self._check_unique(user)
        self._update(user)

    def list_users(
        self, *, search: str | None = None, limit: int, offset: int
    ) -> tuple[list[User], int]:
        rows = [
            u
            for u in self._rows().values()
            if not u.meta.is_deleted
            and _contains((u.first_name, u.last_name, u.email, u.username), search)
        ]
        rows.sort(key=lambda u: u.username)
        return _page(rows, limit, offset)


class InMemoryRoleRepository(_TableRepository):
    resource = "Role"

    def _rows(self) -> dict[UUID, Role]:
        return self._tables.roles

    def get_by_id(self, role_id: UUID) -> Role | None:
        return self._get(role_id)

    def get_by_name(self, name: str) -> Role | None:
        needle = name.strip().upper()
        return self._first(lambda r: r.name == needle and not r.meta.is_deleted)

    def exists_by_name(self, name: str) -> bool:
        return self.get_by_name(name) is not None

    def add(self, role: Role) -> None:
        if self.exists_by_name(role.name):
            raise DuplicateKeyError("Role", "name", role.name)
        self._insert(role)

    def update(self, role: Role) -> None:
        self._update(role)

    def count_active_assignments(self, role_id: UUID) -> int:
        return sum(
            1
            for a in self._tables.assignments.values()
            if a.role_id == role_id and a.is_active
        )

    def list_roles(
        self,
        *,
        include_inactive: bool,
        search: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Role], int]:
        rows = [
            r
            for r in self._rows().values()
            if not r.meta.is_deleted
            and (include_inactive or r.is_active)
            and _contains((r.display_name, r.description), search)
        ]
        rows.sort(key=lambda r: r.name)
        return _page(rows, limit, offset)


class InMemoryRoleAssignmentRepository(_TableRepository):
    resource = "RoleAssignment"

    def _rows(self) -> dict[UUID, RoleAssignment]:
        return self._tables.assignments

    def _pair(self, user_id: UUID, role_id: UUID) -> Iterable[RoleAssignment]:
        return (
            a
            for a in self._rows().values()
            if a.user_id == user_id and a.role_id == role_id
        )

    def _check_single_active(self, assignment: RoleAssignment) -> None:
        if not assignment.is_active:
            return
        for other in self._pair(assignment.user_id, assignment.role_id):
            if other.id != assignment.id and other.is_active:
                raise DuplicateActiveAssignmentError(assignment.user_id, assignment.role_id)

    def add(self, assignment: RoleAssignment) -> None:
        self._check_single_active(assignment)
        self._insert(assignment)

    def update(self, assignment: RoleAssignment) -> None:
        self._check_single_active(assignment)
        self._update(assignment)

    def get_active(self, user_id: UUID, role_id: UUID) -> RoleAssignment | None:
        for a in self._pair(user_id, role_id):
            if a.is_active:
                return copy.deepcopy(a)
        return None

    def get_latest_inactive(
        self, user_id: UUID, role_id: UUID
    ) -> RoleAssignment | None:
        inactive = [a for a in self._pair(user_id, role_id) if not a.is_active]
        if not inactive:
            return None
        latest = max(inactive, key=lambda a: (a.revoked_at or a.assigned_at, a.assigned_at))
        return copy.deepcopy(latest)

    def list_for_user(
        self, user_id: UUID, *, active_only: bool = True
    ) -> list[RoleAssignment]:
        rows = [
            a
            for a in self._rows().values()
            if a.user_id == user_id and (a.is_active or not active_only)
        ]
        rows.sort(key=lambda a: a.assigned_at)
        return [copy.deepcopy(a) for a in rows]

    def list_active_for_role(
        self, role_id: UUID, *, limit: int, offset: int
    ) -> tuple[list[RoleAssignment], int]:
        rows = [a for a in self._rows().values() if a.role_id == role_id and a.is_active]
        rows.sort(key=lambda a: a.assigned_at)
        return _page(rows, limit, offset)


class InMemoryPaymentRepository(_TableRepository):
    resource = "Payment"

    def _rows(self) -> dict[UUID, Payment]:
        return self._tables.payments

    def get_by_id(self, payment_id: UUID) -> Payment | None:
        return self._get(payment_id)

    def exists_by_reference(self, reference: str) -> bool:
        return any(p.reference == reference for p in self._rows().values())

    def add(self, payment: Payment) -> None:
        if self.exists_by_reference(payment.reference):
            raise DuplicateKeyError("Payment", "reference", payment.reference)
        self._insert(payment)

    def update(self, payment: Payment) -> None:
        self._update(payment)

    def list_payments(
        self,
        *,
        user_id: UUID | None = None,
        status: PaymentStatus | None = None,
        is_verified: bool | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Payment], int]:
        rows = [
            p
            for p in self._rows().values()
            if not p.meta.is_deleted
            and (user_id is None or p.user_id == user_id)
            and (status is None or p.status == status)
            and (is_verified is None or p.is_verified == is_verified)
        ]
        rows.sort(key=lambda p: p.payment_date, reverse=True)
        return _page(rows, limit, offset)


class InMemoryExpenseRepository(_TableRepository):
    resource = "Expense"

    def _rows(self) -> dict[UUID, Expense]:
        return self._tables.expenses

    def get_by_id(self, expense_id: UUID) -> Expense | None:
        return self._get(expense_id)

    def add(self, expense: Expense) -> None:
        self._insert(expense)

    def update(self, expense: Expense) -> None:
        self._update(expense)

    def list_expenses(
        self,
        *,
        category: ExpenseCategory | None = None,
        is_approved: bool | None = None,
        search: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Expense], int]:
        rows = [
            e
            for e in self._rows().values()
            if not e.meta.is_deleted
            and (category is None or e.category == category)
            and (is_approved is None or e.is_approved == is_approved)
            and _contains((e.title, e.description, e.vendor), search)
        ]
        rows.sort(key=lambda e: e.expense_date, reverse=True)
        return _page(rows, limit, offset)


class InMemoryAuditEntryRepository:
    def __init__(self, tables: Tables) -> None:
        self._tables = tables

    def bind(self, tables: Tables) -> None:
        self._tables = tables

    @contextmanager
    def audit_scope(self) -> Iterator[None]:
        mark = len(self._tables.audit)
        try:
            yield
        except Exception:
            del self._tables.audit[mark:]
            raise

    def append(self, entry: AuditEntry) -> None:
        self._tables.audit.append(entry)

    def list_entries(
        self,
        *,
        user_id: UUID | None = None,
        module: str | None = None,
        action: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditEntry], int]:
        # Newest first; reversed() keeps insertion order as the tie-breaker.
        rows = [
            e
            for e in reversed(self._tables.audit)
            if (user_id is None or e.actor_user_id == user_id)
            and (module is None or e.module == module)
            and (action is None or e.action == action)
        ]
        rows.sort(key=lambda e: e.created_at, reverse=True)
        return rows[offset : offset + limit], len(rows)
