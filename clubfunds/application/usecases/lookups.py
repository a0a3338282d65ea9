"""
Name: Aggregate lookups

Responsibilities:
  - Load aggregates inside a unit of work or raise NotFoundError
  - Treat soft-deleted rows as missing
"""

from __future__ import annotations

from uuid import UUID

from ...domain.entities import Expense, Payment, Role, User
from ...domain.errors import NotFoundError
from ...domain.repositories import UnitOfWork


def require_user(uow: UnitOfWork, user_id: UUID) -> User:
    user = uow.users.get_by_id(user_id)
    if user is None or user.meta.is_deleted:
        raise NotFoundError("User", user_id)
    return user


def require_role(uow: UnitOfWork, role_id: UUID) -> Role:
    role = uow.roles.get_by_id(role_id)
    if role is None or role.meta.is_deleted:
        raise NotFoundError("Role", role_id)
    return role


def require_payment(uow: UnitOfWork, payment_id: UUID) -> Payment:
    payment = uow.payments.get_by_id(payment_id)
    if payment is None or payment.meta.is_deleted:
        raise NotFoundError("Payment", payment_id)
    return payment


def require_expense(uow: UnitOfWork, expense_id: UUID) -> Expense:
    expense = uow.expenses.get_by_id(expense_id)
    if expense is None or expense.meta.is_deleted:
        raise NotFoundError("Expense", expense_id)
    return expense


def clamp_page(limit: int | None, offset: int | None, *, default: int, maximum: int) -> tuple[int, int]:
    """Normalize paging input: limit in [1, maximum], offset >= 0."""
    size = default if limit is None else max(1, min(int(limit), maximum))
    return size, max(0, int(offset or 0))
