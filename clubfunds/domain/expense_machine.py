"""
Name: Expense State Machine

Responsibilities:
  - Build unapproved expenses from validated input
  - Guard edits and deletes of approved expenses (immutability)
  - Apply the single-use approval transition

Collaborators:
  - domain.entities: Expense, ExpenseCategory, touch(), mark_deleted()
  - application.usecases.expenses

Constraints:
  - UNAPPROVED -> APPROVED is the only transition; APPROVED is terminal
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from .entities import Expense, ExpenseCategory, mark_deleted, new_record, touch
from .errors import (
    GuardReason,
    InvalidStateTransitionError,
    ProtectedResourceError,
    ValidationFailureError,
)
from .validation import optional_text, require_positive_amount, require_text

MAX_TITLE_LENGTH = 200


def parse_category(value: ExpenseCategory | str | None) -> ExpenseCategory:
    if isinstance(value, ExpenseCategory):
        return value
    try:
        return ExpenseCategory(str(value or "").strip().upper())
    except ValueError as exc:
        raise ValidationFailureError(
            f"category must be one of {[c.value for c in ExpenseCategory]}",
            field="category",
        ) from exc


def create_expense(
    *,
    title: str,
    amount: Decimal | str,
    category: ExpenseCategory | str,
    expense_date: datetime | None,
    actor_name: str,
    now: datetime,
    description: str | None = None,
    vendor: str | None = None,
    receipt_number: str | None = None,
    receipt_url: str | None = None,
) -> Expense:
    return Expense(
        id=uuid4(),
        title=require_text(title, "title", max_length=MAX_TITLE_LENGTH),
        amount=require_positive_amount(amount),
        category=parse_category(category),
        expense_date=expense_date or now,
        description=optional_text(description, "description", max_length=1000),
        vendor=optional_text(vendor, "vendor", max_length=200),
        receipt_number=optional_text(receipt_number, "receipt_number", max_length=100),
        receipt_url=optional_text(receipt_url, "receipt_url", max_length=500),
        meta=new_record(actor_name, now),
    )


@dataclass(frozen=True)
class ExpenseChanges:
    """Partial update: None means "leave as is"."""

    title: str | None = None
    description: str | None = None
    amount: Decimal | str | None = None
    category: ExpenseCategory | str | None = None
    expense_date: datetime | None = None
    vendor: str | None = None
    receipt_number: str | None = None
    receipt_url: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


def ensure_mutable(expense: Expense) -> None:
    if expense.is_approved:
        raise ProtectedResourceError(
            f"Expense '{expense.title}' is approved and can no longer be changed",
            reason=GuardReason.ALREADY_APPROVED,
            resource="Expense",
        )


def apply_changes(
    expense: Expense, changes: ExpenseChanges, *, actor_name: str, now: datetime
) -> None:
    ensure_mutable(expense)
    if changes.is_empty():
        raise ValidationFailureError("No fields to update")

    # Validate everything first so a bad field leaves the expense untouched.
    title = (
        require_text(changes.title, "title", max_length=MAX_TITLE_LENGTH)
        if changes.title is not None
        else expense.title
    )
    amount = (
        require_positive_amount(changes.amount)
        if changes.amount is not None
        else expense.amount
    )
    category = (
        parse_category(changes.category)
        if changes.category is not None
        else expense.category
    )

    expense.title = title
    expense.amount = amount
    expense.category = category
    if changes.expense_date is not None:
        expense.expense_date = changes.expense_date
    if changes.description is not None:
        expense.description = optional_text(changes.description, "description", max_length=1000)
    if changes.vendor is not None:
        expense.vendor = optional_text(changes.vendor, "vendor", max_length=200)
    if changes.receipt_number is not None:
        expense.receipt_number = optional_text(
            changes.receipt_number, "receipt_number", max_length=100
        )
    if changes.receipt_url is not None:
        expense.receipt_url = optional_text(changes.receipt_url, "receipt_url", max_length=500)
    touch(expense.meta, actor_name, now)


def delete(expense: Expense, *, actor_name: str, now: datetime) -> None:
    ensure_mutable(expense)
    mark_deleted(expense.meta, actor_name, now)


def approve(
    expense: Expense,
    *,
    approver_name: str,
    approver_user_id: UUID,
    remarks: str | None,
    now: datetime,
) -> None:
    if expense.is_approved:
        raise InvalidStateTransitionError(
            f"Expense '{expense.title}' is already approved",
            reason=GuardReason.ALREADY_APPROVED,
            resource="Expense",
        )
    expense.is_approved = True
    expense.approved_at = now
    expense.approved_by = approver_name
    expense.approved_by_user_id = approver_user_id
    expense.approval_remarks = optional_text(remarks, "remarks", max_length=500)
    touch(expense.meta, approver_name, now)
