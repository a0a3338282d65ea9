"""
===============================================================================
TARJETA CRC - schemas/expenses.py
===============================================================================

Responsibilities:
    - DTOs for expense creation, partial update, approval and listings.
    - expected_version on update enables optimistic concurrency from clients.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from clubfunds.domain.entities import Expense, ExpenseCategory
from pydantic import BaseModel, Field

from .common import RecordMetaRes, to_meta_res


class CreateExpenseReq(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    category: ExpenseCategory
    expense_date: datetime | None = None
    description: str | None = Field(default=None, max_length=1000)
    vendor: str | None = Field(default=None, max_length=200)
    receipt_number: str | None = Field(default=None, max_length=100)
    receipt_url: str | None = Field(default=None, max_length=500)


class UpdateExpenseReq(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=15, decimal_places=2)
    category: ExpenseCategory | None = None
    expense_date: datetime | None = None
    description: str | None = Field(default=None, max_length=1000)
    vendor: str | None = Field(default=None, max_length=200)
    receipt_number: str | None = Field(default=None, max_length=100)
    receipt_url: str | None = Field(default=None, max_length=500)
    expected_version: int | None = Field(default=None, ge=0)


class ApproveExpenseReq(BaseModel):
    remarks: str | None = Field(default=None, max_length=500)


class ExpenseRes(BaseModel):
    id: UUID
    title: str
    amount: Decimal
    category: ExpenseCategory
    expense_date: datetime
    description: str | None = None
    vendor: str | None = None
    receipt_number: str | None = None
    receipt_url: str | None = None
    is_approved: bool
    approved_at: datetime | None = None
    approved_by: str | None = None
    approved_by_user_id: UUID | None = None
    approval_remarks: str | None = None
    meta: RecordMetaRes


def to_expense_res(expense: Expense) -> ExpenseRes:
    return ExpenseRes(
        id=expense.id,
        title=expense.title,
        amount=expense.amount,
        category=expense.category,
        expense_date=expense.expense_date,
        description=expense.description,
        vendor=expense.vendor,
        receipt_number=expense.receipt_number,
        receipt_url=expense.receipt_url,
        is_approved=expense.is_approved,
        approved_at=expense.approved_at,
        approved_by=expense.approved_by,
        approved_by_user_id=expense.approved_by_user_id,
        approval_remarks=expense.approval_remarks,
        meta=to_meta_res(expense.meta),
    )
