"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/expenses.py
============================================================
Class: PostgresExpenseRepository

Responsibilities:
  - Persist expenses (`expenses` table), soft delete via is_deleted.
  - Filtered listing with case-insensitive search over title,
    description and vendor; newest expense first.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import Expense, ExpenseCategory
from .base import (
    META_COLUMNS,
    PostgresRepository,
    escape_like,
    meta_from_row,
    meta_insert_params,
)


class PostgresExpenseRepository(PostgresRepository):
    resource = "Expense"
    table = "expenses"

    _SELECT_COLUMNS = f"""
        id, title, amount, category, expense_date, description, vendor,
        receipt_number, receipt_url, is_approved, approved_at, approved_by,
        approved_by_user_id, approval_remarks, {META_COLUMNS}
    """

    def _row_to_expense(self, row: tuple) -> Expense:
        return Expense(
            id=row[0],
            title=row[1],
            amount=row[2],
            category=ExpenseCategory(row[3]),
            expense_date=row[4],
            description=row[5],
            vendor=row[6],
            receipt_number=row[7],
            receipt_url=row[8],
            is_approved=row[9],
            approved_at=row[10],
            approved_by=row[11],
            approved_by_user_id=row[12],
            approval_remarks=row[13],
            meta=meta_from_row(row, 14),
        )

    def get_by_id(self, expense_id: UUID) -> Expense | None:
        row = self._fetchone(
            f"SELECT {self._SELECT_COLUMNS} FROM expenses WHERE id = %s",
            (expense_id,),
            context_msg="PostgresExpenseRepository: get_by_id failed",
            extra={"expense_id": str(expense_id)},
        )
        return self._row_to_expense(row) if row else None

    def add(self, expense: Expense) -> None:
        self._execute(
            f"""
                INSERT INTO expenses (
                    id, title, amount, category, expense_date, description,
                    vendor, receipt_number, receipt_url, is_approved,
                    approved_at, approved_by, approved_by_user_id,
                    approval_remarks, {META_COLUMNS}
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                        %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                expense.id,
                expense.title,
                expense.amount,
                expense.category.value,
                expense.expense_date,
                expense.description,
                expense.vendor,
                expense.receipt_number,
                expense.receipt_url,
                expense.is_approved,
                expense.approved_at,
                expense.approved_by,
                expense.approved_by_user_id,
                expense.approval_remarks,
                *meta_insert_params(expense.meta),
            ],
            context_msg="PostgresExpenseRepository: insert failed",
            extra={"expense_id": str(expense.id)},
            subject=expense,
        )
        expense.meta.version = 0

    def update(self, expense: Expense) -> None:
        self._versioned_update(
            expense,
            {
                "title": expense.title,
                "amount": expense.amount,
                "category": expense.category.value,
                "expense_date": expense.expense_date,
                "description": expense.description,
                "vendor": expense.vendor,
                "receipt_number": expense.receipt_number,
                "receipt_url": expense.receipt_url,
                "is_approved": expense.is_approved,
                "approved_at": expense.approved_at,
                "approved_by": expense.approved_by,
                "approved_by_user_id": expense.approved_by_user_id,
                "approval_remarks": expense.approval_remarks,
            },
        )

    def list_expenses(
        self,
        *,
        category: ExpenseCategory | None = None,
        is_approved: bool | None = None,
        search: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Expense], int]:
        where: list[str] = ["NOT is_deleted"]
        params: list[object] = []
        if category is not None:
            where.append("category = %s")
            params.append(category.value)
        if is_approved is not None:
            where.append("is_approved = %s")
            params.append(is_approved)
        if search:
            pattern = f"%{escape_like(search)}%"
            where.append(
                "(title ILIKE %s OR description ILIKE %s OR vendor ILIKE %s)"
            )
            params.extend([pattern, pattern, pattern])

        rows, total = self._paged(
            select_sql=self._SELECT_COLUMNS,
            where=where,
            params=params,
            order_by="expense_date DESC, id DESC",
            limit=limit,
            offset=offset,
            context_msg="PostgresExpenseRepository: list_expenses failed",
        )
        return [self._row_to_expense(r) for r in rows], total
