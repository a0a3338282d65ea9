"""
Name: Expense Reads

Responsibilities:
  - GetExpense by id (deleted expenses read as NOT_FOUND)
  - ListExpenses with optional category / approval / text search, paginated
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import Expense, ExpenseCategory, Page
from ....domain.repositories import UnitOfWorkFactory
from ..lookups import clamp_page, require_expense
from ..results import OperationResult, guarded_operation


class GetExpenseUseCase:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @guarded_operation("get_expense")
    def execute(self, expense_id: UUID) -> OperationResult[Expense]:
        with self._uow_factory() as uow:
            expense = require_expense(uow, expense_id)
        return OperationResult.ok(expense, "Expense found")


class ListExpensesUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        default_page_size: int = 50,
        max_page_size: int = 200,
    ) -> None:
        self._uow_factory = uow_factory
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    @guarded_operation("list_expenses")
    def execute(
        self,
        *,
        category: ExpenseCategory | None = None,
        is_approved: bool | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OperationResult[Page]:
        limit, offset = clamp_page(
            limit, offset, default=self._default_page_size, maximum=self._max_page_size
        )
        term = (search or "").strip() or None
        with self._uow_factory() as uow:
            items, total = uow.expenses.list_expenses(
                category=category,
                is_approved=is_approved,
                search=term,
                limit=limit,
                offset=offset,
            )
        return OperationResult.ok(
            Page(items=items, total=total, limit=limit, offset=offset),
            f"{total} expenses",
        )
