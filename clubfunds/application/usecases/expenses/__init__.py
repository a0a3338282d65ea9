from .list_expenses import GetExpenseUseCase, ListExpensesUseCase
from .manage_expense import (
    ApproveExpenseUseCase,
    CreateExpenseInput,
    CreateExpenseUseCase,
    DeleteExpenseUseCase,
    UpdateExpenseUseCase,
)

__all__ = [
    "ApproveExpenseUseCase",
    "CreateExpenseInput",
    "CreateExpenseUseCase",
    "DeleteExpenseUseCase",
    "GetExpenseUseCase",
    "ListExpensesUseCase",
    "UpdateExpenseUseCase",
]
