"""
===============================================================================
USE CASES: Create / Update / Delete / Approve Expense
===============================================================================

Business Goal:
    Record organizational expenses and approve them exactly once. An approved
    expense is financial evidence and becomes immutable.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    CreateExpenseUseCase, UpdateExpenseUseCase, DeleteExpenseUseCase,
    ApproveExpenseUseCase

Responsibilities:
    - Validate input (VALIDATION_FAILURE).
    - Guard edits/deletes of approved expenses
      (PROTECTED_RESOURCE / ALREADY_APPROVED).
    - Guard re-approval (INVALID_STATE_TRANSITION / ALREADY_APPROVED).
    - Honor a caller-supplied expected_version on update
      (CONCURRENT_MODIFICATION).
    - Append EXPENSE_CREATED / UPDATED / DELETED / APPROVED.

Collaborators:
    - UnitOfWork: expenses, users, audit
    - domain.expense_machine
    - AuditTrailLogger
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ....crosscutting.metrics import record_state_transition
from ....domain import expense_machine
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, Expense, ExpenseCategory
from ....domain.errors import ConcurrentModificationError, NotFoundError
from ....domain.expense_machine import ExpenseChanges
from ....domain.repositories import UnitOfWork, UnitOfWorkFactory
from ....domain.services import Clock
from ...audit_trail import AuditTrailLogger
from ..lookups import require_expense
from ..results import OperationResult, guarded_operation


@dataclass(frozen=True)
class CreateExpenseInput:
    title: str
    amount: Decimal | str
    category: ExpenseCategory | str
    expense_date: datetime | None = None
    description: str | None = None
    vendor: str | None = None
    receipt_number: str | None = None
    receipt_url: str | None = None


class _ExpenseCommand:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    def _log(
        self, uow: UnitOfWork, actor: Actor, action: AuditAction, description: str
    ) -> None:
        self._audit.log(
            uow,
            actor_user_id=actor.user_id,
            action=action,
            module=AuditModule.EXPENSES,
            description=description,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
        )


class CreateExpenseUseCase(_ExpenseCommand):
    @guarded_operation("create_expense")
    def execute(self, data: CreateExpenseInput, actor: Actor) -> OperationResult[Expense]:
        expense = expense_machine.create_expense(
            title=data.title,
            amount=data.amount,
            category=data.category,
            expense_date=data.expense_date,
            description=data.description,
            vendor=data.vendor,
            receipt_number=data.receipt_number,
            receipt_url=data.receipt_url,
            actor_name=actor.name,
            now=self._clock.now(),
        )
        with self._uow_factory() as uow:
            uow.expenses.add(expense)
            self._log(
                uow,
                actor,
                AuditAction.EXPENSE_CREATED,
                f"Expense created: {expense.title} amount {expense.amount} by {actor.name}",
            )
            uow.commit()

        record_state_transition("expense", "created")
        return OperationResult.ok(expense, "Expense created successfully")


class UpdateExpenseUseCase(_ExpenseCommand):
    @guarded_operation("update_expense")
    def execute(
        self,
        expense_id: UUID,
        changes: ExpenseChanges,
        actor: Actor,
        *,
        expected_version: int | None = None,
    ) -> OperationResult[Expense]:
        with self._uow_factory() as uow:
            expense = require_expense(uow, expense_id)
            if expected_version is not None and expected_version != expense.meta.version:
                raise ConcurrentModificationError("Expense", expense_id, expected_version)

            expense_machine.apply_changes(
                expense, changes, actor_name=actor.name, now=self._clock.now()
            )
            uow.expenses.update(expense)
            self._log(
                uow, actor, AuditAction.EXPENSE_UPDATED, f"Expense updated: {expense.title} by {actor.name}"
            )
            uow.commit()

        record_state_transition("expense", "updated")
        return OperationResult.ok(expense, "Expense updated successfully")


class DeleteExpenseUseCase(_ExpenseCommand):
    @guarded_operation("delete_expense")
    def execute(self, expense_id: UUID, actor: Actor) -> OperationResult[Expense]:
        with self._uow_factory() as uow:
            expense = require_expense(uow, expense_id)
            expense_machine.delete(expense, actor_name=actor.name, now=self._clock.now())
            uow.expenses.update(expense)
            self._log(
                uow, actor, AuditAction.EXPENSE_DELETED, f"Expense deleted: {expense.title} by {actor.name}"
            )
            uow.commit()

        record_state_transition("expense", "deleted")
        return OperationResult.ok(expense, "Expense deleted successfully")


class ApproveExpenseUseCase(_ExpenseCommand):
    @guarded_operation("approve_expense")
    def execute(
        self, expense_id: UUID, actor: Actor, *, remarks: str | None = None
    ) -> OperationResult[Expense]:
        with self._uow_factory() as uow:
            expense = require_expense(uow, expense_id)
            approver = uow.users.get_by_id(actor.user_id) if actor.user_id else None
            if approver is None:
                raise NotFoundError("User", actor.user_id or actor.name)

            expense_machine.approve(
                expense,
                approver_name=actor.name,
                approver_user_id=approver.id,
                remarks=remarks,
                now=self._clock.now(),
            )
            uow.expenses.update(expense)
            self._log(
                uow,
                actor,
                AuditAction.EXPENSE_APPROVED,
                f"Expense approved: {expense.title} by {actor.name}",
            )
            uow.commit()

        record_state_transition("expense", "approved")
        return OperationResult.ok(expense, "Expense approved successfully")
