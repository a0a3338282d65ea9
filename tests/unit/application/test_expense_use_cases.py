"""
Name: Expense Use Case Tests

Responsibilities:
  - Create / update / delete / approve through the public operations
  - Approved expenses are frozen; approval is single-use
  - Optimistic version check on update (expected_version)
  - Search and filters on listings
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from clubfunds.domain.audit import AuditAction
from clubfunds.domain.entities import Actor, ExpenseCategory
from clubfunds.domain.errors import ErrorKind, GuardReason
from clubfunds.domain.expense_machine import ExpenseChanges

from support import actor_for


@pytest.mark.unit
class TestExpenseLifecycle:
    def test_update_then_approve(self, uc, uow_factory, fin_admin, make_expense):
        expense = make_expense()

        updated = uc.update_expense.execute(
            expense.id,
            ExpenseChanges(amount="900.00", vendor="Riverside Hall"),
            actor_for(fin_admin),
            expected_version=0,
        )
        assert updated.success
        assert updated.payload.amount == Decimal("900.00")
        assert updated.payload.meta.version == 1

        approved = uc.approve_expense.execute(
            expense.id, actor_for(fin_admin), remarks="Committee vote 5-0"
        )
        assert approved.success
        assert approved.payload.is_approved is True
        assert approved.payload.approved_by_user_id == fin_admin.id
        assert approved.payload.approval_remarks == "Committee vote 5-0"

        with uow_factory() as uow:
            entries, total = uow.audit.list_entries(module="EXPENSES", limit=10, offset=0)
        assert total == 3
        assert [e.action for e in entries] == [
            AuditAction.EXPENSE_APPROVED.value,
            AuditAction.EXPENSE_UPDATED.value,
            AuditAction.EXPENSE_CREATED.value,
        ]

    def test_approved_expense_is_frozen(self, uc, fin_admin, make_expense):
        expense = make_expense()
        uc.approve_expense.execute(expense.id, actor_for(fin_admin))

        update = uc.update_expense.execute(
            expense.id, ExpenseChanges(title="Changed"), actor_for(fin_admin)
        )
        delete = uc.delete_expense.execute(expense.id, actor_for(fin_admin))

        for result in (update, delete):
            assert result.error.kind is ErrorKind.PROTECTED_RESOURCE
            assert result.error.reason is GuardReason.ALREADY_APPROVED
        assert uc.get_expense.execute(expense.id).payload.title == "Annual dinner venue"

    def test_second_approval_is_an_invalid_transition(self, uc, fin_admin, make_user, make_expense):
        other_approver = make_user("vicechair")
        expense = make_expense()
        uc.approve_expense.execute(expense.id, actor_for(fin_admin))

        result = uc.approve_expense.execute(expense.id, actor_for(other_approver))

        assert result.error.kind is ErrorKind.INVALID_STATE_TRANSITION
        assert result.error.reason is GuardReason.ALREADY_APPROVED
        assert uc.get_expense.execute(expense.id).payload.approved_by == fin_admin.email

    def test_approval_needs_a_known_user(self, uc, make_expense):
        expense = make_expense()

        result = uc.approve_expense.execute(expense.id, Actor.system())

        assert result.error.kind is ErrorKind.NOT_FOUND
        assert uc.get_expense.execute(expense.id).payload.is_approved is False

    def test_stale_expected_version_is_a_concurrent_modification(self, uc, fin_admin, make_expense):
        expense = make_expense()
        uc.update_expense.execute(expense.id, ExpenseChanges(title="First edit"), actor_for(fin_admin))

        result = uc.update_expense.execute(
            expense.id,
            ExpenseChanges(title="Second edit"),
            actor_for(fin_admin),
            expected_version=0,
        )

        assert result.error.kind is ErrorKind.CONCURRENT_MODIFICATION
        assert result.error.retryable is True
        assert uc.get_expense.execute(expense.id).payload.title == "First edit"

    def test_soft_deleted_expense_disappears_from_reads(
        self, uc, uow_factory, fin_admin, make_expense
    ):
        expense = make_expense()

        assert uc.delete_expense.execute(expense.id, actor_for(fin_admin)).success

        assert uc.list_expenses.execute().payload.total == 0
        assert uc.get_expense.execute(expense.id).error.kind is ErrorKind.NOT_FOUND
        with uow_factory() as uow:
            stored = uow.expenses.get_by_id(expense.id)
        assert stored.meta.is_deleted is True
        assert stored.meta.deleted_by == fin_admin.email

    def test_missing_expense_is_not_found(self, uc, fin_admin):
        result = uc.delete_expense.execute(uuid4(), actor_for(fin_admin))
        assert result.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.unit
class TestListExpenses:
    def test_search_matches_title_description_and_vendor(self, uc, clock, make_expense):
        make_expense(title="Pitch hire", vendor="City Council", category=ExpenseCategory.EVENTS)
        clock.advance(days=1)
        make_expense(title="Coach fuel", vendor="Shell", category=ExpenseCategory.TRANSPORT)

        by_vendor = uc.list_expenses.execute(search="council").payload
        by_category = uc.list_expenses.execute(category=ExpenseCategory.TRANSPORT).payload
        blank_search = uc.list_expenses.execute(search="   ").payload

        assert [e.title for e in by_vendor.items] == ["Pitch hire"]
        assert [e.title for e in by_category.items] == ["Coach fuel"]
        assert [e.title for e in blank_search.items] == ["Coach fuel", "Pitch hire"]

    def test_filter_by_approval(self, uc, fin_admin, make_expense):
        approved = make_expense(title="Trophies")
        make_expense(title="Bibs")
        uc.approve_expense.execute(approved.id, actor_for(fin_admin))

        result = uc.list_expenses.execute(is_approved=True).payload

        assert [e.id for e in result.items] == [approved.id]
