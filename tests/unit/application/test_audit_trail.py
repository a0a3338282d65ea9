"""
Name: Audit Trail Logger Tests

Responsibilities:
  - Entries carry actor email, ip and user agent
  - Lost entries (no actor, unknown actor, failing store) are logged and
    counted, and never undo the primary transition
  - Audit listing filters
"""

from unittest.mock import patch
from uuid import uuid4

import pytest
from clubfunds.application.usecases.roles import CreateRoleInput
from clubfunds.crosscutting.metrics import get_sample_value
from clubfunds.domain.audit import AuditAction, AuditModule
from clubfunds.domain.entities import Actor
from clubfunds.domain.errors import ErrorKind

from support import actor_for

FAILURES = "clubfunds_audit_write_failures_total"


def _failures(module: str) -> float:
    return get_sample_value(FAILURES, {"module": module}) or 0.0


@pytest.mark.unit
class TestAuditTrailLogger:
    def test_entry_resolves_actor_email(self, audit_logger, uow_factory, clock, member):
        with uow_factory() as uow:
            entry = audit_logger.log(
                uow,
                actor_user_id=member.id,
                action=AuditAction.PAYMENT_CREATED,
                module=AuditModule.PAYMENTS,
                description="Payment created",
                ip_address="198.51.100.1",
                user_agent="Mozilla/5.0",
            )
            uow.commit()

        assert entry.actor_email == member.email
        assert entry.action == "PAYMENT_CREATED"
        assert entry.module == "PAYMENTS"
        assert entry.created_at == clock.now()

    def test_missing_actor_is_dropped_and_counted(self, audit_logger, uow_factory):
        before = _failures("ROLES")

        with uow_factory() as uow:
            entry = audit_logger.log(
                uow,
                actor_user_id=None,
                action=AuditAction.ROLE_CREATED,
                module=AuditModule.ROLES,
                description="Role created by SYSTEM",
            )

        assert entry is None
        assert _failures("ROLES") == before + 1

    def test_unknown_actor_is_dropped(self, audit_logger, uow_factory):
        with uow_factory() as uow:
            entry = audit_logger.log(
                uow,
                actor_user_id=uuid4(),
                action="CUSTOM",
                module="MISC",
                description="x",
            )
        assert entry is None

    def test_failing_audit_store_keeps_the_transition(self, uc, uow_factory, make_user):
        chair = make_user("chair")
        before = _failures("ROLES")

        with patch(
            "clubfunds.infrastructure.repositories.in_memory.repositories."
            "InMemoryAuditEntryRepository.append",
            side_effect=RuntimeError("disk full"),
        ):
            result = uc.create_role.execute(
                CreateRoleInput(name="STEWARD", display_name="Steward"), actor_for(chair)
            )

        assert result.success
        assert uc.get_role.execute(result.payload.id).success
        assert _failures("ROLES") == before + 1

    def test_failing_actor_lookup_keeps_the_transaction(
        self, audit_logger, uow_factory, member
    ):
        before = _failures("PAYMENTS")

        with uow_factory() as uow:
            with patch.object(
                uow.users, "get_by_id", side_effect=RuntimeError("connection reset")
            ):
                entry = audit_logger.log(
                    uow,
                    actor_user_id=member.id,
                    action=AuditAction.PAYMENT_CREATED,
                    module=AuditModule.PAYMENTS,
                    description="Payment created",
                )
            uow.commit()

        assert entry is None
        assert _failures("PAYMENTS") == before + 1

    def test_system_actor_on_catalog_ops_loses_the_entry(self, uc, uow_factory):
        result = uc.create_role.execute(
            CreateRoleInput(name="GROUNDSKEEPER", display_name="Groundskeeper"),
            Actor.system(),
        )

        assert result.success
        with uow_factory() as uow:
            _, total = uow.audit.list_entries(
                action=AuditAction.ROLE_CREATED.value, limit=10, offset=0
            )
        assert total == 0


@pytest.mark.unit
class TestListAuditEntries:
    def test_filters_by_user_module_and_action(self, uc, member, make_payment, make_expense):
        make_payment(member)
        make_expense()

        by_user = uc.list_audit.execute(user_id=member.id).payload
        payments = uc.list_audit.execute(module="payments").payload
        created = uc.list_audit.execute(action="expense_created").payload

        assert {e.actor_user_id for e in by_user.items} == {member.id}
        assert {e.module for e in payments.items} == {"PAYMENTS"}
        assert [e.action for e in created.items] == ["EXPENSE_CREATED"]

    def test_unknown_user_filter_is_not_found(self, uc):
        result = uc.list_audit.execute(user_id=uuid4())
        assert result.error.kind is ErrorKind.NOT_FOUND
