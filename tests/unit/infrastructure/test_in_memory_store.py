"""
Name: In-Memory Store Tests

Responsibilities:
  - Units of work publish only on commit
  - Unique keys and single active grant are enforced like the SQL schema
  - Stored rows never alias caller objects
  - A failed audit scope undoes only its own entries
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from clubfunds.domain.audit import AuditEntry
from clubfunds.domain.entities import Payment, Role, RoleAssignment, User, new_record
from clubfunds.domain.errors import DuplicateActiveAssignmentError, DuplicateKeyError
from clubfunds.infrastructure.repositories.in_memory import InMemoryUnitOfWorkFactory

pytestmark = pytest.mark.unit

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def _user(email="keeper@club.example.org", username="keeper") -> User:
    return User(
        id=uuid4(),
        email=email,
        username=username,
        password_hash="hashed:x",
        meta=new_record("SYSTEM", NOW),
    )


def _payment(user_id, reference="REF-1") -> Payment:
    return Payment(
        id=uuid4(),
        user_id=user_id,
        amount=Decimal("20.00"),
        reference=reference,
        payment_date=NOW,
        meta=new_record("SYSTEM", NOW),
    )


@pytest.fixture
def factory():
    return InMemoryUnitOfWorkFactory()


class TestUnitOfWork:
    def test_leaving_without_commit_discards_writes(self, factory):
        user = _user()
        with factory() as uow:
            uow.users.add(user)

        with factory() as uow:
            assert uow.users.get_by_id(user.id) is None

    def test_exception_discards_writes(self, factory):
        user = _user()
        with pytest.raises(RuntimeError):
            with factory() as uow:
                uow.users.add(user)
                raise RuntimeError("abort")

        assert factory.database.snapshot().users == {}

    def test_writes_after_commit_stay_private(self, factory):
        first, second = _user(), _user("second@club.example.org", "second")
        with factory() as uow:
            uow.users.add(first)
            uow.commit()
            uow.users.add(second)

        users = factory.database.snapshot().users
        assert set(users) == {first.id}

    def test_insert_sets_version_zero_and_update_increments(self, factory):
        user = _user()
        with factory() as uow:
            uow.users.add(user)
            uow.commit()

        with factory() as uow:
            stored = uow.users.get_by_id(user.id)
            stored.first_name = "Kay"
            uow.users.update(stored)
            uow.commit()

        assert factory.database.snapshot().users[user.id].meta.version == 1


class TestConstraints:
    def test_email_and_username_are_unique(self, factory):
        with factory() as uow:
            uow.users.add(_user())
            with pytest.raises(DuplicateKeyError):
                uow.users.add(_user(username="other"))
            with pytest.raises(DuplicateKeyError):
                uow.users.add(_user(email="other@club.example.org"))

    def test_payment_reference_is_unique(self, factory):
        owner = uuid4()
        with factory() as uow:
            uow.payments.add(_payment(owner))
            with pytest.raises(DuplicateKeyError):
                uow.payments.add(_payment(owner))

    def test_deleted_role_frees_its_name(self, factory):
        role = Role(id=uuid4(), name="COACH", display_name="Coach", meta=new_record("SYSTEM", NOW))
        with factory() as uow:
            uow.roles.add(role)
            role = uow.roles.get_by_id(role.id)
            role.meta.is_deleted = True
            uow.roles.update(role)

            uow.roles.add(
                Role(id=uuid4(), name="COACH", display_name="Coach", meta=new_record("SYSTEM", NOW))
            )
            assert uow.roles.get_by_name("coach").id != role.id

    def test_single_active_assignment_per_pair(self, factory):
        user_id, role_id = uuid4(), uuid4()

        def grant():
            return RoleAssignment(
                id=uuid4(),
                user_id=user_id,
                role_id=role_id,
                assigned_at=NOW,
                assigned_by="SYSTEM",
            )

        with factory() as uow:
            uow.assignments.add(grant())
            with pytest.raises(DuplicateActiveAssignmentError):
                uow.assignments.add(grant())


class TestIsolation:
    def test_reads_return_copies(self, factory):
        user = _user()
        with factory() as uow:
            uow.users.add(user)
            user.first_name = "Mutated after add"
            loaded = uow.users.get_by_id(user.id)
            loaded.last_name = "Mutated after read"
            uow.commit()

        stored = factory.database.snapshot().users[user.id]
        assert stored.first_name == ""
        assert stored.last_name == ""


class TestAuditScope:
    def _entry(self) -> AuditEntry:
        return AuditEntry(
            id=uuid4(),
            actor_user_id=uuid4(),
            action="PAYMENT_CREATED",
            module="PAYMENTS",
            description="Payment created",
            created_at=NOW,
        )

    def test_failure_inside_scope_drops_its_entries_only(self, factory):
        kept = self._entry()
        with factory() as uow:
            uow.audit.append(kept)
            with pytest.raises(RuntimeError):
                with uow.audit.audit_scope():
                    uow.audit.append(self._entry())
                    raise RuntimeError("lookup failed")
            uow.commit()

        assert [e.id for e in factory.database.snapshot().audit] == [kept.id]
