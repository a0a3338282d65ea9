"""
Name: Role Ledger and Role Catalog Use Case Tests

Responsibilities:
  - Assign / revoke / reactivate through the public operations
  - Single active grant per (user, role), history kept on revoke
  - Batch assignment is all-or-nothing
  - Role catalog guards (system roles, roles in use, unique names)

Collaborators:
  - conftest: uc (wired use cases), make_user, system_roles, clock
"""

from uuid import uuid4

import pytest
from clubfunds.application.usecases.roles import CreateRoleInput, UpdateRoleInput
from clubfunds.domain.audit import AuditAction
from clubfunds.domain.entities import Actor, SystemRole
from clubfunds.domain.errors import ErrorKind, GuardReason

from support import actor_for


@pytest.fixture
def chair(make_user):
    return make_user("chair", roles=[SystemRole.SUPER_ADMIN.value])


@pytest.fixture
def coach_role(uc, chair):
    result = uc.create_role.execute(
        CreateRoleInput(name="coach", display_name="Coach"), actor_for(chair)
    )
    assert result.success
    return result.payload


def _history(uow_factory, user_id):
    with uow_factory() as uow:
        return uow.assignments.list_for_user(user_id, active_only=False)


@pytest.mark.unit
class TestAssignRole:
    def test_assign_creates_active_grant_and_audit_entry(
        self, uc, uow_factory, chair, member, coach_role
    ):
        result = uc.assign_role.execute(
            member.id, coach_role.id, actor_for(chair), remark="Season 2024"
        )

        assert result.success
        assignment = result.payload
        assert assignment.is_active is True
        assert assignment.assigned_by == chair.email
        assert assignment.remark == "Season 2024"

        with uow_factory() as uow:
            entries, _ = uow.audit.list_entries(
                action=AuditAction.ROLE_ASSIGNED.value, limit=10, offset=0
            )
        assert any(
            e.actor_user_id == chair.id and "COACH" in e.description for e in entries
        )

    def test_second_active_grant_is_refused(self, uc, uow_factory, chair, member, coach_role):
        assert uc.assign_role.execute(member.id, coach_role.id, actor_for(chair)).success

        result = uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))

        assert not result.success
        assert result.error.kind is ErrorKind.INVALID_STATE_TRANSITION
        assert result.error.reason is GuardReason.ALREADY_ASSIGNED
        active = [a for a in _history(uow_factory, member.id) if a.role_id == coach_role.id]
        assert len(active) == 1

    def test_unknown_user_or_role_is_not_found(self, uc, chair, member, coach_role):
        missing_user = uc.assign_role.execute(uuid4(), coach_role.id, actor_for(chair))
        missing_role = uc.assign_role.execute(member.id, uuid4(), actor_for(chair))

        assert missing_user.error.kind is ErrorKind.NOT_FOUND
        assert missing_user.error.resource == "User"
        assert missing_role.error.kind is ErrorKind.NOT_FOUND
        assert missing_role.error.resource == "Role"

    def test_system_actor_attributes_audit_to_target_user(
        self, uc, uow_factory, member, coach_role
    ):
        result = uc.assign_role.execute(member.id, coach_role.id, Actor.system())

        assert result.success
        assert result.payload.assigned_by == "SYSTEM"
        with uow_factory() as uow:
            entries, _ = uow.audit.list_entries(
                user_id=member.id, action="ROLE_ASSIGNED", limit=10, offset=0
            )
        assert any("COACH" in e.description for e in entries)


@pytest.mark.unit
class TestAssignRolesBatch:
    def test_batch_assigns_every_role(self, uc, chair, member, coach_role, system_roles):
        fin = system_roles[SystemRole.FIN_ADMIN.value]

        result = uc.assign_roles.execute(
            member.id, [coach_role.id, fin.id, coach_role.id], actor_for(chair)
        )

        assert result.success
        assert {a.role_id for a in result.payload} == {coach_role.id, fin.id}

    def test_one_unknown_role_commits_nothing(self, uc, uow_factory, chair, member, coach_role):
        before = _history(uow_factory, member.id)

        result = uc.assign_roles.execute(member.id, [coach_role.id, uuid4()], actor_for(chair))

        assert result.error.kind is ErrorKind.NOT_FOUND
        assert _history(uow_factory, member.id) == before

    def test_one_duplicate_commits_nothing(self, uc, uow_factory, chair, member, coach_role, system_roles):
        user_role = system_roles[SystemRole.USER.value]
        before = _history(uow_factory, member.id)

        result = uc.assign_roles.execute(member.id, [coach_role.id, user_role.id], actor_for(chair))

        assert result.error.reason is GuardReason.ALREADY_ASSIGNED
        assert _history(uow_factory, member.id) == before

    def test_empty_batch_is_a_validation_failure(self, uc, chair, member):
        result = uc.assign_roles.execute(member.id, [], actor_for(chair))
        assert result.error.kind is ErrorKind.VALIDATION_FAILURE


@pytest.mark.unit
class TestRevokeAndReactivate:
    def test_revoke_keeps_history(self, uc, uow_factory, clock, chair, member, coach_role):
        granted = uc.assign_role.execute(member.id, coach_role.id, actor_for(chair)).payload
        clock.advance(days=3)

        result = uc.revoke_role.execute(member.id, coach_role.id, actor_for(chair))

        assert result.success
        assert result.payload.id == granted.id
        assert result.payload.is_active is False
        assert result.payload.revoked_at == clock.now()
        rows = [a for a in _history(uow_factory, member.id) if a.role_id == coach_role.id]
        assert len(rows) == 1 and rows[0].is_active is False

    def test_revoke_without_active_grant_is_refused(self, uc, chair, member, coach_role):
        result = uc.revoke_role.execute(member.id, coach_role.id, actor_for(chair))

        assert result.error.kind is ErrorKind.INVALID_STATE_TRANSITION
        assert result.error.reason is GuardReason.NOT_ASSIGNED

    def test_reactivate_restamps_latest_inactive_row(self, uc, uow_factory, clock, chair, member, coach_role):
        granted = uc.assign_role.execute(member.id, coach_role.id, actor_for(chair)).payload
        uc.revoke_role.execute(member.id, coach_role.id, actor_for(chair))
        clock.advance(days=10)

        result = uc.reactivate_role.execute(member.id, coach_role.id, actor_for(chair))

        assert result.success
        assert result.payload.id == granted.id
        assert result.payload.is_active is True
        assert result.payload.assigned_at == clock.now()
        assert result.payload.revoked_at is None
        assert len([a for a in _history(uow_factory, member.id) if a.role_id == coach_role.id]) == 1

    def test_reactivate_never_assigned_is_refused(self, uc, chair, member, coach_role):
        result = uc.reactivate_role.execute(member.id, coach_role.id, actor_for(chair))
        assert result.error.reason is GuardReason.NOT_ASSIGNED

    def test_reactivate_while_active_is_refused(self, uc, chair, member, coach_role):
        uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))

        result = uc.reactivate_role.execute(member.id, coach_role.id, actor_for(chair))

        assert result.error.reason is GuardReason.ALREADY_ASSIGNED

    def test_assign_after_revoke_appends_a_new_row(self, uc, uow_factory, chair, member, coach_role):
        uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))
        uc.revoke_role.execute(member.id, coach_role.id, actor_for(chair))

        result = uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))

        assert result.success
        rows = [a for a in _history(uow_factory, member.id) if a.role_id == coach_role.id]
        assert len(rows) == 2
        assert sum(1 for a in rows if a.is_active) == 1


@pytest.mark.unit
class TestRoleQueries:
    def test_active_roles_skip_deactivated_roles(self, uc, chair, member, coach_role):
        uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))
        assert {r.name for r in uc.list_active_roles.execute(member.id).payload} == {
            "COACH",
            "USER",
        }

        uc.deactivate_role.execute(coach_role.id, actor_for(chair))

        assert [r.name for r in uc.list_active_roles.execute(member.id).payload] == ["USER"]

    def test_list_users_for_role(self, uc, chair, member, make_user, coach_role):
        other = make_user("other")
        uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))
        uc.assign_role.execute(other.id, coach_role.id, actor_for(chair))

        page = uc.list_users_for_role.execute(coach_role.id, limit=1).payload

        assert page.total == 2
        assert len(page.items) == 1
        assert page.next_offset == 1
        assert page.items[0].user.id in {member.id, other.id}


@pytest.mark.unit
class TestRoleCatalog:
    def test_create_normalizes_name_and_refuses_duplicates(self, uc, chair, coach_role):
        assert coach_role.name == "COACH"
        assert coach_role.code == "ROLE_COACH"
        assert coach_role.is_system_role is False

        result = uc.create_role.execute(
            CreateRoleInput(name=" Coach ", display_name="Again"), actor_for(chair)
        )

        assert result.error.kind is ErrorKind.ALREADY_EXISTS

    def test_invalid_role_name_is_a_validation_failure(self, uc, chair):
        result = uc.create_role.execute(
            CreateRoleInput(name="head coach!", display_name="x"), actor_for(chair)
        )
        assert result.error.kind is ErrorKind.VALIDATION_FAILURE

    @pytest.mark.parametrize("operation", ["deactivate_role", "delete_role"])
    def test_system_roles_are_protected(self, uc, chair, system_roles, operation):
        role = system_roles[SystemRole.USER.value]

        result = getattr(uc, operation).execute(role.id, actor_for(chair))

        assert result.error.kind is ErrorKind.PROTECTED_RESOURCE
        assert result.error.reason is GuardReason.PROTECTED_ROLE
        assert uc.get_role.execute(role.id).payload.is_active is True

    def test_system_role_cannot_be_edited(self, uc, chair, system_roles):
        role = system_roles[SystemRole.FIN_ADMIN.value]

        result = uc.update_role.execute(
            role.id, UpdateRoleInput(display_name="Money people"), actor_for(chair)
        )

        assert result.error.kind is ErrorKind.PROTECTED_RESOURCE

    def test_update_bumps_version(self, uc, chair, coach_role):
        result = uc.update_role.execute(
            coach_role.id, UpdateRoleInput(description="Runs training"), actor_for(chair)
        )

        assert result.success
        assert result.payload.description == "Runs training"
        assert result.payload.meta.version == coach_role.meta.version + 1

    def test_role_in_use_cannot_be_deleted(self, uc, chair, member, coach_role):
        uc.assign_role.execute(member.id, coach_role.id, actor_for(chair))

        result = uc.delete_role.execute(coach_role.id, actor_for(chair))

        assert result.error.kind is ErrorKind.INVALID_STATE_TRANSITION
        assert result.error.reason is GuardReason.ROLE_IN_USE

    def test_deleted_role_frees_its_name(self, uc, chair, coach_role):
        assert uc.delete_role.execute(coach_role.id, actor_for(chair)).success

        listed = uc.list_roles.execute(include_inactive=True).payload
        assert "COACH" not in {r.name for r in listed.items}

        again = uc.create_role.execute(
            CreateRoleInput(name="COACH", display_name="Coach v2"), actor_for(chair)
        )
        assert again.success
        assert again.payload.id != coach_role.id

    def test_list_roles_hides_inactive_by_default(self, uc, chair, coach_role):
        uc.deactivate_role.execute(coach_role.id, actor_for(chair))

        active = {r.name for r in uc.list_roles.execute().payload.items}
        everything = {r.name for r in uc.list_roles.execute(include_inactive=True).payload.items}

        assert "COACH" not in active
        assert "COACH" in everything
        assert {role.value for role in SystemRole} <= active
