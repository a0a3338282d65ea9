"""
Name: User Administration Tests

Responsibilities:
  - Enable / disable accounts (audited, version-guarded)
  - A disabled account cannot log in until re-enabled
  - Directory listing with search; role catalog search
  - Password change checks the current password
"""

from uuid import uuid4

import pytest
from clubfunds.application.usecases.roles import CreateRoleInput
from clubfunds.application.usecases.users import (
    AuthenticateUserUseCase,
    ChangePasswordInput,
)
from clubfunds.application.usecases.users.users_results import AuthErrorCode
from clubfunds.domain.audit import AuditAction, AuditModule
from clubfunds.domain.entities import SystemRole
from clubfunds.domain.errors import ErrorKind

from support import actor_for


def _verify(raw, hashed):
    return hashed == f"hashed:{raw}"


@pytest.fixture
def admin(make_user):
    return make_user("chair", roles=[SystemRole.TECH_ADMIN.value])


def _audit(uow_factory, action: AuditAction):
    with uow_factory() as uow:
        entries, _ = uow.audit.list_entries(action=action.value, limit=50, offset=0)
    return entries


@pytest.mark.unit
class TestEnableDisableUser:
    def test_disable_blocks_login_and_enable_restores_it(
        self, uc, uow_factory, clock, admin, member
    ):
        authenticate = AuthenticateUserUseCase(uow_factory, clock, _verify)

        disabled = uc.disable_user.execute(member.id, actor_for(admin))
        refused = authenticate.execute(member.email, "secret")
        enabled = uc.enable_user.execute(member.id, actor_for(admin))
        accepted = authenticate.execute(member.email, "secret")

        assert disabled.success
        assert disabled.message == "User disabled successfully"
        assert disabled.payload.is_enabled is False
        assert refused.error.code is AuthErrorCode.ACCOUNT_DISABLED
        assert enabled.payload.is_enabled is True
        assert accepted.error is None

    def test_toggle_is_stamped_and_audited(self, uc, uow_factory, clock, admin, member):
        clock.advance(hours=2)

        result = uc.disable_user.execute(member.id, actor_for(admin))

        stored = uc.get_user.execute(member.id).payload
        assert stored.meta.updated_by == admin.email
        assert stored.meta.updated_at == clock.now()
        assert stored.meta.version == result.payload.meta.version

        entries = _audit(uow_factory, AuditAction.USER_DISABLED)
        assert [e.actor_user_id for e in entries] == [admin.id]
        assert entries[0].module == AuditModule.USERS.value
        assert member.email in entries[0].description

    def test_unknown_user_is_not_found(self, uc, admin):
        result = uc.enable_user.execute(uuid4(), actor_for(admin))
        assert result.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.unit
class TestListUsers:
    def test_search_matches_name_email_and_username(self, uc, make_user):
        make_user("alice")
        make_user("bob")
        make_user("malik")

        by_username = uc.list_users.execute(search="ALI").payload
        by_email = uc.list_users.execute(search="bob@club").payload
        everyone = uc.list_users.execute().payload

        assert [u.username for u in by_username.items] == ["alice", "malik"]
        assert [u.username for u in by_email.items] == ["bob"]
        assert [u.username for u in everyone.items] == ["alice", "bob", "malik"]

    def test_paging_reports_total(self, uc, make_user):
        for name in ("ann", "ben", "cat"):
            make_user(name)

        page = uc.list_users.execute(limit=2, offset=1).payload

        assert page.total == 3
        assert [u.username for u in page.items] == ["ben", "cat"]


@pytest.mark.unit
class TestSearchRoles:
    def test_search_matches_display_name_and_description(self, uc, admin):
        uc.create_role.execute(
            CreateRoleInput(
                name="COACH", display_name="Team Coach", description="Runs training"
            ),
            actor_for(admin),
        )

        by_display = uc.list_roles.execute(search="coach").payload
        by_description = uc.list_roles.execute(search="TRAINING").payload
        nothing = uc.list_roles.execute(search="groundskeeper").payload

        assert [r.name for r in by_display.items] == ["COACH"]
        assert [r.name for r in by_description.items] == ["COACH"]
        assert nothing.total == 0


@pytest.mark.unit
class TestChangePassword:
    def test_current_password_is_required(self, uc, member):
        result = uc.change_password.execute(
            member.id,
            ChangePasswordInput(current_password="wrong", new_password_hash="hashed:new"),
            actor_for(member),
        )

        assert result.error.kind is ErrorKind.VALIDATION_FAILURE
        assert uc.get_user.execute(member.id).payload.password_hash == "hashed:secret"

    def test_new_password_replaces_the_old_one(self, uc, uow_factory, clock, member):
        authenticate = AuthenticateUserUseCase(uow_factory, clock, _verify)

        result = uc.change_password.execute(
            member.id,
            ChangePasswordInput(current_password="secret", new_password_hash="hashed:n3w"),
            actor_for(member),
        )

        assert result.message == "Password changed successfully"
        assert authenticate.execute(member.email, "secret").error is not None
        assert authenticate.execute(member.email, "n3w").error is None

        entries = _audit(uow_factory, AuditAction.PASSWORD_CHANGED)
        assert [e.module for e in entries] == [AuditModule.AUTH.value]
