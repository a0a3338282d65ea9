"""Seeding of system roles and the optional super administrator."""

import pytest
from clubfunds.application.bootstrap import AdminSeed
from clubfunds.domain.entities import SystemRole
from clubfunds.domain.errors import ErrorKind, GuardReason

from support import actor_for

ADMIN = AdminSeed(
    email="SuperAdmin@Commonwealth.local", username="superadmin", password="admin"
)


@pytest.mark.unit
class TestSystemBootstrapper:
    def test_seeds_four_protected_roles_once(self, bootstrapper, uc):
        first = bootstrapper.seed_system_roles()
        second = bootstrapper.seed_system_roles()

        assert sorted(first) == sorted(r.value for r in SystemRole)
        assert second == []
        roles = uc.list_roles.execute(include_inactive=True).payload.items
        assert {r.name for r in roles} == {r.value for r in SystemRole}
        assert all(r.is_system_role for r in roles)
        assert {r.meta.created_by for r in roles} == {"SYSTEM"}

    def test_admin_gets_super_admin_and_normalized_email(self, bootstrapper, uc, uow_factory):
        bootstrapper.seed_system_roles()

        assert bootstrapper.seed_admin(ADMIN) is True
        assert bootstrapper.seed_admin(ADMIN) is False

        with uow_factory() as uow:
            admin = uow.users.get_by_email("superadmin@commonwealth.local")
        assert admin.password_hash == "hashed:admin"
        roles = uc.list_active_roles.execute(admin.id).payload
        assert [r.name for r in roles] == [SystemRole.SUPER_ADMIN.value]

    def test_seeded_roles_cannot_be_deleted(self, bootstrapper, uc, system_roles, make_user):
        chair = make_user("chair", roles=[SystemRole.SUPER_ADMIN.value])

        result = uc.delete_role.execute(
            system_roles[SystemRole.USER.value].id, actor_for(chair)
        )

        assert result.error.kind is ErrorKind.PROTECTED_RESOURCE
        assert result.error.reason is GuardReason.PROTECTED_ROLE
