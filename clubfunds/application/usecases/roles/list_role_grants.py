"""
Name: Role Ledger Reads

Responsibilities:
  - ListActiveRoles: effective roles of a user (active grant AND active role)
  - ListUsersForRole: active grants of a role with their users, paginated

Notes:
  - Pure reads: the unit of work is opened and left without commit
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ....domain.entities import Page, Role, RoleAssignment, User
from ....domain.repositories import UnitOfWorkFactory
from ..lookups import clamp_page, require_role, require_user
from ..results import OperationResult, guarded_operation


@dataclass(frozen=True)
class RoleMember:
    user: User
    assignment: RoleAssignment


class ListActiveRolesUseCase:
    """A deactivated or deleted role grants nothing, even with an active row."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @guarded_operation("list_active_roles")
    def execute(self, user_id: UUID) -> OperationResult[list[Role]]:
        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
            roles: dict[UUID, Role] = {}
            for assignment in uow.assignments.list_for_user(user.id, active_only=True):
                role = uow.roles.get_by_id(assignment.role_id)
                if role is None or not role.is_active or role.meta.is_deleted:
                    continue
                roles[role.id] = role

        active = sorted(roles.values(), key=lambda r: r.name)
        return OperationResult.ok(active, f"{len(active)} active roles")


class ListUsersForRoleUseCase:
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

    @guarded_operation("list_users_for_role")
    def execute(
        self, role_id: UUID, *, limit: int | None = None, offset: int | None = None
    ) -> OperationResult[Page]:
        limit, offset = clamp_page(
            limit, offset, default=self._default_page_size, maximum=self._max_page_size
        )
        with self._uow_factory() as uow:
            role = require_role(uow, role_id)
            assignments, total = uow.assignments.list_active_for_role(
                role.id, limit=limit, offset=offset
            )
            members = []
            for assignment in assignments:
                user = uow.users.get_by_id(assignment.user_id)
                if user is not None:
                    members.append(RoleMember(user=user, assignment=assignment))

        return OperationResult.ok(
            Page(items=members, total=total, limit=limit, offset=offset),
            f"{total} users hold role {role.name}",
        )
