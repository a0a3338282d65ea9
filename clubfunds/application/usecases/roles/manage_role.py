"""
===============================================================================
USE CASES: Role catalog management
===============================================================================

Name:
    Create / Update / Activate / Deactivate / Delete / Get / List roles

Responsibilities:
    - Keep role names unique (ALREADY_EXISTS).
    - Protect system roles: no edit, no deactivation, no deletion
      (PROTECTED_RESOURCE / PROTECTED_ROLE).
    - Refuse deleting a role that still has active grants
      (INVALID_STATE_TRANSITION / ROLE_IN_USE).
    - Append one audit entry per successful mutation.

Collaborators:
    - UnitOfWork: roles (+ users for audit resolution)
    - domain.role_ledger: catalog guards
    - AuditTrailLogger

Notes:
    - Custom roles are never system roles; the bootstrap seeder is the only
      caller that passes system_role=True.
    - Role audit entries carry no subject user, so SYSTEM-actor mutations are
      reported as lost entries by the audit logger.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

from ....crosscutting.metrics import record_state_transition
from ....domain import role_ledger
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, Page, Role, new_record, touch
from ....domain.errors import AlreadyExistsError, ValidationFailureError
from ....domain.repositories import UnitOfWork, UnitOfWorkFactory
from ....domain.services import Clock
from ....domain.validation import normalize_role_name, optional_text, require_text
from ...audit_trail import AuditTrailLogger
from ..lookups import clamp_page, require_role
from ..results import OperationResult, guarded_operation


@dataclass(frozen=True)
class CreateRoleInput:
    name: str
    display_name: str
    description: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class UpdateRoleInput:
    display_name: str | None = None
    description: str | None = None


class _RoleCommand:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    def _log(self, uow: UnitOfWork, actor: Actor, action: AuditAction, description: str) -> None:
        self._audit.log(
            uow,
            actor_user_id=actor.user_id,
            action=action,
            module=AuditModule.ROLES,
            description=description,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
        )


class CreateRoleUseCase(_RoleCommand):
    @guarded_operation("create_role")
    def execute(
        self, data: CreateRoleInput, actor: Actor, *, system_role: bool = False
    ) -> OperationResult[Role]:
        name = normalize_role_name(data.name)
        role = Role(
            id=uuid4(),
            name=name,
            display_name=require_text(data.display_name, "display_name", max_length=100),
            description=optional_text(data.description, "description", max_length=500),
            is_active=data.is_active,
            is_system_role=system_role,
            meta=new_record(actor.name, self._clock.now()),
        )

        with self._uow_factory() as uow:
            if uow.roles.exists_by_name(name):
                raise AlreadyExistsError(f"Role '{name}' already exists", resource="Role")
            uow.roles.add(role)
            self._log(uow, actor, AuditAction.ROLE_CREATED, f"Role created: {name} by {actor.name}")
            uow.commit()

        record_state_transition("role", "created")
        return OperationResult.ok(role, "Role created successfully")


class UpdateRoleUseCase(_RoleCommand):
    @guarded_operation("update_role")
    def execute(
        self, role_id: UUID, data: UpdateRoleInput, actor: Actor
    ) -> OperationResult[Role]:
        if data.display_name is None and data.description is None:
            raise ValidationFailureError("No fields to update")

        with self._uow_factory() as uow:
            role = require_role(uow, role_id)
            role_ledger.ensure_editable(role)
            if data.display_name is not None:
                role.display_name = require_text(
                    data.display_name, "display_name", max_length=100
                )
            if data.description is not None:
                role.description = optional_text(data.description, "description", max_length=500)
            touch(role.meta, actor.name, self._clock.now())
            uow.roles.update(role)
            self._log(uow, actor, AuditAction.ROLE_UPDATED, f"Role updated: {role.name} by {actor.name}")
            uow.commit()

        record_state_transition("role", "updated")
        return OperationResult.ok(role, "Role updated successfully")


class ActivateRoleUseCase(_RoleCommand):
    @guarded_operation("activate_role")
    def execute(self, role_id: UUID, actor: Actor) -> OperationResult[Role]:
        with self._uow_factory() as uow:
            role = require_role(uow, role_id)
            role_ledger.activate(role, actor_name=actor.name, now=self._clock.now())
            uow.roles.update(role)
            self._log(uow, actor, AuditAction.ROLE_ACTIVATED, f"Role activated: {role.name} by {actor.name}")
            uow.commit()

        record_state_transition("role", "activated")
        return OperationResult.ok(role, "Role activated successfully")


class DeactivateRoleUseCase(_RoleCommand):
    @guarded_operation("deactivate_role")
    def execute(self, role_id: UUID, actor: Actor) -> OperationResult[Role]:
        with self._uow_factory() as uow:
            role = require_role(uow, role_id)
            role_ledger.deactivate(role, actor_name=actor.name, now=self._clock.now())
            uow.roles.update(role)
            self._log(
                uow, actor, AuditAction.ROLE_DEACTIVATED, f"Role deactivated: {role.name} by {actor.name}"
            )
            uow.commit()

        record_state_transition("role", "deactivated")
        return OperationResult.ok(role, "Role deactivated successfully")


class DeleteRoleUseCase(_RoleCommand):
    @guarded_operation("delete_role")
    def execute(self, role_id: UUID, actor: Actor) -> OperationResult[Role]:
        with self._uow_factory() as uow:
            role = require_role(uow, role_id)
            role_ledger.delete(
                role,
                active_assignments=uow.roles.count_active_assignments(role.id),
                actor_name=actor.name,
                now=self._clock.now(),
            )
            uow.roles.update(role)
            self._log(uow, actor, AuditAction.ROLE_DELETED, f"Role deleted: {role.name} by {actor.name}")
            uow.commit()

        record_state_transition("role", "deleted")
        return OperationResult.ok(role, "Role deleted successfully")


class GetRoleUseCase:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @guarded_operation("get_role")
    def execute(self, role_id: UUID) -> OperationResult[Role]:
        with self._uow_factory() as uow:
            role = require_role(uow, role_id)
        return OperationResult.ok(role, "Role found")


class ListRolesUseCase:
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

    @guarded_operation("list_roles")
    def execute(
        self,
        *,
        include_inactive: bool = False,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OperationResult[Page]:
        limit, offset = clamp_page(
            limit, offset, default=self._default_page_size, maximum=self._max_page_size
        )
        with self._uow_factory() as uow:
            roles, total = uow.roles.list_roles(
                include_inactive=include_inactive,
                search=(search or "").strip() or None,
                limit=limit,
                offset=offset,
            )
        return OperationResult.ok(
            Page(items=roles, total=total, limit=limit, offset=offset),
            f"{total} roles",
        )
