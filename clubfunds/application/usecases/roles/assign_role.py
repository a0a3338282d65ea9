"""
===============================================================================
USE CASE: Assign Role / Assign Roles (batch)
===============================================================================

Business Goal:
    Grant a role to a user through the role ledger, keeping at most one
    active grant per (user, role) pair and leaving a trace in the audit trail.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Classes:
    AssignRoleUseCase, AssignRolesUseCase

Responsibilities:
    - Resolve user and role (NOT_FOUND otherwise).
    - Refuse a second active grant (INVALID_STATE_TRANSITION / ALREADY_ASSIGNED).
    - Insert a new ledger row and append ROLE_ASSIGNED in the same unit of work.
    - Batch variant: all-or-nothing; one unknown role or one duplicate means
      nothing is committed.

Collaborators:
    - UnitOfWork: users, roles, assignments, audit
    - domain.role_ledger.grant
    - AuditTrailLogger

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) user_id and role_id must resolve to existing, non-deleted rows.
R2) The check below is a fast path; the store's unique constraint on active
    rows is what makes concurrent assigns resolve to one winner.
R3) Attribution: the acting user, or the target user for SYSTEM grants.
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.metrics import record_state_transition
from ....domain import role_ledger
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, Role, RoleAssignment, User
from ....domain.errors import (
    DuplicateActiveAssignmentError,
    ValidationFailureError,
)
from ....domain.repositories import UnitOfWork, UnitOfWorkFactory
from ....domain.services import Clock
from ...audit_trail import AuditTrailLogger, attributed_user_id
from ..lookups import require_role, require_user
from ..results import OperationResult, guarded_operation


def assign_within(
    uow: UnitOfWork,
    *,
    user: User,
    role: Role,
    actor: Actor,
    remark: str | None,
    clock: Clock,
    audit: AuditTrailLogger,
) -> RoleAssignment:
    """Grant inside an open unit of work (shared by single, batch and registration)."""
    if uow.assignments.get_active(user.id, role.id) is not None:
        raise DuplicateActiveAssignmentError(user.id, role.id)

    assignment = role_ledger.grant(
        user_id=user.id,
        role_id=role.id,
        actor_name=actor.name,
        remark=remark,
        now=clock.now(),
    )
    uow.assignments.add(assignment)
    audit.log(
        uow,
        actor_user_id=attributed_user_id(actor, user.id),
        action=AuditAction.ROLE_ASSIGNED,
        module=AuditModule.ROLES,
        description=f"Role {role.name} assigned to {user.email} by {actor.name}",
        ip_address=actor.ip_address,
        user_agent=actor.user_agent,
    )
    return assignment


class AssignRoleUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    @guarded_operation("assign_role")
    def execute(
        self,
        user_id: UUID,
        role_id: UUID,
        actor: Actor,
        *,
        remark: str | None = None,
    ) -> OperationResult[RoleAssignment]:
        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
            role = require_role(uow, role_id)
            assignment = assign_within(
                uow,
                user=user,
                role=role,
                actor=actor,
                remark=remark,
                clock=self._clock,
                audit=self._audit,
            )
            uow.commit()

        record_state_transition("role_assignment", "assigned")
        return OperationResult.ok(assignment, "Role assigned successfully")


class AssignRolesUseCase:
    """Batch grant used at registration; one transaction for the whole set."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    @guarded_operation("assign_roles")
    def execute(
        self,
        user_id: UUID,
        role_ids: set[UUID] | list[UUID],
        actor: Actor,
        *,
        remark: str | None = None,
    ) -> OperationResult[list[RoleAssignment]]:
        unique_ids = list(dict.fromkeys(role_ids))
        if not unique_ids:
            raise ValidationFailureError("role_ids must not be empty", field="role_ids")

        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
            # Resolve every role before writing anything.
            roles = [require_role(uow, role_id) for role_id in unique_ids]
            created = [
                assign_within(
                    uow,
                    user=user,
                    role=role,
                    actor=actor,
                    remark=remark,
                    clock=self._clock,
                    audit=self._audit,
                )
                for role in roles
            ]
            uow.commit()

        for _ in created:
            record_state_transition("role_assignment", "assigned")
        return OperationResult.ok(created, f"{len(created)} roles assigned successfully")
