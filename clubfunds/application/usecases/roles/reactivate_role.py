"""
===============================================================================
USE CASE: Reactivate Role
===============================================================================

Responsibilities:
    - Re-stamp the most recently revoked ledger row for (user, role) instead
      of inserting a duplicate, keeping history linear.
    - Append ROLE_REACTIVATED.

Notes:
    - Core operation only; not exposed over HTTP.
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.metrics import record_state_transition
from ....domain import role_ledger
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, RoleAssignment
from ....domain.errors import (
    DuplicateActiveAssignmentError,
    GuardReason,
    InvalidStateTransitionError,
)
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ...audit_trail import AuditTrailLogger, attributed_user_id
from ..lookups import require_role, require_user
from ..results import OperationResult, guarded_operation


class ReactivateRoleUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    @guarded_operation("reactivate_role")
    def execute(
        self, user_id: UUID, role_id: UUID, actor: Actor
    ) -> OperationResult[RoleAssignment]:
        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
            role = require_role(uow, role_id)

            if uow.assignments.get_active(user.id, role.id) is not None:
                raise DuplicateActiveAssignmentError(user.id, role.id)

            assignment = uow.assignments.get_latest_inactive(user.id, role.id)
            if assignment is None:
                raise InvalidStateTransitionError(
                    f"Role {role.name} was never assigned to {user.email}",
                    reason=GuardReason.NOT_ASSIGNED,
                    resource="RoleAssignment",
                )

            role_ledger.reactivate(assignment, actor_name=actor.name, now=self._clock.now())
            uow.assignments.update(assignment)
            self._audit.log(
                uow,
                actor_user_id=attributed_user_id(actor, user.id),
                action=AuditAction.ROLE_REACTIVATED,
                module=AuditModule.ROLES,
                description=f"Role {role.name} reactivated for {user.email} by {actor.name}",
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
            uow.commit()

        record_state_transition("role_assignment", "reactivated")
        return OperationResult.ok(assignment, "Role reactivated successfully")
