"""
===============================================================================
USE CASE: Enable / Disable User
===============================================================================

Business Goal:
    Let administrators switch a member's account on or off. A disabled
    account keeps its roles and history but can neither log in nor use an
    issued token.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    EnableUserUseCase, DisableUserUseCase

Responsibilities:
    - Load the user (NOT_FOUND for unknown or deleted users).
    - Set is_enabled, stamp updated_by / updated_at, version-guarded update.
    - Append USER_ENABLED / USER_DISABLED to the audit trail.

Collaborators:
    - UnitOfWork: users, audit
    - AuditTrailLogger

Notes:
    - Repeating the current state is accepted and still recorded.
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.metrics import record_state_transition
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, User, touch
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ...audit_trail import AuditTrailLogger, attributed_user_id
from ..lookups import require_user
from ..results import OperationResult, guarded_operation


class _SetUserEnabled:
    enabled: bool
    action: AuditAction
    verb: str

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    def _apply(self, user_id: UUID, actor: Actor) -> OperationResult[User]:
        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
            user.is_enabled = self.enabled
            touch(user.meta, actor.name, self._clock.now())
            uow.users.update(user)
            self._audit.log(
                uow,
                actor_user_id=attributed_user_id(actor, user.id),
                action=self.action,
                module=AuditModule.USERS,
                description=f"User account {self.verb}: {user.email} by {actor.name}",
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
            uow.commit()

        record_state_transition("user", self.verb)
        return OperationResult.ok(user, f"User {self.verb} successfully")


class EnableUserUseCase(_SetUserEnabled):
    enabled = True
    action = AuditAction.USER_ENABLED
    verb = "enabled"

    @guarded_operation("enable_user")
    def execute(self, user_id: UUID, actor: Actor) -> OperationResult[User]:
        return self._apply(user_id, actor)


class DisableUserUseCase(_SetUserEnabled):
    enabled = False
    action = AuditAction.USER_DISABLED
    verb = "disabled"

    @guarded_operation("disable_user")
    def execute(self, user_id: UUID, actor: Actor) -> OperationResult[User]:
        return self._apply(user_id, actor)
