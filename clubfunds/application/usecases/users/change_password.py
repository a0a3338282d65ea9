"""
===============================================================================
USE CASE: Change Password
===============================================================================

Responsibilities:
    - Check the current password through the injected verifier.
    - Store the new (already hashed) credential, version-guarded.
    - Append PASSWORD_CHANGED under the AUTH module.

Notes:
    - A wrong current password is a VALIDATION_FAILURE; the stored hash is
      left untouched.
    - Hashing stays in identity/; this use case never sees a raw new password.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, User, touch
from ....domain.errors import ValidationFailureError
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ....domain.validation import require_text
from ...audit_trail import AuditTrailLogger
from ..lookups import require_user
from ..results import OperationResult, guarded_operation
from .authenticate_user import PasswordVerifier


@dataclass(frozen=True)
class ChangePasswordInput:
    current_password: str
    new_password_hash: str


class ChangePasswordUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
        verify_password: PasswordVerifier,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit
        self._verify_password = verify_password

    @guarded_operation("change_password")
    def execute(
        self, user_id: UUID, data: ChangePasswordInput, actor: Actor
    ) -> OperationResult[User]:
        new_hash = require_text(data.new_password_hash, "new_password_hash")

        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
            if not data.current_password or not self._verify_password(
                data.current_password, user.password_hash
            ):
                raise ValidationFailureError(
                    "Current password is incorrect", field="current_password"
                )

            user.password_hash = new_hash
            touch(user.meta, actor.name, self._clock.now())
            uow.users.update(user)
            self._audit.log(
                uow,
                actor_user_id=user.id,
                action=AuditAction.PASSWORD_CHANGED,
                module=AuditModule.AUTH,
                description=f"Password changed for {user.email}",
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
            uow.commit()

        return OperationResult.ok(user, "Password changed successfully")
