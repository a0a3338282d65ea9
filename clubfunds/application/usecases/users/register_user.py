"""
===============================================================================
USE CASE: Register User
===============================================================================

Business Goal:
    Add a user to the identity directory and grant their initial roles in
    the same unit of work.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    RegisterUserUseCase

Responsibilities:
    - Validate and normalize email, username, phone.
    - Refuse duplicate email/username (ALREADY_EXISTS).
    - Resolve every requested role before writing (NOT_FOUND, nothing kept).
    - Default to the USER role when no role is requested.
    - Append USER_REGISTERED and one ROLE_ASSIGNED per grant.

Collaborators:
    - UnitOfWork: users, roles, assignments, audit
    - roles.assign_role.assign_within (same ledger path as AssignRole)
    - AuditTrailLogger

Notes:
    - Receives an already-hashed credential; hashing lives in identity/.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from ....crosscutting.metrics import record_state_transition
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, SystemRole, User, new_record
from ....domain.errors import AlreadyExistsError, NotFoundError
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ....domain.validation import (
    normalize_email,
    normalize_phone,
    optional_text,
    require_text,
)
from ...audit_trail import AuditTrailLogger, attributed_user_id
from ..lookups import require_role
from ..results import OperationResult, guarded_operation
from ..roles.assign_role import assign_within


@dataclass(frozen=True)
class RegisterUserInput:
    email: str
    username: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    phone_number: str | None = None
    role_ids: list[UUID] = field(default_factory=list)


class RegisterUserUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    @guarded_operation("register_user")
    def execute(self, data: RegisterUserInput, actor: Actor) -> OperationResult[User]:
        now = self._clock.now()
        user = User(
            id=uuid4(),
            email=normalize_email(data.email),
            username=require_text(data.username, "username", max_length=50),
            password_hash=require_text(data.password_hash, "password_hash"),
            first_name=optional_text(data.first_name, "first_name", max_length=100) or "",
            last_name=optional_text(data.last_name, "last_name", max_length=100) or "",
            phone_number=normalize_phone(data.phone_number),
            meta=new_record(actor.name, now),
        )

        with self._uow_factory() as uow:
            if uow.users.exists_by_email(user.email):
                raise AlreadyExistsError(
                    f"User with email '{user.email}' already exists", resource="User"
                )
            if uow.users.exists_by_username(user.username):
                raise AlreadyExistsError(
                    f"User with username '{user.username}' already exists", resource="User"
                )

            if data.role_ids:
                roles = [require_role(uow, role_id) for role_id in dict.fromkeys(data.role_ids)]
            else:
                default_role = uow.roles.get_by_name(SystemRole.USER.value)
                if default_role is None or default_role.meta.is_deleted:
                    raise NotFoundError("Role", SystemRole.USER.value)
                roles = [default_role]

            uow.users.add(user)
            self._audit.log(
                uow,
                actor_user_id=attributed_user_id(actor, user.id),
                action=AuditAction.USER_REGISTERED,
                module=AuditModule.USERS,
                description=f"User registered: {user.email} by {actor.name}",
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
            for role in roles:
                assign_within(
                    uow,
                    user=user,
                    role=role,
                    actor=actor,
                    remark="Initial role at registration",
                    clock=self._clock,
                    audit=self._audit,
                )
            uow.commit()

        record_state_transition("user", "registered")
        return OperationResult.ok(user, "User registered successfully")
