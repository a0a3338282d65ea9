"""
Name: Role Assignment Ledger and Role Catalog Rules

Responsibilities:
  - Create, revoke and reactivate ledger rows (RoleAssignment)
  - Guard system roles against deactivation, deletion and edits
  - Guard deletion of roles that still have active grants

Collaborators:
  - domain.entities: Role, RoleAssignment, AuditedRecord helpers
  - application.usecases.roles: persistence + audit around these rules

Constraints:
  - Rows are never physically deleted; revoke flips is_active
  - Reactivation re-stamps the existing row instead of inserting a new one
  - Single-active-grant uniqueness is enforced by the store, these functions
    only guard the row they are handed
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from .entities import Role, RoleAssignment, mark_deleted, new_record, touch
from .errors import GuardReason, InvalidStateTransitionError, ProtectedResourceError
from .validation import optional_text

MAX_REMARK_LENGTH = 500


def grant(
    *,
    user_id: UUID,
    role_id: UUID,
    actor_name: str,
    remark: str | None,
    now: datetime,
) -> RoleAssignment:
    return RoleAssignment(
        id=uuid4(),
        user_id=user_id,
        role_id=role_id,
        assigned_at=now,
        assigned_by=actor_name,
        is_active=True,
        remark=optional_text(remark, "remark", max_length=MAX_REMARK_LENGTH),
        meta=new_record(actor_name, now),
    )


def revoke(assignment: RoleAssignment, *, actor_name: str, now: datetime) -> None:
    if not assignment.is_active:
        raise InvalidStateTransitionError(
            "Role assignment is already revoked",
            reason=GuardReason.NOT_ASSIGNED,
            resource="RoleAssignment",
        )
    assignment.is_active = False
    assignment.revoked_at = now
    assignment.revoked_by = actor_name
    touch(assignment.meta, actor_name, now)


def reactivate(assignment: RoleAssignment, *, actor_name: str, now: datetime) -> None:
    if assignment.is_active:
        raise InvalidStateTransitionError(
            "Role assignment is already active",
            reason=GuardReason.ALREADY_ASSIGNED,
            resource="RoleAssignment",
        )
    assignment.is_active = True
    assignment.assigned_at = now
    assignment.assigned_by = actor_name
    assignment.revoked_at = None
    assignment.revoked_by = None
    touch(assignment.meta, actor_name, now)


# -----------------------------------------------------------------------------
# Role catalog guards
# -----------------------------------------------------------------------------


def _protected(role: Role, action: str) -> ProtectedResourceError:
    return ProtectedResourceError(
        f"Cannot {action} system role {role.name}",
        reason=GuardReason.PROTECTED_ROLE,
        resource="Role",
    )


def ensure_editable(role: Role) -> None:
    if role.is_system_role:
        raise _protected(role, "modify")


def activate(role: Role, *, actor_name: str, now: datetime) -> None:
    role.is_active = True
    touch(role.meta, actor_name, now)


def deactivate(role: Role, *, actor_name: str, now: datetime) -> None:
    if role.is_system_role:
        raise _protected(role, "deactivate")
    role.is_active = False
    touch(role.meta, actor_name, now)


def delete(
    role: Role, *, active_assignments: int, actor_name: str, now: datetime
) -> None:
    if role.is_system_role:
        raise _protected(role, "delete")
    if active_assignments > 0:
        raise InvalidStateTransitionError(
            f"Cannot delete role assigned to {active_assignments} users",
            reason=GuardReason.ROLE_IN_USE,
            resource="Role",
        )
    role.is_active = False
    mark_deleted(role.meta, actor_name, now)
