"""
===============================================================================
TARJETA CRC - schemas/roles.py
===============================================================================

Responsibilities:
    - DTOs for the role catalog and the role ledger (grants).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from clubfunds.domain.entities import Role, RoleAssignment
from pydantic import BaseModel, Field

from .common import RecordMetaRes, to_meta_res
from .users import UserRes


class CreateRoleReq(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, description="UPPER_SNAKE name")
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = True


class UpdateRoleReq(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class AssignRolesReq(BaseModel):
    role_ids: list[UUID] = Field(..., min_length=1, max_length=20)
    remark: str | None = Field(default=None, max_length=500)


class RoleRes(BaseModel):
    id: UUID
    name: str
    code: str | None = None
    display_name: str
    description: str | None = None
    is_active: bool
    is_system_role: bool
    meta: RecordMetaRes


class RoleAssignmentRes(BaseModel):
    id: UUID
    user_id: UUID
    role_id: UUID
    assigned_at: datetime
    assigned_by: str
    is_active: bool
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    remark: str | None = None


class RoleMemberRes(BaseModel):
    user: UserRes
    assignment: RoleAssignmentRes


def to_role_res(role: Role) -> RoleRes:
    return RoleRes(
        id=role.id,
        name=role.name,
        code=role.code,
        display_name=role.display_name,
        description=role.description,
        is_active=role.is_active,
        is_system_role=role.is_system_role,
        meta=to_meta_res(role.meta),
    )


def to_assignment_res(assignment: RoleAssignment) -> RoleAssignmentRes:
    return RoleAssignmentRes(
        id=assignment.id,
        user_id=assignment.user_id,
        role_id=assignment.role_id,
        assigned_at=assignment.assigned_at,
        assigned_by=assignment.assigned_by,
        is_active=assignment.is_active,
        revoked_at=assignment.revoked_at,
        revoked_by=assignment.revoked_by,
        remark=assignment.remark,
    )
