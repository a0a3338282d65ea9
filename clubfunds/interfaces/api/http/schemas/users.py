"""
===============================================================================
TARJETA CRC - schemas/users.py
===============================================================================

Responsibilities:
    - DTOs for login, password change, registration and the user directory.
    - Normalize email at the edge (trim/lower).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from clubfunds.domain.entities import User
from pydantic import BaseModel, Field, field_validator

from .common import RecordMetaRes, to_meta_res


class LoginReq(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterUserReq(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=8, max_length=512)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    phone_number: str | None = Field(default=None, max_length=20)
    role_ids: list[UUID] = Field(default_factory=list, max_length=20)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ChangePasswordReq(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=512)
    new_password: str = Field(..., min_length=8, max_length=512)


class UserRes(BaseModel):
    id: UUID
    email: str
    username: str
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None = None
    is_enabled: bool
    is_locked: bool
    last_login_at: datetime | None = None
    meta: RecordMetaRes


class LoginRes(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRes


class MeRes(BaseModel):
    user: UserRes
    roles: list[str]
    permissions: list[str]


def to_user_res(user: User) -> UserRes:
    return UserRes(
        id=user.id,
        email=user.email,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        phone_number=user.phone_number,
        is_enabled=user.is_enabled,
        is_locked=user.is_locked,
        last_login_at=user.last_login_at,
        meta=to_meta_res(user.meta),
    )
