"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/users.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Load users by id / email / username (authentication, lookups).
  - Insert and version-guarded update of the `users` table.
  - Surface email/username collisions as DuplicateKeyError.
  - Directory listing with case-insensitive search over names, email and
    username.

Collaborators:
  - PostgresRepository (execution helpers)
  - domain.entities.User

Constraints / Notes:
  - Emails are stored lower-cased; lookups normalize the same way.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import User
from .base import (
    META_COLUMNS,
    PostgresRepository,
    escape_like,
    meta_from_row,
    meta_insert_params,
)


class PostgresUserRepository(PostgresRepository):
    resource = "User"
    table = "users"

    _UNIQUE_KEYS = {"uq_users_email": "email", "uq_users_username": "username"}

    _SELECT_COLUMNS = f"""
        id, email, username, password_hash, first_name, last_name, phone_number,
        is_enabled, is_locked, failed_login_attempts, locked_until,
        last_login_at, last_login_ip, {META_COLUMNS}
    """

    def _row_to_user(self, row: tuple) -> User:
        return User(
            id=row[0],
            email=row[1],
            username=row[2],
            password_hash=row[3],
            first_name=row[4],
            last_name=row[5],
            phone_number=row[6],
            is_enabled=row[7],
            is_locked=row[8],
            failed_login_attempts=row[9],
            locked_until=row[10],
            last_login_at=row[11],
            last_login_ip=row[12],
            meta=meta_from_row(row, 13),
        )

    def _get_where(self, condition: str, value: object) -> User | None:
        row = self._fetchone(
            f"SELECT {self._SELECT_COLUMNS} FROM users WHERE {condition}",
            (value,),
            context_msg="PostgresUserRepository: lookup failed",
            extra={"condition": condition},
        )
        return self._row_to_user(row) if row else None

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._get_where("id = %s", user_id)

    def get_by_email(self, email: str) -> User | None:
        return self._get_where("email = %s", email.strip().lower())

    def get_by_username(self, username: str) -> User | None:
        return self._get_where("username = %s", username)

    def exists_by_email(self, email: str) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM users WHERE email = %s",
            (email.strip().lower(),),
            context_msg="PostgresUserRepository: exists_by_email failed",
        )
        return row is not None

    def exists_by_username(self, username: str) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM users WHERE username = %s",
            (username,),
            context_msg="PostgresUserRepository: exists_by_username failed",
        )
        return row is not None

    def add(self, user: User) -> None:
        self._execute(
            f"""
                INSERT INTO users (
                    id, email, username, password_hash, first_name, last_name,
                    phone_number, is_enabled, is_locked, failed_login_attempts,
                    locked_until, last_login_at, last_login_ip, {META_COLUMNS}
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                        %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                user.id,
                user.email,
                user.username,
                user.password_hash,
                user.first_name,
                user.last_name,
                user.phone_number,
                user.is_enabled,
                user.is_locked,
                user.failed_login_attempts,
                user.locked_until,
                user.last_login_at,
                user.last_login_ip,
                *meta_insert_params(user.meta),
            ],
            context_msg="PostgresUserRepository: insert failed",
            extra={"user_id": str(user.id)},
            subject=user,
        )
        user.meta.version = 0

    def update(self, user: User) -> None:
        self._versioned_update(
            user,
            {
                "email": user.email,
                "username": user.username,
                "password_hash": user.password_hash,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "phone_number": user.phone_number,
                "is_enabled": user.is_enabled,
                "is_locked": user.is_locked,
                "failed_login_attempts": user.failed_login_attempts,
                "locked_until": user.locked_until,
                "last_login_at": user.last_login_at,
                "last_login_ip": user.last_login_ip,
            },
        )

    def list_users(
        self, *, search: str | None = None, limit: int, offset: int
    ) -> tuple[list[User], int]:
        where: list[str] = ["NOT is_deleted"]
        params: list[object] = []
        if search:
            pattern = f"%{escape_like(search)}%"
            where.append(
                "(first_name ILIKE %s OR last_name ILIKE %s"
                " OR email ILIKE %s OR username ILIKE %s)"
            )
            params.extend([pattern] * 4)

        rows, total = self._paged(
            select_sql=self._SELECT_COLUMNS,
            where=where,
            params=params,
            order_by="username ASC",
            limit=limit,
            offset=offset,
            context_msg="PostgresUserRepository: list_users failed",
        )
        return [self._row_to_user(r) for r in rows], total
