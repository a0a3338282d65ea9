"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/roles.py
============================================================
Class: PostgresRoleRepository

Responsibilities:
  - Role catalog persistence (`roles` table).
  - Count active grants for the "role in use" guard.
  - Deterministic listing ordered by name.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import Role
from .base import (
    META_COLUMNS,
    PostgresRepository,
    escape_like,
    meta_from_row,
    meta_insert_params,
)


class PostgresRoleRepository(PostgresRepository):
    resource = "Role"
    table = "roles"

    _UNIQUE_KEYS = {"uq_roles_name_live": "name"}

    _SELECT_COLUMNS = f"""
        id, name, display_name, description, is_active, is_system_role, code,
        {META_COLUMNS}
    """

    def _row_to_role(self, row: tuple) -> Role:
        return Role(
            id=row[0],
            name=row[1],
            display_name=row[2],
            description=row[3],
            is_active=row[4],
            is_system_role=row[5],
            code=row[6],
            meta=meta_from_row(row, 7),
        )

    def get_by_id(self, role_id: UUID) -> Role | None:
        row = self._fetchone(
            f"SELECT {self._SELECT_COLUMNS} FROM roles WHERE id = %s",
            (role_id,),
            context_msg="PostgresRoleRepository: get_by_id failed",
            extra={"role_id": str(role_id)},
        )
        return self._row_to_role(row) if row else None

    def get_by_name(self, name: str) -> Role | None:
        row = self._fetchone(
            f"SELECT {self._SELECT_COLUMNS} FROM roles WHERE name = %s AND NOT is_deleted",
            (name.strip().upper(),),
            context_msg="PostgresRoleRepository: get_by_name failed",
            extra={"role_name": name},
        )
        return self._row_to_role(row) if row else None

    def exists_by_name(self, name: str) -> bool:
        return self.get_by_name(name) is not None

    def add(self, role: Role) -> None:
        self._execute(
            f"""
                INSERT INTO roles (
                    id, name, display_name, description, is_active,
                    is_system_role, code, {META_COLUMNS}
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                role.id,
                role.name,
                role.display_name,
                role.description,
                role.is_active,
                role.is_system_role,
                role.code,
                *meta_insert_params(role.meta),
            ],
            context_msg="PostgresRoleRepository: insert failed",
            extra={"role_id": str(role.id)},
            subject=role,
        )
        role.meta.version = 0

    def update(self, role: Role) -> None:
        self._versioned_update(
            role,
            {
                "display_name": role.display_name,
                "description": role.description,
                "is_active": role.is_active,
            },
        )

    def count_active_assignments(self, role_id: UUID) -> int:
        row = self._fetchone(
            "SELECT COUNT(*) FROM user_roles WHERE role_id = %s AND is_active",
            (role_id,),
            context_msg="PostgresRoleRepository: count_active_assignments failed",
            extra={"role_id": str(role_id)},
        )
        return int(row[0]) if row else 0

    def list_roles(
        self,
        *,
        include_inactive: bool,
        search: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Role], int]:
        where = ["NOT is_deleted"]
        params: list[object] = []
        if not include_inactive:
            where.append("is_active")
        if search:
            pattern = f"%{escape_like(search)}%"
            where.append("(display_name ILIKE %s OR description ILIKE %s)")
            params.extend([pattern, pattern])
        rows, total = self._paged(
            select_sql=self._SELECT_COLUMNS,
            where=where,
            params=params,
            order_by="name ASC",
            limit=limit,
            offset=offset,
            context_msg="PostgresRoleRepository: list_roles failed",
        )
        return [self._row_to_role(r) for r in rows], total
