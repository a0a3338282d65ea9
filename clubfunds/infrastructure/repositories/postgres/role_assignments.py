"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/role_assignments.py
============================================================
Class: PostgresRoleAssignmentRepository

Responsibilities:
  - Persist the role ledger (`user_roles` table): one row per grant.
  - Rely on the partial unique index uq_user_roles_active_pair to make
    "at most one active grant per (user, role)" hold under concurrency.

Constraints / Notes:
  - A violation of that index is reported as DuplicateActiveAssignmentError
    so the use case answers ALREADY_ASSIGNED, not a generic conflict.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from psycopg.errors import UniqueViolation

from ....domain.entities import RoleAssignment
from ....domain.errors import DomainError, DuplicateActiveAssignmentError
from .base import META_COLUMNS, PostgresRepository, meta_from_row, meta_insert_params

ACTIVE_PAIR_INDEX = "uq_user_roles_active_pair"


class PostgresRoleAssignmentRepository(PostgresRepository):
    resource = "RoleAssignment"
    table = "user_roles"

    _SELECT_COLUMNS = f"""
        id, user_id, role_id, assigned_at, assigned_by, is_active,
        revoked_at, revoked_by, remark, {META_COLUMNS}
    """

    def _row_to_assignment(self, row: tuple) -> RoleAssignment:
        return RoleAssignment(
            id=row[0],
            user_id=row[1],
            role_id=row[2],
            assigned_at=row[3],
            assigned_by=row[4],
            is_active=row[5],
            revoked_at=row[6],
            revoked_by=row[7],
            remark=row[8],
            meta=meta_from_row(row, 9),
        )

    def _unique_violation(self, exc: UniqueViolation, subject: object) -> DomainError:
        if exc.diag.constraint_name == ACTIVE_PAIR_INDEX and isinstance(subject, RoleAssignment):
            return DuplicateActiveAssignmentError(subject.user_id, subject.role_id)
        return super()._unique_violation(exc, subject)

    def add(self, assignment: RoleAssignment) -> None:
        self._execute(
            f"""
                INSERT INTO user_roles (
                    id, user_id, role_id, assigned_at, assigned_by, is_active,
                    revoked_at, revoked_by, remark, {META_COLUMNS}
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s,
                        %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                assignment.id,
                assignment.user_id,
                assignment.role_id,
                assignment.assigned_at,
                assignment.assigned_by,
                assignment.is_active,
                assignment.revoked_at,
                assignment.revoked_by,
                assignment.remark,
                *meta_insert_params(assignment.meta),
            ],
            context_msg="PostgresRoleAssignmentRepository: insert failed",
            extra={"user_id": str(assignment.user_id), "role_id": str(assignment.role_id)},
            subject=assignment,
        )
        assignment.meta.version = 0

    def update(self, assignment: RoleAssignment) -> None:
        self._versioned_update(
            assignment,
            {
                "assigned_at": assignment.assigned_at,
                "assigned_by": assignment.assigned_by,
                "is_active": assignment.is_active,
                "revoked_at": assignment.revoked_at,
                "revoked_by": assignment.revoked_by,
                "remark": assignment.remark,
            },
        )

    def get_active(self, user_id: UUID, role_id: UUID) -> RoleAssignment | None:
        row = self._fetchone(
            f"""
                SELECT {self._SELECT_COLUMNS}
                FROM user_roles
                WHERE user_id = %s AND role_id = %s AND is_active
            """,
            (user_id, role_id),
            context_msg="PostgresRoleAssignmentRepository: get_active failed",
        )
        return self._row_to_assignment(row) if row else None

    def get_latest_inactive(
        self, user_id: UUID, role_id: UUID
    ) -> RoleAssignment | None:
        row = self._fetchone(
            f"""
                SELECT {self._SELECT_COLUMNS}
                FROM user_roles
                WHERE user_id = %s AND role_id = %s AND NOT is_active
                ORDER BY COALESCE(revoked_at, assigned_at) DESC, assigned_at DESC
                LIMIT 1
            """,
            (user_id, role_id),
            context_msg="PostgresRoleAssignmentRepository: get_latest_inactive failed",
        )
        return self._row_to_assignment(row) if row else None

    def list_for_user(
        self, user_id: UUID, *, active_only: bool = True
    ) -> list[RoleAssignment]:
        active_sql = "AND is_active" if active_only else ""
        rows = self._fetchall(
            f"""
                SELECT {self._SELECT_COLUMNS}
                FROM user_roles
                WHERE user_id = %s {active_sql}
                ORDER BY assigned_at ASC
            """,
            (user_id,),
            context_msg="PostgresRoleAssignmentRepository: list_for_user failed",
            extra={"user_id": str(user_id)},
        )
        return [self._row_to_assignment(r) for r in rows]

    def list_active_for_role(
        self, role_id: UUID, *, limit: int, offset: int
    ) -> tuple[list[RoleAssignment], int]:
        rows, total = self._paged(
            select_sql=self._SELECT_COLUMNS,
            where=["role_id = %s", "is_active"],
            params=[role_id],
            order_by="assigned_at ASC, id ASC",
            limit=limit,
            offset=offset,
            context_msg="PostgresRoleAssignmentRepository: list_active_for_role failed",
        )
        return [self._row_to_assignment(r) for r in rows], total
