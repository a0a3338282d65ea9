"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/base.py
============================================================
Class: PostgresRepository

Responsibilities:
  - Run parameterized SQL on the unit of work connection.
  - Translate unique violations into domain errors, everything else into
    DatabaseError with structured logging.
  - Map the shared audit columns to and from AuditedRecord.
  - Implement the optimistic version check used by every update().

Constraints / Notes:
  - Never commits: the unit of work owns the transaction.
  - SQL fragments are built only from class constants, never from input.
============================================================
"""

from __future__ import annotations

from typing import Iterable

from psycopg import Connection, Error as PsycopgError
from psycopg.errors import UniqueViolation

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import AuditedRecord
from ....domain.errors import ConcurrentModificationError, DomainError, DuplicateKeyError

META_COLUMNS = (
    "created_at, updated_at, created_by, updated_by, version, "
    "is_deleted, deleted_at, deleted_by"
)
META_WIDTH = 8


def meta_from_row(row: tuple, start: int) -> AuditedRecord:
    (
        created_at,
        updated_at,
        created_by,
        updated_by,
        version,
        is_deleted,
        deleted_at,
        deleted_by,
    ) = row[start : start + META_WIDTH]
    return AuditedRecord(
        created_at=created_at,
        updated_at=updated_at,
        created_by=created_by,
        updated_by=updated_by,
        version=version,
        is_deleted=is_deleted,
        deleted_at=deleted_at,
        deleted_by=deleted_by,
    )


def meta_insert_params(meta: AuditedRecord) -> tuple:
    """Values for META_COLUMNS on insert (version always starts at 0)."""
    return (
        meta.created_at,
        meta.updated_at,
        meta.created_by,
        meta.updated_by,
        0,
        meta.is_deleted,
        meta.deleted_at,
        meta.deleted_by,
    )


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresRepository:
    """R: Shared execution helpers bound to one transaction connection."""

    resource: str = ""
    table: str = ""

    # constraint name -> key reported in DuplicateKeyError
    _UNIQUE_KEYS: dict[str, str] = {}

    def __init__(self, conn: Connection):
        self._conn = conn

    # =========================================================
    # Execution
    # =========================================================
    def _execute(
        self,
        query: str,
        params: Iterable[object],
        *,
        context_msg: str,
        extra: dict | None = None,
        subject: object = None,
    ):
        try:
            return self._conn.execute(query, tuple(params))
        except UniqueViolation as exc:
            raise self._unique_violation(exc, subject) from exc
        except PsycopgError as exc:
            logger.exception(context_msg, extra={**(extra or {}), "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchone(
        self, query: str, params: Iterable[object], *, context_msg: str, extra: dict | None = None
    ) -> tuple | None:
        return self._execute(query, params, context_msg=context_msg, extra=extra).fetchone()

    def _fetchall(
        self, query: str, params: Iterable[object], *, context_msg: str, extra: dict | None = None
    ) -> list[tuple]:
        return self._execute(query, params, context_msg=context_msg, extra=extra).fetchall()

    def _unique_violation(self, exc: UniqueViolation, subject: object) -> DomainError:
        constraint = exc.diag.constraint_name or ""
        key = self._UNIQUE_KEYS.get(constraint, constraint or "key")
        value = getattr(subject, key, None) if subject is not None else None
        return DuplicateKeyError(self.resource, key, value)

    # =========================================================
    # Optimistic concurrency
    # =========================================================
    def _versioned_update(self, entity, assignments: dict[str, object]) -> None:
        """
        UPDATE guarded by the version the entity was read at.

        Zero affected rows means someone else wrote first.
        """
        meta = entity.meta
        fields = {
            **assignments,
            "updated_at": meta.updated_at,
            "updated_by": meta.updated_by,
            "is_deleted": meta.is_deleted,
            "deleted_at": meta.deleted_at,
            "deleted_by": meta.deleted_by,
        }
        set_sql = ", ".join(f"{column} = %s" for column in fields)
        cursor = self._execute(
            f"""
                UPDATE {self.table}
                SET {set_sql}, version = version + 1
                WHERE id = %s AND version = %s
            """,
            [*fields.values(), entity.id, meta.version],
            context_msg=f"{type(self).__name__}: update failed",
            extra={"id": str(entity.id)},
            subject=entity,
        )
        if cursor.rowcount == 0:
            raise ConcurrentModificationError(self.resource, entity.id, meta.version)
        meta.version += 1

    def _paged(
        self,
        *,
        select_sql: str,
        where: list[str],
        params: list[object],
        order_by: str,
        limit: int,
        offset: int,
        context_msg: str,
    ) -> tuple[list[tuple], int]:
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        total_row = self._fetchone(
            f"SELECT COUNT(*) FROM {self.table} {where_sql}",
            params,
            context_msg=context_msg,
        )
        rows = self._fetchall(
            f"""
                SELECT {select_sql}
                FROM {self.table}
                {where_sql}
                ORDER BY {order_by}
                LIMIT %s OFFSET %s
            """,
            [*params, limit, offset],
            context_msg=context_msg,
        )
        return rows, int(total_row[0]) if total_row else 0
