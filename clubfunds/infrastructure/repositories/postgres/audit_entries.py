"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/audit_entries.py
============================================================
Class: PostgresAuditEntryRepository

Responsibilities:
  - Append-only writes to `audit_trails`.
  - Filtered reads, newest first.

Constraints / Notes:
  - audit_scope() wraps the actor lookup and the insert in one SAVEPOINT:
    a failure rolls back to it and re-raises, leaving the caller's
    transaction usable.
============================================================
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator
from uuid import UUID

from ....domain.audit import AuditEntry
from .base import PostgresRepository


class PostgresAuditEntryRepository(PostgresRepository):
    resource = "AuditEntry"
    table = "audit_trails"

    _SELECT_COLUMNS = """
        id, actor_user_id, action, module, description, created_at,
        actor_email, ip_address, user_agent
    """

    def _row_to_entry(self, row: tuple) -> AuditEntry:
        return AuditEntry(
            id=row[0],
            actor_user_id=row[1],
            action=row[2],
            module=row[3],
            description=row[4],
            created_at=row[5],
            actor_email=row[6],
            ip_address=row[7],
            user_agent=row[8],
        )

    @contextmanager
    def audit_scope(self) -> Iterator[None]:
        self._conn.execute("SAVEPOINT audit_scope")
        try:
            yield
        except Exception:
            self._conn.execute("ROLLBACK TO SAVEPOINT audit_scope")
            raise
        self._conn.execute("RELEASE SAVEPOINT audit_scope")

    def append(self, entry: AuditEntry) -> None:
        self._execute(
            """
                INSERT INTO audit_trails (
                    id, actor_user_id, action, module, description,
                    created_at, actor_email, ip_address, user_agent
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                entry.id,
                entry.actor_user_id,
                entry.action,
                entry.module,
                entry.description,
                entry.created_at,
                entry.actor_email,
                entry.ip_address,
                entry.user_agent,
            ],
            context_msg="PostgresAuditEntryRepository: append failed",
            extra={"audit_action": entry.action, "audit_module": entry.module},
        )

    def list_entries(
        self,
        *,
        user_id: UUID | None = None,
        module: str | None = None,
        action: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditEntry], int]:
        where: list[str] = []
        params: list[object] = []
        if user_id is not None:
            where.append("actor_user_id = %s")
            params.append(user_id)
        if module is not None:
            where.append("module = %s")
            params.append(module)
        if action is not None:
            where.append("action = %s")
            params.append(action)

        rows, total = self._paged(
            select_sql=self._SELECT_COLUMNS,
            where=where,
            params=params,
            order_by="created_at DESC, id DESC",
            limit=limit,
            offset=offset,
            context_msg="PostgresAuditEntryRepository: list_entries failed",
        )
        return [self._row_to_entry(r) for r in rows], total
