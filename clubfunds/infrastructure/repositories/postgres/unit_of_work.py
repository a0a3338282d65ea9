"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/unit_of_work.py
============================================================
Class: PostgresUnitOfWork / PostgresUnitOfWorkFactory

Responsibilities:
  - Borrow one pooled connection per unit of work and run every repository
    on it inside a single transaction.
  - commit() commits; leaving the block without commit rolls back.
  - Always return the connection to the pool.

Collaborators:
  - psycopg_pool.ConnectionPool
  - postgres repositories
============================================================
"""

from __future__ import annotations

from typing import Callable, Optional

from psycopg import Connection, Error as PsycopgError
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from .audit_entries import PostgresAuditEntryRepository
from .expenses import PostgresExpenseRepository
from .payments import PostgresPaymentRepository
from .role_assignments import PostgresRoleAssignmentRepository
from .roles import PostgresRoleRepository
from .users import PostgresUserRepository


class PostgresUnitOfWork:
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool
        self._conn: Optional[Connection] = None

    def __enter__(self) -> "PostgresUnitOfWork":
        try:
            conn = self._pool.getconn()
        except Exception as exc:
            logger.exception("PostgresUnitOfWork: could not acquire connection")
            raise DatabaseError(f"Could not acquire connection: {exc}", original_error=exc) from exc

        conn.autocommit = False
        self._conn = conn
        self.users = PostgresUserRepository(conn)
        self.roles = PostgresRoleRepository(conn)
        self.assignments = PostgresRoleAssignmentRepository(conn)
        self.payments = PostgresPaymentRepository(conn)
        self.expenses = PostgresExpenseRepository(conn)
        self.audit = PostgresAuditEntryRepository(conn)
        return self

    def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("Unit of work is not active")
        try:
            self._conn.commit()
        except PsycopgError as exc:
            logger.exception("PostgresUnitOfWork: commit failed")
            raise DatabaseError(f"Commit failed: {exc}", original_error=exc) from exc

    def __exit__(self, exc_type, exc, tb) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            # Read-only blocks and failures both end here; rollback is a no-op
            # after a successful commit.
            conn.rollback()
        except PsycopgError:
            logger.warning("PostgresUnitOfWork: rollback failed", exc_info=True)
        finally:
            self._pool.putconn(conn)


class PostgresUnitOfWorkFactory:
    """Opens units of work over the process pool (resolved lazily)."""

    def __init__(self, pool_provider: Callable[[], ConnectionPool]) -> None:
        self._pool_provider = pool_provider

    def __call__(self) -> PostgresUnitOfWork:
        return PostgresUnitOfWork(self._pool_provider())
