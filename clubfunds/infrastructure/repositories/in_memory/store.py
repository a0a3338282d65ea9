"""
============================================================
CRC CARD - infrastructure/repositories/in_memory/store.py
============================================================
Class: InMemoryDatabase / InMemoryUnitOfWork

Responsibilities:
  - Hold every table in process memory (tests / local dev).
  - Give each unit of work a private working copy of the tables and publish
    it atomically on commit; leaving without commit discards it.
  - Serialize units of work with one lock, which makes check-then-insert
    sequences (single active grant, unique keys) race-free.

Collaborators:
  - domain.repositories.UnitOfWork (contract)
  - in_memory repositories (operate on the working copy)

Constraints / Notes:
  - Copy-on-begin is O(size of the store): fine for tests and local runs.
  - Units of work must not be nested in the same thread.
============================================================
"""

from __future__ import annotations

import copy
import threading

from .repositories import (
    InMemoryAuditEntryRepository,
    InMemoryExpenseRepository,
    InMemoryPaymentRepository,
    InMemoryRoleAssignmentRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)
from .tables import Tables


class InMemoryDatabase:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables = Tables()

    def begin(self) -> Tables:
        self._lock.acquire()
        return copy.deepcopy(self._tables)

    def publish(self, tables: Tables) -> None:
        self._tables = tables

    def end(self) -> None:
        self._lock.release()

    def snapshot(self) -> Tables:
        """Deep copy of the committed state (assertions in tests)."""
        with self._lock:
            return copy.deepcopy(self._tables)

    def reset(self) -> None:
        with self._lock:
            self._tables = Tables()


class InMemoryUnitOfWork:
    def __init__(self, database: InMemoryDatabase) -> None:
        self._database = database
        self._tables: Tables | None = None

    def __enter__(self) -> "InMemoryUnitOfWork":
        self._tables = self._database.begin()
        self.users = InMemoryUserRepository(self._tables)
        self.roles = InMemoryRoleRepository(self._tables)
        self.assignments = InMemoryRoleAssignmentRepository(self._tables)
        self.payments = InMemoryPaymentRepository(self._tables)
        self.expenses = InMemoryExpenseRepository(self._tables)
        self.audit = InMemoryAuditEntryRepository(self._tables)
        return self

    def commit(self) -> None:
        if self._tables is None:
            raise RuntimeError("Unit of work is not active")
        self._database.publish(self._tables)
        # Later writes in the same block must not leak into the published state.
        self._tables = copy.deepcopy(self._tables)
        self._rebind()

    def _rebind(self) -> None:
        for repo in (
            self.users,
            self.roles,
            self.assignments,
            self.payments,
            self.expenses,
            self.audit,
        ):
            repo.bind(self._tables)

    def __exit__(self, exc_type, exc, tb) -> None:
        self._tables = None
        self._database.end()


class InMemoryUnitOfWorkFactory:
    """Callable that opens units of work over one shared InMemoryDatabase."""

    def __init__(self, database: InMemoryDatabase | None = None) -> None:
        self.database = database or InMemoryDatabase()

    def __call__(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self.database)
