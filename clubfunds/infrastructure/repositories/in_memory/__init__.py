"""
In-memory store (tests / local runs).

Exports the unit of work and the repositories it binds to a working copy.
"""

from .repositories import (
    InMemoryAuditEntryRepository,
    InMemoryExpenseRepository,
    InMemoryPaymentRepository,
    InMemoryRoleAssignmentRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)
from .store import InMemoryDatabase, InMemoryUnitOfWork, InMemoryUnitOfWorkFactory
from .tables import Tables

__all__ = [
    "InMemoryAuditEntryRepository",
    "InMemoryDatabase",
    "InMemoryExpenseRepository",
    "InMemoryPaymentRepository",
    "InMemoryRoleAssignmentRepository",
    "InMemoryRoleRepository",
    "InMemoryUnitOfWork",
    "InMemoryUnitOfWorkFactory",
    "InMemoryUserRepository",
    "Tables",
]
