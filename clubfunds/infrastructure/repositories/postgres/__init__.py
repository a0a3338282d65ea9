"""PostgreSQL implementations of the domain repositories (psycopg 3, raw SQL)."""

from .audit_entries import PostgresAuditEntryRepository
from .expenses import PostgresExpenseRepository
from .payments import PostgresPaymentRepository
from .role_assignments import ACTIVE_PAIR_INDEX, PostgresRoleAssignmentRepository
from .roles import PostgresRoleRepository
from .unit_of_work import PostgresUnitOfWork, PostgresUnitOfWorkFactory
from .users import PostgresUserRepository

__all__ = [
    "ACTIVE_PAIR_INDEX",
    "PostgresAuditEntryRepository",
    "PostgresExpenseRepository",
    "PostgresPaymentRepository",
    "PostgresRoleAssignmentRepository",
    "PostgresRoleRepository",
    "PostgresUnitOfWork",
    "PostgresUnitOfWorkFactory",
    "PostgresUserRepository",
]
