"""
===============================================================================
CRC CARD - domain/audit.py
===============================================================================

Module:
    Audit Trail Models (Domain)

Responsibilities:
    - Define the immutable AuditEntry fact.
    - Centralize action codes and module tags so writers and readers agree.

Collaborators:
    - domain.repositories.AuditEntryRepository: appends and lists entries.
    - application.audit_trail: builds and appends entries (best-effort).
    - infra repositories: map to/from the audit_trails table.

Notes:
    - Append-only: the core never updates or deletes an entry.
    - Used for traceability, never for authorization decisions.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class AuditModule(str, Enum):
    ROLES = "ROLES"
    USERS = "USERS"
    AUTH = "AUTH"
    PAYMENTS = "PAYMENTS"
    EXPENSES = "EXPENSES"


class AuditAction(str, Enum):
    # Role ledger
    ROLE_ASSIGNED = "ROLE_ASSIGNED"
    ROLE_REVOKED = "ROLE_REVOKED"
    ROLE_REACTIVATED = "ROLE_REACTIVATED"
    # Role catalog
    ROLE_CREATED = "ROLE_CREATED"
    ROLE_UPDATED = "ROLE_UPDATED"
    ROLE_ACTIVATED = "ROLE_ACTIVATED"
    ROLE_DEACTIVATED = "ROLE_DEACTIVATED"
    ROLE_DELETED = "ROLE_DELETED"
    # Users
    USER_REGISTERED = "USER_REGISTERED"
    USER_ENABLED = "USER_ENABLED"
    USER_DISABLED = "USER_DISABLED"
    # Auth
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    # Payments
    PAYMENT_CREATED = "PAYMENT_CREATED"
    PAYMENT_VERIFIED = "PAYMENT_VERIFIED"
    PAYMENT_REJECTED = "PAYMENT_REJECTED"
    PAYMENT_CANCELLED = "PAYMENT_CANCELLED"
    # Expenses
    EXPENSE_CREATED = "EXPENSE_CREATED"
    EXPENSE_UPDATED = "EXPENSE_UPDATED"
    EXPENSE_DELETED = "EXPENSE_DELETED"
    EXPENSE_APPROVED = "EXPENSE_APPROVED"


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """One immutable fact: who did what, when."""

    id: UUID
    actor_user_id: UUID
    action: str
    module: str
    description: str
    created_at: datetime
    actor_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
