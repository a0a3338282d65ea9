"""
Name: Domain Entities

Responsibilities:
  - Define the core data structures of the club finance domain
  - Embed an AuditedRecord by value in every mutable aggregate
  - Provide small helpers that operate on the embedded record

Collaborators:
  - domain.repositories: persistence ports for these entities
  - domain.payment_machine / expense_machine / role_ledger: guarded transitions
  - application.usecases: orchestrate entities through the unit of work

Constraints:
  - Pure Python dataclasses, no framework imports
  - Timestamps are timezone-aware (UTC)

Notes:
  - AuditedRecord is composition, not inheritance; use touch()/mark_deleted()
  - Users do not hold their role assignments; the ledger loads them on demand
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from uuid import UUID


SYSTEM_ACTOR_NAME = "SYSTEM"


@dataclass
class AuditedRecord:
    """
    R: Row metadata shared by every mutable aggregate.

    version is owned by the store: it starts at 0 and is incremented on
    every successful write.
    """

    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None
    version: int = 0
    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_by: str | None = None


def new_record(actor_name: str, now: datetime) -> AuditedRecord:
    """Metadata for a freshly created row."""
    return AuditedRecord(
        created_at=now,
        updated_at=now,
        created_by=actor_name,
        updated_by=actor_name,
    )


def touch(record: AuditedRecord, actor_name: str, now: datetime) -> None:
    record.updated_at = now
    record.updated_by = actor_name


def mark_deleted(record: AuditedRecord, actor_name: str, now: datetime) -> None:
    record.is_deleted = True
    record.deleted_at = now
    record.deleted_by = actor_name
    touch(record, actor_name, now)


@dataclass(frozen=True, slots=True)
class Actor:
    """
    R: Acting identity threaded explicitly through every public operation.

    name is the value stamped into *_by columns (email or "SYSTEM").
    """

    name: str
    user_id: UUID | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    @classmethod
    def system(cls) -> "Actor":
        return cls(name=SYSTEM_ACTOR_NAME)


# -----------------------------------------------------------------------------
# Identity directory
# -----------------------------------------------------------------------------


@dataclass
class User:
    id: UUID
    email: str
    username: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    phone_number: str | None = None
    is_enabled: bool = True
    is_locked: bool = False
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    last_login_ip: str | None = None
    meta: AuditedRecord = field(default_factory=AuditedRecord)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_locked_at(self, now: datetime) -> bool:
        """A lock whose expiry has passed no longer counts."""
        if not self.is_locked:
            return False
        return self.locked_until is None or self.locked_until > now

    def lift_expired_lock(self, now: datetime) -> bool:
        if self.is_locked and not self.is_locked_at(now):
            self.is_locked = False
            self.locked_until = None
            self.failed_login_attempts = 0
            return True
        return False

    def register_failed_login(
        self, now: datetime, *, max_attempts: int, lock_minutes: int
    ) -> None:
        self.failed_login_attempts += 1
        if self.failed_login_attempts >= max_attempts:
            self.is_locked = True
            self.locked_until = now + timedelta(minutes=lock_minutes)

    def register_successful_login(self, now: datetime, ip_address: str | None) -> None:
        self.failed_login_attempts = 0
        self.is_locked = False
        self.locked_until = None
        self.last_login_at = now
        self.last_login_ip = ip_address


class SystemRole(str, Enum):
    """Seed roles created at bootstrap; protected from deactivation/deletion."""

    SUPER_ADMIN = "SUPER_ADMIN"
    TECH_ADMIN = "TECH_ADMIN"
    FIN_ADMIN = "FIN_ADMIN"
    USER = "USER"


SYSTEM_ROLE_DISPLAY_NAMES: dict[SystemRole, str] = {
    SystemRole.SUPER_ADMIN: "Super Administrator",
    SystemRole.TECH_ADMIN: "Technical Administrator",
    SystemRole.FIN_ADMIN: "Financial Administrator",
    SystemRole.USER: "Regular User",
}


@dataclass
class Role:
    id: UUID
    name: str
    display_name: str
    description: str | None = None
    is_active: bool = True
    is_system_role: bool = False
    code: str | None = None
    meta: AuditedRecord = field(default_factory=AuditedRecord)

    def __post_init__(self) -> None:
        if not self.code:
            self.code = f"ROLE_{self.name}"


@dataclass
class RoleAssignment:
    """One ledger row: a grant of role_id to user_id, possibly revoked."""

    id: UUID
    user_id: UUID
    role_id: UUID
    assigned_at: datetime
    assigned_by: str
    is_active: bool = True
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    remark: str | None = None
    meta: AuditedRecord = field(default_factory=AuditedRecord)


# -----------------------------------------------------------------------------
# Finance
# -----------------------------------------------------------------------------


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


@dataclass
class Payment:
    id: UUID
    user_id: UUID
    amount: Decimal
    reference: str
    payment_date: datetime
    status: PaymentStatus = PaymentStatus.PENDING
    is_verified: bool = False
    bank_name: str | None = None
    account_number: str | None = None
    description: str | None = None
    proof_of_payment_url: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    verification_remarks: str | None = None
    meta: AuditedRecord = field(default_factory=AuditedRecord)


class ExpenseCategory(str, Enum):
    EVENTS = "EVENTS"
    WELFARE = "WELFARE"
    ADMINISTRATION = "ADMINISTRATION"
    UTILITIES = "UTILITIES"
    MAINTENANCE = "MAINTENANCE"
    TRANSPORT = "TRANSPORT"
    DONATION = "DONATION"
    OTHER = "OTHER"


@dataclass
class Expense:
    id: UUID
    title: str
    amount: Decimal
    category: ExpenseCategory
    expense_date: datetime
    description: str | None = None
    vendor: str | None = None
    receipt_number: str | None = None
    receipt_url: str | None = None
    is_approved: bool = False
    approved_at: datetime | None = None
    approved_by: str | None = None
    approved_by_user_id: UUID | None = None
    approval_remarks: str | None = None
    meta: AuditedRecord = field(default_factory=AuditedRecord)


@dataclass(frozen=True)
class Page:
    """A slice of a listing plus the unpaginated total."""

    items: list
    total: int
    limit: int
    offset: int

    @property
    def next_offset(self) -> int | None:
        nxt = self.offset + len(self.items)
        return nxt if nxt < self.total else None
