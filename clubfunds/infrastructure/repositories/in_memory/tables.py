"""In-memory table set shared by the in-memory repositories."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from ....domain.audit import AuditEntry
from ....domain.entities import Expense, Payment, Role, RoleAssignment, User


@dataclass
class Tables:
    users: dict[UUID, User] = field(default_factory=dict)
    roles: dict[UUID, Role] = field(default_factory=dict)
    assignments: dict[UUID, RoleAssignment] = field(default_factory=dict)
    payments: dict[UUID, Payment] = field(default_factory=dict)
    expenses: dict[UUID, Expense] = field(default_factory=dict)
    audit: list[AuditEntry] = field(default_factory=list)
