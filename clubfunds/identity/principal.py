"""
Name: Authenticated principal

Responsibilities:
  - Carry the caller identity resolved from the JWT plus the active role
    names and effective permissions computed from the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from .rbac import Permission, has_permission


@dataclass(frozen=True, slots=True)
class Principal:
    user_id: UUID
    email: str
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[Permission] = field(default_factory=frozenset)

    def can(self, permission: Permission) -> bool:
        return has_permission(self.permissions, permission)
