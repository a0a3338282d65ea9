"""
===============================================================================
TARJETA CRC - identity/rbac.py
===============================================================================

Module:
    RBAC: role name -> permissions

Responsibilities:
    - Define the permission catalog (Permission).
    - Map the system roles to permission sets.
    - Resolve the effective permissions of a set of active role names.

Notes:
    - Custom roles carry no permissions unless added to ROLE_PERMISSIONS;
      they are still listed on the principal.
    - The domain does NOT know RBAC: this lives at the boundary.
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Set

from ..domain.entities import SystemRole


class Permission(str, Enum):
    # Identity directory
    USERS_READ = "users:read"
    USERS_MANAGE = "users:manage"
    ROLES_READ = "roles:read"
    ROLES_MANAGE = "roles:manage"

    # Payments
    PAYMENTS_CREATE_OWN = "payments:create_own"
    PAYMENTS_READ_OWN = "payments:read_own"
    PAYMENTS_READ = "payments:read"
    PAYMENTS_MANAGE = "payments:manage"

    # Expenses
    EXPENSES_READ = "expenses:read"
    EXPENSES_MANAGE = "expenses:manage"
    EXPENSES_APPROVE = "expenses:approve"

    # Audit
    AUDIT_READ = "audit:read"

    # Wildcard
    ALL = "*"


ROLE_PERMISSIONS: dict[str, Set[Permission]] = {
    SystemRole.SUPER_ADMIN.value: {Permission.ALL},
    SystemRole.TECH_ADMIN.value: {
        Permission.USERS_READ,
        Permission.USERS_MANAGE,
        Permission.ROLES_READ,
        Permission.ROLES_MANAGE,
        Permission.AUDIT_READ,
    },
    SystemRole.FIN_ADMIN.value: {
        Permission.PAYMENTS_CREATE_OWN,
        Permission.PAYMENTS_READ_OWN,
        Permission.PAYMENTS_READ,
        Permission.PAYMENTS_MANAGE,
        Permission.EXPENSES_READ,
        Permission.EXPENSES_MANAGE,
        Permission.EXPENSES_APPROVE,
        Permission.AUDIT_READ,
    },
    SystemRole.USER.value: {
        Permission.PAYMENTS_CREATE_OWN,
        Permission.PAYMENTS_READ_OWN,
    },
}


def permissions_for_roles(role_names: Iterable[str]) -> frozenset[Permission]:
    permissions: Set[Permission] = set()
    for name in role_names:
        permissions |= ROLE_PERMISSIONS.get(name, set())
    return frozenset(permissions)


def has_permission(granted: Iterable[Permission], required: Permission) -> bool:
    granted_set = set(granted)
    return Permission.ALL in granted_set or required in granted_set
