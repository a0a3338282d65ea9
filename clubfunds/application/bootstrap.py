# =============================================================================
# FILE: application/bootstrap.py
# =============================================================================
"""
===============================================================================
TASK: Bootstrap seeding (system roles + optional super administrator)
===============================================================================

What it is:
    Ensures the four system roles exist and, when configured, a super
    administrator holding SUPER_ADMIN.

Patterns:
    - Task orchestration (seed)
    - Idempotence: existing roles/users are left untouched
    - Same operations as any other caller (CreateRole / RegisterUser);
      no special code path inside the core

CRC:
    Component: SystemBootstrapper
    Responsibilities:
      - Create missing system roles (system_role=True)
      - Register the admin user with SUPER_ADMIN when enabled
    Collaborators:
      - CreateRoleUseCase, RegisterUserUseCase
      - UnitOfWorkFactory (existence checks)
      - password hasher (identity)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..crosscutting.exceptions import ConfigurationError
from ..crosscutting.logger import logger
from ..domain.entities import SYSTEM_ROLE_DISPLAY_NAMES, Actor, SystemRole
from ..domain.repositories import UnitOfWorkFactory
from .usecases.roles.manage_role import CreateRoleInput, CreateRoleUseCase
from .usecases.users.register_user import RegisterUserInput, RegisterUserUseCase


@dataclass(frozen=True, slots=True)
class AdminSeed:
    email: str
    username: str
    password: str


class SystemBootstrapper:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        create_role: CreateRoleUseCase,
        register_user: RegisterUserUseCase,
        hash_password: Callable[[str], str],
    ) -> None:
        self._uow_factory = uow_factory
        self._create_role = create_role
        self._register_user = register_user
        self._hash_password = hash_password

    def seed_system_roles(self) -> list[str]:
        """Create missing system roles; returns the names that were created."""
        created: list[str] = []
        for system_role in SystemRole:
            with self._uow_factory() as uow:
                if uow.roles.get_by_name(system_role.value) is not None:
                    continue

            result = self._create_role.execute(
                CreateRoleInput(
                    name=system_role.value,
                    display_name=SYSTEM_ROLE_DISPLAY_NAMES[system_role],
                    description=f"System role: {SYSTEM_ROLE_DISPLAY_NAMES[system_role]}",
                ),
                Actor.system(),
                system_role=True,
            )
            if not result.success:
                raise ConfigurationError(
                    f"Could not seed system role {system_role.value}: {result.message}"
                )
            created.append(system_role.value)

        if created:
            logger.info("System roles seeded", extra={"roles": created})
        return created

    def seed_admin(self, admin: AdminSeed) -> bool:
        """Register the super administrator once; returns True if created."""
        email = admin.email.strip().lower()
        with self._uow_factory() as uow:
            if uow.users.get_by_email(email) is not None:
                return False
            super_admin = uow.roles.get_by_name(SystemRole.SUPER_ADMIN.value)

        if super_admin is None:
            raise ConfigurationError("SUPER_ADMIN role must be seeded before the admin user")

        result = self._register_user.execute(
            RegisterUserInput(
                email=email,
                username=admin.username,
                password_hash=self._hash_password(admin.password),
                first_name="Super",
                last_name="Administrator",
                role_ids=[super_admin.id],
            ),
            Actor.system(),
        )
        if not result.success:
            raise ConfigurationError(f"Could not seed admin user: {result.message}")

        logger.info("Admin user seeded", extra={"email": email})
        return True
