from .assign_role import AssignRolesUseCase, AssignRoleUseCase, assign_within
from .list_role_grants import ListActiveRolesUseCase, ListUsersForRoleUseCase, RoleMember
from .manage_role import (
    ActivateRoleUseCase,
    CreateRoleInput,
    CreateRoleUseCase,
    DeactivateRoleUseCase,
    DeleteRoleUseCase,
    GetRoleUseCase,
    ListRolesUseCase,
    UpdateRoleInput,
    UpdateRoleUseCase,
)
from .reactivate_role import ReactivateRoleUseCase
from .revoke_role import RevokeRoleUseCase

__all__ = [
    "ActivateRoleUseCase",
    "AssignRoleUseCase",
    "AssignRolesUseCase",
    "CreateRoleInput",
    "CreateRoleUseCase",
    "DeactivateRoleUseCase",
    "DeleteRoleUseCase",
    "GetRoleUseCase",
    "ListActiveRolesUseCase",
    "ListRolesUseCase",
    "ListUsersForRoleUseCase",
    "ReactivateRoleUseCase",
    "RevokeRoleUseCase",
    "RoleMember",
    "UpdateRoleInput",
    "UpdateRoleUseCase",
    "assign_within",
]
