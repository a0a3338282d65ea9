"""
===============================================================================
TARJETA CRC - dependencies.py (Auth + actor dependencies)
===============================================================================

Responsibilities:
  - Resolve the JWT principal once per request: token -> user -> active
    roles -> permissions.
  - Enforce permissions at the HTTP edge (require_permission).
  - Build the domain Actor threaded into every use case.

Patterns:
  - FastAPI dependency caching: get_current_principal runs once per request
    even when several dependencies need it.
  - Fail-fast: missing/invalid token -> 401, disabled user -> 403.

Collaborators:
  - identity.auth (token decoding)
  - identity.rbac / identity.principal
  - identity.actor_resolver.CurrentActorResolver
  - container (GetUser / ListActiveRoles use cases)
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from clubfunds.application.usecases.roles import ListActiveRolesUseCase
from clubfunds.application.usecases.users import GetUserUseCase
from clubfunds.container import (
    get_actor_resolver,
    get_get_user_use_case,
    get_list_active_roles_use_case,
)
from clubfunds.context import set_actor_context
from clubfunds.crosscutting.error_responses import forbidden, unauthorized
from clubfunds.domain.entities import Actor
from clubfunds.identity.actor_resolver import CurrentActorResolver
from clubfunds.identity.auth import decode_access_token, extract_bearer_token
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission, permissions_for_roles
from fastapi import Depends, Header, Request


def get_current_principal(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
    get_user: GetUserUseCase = Depends(get_get_user_use_case),
    list_active_roles: ListActiveRolesUseCase = Depends(get_list_active_roles_use_case),
) -> Principal:
    token = extract_bearer_token(authorization)
    if not token:
        raise unauthorized("Missing bearer token.")

    payload = decode_access_token(token)

    result = get_user.execute(payload.user_id)
    if not result.success or result.payload is None:
        raise unauthorized("Invalid token.")
    user = result.payload
    if not user.is_enabled:
        raise forbidden("Account is disabled.")

    roles_result = list_active_roles.execute(user.id)
    role_names = frozenset(role.name for role in (roles_result.payload or []))

    principal = Principal(
        user_id=user.id,
        email=user.email,
        roles=role_names,
        permissions=permissions_for_roles(role_names),
    )
    request.state.principal = principal
    set_actor_context(principal.email)
    return principal


def require_permission(permission: Permission) -> Callable:
    """Dependency: authenticated principal holding `permission`."""

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(permission):
            raise forbidden(f"Missing permission: {permission.value}")
        return principal

    return dependency


def get_actor(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    resolver: CurrentActorResolver = Depends(get_actor_resolver),
) -> Actor:
    return resolver.resolve(request, principal)


def ensure_self_or(principal: Principal, owner_id, permission: Permission) -> None:
    """Owners may act on their own data; everyone else needs `permission`."""
    if principal.user_id != owner_id and not principal.can(permission):
        raise forbidden(f"Missing permission: {permission.value}")
