"""
===============================================================================
TARJETA CRC - routers/users.py
===============================================================================

Responsibilities:
    - Register users (roles granted in the same unit of work).
    - List / search the directory; read a user, the caller's profile and
      active roles.
    - Enable / disable accounts.
    - Grant / revoke / reactivate roles on a user (role ledger).

Collaborators:
    - application.usecases.users / roles
    - identity.auth.hash_password
    - dependencies (principal, permissions, actor)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from clubfunds.application.usecases.roles import (
    AssignRolesUseCase,
    ListActiveRolesUseCase,
    ReactivateRoleUseCase,
    RevokeRoleUseCase,
)
from clubfunds.application.usecases.users import (
    DisableUserUseCase,
    EnableUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    RegisterUserInput,
    RegisterUserUseCase,
)
from clubfunds.container import (
    get_assign_roles_use_case,
    get_disable_user_use_case,
    get_enable_user_use_case,
    get_get_user_use_case,
    get_list_active_roles_use_case,
    get_list_users_use_case,
    get_reactivate_role_use_case,
    get_register_user_use_case,
    get_revoke_role_use_case,
)
from clubfunds.domain.entities import Actor
from clubfunds.identity.auth import hash_password
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission
from fastapi import APIRouter, Depends, Query, status

from ..dependencies import ensure_self_or, get_actor, get_current_principal, require_permission
from ..error_mapping import unwrap
from ..schemas.common import Envelope, PageRes, to_page_res
from ..schemas.roles import (
    AssignRolesReq,
    RoleAssignmentRes,
    RoleRes,
    to_assignment_res,
    to_role_res,
)
from ..schemas.users import RegisterUserReq, UserRes, to_user_res

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=Envelope[UserRes],
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    req: RegisterUserReq,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
    _principal: Principal = Depends(require_permission(Permission.USERS_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(
        RegisterUserInput(
            email=req.email,
            username=req.username,
            password_hash=hash_password(req.password),
            first_name=req.first_name,
            last_name=req.last_name,
            phone_number=req.phone_number,
            role_ids=list(req.role_ids),
        ),
        actor,
    )
    user = unwrap(result)
    return Envelope(message=result.message, data=to_user_res(user))


@router.get("", response_model=Envelope[PageRes[UserRes]])
def list_users(
    search: str | None = Query(None, max_length=100),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    _principal: Principal = Depends(require_permission(Permission.USERS_READ)),
):
    result = use_case.execute(search=search, limit=limit, offset=offset)
    page = unwrap(result)
    return Envelope(
        message=result.message,
        data=PageRes[UserRes](**to_page_res(page, [to_user_res(u) for u in page.items])),
    )


@router.get("/profile", response_model=Envelope[UserRes])
def get_profile(
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
    principal: Principal = Depends(get_current_principal),
):
    result = use_case.execute(principal.user_id)
    return Envelope(message="User profile", data=to_user_res(unwrap(result)))


@router.get("/{user_id}", response_model=Envelope[UserRes])
def get_user(
    user_id: UUID,
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
    principal: Principal = Depends(get_current_principal),
):
    ensure_self_or(principal, user_id, Permission.USERS_READ)
    result = use_case.execute(user_id)
    return Envelope(message=result.message, data=to_user_res(unwrap(result)))


@router.get("/{user_id}/roles", response_model=Envelope[list[RoleRes]])
def list_user_roles(
    user_id: UUID,
    use_case: ListActiveRolesUseCase = Depends(get_list_active_roles_use_case),
    principal: Principal = Depends(get_current_principal),
):
    ensure_self_or(principal, user_id, Permission.USERS_READ)
    result = use_case.execute(user_id)
    roles = unwrap(result)
    return Envelope(message=result.message, data=[to_role_res(r) for r in roles])


@router.post(
    "/{user_id}/roles",
    response_model=Envelope[list[RoleAssignmentRes]],
    status_code=status.HTTP_201_CREATED,
)
def assign_roles(
    user_id: UUID,
    req: AssignRolesReq,
    use_case: AssignRolesUseCase = Depends(get_assign_roles_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(user_id, req.role_ids, actor, remark=req.remark)
    assignments = unwrap(result)
    return Envelope(
        message=result.message, data=[to_assignment_res(a) for a in assignments]
    )


@router.delete("/{user_id}/roles/{role_id}", response_model=Envelope[RoleAssignmentRes])
def revoke_role(
    user_id: UUID,
    role_id: UUID,
    use_case: RevokeRoleUseCase = Depends(get_revoke_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(user_id, role_id, actor)
    return Envelope(message=result.message, data=to_assignment_res(unwrap(result)))


@router.post(
    "/{user_id}/roles/{role_id}/reactivate",
    response_model=Envelope[RoleAssignmentRes],
)
def reactivate_role(
    user_id: UUID,
    role_id: UUID,
    use_case: ReactivateRoleUseCase = Depends(get_reactivate_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(user_id, role_id, actor)
    return Envelope(message=result.message, data=to_assignment_res(unwrap(result)))


@router.post("/{user_id}/enable", response_model=Envelope[UserRes])
def enable_user(
    user_id: UUID,
    use_case: EnableUserUseCase = Depends(get_enable_user_use_case),
    _principal: Principal = Depends(require_permission(Permission.USERS_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(user_id, actor)
    return Envelope(message=result.message, data=to_user_res(unwrap(result)))


@router.post("/{user_id}/disable", response_model=Envelope[UserRes])
def disable_user(
    user_id: UUID,
    use_case: DisableUserUseCase = Depends(get_disable_user_use_case),
    _principal: Principal = Depends(require_permission(Permission.USERS_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(user_id, actor)
    return Envelope(message=result.message, data=to_user_res(unwrap(result)))
