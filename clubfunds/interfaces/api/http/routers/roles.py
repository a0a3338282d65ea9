"""
===============================================================================
TARJETA CRC - routers/roles.py
===============================================================================

Responsibilities:
    - Role catalog endpoints (create/read/update/activate/deactivate/delete).
    - List the users currently holding a role.

Notes:
    - System roles are protected by the use cases; this router only maps
      their errors (403 PROTECTED_RESOURCE).
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from clubfunds.application.usecases.roles import (
    ActivateRoleUseCase,
    CreateRoleInput,
    CreateRoleUseCase,
    DeactivateRoleUseCase,
    DeleteRoleUseCase,
    GetRoleUseCase,
    ListRolesUseCase,
    ListUsersForRoleUseCase,
    UpdateRoleInput,
    UpdateRoleUseCase,
)
from clubfunds.container import (
    get_activate_role_use_case,
    get_create_role_use_case,
    get_deactivate_role_use_case,
    get_delete_role_use_case,
    get_get_role_use_case,
    get_list_roles_use_case,
    get_list_users_for_role_use_case,
    get_update_role_use_case,
)
from clubfunds.domain.entities import Actor
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission
from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_actor, require_permission
from ..error_mapping import unwrap
from ..schemas.common import Envelope, PageRes, to_page_res
from ..schemas.roles import (
    CreateRoleReq,
    RoleMemberRes,
    RoleRes,
    UpdateRoleReq,
    to_assignment_res,
    to_role_res,
)
from ..schemas.users import to_user_res

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=Envelope[PageRes[RoleRes]])
def list_roles(
    include_inactive: bool = Query(False),
    search: str | None = Query(None, max_length=100),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    use_case: ListRolesUseCase = Depends(get_list_roles_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_READ)),
):
    result = use_case.execute(
        include_inactive=include_inactive, search=search, limit=limit, offset=offset
    )
    page = unwrap(result)
    return Envelope(
        message=result.message,
        data=PageRes[RoleRes](**to_page_res(page, [to_role_res(r) for r in page.items])),
    )


@router.post("", response_model=Envelope[RoleRes], status_code=status.HTTP_201_CREATED)
def create_role(
    req: CreateRoleReq,
    use_case: CreateRoleUseCase = Depends(get_create_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(
        CreateRoleInput(
            name=req.name,
            display_name=req.display_name,
            description=req.description,
            is_active=req.is_active,
        ),
        actor,
    )
    return Envelope(message=result.message, data=to_role_res(unwrap(result)))


@router.get("/{role_id}", response_model=Envelope[RoleRes])
def get_role(
    role_id: UUID,
    use_case: GetRoleUseCase = Depends(get_get_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_READ)),
):
    result = use_case.execute(role_id)
    return Envelope(message=result.message, data=to_role_res(unwrap(result)))


@router.patch("/{role_id}", response_model=Envelope[RoleRes])
def update_role(
    role_id: UUID,
    req: UpdateRoleReq,
    use_case: UpdateRoleUseCase = Depends(get_update_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(
        role_id,
        UpdateRoleInput(display_name=req.display_name, description=req.description),
        actor,
    )
    return Envelope(message=result.message, data=to_role_res(unwrap(result)))


@router.delete("/{role_id}", response_model=Envelope[RoleRes])
def delete_role(
    role_id: UUID,
    use_case: DeleteRoleUseCase = Depends(get_delete_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(role_id, actor)
    return Envelope(message=result.message, data=to_role_res(unwrap(result)))


@router.post("/{role_id}/activate", response_model=Envelope[RoleRes])
def activate_role(
    role_id: UUID,
    use_case: ActivateRoleUseCase = Depends(get_activate_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(role_id, actor)
    return Envelope(message=result.message, data=to_role_res(unwrap(result)))


@router.post("/{role_id}/deactivate", response_model=Envelope[RoleRes])
def deactivate_role(
    role_id: UUID,
    use_case: DeactivateRoleUseCase = Depends(get_deactivate_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.ROLES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(role_id, actor)
    return Envelope(message=result.message, data=to_role_res(unwrap(result)))


@router.get("/{role_id}/users", response_model=Envelope[PageRes[RoleMemberRes]])
def list_role_users(
    role_id: UUID,
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    use_case: ListUsersForRoleUseCase = Depends(get_list_users_for_role_use_case),
    _principal: Principal = Depends(require_permission(Permission.USERS_READ)),
):
    result = use_case.execute(role_id, limit=limit, offset=offset)
    page = unwrap(result)
    members = [
        RoleMemberRes(user=to_user_res(m.user), assignment=to_assignment_res(m.assignment))
        for m in page.items
    ]
    return Envelope(
        message=result.message,
        data=PageRes[RoleMemberRes](**to_page_res(page, members)),
    )
