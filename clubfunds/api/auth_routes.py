"""
===============================================================================
TARJETA CRC - clubfunds/api/auth_routes.py (authentication)
===============================================================================

Responsibilities:
  - POST /auth/login: check credentials (with lockout) and issue a JWT.
  - GET /auth/me: the caller, its active roles and effective permissions.
  - POST /auth/change-password: replace the caller's password.

Patterns:
  - Adapter / Presentation Layer: HTTP <-> use case.
  - Fail-safe security: any authentication failure denies by default.

Collaborators:
  - application.usecases.users.AuthenticateUserUseCase
  - identity.auth.create_access_token
  - interfaces.api.http.dependencies.get_current_principal
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..application.usecases.users import (
    AuthenticateUserUseCase,
    AuthErrorCode,
    ChangePasswordInput,
    ChangePasswordUseCase,
    GetUserUseCase,
)
from ..container import (
    get_authenticate_user_use_case,
    get_change_password_use_case,
    get_get_user_use_case,
)
from ..crosscutting.error_responses import (
    OPENAPI_ERROR_RESPONSES,
    account_locked,
    concurrent_modification,
    forbidden,
    unauthorized,
)
from ..domain.entities import Actor
from ..identity.auth import create_access_token, hash_password
from ..identity.principal import Principal
from ..interfaces.api.http.dependencies import get_actor, get_current_principal
from ..interfaces.api.http.error_mapping import unwrap
from ..interfaces.api.http.schemas.common import Envelope
from ..interfaces.api.http.schemas.users import (
    ChangePasswordReq,
    LoginReq,
    LoginRes,
    MeRes,
    UserRes,
    to_user_res,
)

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

_AUTH_ERRORS = {
    AuthErrorCode.INVALID_CREDENTIALS: unauthorized,
    AuthErrorCode.ACCOUNT_DISABLED: forbidden,
    AuthErrorCode.ACCOUNT_LOCKED: account_locked,
    AuthErrorCode.CONCURRENT_MODIFICATION: concurrent_modification,
}


@router.post("/auth/login", response_model=Envelope[LoginRes], tags=["auth"])
def login(
    req: LoginReq,
    request: Request,
    use_case: AuthenticateUserUseCase = Depends(get_authenticate_user_use_case),
):
    ip_address = request.client.host if request.client else None
    result = use_case.execute(req.email, req.password, ip_address=ip_address)
    if result.error is not None:
        raise _AUTH_ERRORS[result.error.code](result.error.message)

    token, expires_in = create_access_token(result.user)
    return Envelope(
        message="Login successful",
        data=LoginRes(
            access_token=token,
            expires_in=expires_in,
            user=to_user_res(result.user),
        ),
    )


@router.get("/auth/me", response_model=Envelope[MeRes], tags=["auth"])
def me(
    principal: Principal = Depends(get_current_principal),
    get_user: GetUserUseCase = Depends(get_get_user_use_case),
):
    user = unwrap(get_user.execute(principal.user_id))
    return Envelope(
        message="Current user",
        data=MeRes(
            user=to_user_res(user),
            roles=sorted(principal.roles),
            permissions=sorted(p.value for p in principal.permissions),
        ),
    )


@router.post("/auth/change-password", response_model=Envelope[UserRes], tags=["auth"])
def change_password(
    req: ChangePasswordReq,
    principal: Principal = Depends(get_current_principal),
    actor: Actor = Depends(get_actor),
    use_case: ChangePasswordUseCase = Depends(get_change_password_use_case),
):
    result = use_case.execute(
        principal.user_id,
        ChangePasswordInput(
            current_password=req.current_password,
            new_password_hash=hash_password(req.new_password),
        ),
        actor,
    )
    return Envelope(message=result.message, data=to_user_res(unwrap(result)))
