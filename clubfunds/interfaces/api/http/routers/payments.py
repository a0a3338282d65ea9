"""
===============================================================================
TARJETA CRC - routers/payments.py
===============================================================================

Responsibilities:
    - Submit payments (members for themselves, finance admins for anyone).
    - Review transitions: verify / reject / cancel (members may cancel
      their own payments).
    - Read and list payments; members only see their own.

Collaborators:
    - application.usecases.payments
    - dependencies (principal, permissions, actor)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from clubfunds.application.usecases.payments import (
    CancelPaymentUseCase,
    CreatePaymentInput,
    CreatePaymentUseCase,
    GetPaymentUseCase,
    ListPaymentsUseCase,
    RejectPaymentUseCase,
    VerifyPaymentUseCase,
)
from clubfunds.container import (
    get_cancel_payment_use_case,
    get_create_payment_use_case,
    get_get_payment_use_case,
    get_list_payments_use_case,
    get_reject_payment_use_case,
    get_verify_payment_use_case,
)
from clubfunds.domain.entities import Actor, PaymentStatus
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission
from fastapi import APIRouter, Depends, Query, status

from ..dependencies import ensure_self_or, get_actor, require_permission
from ..error_mapping import unwrap
from ..schemas.common import Envelope, PageRes, to_page_res
from ..schemas.payments import (
    CancelPaymentReq,
    CreatePaymentReq,
    PaymentRes,
    ReviewPaymentReq,
    to_payment_res,
)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=Envelope[PageRes[PaymentRes]])
def list_payments(
    user_id: UUID | None = Query(None),
    status_filter: PaymentStatus | None = Query(None, alias="status"),
    is_verified: bool | None = Query(None),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    use_case: ListPaymentsUseCase = Depends(get_list_payments_use_case),
    principal: Principal = Depends(require_permission(Permission.PAYMENTS_READ_OWN)),
):
    if not principal.can(Permission.PAYMENTS_READ):
        user_id = principal.user_id

    result = use_case.execute(
        user_id=user_id,
        status=status_filter,
        is_verified=is_verified,
        limit=limit,
        offset=offset,
    )
    page = unwrap(result)
    return Envelope(
        message=result.message,
        data=PageRes[PaymentRes](
            **to_page_res(page, [to_payment_res(p) for p in page.items])
        ),
    )


@router.post("", response_model=Envelope[PaymentRes], status_code=status.HTTP_201_CREATED)
def create_payment(
    req: CreatePaymentReq,
    use_case: CreatePaymentUseCase = Depends(get_create_payment_use_case),
    principal: Principal = Depends(require_permission(Permission.PAYMENTS_CREATE_OWN)),
    actor: Actor = Depends(get_actor),
):
    owner_id = req.user_id or principal.user_id
    ensure_self_or(principal, owner_id, Permission.PAYMENTS_MANAGE)

    result = use_case.execute(
        CreatePaymentInput(
            user_id=owner_id,
            amount=req.amount,
            reference=req.reference,
            payment_date=req.payment_date,
            bank_name=req.bank_name,
            account_number=req.account_number,
            description=req.description,
            proof_of_payment_url=req.proof_of_payment_url,
        ),
        actor,
    )
    return Envelope(message=result.message, data=to_payment_res(unwrap(result)))


@router.get("/{payment_id}", response_model=Envelope[PaymentRes])
def get_payment(
    payment_id: UUID,
    use_case: GetPaymentUseCase = Depends(get_get_payment_use_case),
    principal: Principal = Depends(require_permission(Permission.PAYMENTS_READ_OWN)),
):
    result = use_case.execute(payment_id)
    payment = unwrap(result)
    ensure_self_or(principal, payment.user_id, Permission.PAYMENTS_READ)
    return Envelope(message=result.message, data=to_payment_res(payment))


@router.post("/{payment_id}/verify", response_model=Envelope[PaymentRes])
def verify_payment(
    payment_id: UUID,
    req: ReviewPaymentReq,
    use_case: VerifyPaymentUseCase = Depends(get_verify_payment_use_case),
    _principal: Principal = Depends(require_permission(Permission.PAYMENTS_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(payment_id, actor, remarks=req.remarks)
    return Envelope(message=result.message, data=to_payment_res(unwrap(result)))


@router.post("/{payment_id}/reject", response_model=Envelope[PaymentRes])
def reject_payment(
    payment_id: UUID,
    req: ReviewPaymentReq,
    use_case: RejectPaymentUseCase = Depends(get_reject_payment_use_case),
    _principal: Principal = Depends(require_permission(Permission.PAYMENTS_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(payment_id, actor, remarks=req.remarks)
    return Envelope(message=result.message, data=to_payment_res(unwrap(result)))


@router.post("/{payment_id}/cancel", response_model=Envelope[PaymentRes])
def cancel_payment(
    payment_id: UUID,
    req: CancelPaymentReq | None = None,
    use_case: CancelPaymentUseCase = Depends(get_cancel_payment_use_case),
    get_payment: GetPaymentUseCase = Depends(get_get_payment_use_case),
    principal: Principal = Depends(require_permission(Permission.PAYMENTS_CREATE_OWN)),
    actor: Actor = Depends(get_actor),
):
    payment = unwrap(get_payment.execute(payment_id))
    ensure_self_or(principal, payment.user_id, Permission.PAYMENTS_MANAGE)

    remarks = req.remarks if req is not None else None
    result = use_case.execute(payment_id, actor, remarks=remarks)
    return Envelope(message=result.message, data=to_payment_res(unwrap(result)))
