"""
Name: Payment State Machine

Responsibilities:
  - Build new PENDING payments from validated input
  - Apply guarded transitions: verify, reject, cancel
  - Express the guard policy (strict vs legacy) in one place

Collaborators:
  - domain.entities: Payment, PaymentStatus, touch()
  - domain.errors: InvalidStateTransitionError / ValidationFailureError
  - application.usecases.payments: load, transition, persist, audit

Constraints:
  - Functions mutate the given Payment in place and never touch storage
  - Guards run before any field changes, so a failed transition is a no-op

Notes:
  - STRICT: only PENDING may leave PENDING.
  - LEGACY: guards only look at is_verified (reject has no guard at all).
  - Reject never clears is_verified, so a verified payment stays verified
    for the verify and cancel guards under either policy.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from .entities import Payment, PaymentStatus, new_record, touch
from .errors import GuardReason, InvalidStateTransitionError
from .validation import optional_text, require_positive_amount, require_text


class PaymentGuardPolicy(str, Enum):
    STRICT = "strict"
    LEGACY = "legacy"


def create_payment(
    *,
    user_id: UUID,
    amount: Decimal | str,
    reference: str,
    payment_date: datetime | None,
    actor_name: str,
    now: datetime,
    bank_name: str | None = None,
    account_number: str | None = None,
    description: str | None = None,
    proof_of_payment_url: str | None = None,
) -> Payment:
    return Payment(
        id=uuid4(),
        user_id=user_id,
        amount=require_positive_amount(amount),
        reference=require_text(reference, "reference", max_length=100),
        payment_date=payment_date or now,
        status=PaymentStatus.PENDING,
        is_verified=False,
        bank_name=optional_text(bank_name, "bank_name", max_length=100),
        account_number=optional_text(account_number, "account_number", max_length=50),
        description=optional_text(description, "description", max_length=1000),
        proof_of_payment_url=optional_text(
            proof_of_payment_url, "proof_of_payment_url", max_length=500
        ),
        meta=new_record(actor_name, now),
    )


def _not_pending(payment: Payment, action: str) -> InvalidStateTransitionError:
    return InvalidStateTransitionError(
        f"Cannot {action} payment {payment.reference}: status is {payment.status.value}",
        reason=GuardReason.NOT_PENDING,
        resource="Payment",
    )


def _already_verified(payment: Payment) -> InvalidStateTransitionError:
    return InvalidStateTransitionError(
        f"Payment {payment.reference} is already verified",
        reason=GuardReason.ALREADY_VERIFIED,
        resource="Payment",
    )


def verify(
    payment: Payment,
    *,
    actor_name: str,
    remarks: str,
    now: datetime,
    policy: PaymentGuardPolicy = PaymentGuardPolicy.STRICT,
) -> None:
    remarks = require_text(remarks, "remarks", max_length=500)
    if payment.is_verified:
        raise _already_verified(payment)
    if policy is PaymentGuardPolicy.STRICT and payment.status is not PaymentStatus.PENDING:
        raise _not_pending(payment, "verify")

    payment.status = PaymentStatus.VERIFIED
    payment.is_verified = True
    payment.verified_at = now
    payment.verified_by = actor_name
    payment.verification_remarks = remarks
    touch(payment.meta, actor_name, now)


def reject(
    payment: Payment,
    *,
    actor_name: str,
    remarks: str,
    now: datetime,
    policy: PaymentGuardPolicy = PaymentGuardPolicy.STRICT,
) -> None:
    remarks = require_text(remarks, "remarks", max_length=500)
    if policy is PaymentGuardPolicy.STRICT:
        if payment.is_verified:
            raise _already_verified(payment)
        if payment.status is not PaymentStatus.PENDING:
            raise _not_pending(payment, "reject")

    payment.status = PaymentStatus.REJECTED
    payment.verified_at = now
    payment.verified_by = actor_name
    payment.verification_remarks = remarks
    touch(payment.meta, actor_name, now)


def cancel(
    payment: Payment,
    *,
    actor_name: str,
    remarks: str | None,
    now: datetime,
    policy: PaymentGuardPolicy = PaymentGuardPolicy.STRICT,
) -> None:
    remarks = optional_text(remarks, "remarks", max_length=500)
    if payment.is_verified:
        raise InvalidStateTransitionError(
            f"Cannot cancel verified payment {payment.reference}",
            reason=GuardReason.CANNOT_CANCEL_VERIFIED,
            resource="Payment",
        )
    if policy is PaymentGuardPolicy.STRICT and payment.status is not PaymentStatus.PENDING:
        raise _not_pending(payment, "cancel")

    payment.status = PaymentStatus.CANCELLED
    payment.verification_remarks = remarks
    touch(payment.meta, actor_name, now)
