"""
===============================================================================
TARJETA CRC - schemas/payments.py
===============================================================================

Responsibilities:
    - DTOs for payment submission, review transitions and listings.
    - Amounts travel as decimals (never floats).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from clubfunds.domain.entities import Payment, PaymentStatus
from pydantic import BaseModel, Field

from .common import RecordMetaRes, to_meta_res


class CreatePaymentReq(BaseModel):
    user_id: UUID | None = Field(
        default=None, description="Owner; defaults to the caller"
    )
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    reference: str = Field(..., min_length=1, max_length=100)
    payment_date: datetime | None = None
    bank_name: str | None = Field(default=None, max_length=100)
    account_number: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=500)
    proof_of_payment_url: str | None = Field(default=None, max_length=500)


class ReviewPaymentReq(BaseModel):
    remarks: str = Field(..., min_length=1, max_length=500)


class CancelPaymentReq(BaseModel):
    remarks: str | None = Field(default=None, max_length=500)


class PaymentRes(BaseModel):
    id: UUID
    user_id: UUID
    amount: Decimal
    reference: str
    payment_date: datetime
    status: PaymentStatus
    is_verified: bool
    bank_name: str | None = None
    account_number: str | None = None
    description: str | None = None
    proof_of_payment_url: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    verification_remarks: str | None = None
    meta: RecordMetaRes


def to_payment_res(payment: Payment) -> PaymentRes:
    return PaymentRes(
        id=payment.id,
        user_id=payment.user_id,
        amount=payment.amount,
        reference=payment.reference,
        payment_date=payment.payment_date,
        status=payment.status,
        is_verified=payment.is_verified,
        bank_name=payment.bank_name,
        account_number=payment.account_number,
        description=payment.description,
        proof_of_payment_url=payment.proof_of_payment_url,
        verified_at=payment.verified_at,
        verified_by=payment.verified_by,
        verification_remarks=payment.verification_remarks,
        meta=to_meta_res(payment.meta),
    )
