"""
===============================================================================
USE CASE: Create Payment
===============================================================================

Responsibilities:
    - Validate amount (> 0) and reference (non-blank, unique).
    - Create the payment in PENDING for an existing owner.
    - Append PAYMENT_CREATED.

Error Mapping:
    - VALIDATION_FAILURE: non-positive amount, blank reference
    - NOT_FOUND: owner user does not exist
    - ALREADY_EXISTS: reference already used
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ....crosscutting.metrics import record_state_transition
from ....domain import payment_machine
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, Payment
from ....domain.errors import AlreadyExistsError
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ...audit_trail import AuditTrailLogger, attributed_user_id
from ..lookups import require_user
from ..results import OperationResult, guarded_operation


@dataclass(frozen=True)
class CreatePaymentInput:
    user_id: UUID
    amount: Decimal | str
    reference: str
    payment_date: datetime | None = None
    bank_name: str | None = None
    account_number: str | None = None
    description: str | None = None
    proof_of_payment_url: str | None = None


class CreatePaymentUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit

    @guarded_operation("create_payment")
    def execute(self, data: CreatePaymentInput, actor: Actor) -> OperationResult[Payment]:
        payment = payment_machine.create_payment(
            user_id=data.user_id,
            amount=data.amount,
            reference=data.reference,
            payment_date=data.payment_date,
            bank_name=data.bank_name,
            account_number=data.account_number,
            description=data.description,
            proof_of_payment_url=data.proof_of_payment_url,
            actor_name=actor.name,
            now=self._clock.now(),
        )

        with self._uow_factory() as uow:
            owner = require_user(uow, data.user_id)
            if uow.payments.exists_by_reference(payment.reference):
                raise AlreadyExistsError(
                    f"Payment reference '{payment.reference}' already exists",
                    resource="Payment",
                )
            uow.payments.add(payment)
            self._audit.log(
                uow,
                actor_user_id=attributed_user_id(actor, owner.id),
                action=AuditAction.PAYMENT_CREATED,
                module=AuditModule.PAYMENTS,
                description=(
                    f"Payment created: {payment.reference} for {owner.email} "
                    f"amount {payment.amount} by {actor.name}"
                ),
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
            uow.commit()

        record_state_transition("payment", "created")
        return OperationResult.ok(payment, "Payment created successfully")
