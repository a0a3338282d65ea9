"""
===============================================================================
USE CASES: Verify / Reject / Cancel Payment
===============================================================================

Name:
    Payment transition use cases

Business Goal:
    Move a payment out of PENDING exactly once, under the configured guard
    policy, and leave one audit entry per transition.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    VerifyPaymentUseCase, RejectPaymentUseCase, CancelPaymentUseCase

Responsibilities:
    - Load the payment (NOT_FOUND).
    - Apply the guarded transition from domain.payment_machine.
    - Persist with the optimistic version check (CONCURRENT_MODIFICATION).
    - Append PAYMENT_VERIFIED / PAYMENT_REJECTED / PAYMENT_CANCELLED.

Collaborators:
    - UnitOfWork: payments, users, audit
    - domain.payment_machine
    - AuditTrailLogger

-------------------------------------------------------------------------------
POLICIES
-------------------------------------------------------------------------------
guard_policy:
    STRICT  -> only PENDING may be verified, rejected or cancelled
    LEGACY  -> only the is_verified flag is checked
attribution:
    ACTOR   -> audit entry attributed to the acting user (owner for SYSTEM)
    OWNER   -> audit entry attributed to the payment owner
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Callable
from uuid import UUID

from ....crosscutting.metrics import record_state_transition
from ....domain import payment_machine
from ....domain.audit import AuditAction, AuditModule
from ....domain.entities import Actor, Payment
from ....domain.payment_machine import PaymentGuardPolicy
from ....domain.repositories import UnitOfWorkFactory
from ....domain.services import Clock
from ...audit_trail import AuditTrailLogger, attributed_user_id
from ..lookups import require_payment
from ..results import OperationResult, guarded_operation


class PaymentAuditAttribution(str, Enum):
    ACTOR = "actor"
    OWNER = "owner"


class _PaymentTransition:
    action: AuditAction
    verb: str

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditTrailLogger,
        *,
        guard_policy: PaymentGuardPolicy = PaymentGuardPolicy.STRICT,
        attribution: PaymentAuditAttribution = PaymentAuditAttribution.ACTOR,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit
        self._guard_policy = guard_policy
        self._attribution = attribution

    def _transition(
        self,
        payment_id: UUID,
        actor: Actor,
        apply: Callable[[Payment], None],
    ) -> OperationResult[Payment]:
        with self._uow_factory() as uow:
            payment = require_payment(uow, payment_id)
            apply(payment)
            uow.payments.update(payment)

            if self._attribution is PaymentAuditAttribution.OWNER:
                audit_user_id = payment.user_id
            else:
                audit_user_id = attributed_user_id(actor, payment.user_id)

            self._audit.log(
                uow,
                actor_user_id=audit_user_id,
                action=self.action,
                module=AuditModule.PAYMENTS,
                description=f"Payment {self.verb}: {payment.reference} by {actor.name}",
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
            uow.commit()

        record_state_transition("payment", self.verb)
        return OperationResult.ok(payment, f"Payment {self.verb} successfully")


class VerifyPaymentUseCase(_PaymentTransition):
    action = AuditAction.PAYMENT_VERIFIED
    verb = "verified"

    @guarded_operation("verify_payment")
    def execute(
        self, payment_id: UUID, actor: Actor, *, remarks: str
    ) -> OperationResult[Payment]:
        return self._transition(
            payment_id,
            actor,
            lambda payment: payment_machine.verify(
                payment,
                actor_name=actor.name,
                remarks=remarks,
                now=self._clock.now(),
                policy=self._guard_policy,
            ),
        )


class RejectPaymentUseCase(_PaymentTransition):
    action = AuditAction.PAYMENT_REJECTED
    verb = "rejected"

    @guarded_operation("reject_payment")
    def execute(
        self, payment_id: UUID, actor: Actor, *, remarks: str
    ) -> OperationResult[Payment]:
        return self._transition(
            payment_id,
            actor,
            lambda payment: payment_machine.reject(
                payment,
                actor_name=actor.name,
                remarks=remarks,
                now=self._clock.now(),
                policy=self._guard_policy,
            ),
        )


class CancelPaymentUseCase(_PaymentTransition):
    action = AuditAction.PAYMENT_CANCELLED
    verb = "cancelled"

    @guarded_operation("cancel_payment")
    def execute(
        self, payment_id: UUID, actor: Actor, *, remarks: str | None = None
    ) -> OperationResult[Payment]:
        return self._transition(
            payment_id,
            actor,
            lambda payment: payment_machine.cancel(
                payment,
                actor_name=actor.name,
                remarks=remarks,
                now=self._clock.now(),
                policy=self._guard_policy,
            ),
        )
