"""
Name: Payment State Machine Unit Tests

Responsibilities:
  - Verify the PENDING -> VERIFIED / REJECTED / CANCELLED transitions
  - Verify the guards under the strict and legacy policies
  - Verify a refused transition leaves the payment untouched

Notes:
  - Pure unit tests (no store, no clock)
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from clubfunds.domain import payment_machine
from clubfunds.domain.entities import PaymentStatus
from clubfunds.domain.errors import (
    ErrorKind,
    GuardReason,
    InvalidStateTransitionError,
    ValidationFailureError,
)
from clubfunds.domain.payment_machine import PaymentGuardPolicy

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)
LATER = datetime(2024, 5, 11, 8, 0, tzinfo=timezone.utc)


def _payment(**overrides):
    payment = payment_machine.create_payment(
        user_id=uuid4(),
        amount="250.00",
        reference="TRX-0001",
        payment_date=None,
        actor_name="member@club.example.org",
        now=NOW,
    )
    for name, value in overrides.items():
        setattr(payment, name, value)
    return payment


@pytest.mark.unit
class TestCreatePayment:
    def test_new_payment_is_pending_and_unverified(self):
        payment = _payment()

        assert payment.status is PaymentStatus.PENDING
        assert payment.is_verified is False
        assert payment.amount == Decimal("250.00")
        assert payment.payment_date == NOW
        assert payment.meta.created_by == "member@club.example.org"
        assert payment.meta.version == 0

    def test_amount_is_rounded_to_two_places(self):
        payment = payment_machine.create_payment(
            user_id=uuid4(),
            amount="10.005",
            reference="TRX-ROUND",
            payment_date=None,
            actor_name="x@club.example.org",
            now=NOW,
        )
        assert payment.amount == Decimal("10.01")

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", None])
    def test_rejects_non_positive_or_malformed_amounts(self, amount):
        with pytest.raises(ValidationFailureError):
            payment_machine.create_payment(
                user_id=uuid4(),
                amount=amount,
                reference="TRX-BAD",
                payment_date=None,
                actor_name="x@club.example.org",
                now=NOW,
            )

    def test_reference_is_required(self):
        with pytest.raises(ValidationFailureError) as exc:
            payment_machine.create_payment(
                user_id=uuid4(),
                amount="1.00",
                reference="   ",
                payment_date=None,
                actor_name="x@club.example.org",
                now=NOW,
            )
        assert exc.value.field == "reference"


@pytest.mark.unit
class TestVerify:
    def test_verify_pending_payment(self):
        payment = _payment()

        payment_machine.verify(
            payment, actor_name="treasurer@club.example.org", remarks="Matched", now=LATER
        )

        assert payment.status is PaymentStatus.VERIFIED
        assert payment.is_verified is True
        assert payment.verified_at == LATER
        assert payment.verified_by == "treasurer@club.example.org"
        assert payment.verification_remarks == "Matched"
        assert payment.meta.updated_at == LATER

    def test_verify_twice_is_refused_with_already_verified(self):
        payment = _payment()
        payment_machine.verify(payment, actor_name="a", remarks="ok", now=LATER)

        with pytest.raises(InvalidStateTransitionError) as exc:
            payment_machine.verify(payment, actor_name="b", remarks="again", now=LATER)

        assert exc.value.kind is ErrorKind.INVALID_STATE_TRANSITION
        assert exc.value.reason is GuardReason.ALREADY_VERIFIED
        assert payment.verified_by == "a"

    def test_remarks_are_required(self):
        payment = _payment()
        with pytest.raises(ValidationFailureError):
            payment_machine.verify(payment, actor_name="a", remarks="  ", now=LATER)
        assert payment.status is PaymentStatus.PENDING

    def test_strict_policy_refuses_verifying_a_rejected_payment(self):
        payment = _payment()
        payment_machine.reject(payment, actor_name="a", remarks="No match", now=LATER)

        with pytest.raises(InvalidStateTransitionError) as exc:
            payment_machine.verify(payment, actor_name="a", remarks="ok", now=LATER)

        assert exc.value.reason is GuardReason.NOT_PENDING
        assert payment.status is PaymentStatus.REJECTED

    def test_legacy_policy_allows_verifying_a_rejected_payment(self):
        payment = _payment()
        payment_machine.reject(payment, actor_name="a", remarks="No match", now=LATER)

        payment_machine.verify(
            payment,
            actor_name="a",
            remarks="Found it",
            now=LATER,
            policy=PaymentGuardPolicy.LEGACY,
        )

        assert payment.status is PaymentStatus.VERIFIED


@pytest.mark.unit
class TestReject:
    def test_reject_pending_payment(self):
        payment = _payment()

        payment_machine.reject(payment, actor_name="a", remarks="Wrong amount", now=LATER)

        assert payment.status is PaymentStatus.REJECTED
        assert payment.is_verified is False
        assert payment.verification_remarks == "Wrong amount"

    def test_strict_policy_refuses_rejecting_a_verified_payment(self):
        payment = _payment()
        payment_machine.verify(payment, actor_name="a", remarks="ok", now=LATER)

        with pytest.raises(InvalidStateTransitionError) as exc:
            payment_machine.reject(payment, actor_name="a", remarks="oops", now=LATER)

        assert exc.value.reason is GuardReason.ALREADY_VERIFIED
        assert payment.status is PaymentStatus.VERIFIED

    def test_legacy_policy_has_no_reject_guard(self):
        payment = _payment()
        payment_machine.verify(payment, actor_name="a", remarks="ok", now=LATER)

        payment_machine.reject(
            payment,
            actor_name="a",
            remarks="reversed",
            now=LATER,
            policy=PaymentGuardPolicy.LEGACY,
        )

        assert payment.status is PaymentStatus.REJECTED
        assert payment.is_verified is True

    def test_legacy_reject_keeps_a_verified_payment_from_second_verify(self):
        payment = _payment()
        legacy = PaymentGuardPolicy.LEGACY
        payment_machine.verify(payment, actor_name="a", remarks="ok", now=LATER, policy=legacy)
        payment_machine.reject(payment, actor_name="a", remarks="oops", now=LATER, policy=legacy)

        with pytest.raises(InvalidStateTransitionError) as exc:
            payment_machine.verify(
                payment, actor_name="b", remarks="again", now=LATER, policy=legacy
            )

        assert exc.value.reason is GuardReason.ALREADY_VERIFIED
        assert payment.status is PaymentStatus.REJECTED


@pytest.mark.unit
class TestCancel:
    def test_cancel_pending_payment_without_remarks(self):
        payment = _payment()

        payment_machine.cancel(payment, actor_name="a", remarks=None, now=LATER)

        assert payment.status is PaymentStatus.CANCELLED
        assert payment.verification_remarks is None

    @pytest.mark.parametrize("policy", list(PaymentGuardPolicy))
    def test_cannot_cancel_verified_payment_under_any_policy(self, policy):
        payment = _payment()
        payment_machine.verify(payment, actor_name="a", remarks="ok", now=LATER)

        with pytest.raises(InvalidStateTransitionError) as exc:
            payment_machine.cancel(
                payment, actor_name="a", remarks=None, now=LATER, policy=policy
            )

        assert exc.value.reason is GuardReason.CANNOT_CANCEL_VERIFIED

    def test_strict_policy_refuses_cancelling_twice(self):
        payment = _payment()
        payment_machine.cancel(payment, actor_name="a", remarks=None, now=LATER)

        with pytest.raises(InvalidStateTransitionError) as exc:
            payment_machine.cancel(payment, actor_name="a", remarks=None, now=LATER)

        assert exc.value.reason is GuardReason.NOT_PENDING

    def test_failed_guard_leaves_payment_unchanged(self):
        payment = _payment(status=PaymentStatus.REJECTED)
        before = replace(payment)

        with pytest.raises(InvalidStateTransitionError):
            payment_machine.cancel(payment, actor_name="a", remarks="x", now=LATER)

        assert payment == before
