"""
Name: Payment Reads

Responsibilities:
  - GetPayment by id (NOT_FOUND otherwise)
  - ListPayments with optional owner / status / verified filters, paginated
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import Page, Payment, PaymentStatus
from ....domain.repositories import UnitOfWorkFactory
from ..lookups import clamp_page, require_payment
from ..results import OperationResult, guarded_operation


class GetPaymentUseCase:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @guarded_operation("get_payment")
    def execute(self, payment_id: UUID) -> OperationResult[Payment]:
        with self._uow_factory() as uow:
            payment = require_payment(uow, payment_id)
        return OperationResult.ok(payment, "Payment found")


class ListPaymentsUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        default_page_size: int = 50,
        max_page_size: int = 200,
    ) -> None:
        self._uow_factory = uow_factory
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    @guarded_operation("list_payments")
    def execute(
        self,
        *,
        user_id: UUID | None = None,
        status: PaymentStatus | None = None,
        is_verified: bool | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OperationResult[Page]:
        limit, offset = clamp_page(
            limit, offset, default=self._default_page_size, maximum=self._max_page_size
        )
        with self._uow_factory() as uow:
            items, total = uow.payments.list_payments(
                user_id=user_id,
                status=status,
                is_verified=is_verified,
                limit=limit,
                offset=offset,
            )
        return OperationResult.ok(
            Page(items=items, total=total, limit=limit, offset=offset),
            f"{total} payments",
        )
