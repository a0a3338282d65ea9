from .create_payment import CreatePaymentInput, CreatePaymentUseCase
from .list_payments import GetPaymentUseCase, ListPaymentsUseCase
from .transition_payment import (
    CancelPaymentUseCase,
    PaymentAuditAttribution,
    RejectPaymentUseCase,
    VerifyPaymentUseCase,
)

__all__ = [
    "CancelPaymentUseCase",
    "CreatePaymentInput",
    "CreatePaymentUseCase",
    "GetPaymentUseCase",
    "ListPaymentsUseCase",
    "PaymentAuditAttribution",
    "RejectPaymentUseCase",
    "VerifyPaymentUseCase",
]
