"""
============================================================
TARJETA CRC - infrastructure/repositories/postgres/payments.py
============================================================
Class: PostgresPaymentRepository

Responsibilities:
  - Persist payments (`payments` table); reference is unique.
  - Filtered listing, newest payment first.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import Payment, PaymentStatus
from .base import META_COLUMNS, PostgresRepository, meta_from_row, meta_insert_params


class PostgresPaymentRepository(PostgresRepository):
    resource = "Payment"
    table = "payments"

    _UNIQUE_KEYS = {"uq_payments_reference": "reference"}

    _SELECT_COLUMNS = f"""
        id, user_id, amount, reference, payment_date, status, is_verified,
        bank_name, account_number, description, proof_of_payment_url,
        verified_at, verified_by, verification_remarks, {META_COLUMNS}
    """

    def _row_to_payment(self, row: tuple) -> Payment:
        return Payment(
            id=row[0],
            user_id=row[1],
            amount=row[2],
            reference=row[3],
            payment_date=row[4],
            status=PaymentStatus(row[5]),
            is_verified=row[6],
            bank_name=row[7],
            account_number=row[8],
            description=row[9],
            proof_of_payment_url=row[10],
            verified_at=row[11],
            verified_by=row[12],
            verification_remarks=row[13],
            meta=meta_from_row(row, 14),
        )

    def get_by_id(self, payment_id: UUID) -> Payment | None:
        row = self._fetchone(
            f"SELECT {self._SELECT_COLUMNS} FROM payments WHERE id = %s",
            (payment_id,),
            context_msg="PostgresPaymentRepository: get_by_id failed",
            extra={"payment_id": str(payment_id)},
        )
        return self._row_to_payment(row) if row else None

    def exists_by_reference(self, reference: str) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM payments WHERE reference = %s",
            (reference,),
            context_msg="PostgresPaymentRepository: exists_by_reference failed",
        )
        return row is not None

    def add(self, payment: Payment) -> None:
        self._execute(
            f"""
                INSERT INTO payments (
                    id, user_id, amount, reference, payment_date, status,
                    is_verified, bank_name, account_number, description,
                    proof_of_payment_url, verified_at, verified_by,
                    verification_remarks, {META_COLUMNS}
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                        %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                payment.id,
                payment.user_id,
                payment.amount,
                payment.reference,
                payment.payment_date,
                payment.status.value,
                payment.is_verified,
                payment.bank_name,
                payment.account_number,
                payment.description,
                payment.proof_of_payment_url,
                payment.verified_at,
                payment.verified_by,
                payment.verification_remarks,
                *meta_insert_params(payment.meta),
            ],
            context_msg="PostgresPaymentRepository: insert failed",
            extra={"payment_id": str(payment.id)},
            subject=payment,
        )
        payment.meta.version = 0

    def update(self, payment: Payment) -> None:
        self._versioned_update(
            payment,
            {
                "status": payment.status.value,
                "is_verified": payment.is_verified,
                "bank_name": payment.bank_name,
                "account_number": payment.account_number,
                "description": payment.description,
                "proof_of_payment_url": payment.proof_of_payment_url,
                "verified_at": payment.verified_at,
                "verified_by": payment.verified_by,
                "verification_remarks": payment.verification_remarks,
            },
        )

    def list_payments(
        self,
        *,
        user_id: UUID | None = None,
        status: PaymentStatus | None = None,
        is_verified: bool | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Payment], int]:
        where: list[str] = ["NOT is_deleted"]
        params: list[object] = []
        if user_id is not None:
            where.append("user_id = %s")
            params.append(user_id)
        if status is not None:
            where.append("status = %s")
            params.append(status.value)
        if is_verified is not None:
            where.append("is_verified = %s")
            params.append(is_verified)

        rows, total = self._paged(
            select_sql=self._SELECT_COLUMNS,
            where=where,
            params=params,
            order_by="payment_date DESC, id DESC",
            limit=limit,
            offset=offset,
            context_msg="PostgresPaymentRepository: list_payments failed",
        )
        return [self._row_to_payment(r) for r in rows], total
