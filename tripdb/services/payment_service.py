"""
Payment Service - payment records, status history and refunds
"""
import secrets
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from tripdb.core.exceptions import RefundExceedsAmountError
from tripdb.models.payment import Payment, PaymentRecordStatus, Refund, StatusChange
from tripdb.services.base import EntityService


def generate_payment_number(now: Optional[datetime] = None) -> str:
    """Human-facing reference such as ``PAY261019482913``. Not a key."""
    now = now or datetime.now(timezone.utc)
    return f"PAY{now:%y%m%d}{100000 + secrets.randbelow(900000)}"


class PaymentService(EntityService[Payment]):
    collection = "payments"
    model = Payment

    async def create(self, data: Union[Payment, Mapping[str, Any]]) -> Payment:
        payment = self.build(data)
        if not payment.payment_number:
            payment.payment_number = generate_payment_number()
        return await super().create(payment)

    async def find_by_booking(self, booking_id: str) -> List[Payment]:
        return await self.find_by("bookingId", booking_id)

    async def find_by_user(self, user_id: str, status: Optional[str] = None) -> List[Payment]:
        payments = await self.find_by("userId", user_id)
        if status:
            payments = [p for p in payments if p.status == status]
        return payments

    async def find_by_payment_number(self, payment_number: str) -> Optional[Payment]:
        return await self.find_one_by("paymentNumber", payment_number)

    async def update_status(
        self,
        payment: Payment,
        status: Union[PaymentRecordStatus, str],
        reason: str = "",
    ) -> Payment:
        status = PaymentRecordStatus(status).value

        def apply(p: Payment) -> None:
            p.status_history.append(StatusChange(status=p.status, reason=reason))
            p.status = status
            if status == PaymentRecordStatus.FAILED.value:
                p.failure_reason = reason

        return await self.mutate(payment, apply)

    async def add_refund(self, payment: Payment, amount: float, reason: str = "") -> Payment:
        """
        Record a refund against the payment

        Args:
            payment: Payment being refunded
            amount: Refund amount, at most what is still refundable
            reason: Free text stored with the refund

        Returns:
            The payment, ``refunded`` once fully refunded, else ``partially_refunded``
        """
        def apply(p: Payment) -> None:
            if amount <= 0 or amount > p.refundable_amount:
                raise RefundExceedsAmountError(p.id, amount, p.refundable_amount)
            p.refunds.append(Refund(amount=amount, reason=reason))
            p.status_history.append(StatusChange(status=p.status, reason="Refund issued"))
            if p.refunded_total >= p.amount:
                p.status = PaymentRecordStatus.REFUNDED.value
            else:
                p.status = PaymentRecordStatus.PARTIALLY_REFUNDED.value

        return await self.mutate(payment, apply)
