"""
Booking Service - reservations, status changes and refunds
"""
import logging
from datetime import datetime
from typing import List, Optional, Union

from tripdb.models.base import as_utc
from tripdb.models.booking import Booking, BookingStatus, PaymentStatus
from tripdb.services.base import EntityService

logger = logging.getLogger(__name__)


class BookingService(EntityService[Booking]):
    """
    Manages bookings. Every status change goes through ``mutate`` so a
    concurrent writer forces a reload and the transition rules are checked
    again against the stored status.
    """

    collection = "bookings"
    model = Booking

    async def find_by_user_id(self, user_id: str, limit: Optional[int] = None) -> List[Booking]:
        return await self.find_by("userId", user_id, limit=limit)

    async def find_by_trip_id(self, trip_id: str, limit: Optional[int] = None) -> List[Booking]:
        return await self.find_by("tripId", trip_id, limit=limit)

    async def find_by_payment_id(self, payment_id: str) -> Optional[Booking]:
        return await self.find_one_by("paymentId", payment_id)

    async def find_by_status(self, status: Union[BookingStatus, str], limit: Optional[int] = None) -> List[Booking]:
        return await self.find_by("bookingStatus", BookingStatus(status).value, limit=limit)

    async def find_by_payment_status(
        self, status: Union[PaymentStatus, str], limit: Optional[int] = None
    ) -> List[Booking]:
        return await self.find_by("paymentStatus", PaymentStatus(status).value, limit=limit)

    async def find_by_date_range(
        self,
        start: Union[datetime, str],
        end: Union[datetime, str],
        limit: Optional[int] = None,
    ) -> List[Booking]:
        """Bookings whose travel date falls inside [start, end]. Unparseable dates never match."""
        start, end = as_utc(start), as_utc(end)
        bookings = await self.find_all(limit=limit)
        return [
            b for b in bookings
            if b.has_valid_travel_date() and start <= b.travel_datetime() <= end
        ]

    async def cancel(self, booking: Booking, reason: str = "") -> Booking:
        return await self.mutate(booking, lambda b: b.mark_cancelled(reason))

    async def confirm(self, booking: Booking) -> Booking:
        return await self.mutate(booking, lambda b: b.transition_to(BookingStatus.CONFIRMED))

    async def complete(self, booking: Booking) -> Booking:
        return await self.mutate(booking, lambda b: b.transition_to(BookingStatus.COMPLETED))

    async def update_payment_status(
        self,
        booking: Booking,
        status: Union[PaymentStatus, str],
        payment_id: str = "",
    ) -> Booking:
        status = PaymentStatus(status).value

        def apply(b: Booking) -> None:
            b.payment_status = status
            if payment_id:
                b.payment_id = payment_id

        return await self.mutate(booking, apply)

    async def process_refund(self, booking: Booking, amount: float) -> Booking:
        """Record the refund and cancel the booking in one write"""
        booking = await self.mutate(booking, lambda b: b.mark_refunded(amount))
        logger.info(
            f"Refund of {amount} {booking.currency} processed",
            extra={"collection": self.collection, "document_id": booking.id},
        )
        return booking

    async def cancel_with_refund(
        self,
        booking: Booking,
        reason: str = "",
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Cancel under the tiered refund policy

        Args:
            booking: Booking to cancel
            reason: Stored as the cancellation reason
            now: Reference time for the days-to-travel computation

        Returns:
            The cancelled booking with ``refund_amount`` set
        """
        def apply(b: Booking) -> None:
            refund = b.calculate_refund_amount(now)
            b.mark_cancelled(reason)
            b.refund_amount = refund
            if refund > 0:
                b.payment_status = PaymentStatus.REFUNDED.value

        return await self.mutate(booking, apply)
