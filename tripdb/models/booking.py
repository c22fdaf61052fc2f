"""
Booking entity: reservation record with two independent status dimensions.

``booking_status`` follows pending -> confirmed -> completed | cancelled.
``payment_status`` is tracked separately (pending -> processing ->
completed | failed -> refunded) and is not guarded.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import Field

from tripdb.core.exceptions import InvalidStatusTransitionError
from tripdb.models.base import DomainModel, ValidationResult, as_utc, now_iso, parse_timestamp

SECONDS_PER_DAY = 24 * 3600
MIN_DAYS_TO_CANCEL = 3

# (minimum whole days before travel, share of total refunded), checked in order
REFUND_TIERS = [
    (14, 0.90),
    (7, 0.50),
    (3, 0.25),
]


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    BookingStatus.PENDING.value: frozenset({BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value}),
    BookingStatus.CONFIRMED.value: frozenset({BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}),
    BookingStatus.CANCELLED.value: frozenset(),
    BookingStatus.COMPLETED.value: frozenset(),
}


class Booking(DomainModel):
    user_id: str = ""
    trip_id: str = ""
    accommodation_id: Optional[str] = None
    booking_date: str = Field(default_factory=now_iso)
    travel_date: str = ""
    number_of_guests: int = 1
    guest_details: List[Dict[str, Any]] = Field(default_factory=list)
    total_amount: float = 0
    currency: str = "USD"
    payment_status: str = PaymentStatus.PENDING.value
    payment_id: str = ""
    booking_status: str = BookingStatus.CONFIRMED.value
    special_requests: str = ""
    emergency_contact: Dict[str, Any] = Field(default_factory=dict)
    cancellation_reason: str = ""
    refund_amount: float = 0

    def travel_datetime(self) -> datetime:
        return parse_timestamp(self.travel_date)

    def has_valid_travel_date(self) -> bool:
        try:
            self.travel_datetime()
        except ValueError:
            return False
        return True

    def days_until_travel(self, now: Optional[datetime] = None) -> int:
        """Whole days to travel, rounded up (a partial day counts as a day)."""
        now = as_utc(now) if now else datetime.now(timezone.utc)
        delta = self.travel_datetime() - now
        return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    def can_be_cancelled(self, now: Optional[datetime] = None) -> bool:
        return (
            self.booking_status == BookingStatus.CONFIRMED.value
            and self.days_until_travel(now) >= MIN_DAYS_TO_CANCEL
        )

    def calculate_refund_amount(self, now: Optional[datetime] = None) -> float:
        days = self.days_until_travel(now)
        for min_days, share in REFUND_TIERS:
            if days >= min_days:
                return round(self.total_amount * share, 2)
        return 0.0

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        now = as_utc(now) if now else datetime.now(timezone.utc)
        return self.travel_datetime() > now and self.booking_status == BookingStatus.CONFIRMED.value

    def is_past(self, now: Optional[datetime] = None) -> bool:
        now = as_utc(now) if now else datetime.now(timezone.utc)
        return self.travel_datetime() < now

    def transition_to(self, target: BookingStatus) -> None:
        allowed = ALLOWED_TRANSITIONS.get(self.booking_status, frozenset())
        if target.value not in allowed:
            raise InvalidStatusTransitionError("booking", self.booking_status, target.value)
        self.booking_status = target.value

    def mark_cancelled(self, reason: str = "") -> None:
        self.transition_to(BookingStatus.CANCELLED)
        self.cancellation_reason = reason

    def mark_refunded(self, amount: float) -> None:
        """Record a refund. Also valid on a booking that was already cancelled."""
        if self.booking_status != BookingStatus.CANCELLED.value:
            self.transition_to(BookingStatus.CANCELLED)
        self.refund_amount = amount
        self.payment_status = PaymentStatus.REFUNDED.value

    def validate_fields(self) -> ValidationResult:
        errors = []

        if not self.user_id:
            errors.append("User ID is required")

        if not self.trip_id:
            errors.append("Trip ID is required")

        if not self.travel_date:
            errors.append("Travel date is required")
        elif not self.has_valid_travel_date():
            errors.append("Travel date must be an ISO-8601 date")

        if self.number_of_guests < 1:
            errors.append("Number of guests must be at least 1")

        if self.total_amount <= 0:
            errors.append("Total amount must be greater than 0")

        if self.payment_status not in {s.value for s in PaymentStatus}:
            errors.append("Invalid payment status")

        if self.booking_status not in {s.value for s in BookingStatus}:
            errors.append("Invalid booking status")

        return ValidationResult.from_errors(errors)
