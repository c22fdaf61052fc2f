"""
Payment entity with partial refunds
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tripdb.models.base import DomainModel, ValidationResult, now_iso

SUPPORTED_CURRENCIES = ("USD", "UGX", "EUR", "GBP", "KES", "TZS")


class PaymentRecordStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class Refund(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    amount: float
    reason: str = ""
    refunded_at: str = Field(default_factory=now_iso)


class StatusChange(BaseModel):
    """Previous status, kept when the status moves on"""
    status: str
    timestamp: str = Field(default_factory=now_iso)
    reason: str = ""


class Payment(DomainModel):
    booking_id: str = ""
    user_id: str = ""
    payment_number: str = ""
    amount: float = 0
    currency: str = "USD"
    payment_method: str = "card"
    provider: str = "manual"
    status: str = PaymentRecordStatus.PENDING.value
    refunds: List[Refund] = Field(default_factory=list)
    status_history: List[StatusChange] = Field(default_factory=list)
    failure_reason: str = ""

    @property
    def refunded_total(self) -> float:
        return round(sum(r.amount for r in self.refunds), 2)

    @property
    def refundable_amount(self) -> float:
        return round(self.amount - self.refunded_total, 2)

    def validate_fields(self) -> ValidationResult:
        errors = []

        if not self.booking_id:
            errors.append("Booking ID is required")

        if not self.user_id:
            errors.append("User ID is required")

        if self.amount <= 0:
            errors.append("Amount must be greater than 0")

        if self.currency not in SUPPORTED_CURRENCIES:
            errors.append(f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}")

        if self.status not in {s.value for s in PaymentRecordStatus}:
            errors.append("Invalid payment status")

        return ValidationResult.from_errors(errors)
