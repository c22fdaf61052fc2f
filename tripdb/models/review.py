"""
Review entity for trips and accommodations
"""
from enum import Enum

from tripdb.models.base import DomainModel, ValidationResult

MIN_RATING = 1
MAX_RATING = 5


class ReviewItemType(str, Enum):
    TRIP = "trip"
    ACCOMMODATION = "accommodation"


class ModerationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(DomainModel):
    item_id: str = ""
    item_type: str = ReviewItemType.TRIP.value
    booking_id: str = ""
    user_id: str = ""
    rating: int = 0
    title: str = ""
    content: str = ""
    would_recommend: bool = True
    moderation_status: str = ModerationStatus.PENDING.value
    helpful_votes: int = 0

    def validate_fields(self) -> ValidationResult:
        errors = []

        if not self.item_id:
            errors.append("Item ID is required")

        if self.item_type not in {t.value for t in ReviewItemType}:
            errors.append("Item type must be trip or accommodation")

        if not self.booking_id:
            errors.append("Booking ID is required")

        if not self.user_id:
            errors.append("User ID is required")

        if not MIN_RATING <= self.rating <= MAX_RATING:
            errors.append(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        if not self.content.strip():
            errors.append("Review content is required")

        return ValidationResult.from_errors(errors)
