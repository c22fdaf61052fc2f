"""
Domain entities persisted in the document store.
"""

from .base import CreateResult, DomainModel, ValidationResult
from .user import User, WishlistItem
from .trip import Difficulty, Ratings, Trip
from .booking import Booking, BookingStatus, PaymentStatus
from .accommodation import (
    Accommodation,
    AccommodationCategory,
    AccommodationType,
    ListingStatus,
    Pricing,
)
from .review import ModerationStatus, Review, ReviewItemType
from .payment import Payment, PaymentRecordStatus, Refund, StatusChange

__all__ = [
    "CreateResult",
    "DomainModel",
    "ValidationResult",
    "User",
    "WishlistItem",
    "Difficulty",
    "Ratings",
    "Trip",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "Accommodation",
    "AccommodationCategory",
    "AccommodationType",
    "ListingStatus",
    "Pricing",
    "ModerationStatus",
    "Review",
    "ReviewItemType",
    "Payment",
    "PaymentRecordStatus",
    "Refund",
    "StatusChange",
]
