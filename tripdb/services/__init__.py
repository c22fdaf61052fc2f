# Domain services, one per collection

from .base import EntityService
from .user_service import UserService
from .trip_service import TripService
from .booking_service import BookingService
from .accommodation_service import AccommodationService
from .review_service import ReviewService
from .payment_service import PaymentService, generate_payment_number

__all__ = [
    "EntityService",
    "UserService",
    "TripService",
    "BookingService",
    "AccommodationService",
    "ReviewService",
    "PaymentService",
    "generate_payment_number",
]
