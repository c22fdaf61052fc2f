"""
Accommodation listing entity
"""
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tripdb.models.base import DomainModel, ValidationResult
from tripdb.models.trip import Ratings


class AccommodationType(str, Enum):
    HOTEL = "hotel"
    LODGE = "lodge"
    CAMP = "camp"
    GUESTHOUSE = "guesthouse"
    APARTMENT = "apartment"
    VILLA = "villa"


class AccommodationCategory(str, Enum):
    BUDGET = "budget"
    MID_RANGE = "mid-range"
    LUXURY = "luxury"
    PREMIUM = "premium"


class ListingStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class Pricing(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base_price: float = 0
    currency: str = "USD"


class Accommodation(DomainModel):
    """A host's property. Archived listings stay stored but are hidden from listings."""
    host_id: str = ""
    title: str = ""
    description: str = ""
    type: str = AccommodationType.HOTEL.value
    category: str = AccommodationCategory.MID_RANGE.value
    location: Dict[str, Any] = Field(default_factory=dict)
    pricing: Pricing = Field(default_factory=Pricing)
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    rating: Ratings = Field(default_factory=Ratings)
    status: str = ListingStatus.ACTIVE.value
    featured: bool = False

    @property
    def is_listed(self) -> bool:
        return self.status != ListingStatus.ARCHIVED.value

    def validate_fields(self) -> ValidationResult:
        errors = []

        if not self.host_id:
            errors.append("Host ID is required")

        if not self.title.strip():
            errors.append("Title is required")

        if not self.description.strip():
            errors.append("Description is required")

        if self.type not in {t.value for t in AccommodationType}:
            errors.append("Invalid accommodation type")

        if self.category not in {c.value for c in AccommodationCategory}:
            errors.append("Invalid accommodation category")

        if self.status not in {s.value for s in ListingStatus}:
            errors.append("Invalid listing status")

        if self.pricing.base_price < 0:
            errors.append("Base price cannot be negative")

        return ValidationResult.from_errors(errors)
