"""
Trip listing entity
"""
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field

from tripdb.models.base import DomainModel, ValidationResult


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"
    EXTREME = "extreme"


class Ratings(BaseModel):
    """Running mean of review ratings"""
    average: float = 0
    count: int = 0

    def add(self, rating: float) -> None:
        total = self.average * self.count
        self.count += 1
        self.average = (total + rating) / self.count


class Trip(DomainModel):
    """
    A bookable trip published by a host.
    ``is_active`` False marks a soft-deleted trip: still stored, hidden from listings.
    """
    title: str = ""
    description: str = ""
    location: Dict[str, Any] = Field(default_factory=dict)
    duration: str = ""
    price: float = 0
    max_group_size: int = 1
    difficulty: str = Difficulty.EASY.value
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    inclusions: List[str] = Field(default_factory=list)
    exclusions: List[str] = Field(default_factory=list)
    itinerary: List[Dict[str, Any]] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    # date (YYYY-MM-DD) -> remaining slots
    availability: Dict[str, int] = Field(default_factory=dict)
    ratings: Ratings = Field(default_factory=Ratings)
    is_active: bool = True
    is_featured: bool = False
    created_by: str = ""

    def is_available(self, day: Union[str, date]) -> bool:
        """Dates without an availability entry count as available."""
        key = day.isoformat()[:10] if isinstance(day, date) else day
        if key not in self.availability:
            return True
        return self.availability[key] > 0

    def matches_location(self, text: str) -> bool:
        needle = text.lower()
        return any(
            isinstance(self.location.get(part), str) and needle in self.location[part].lower()
            for part in ("country", "city", "region")
        )

    def validate_fields(self) -> ValidationResult:
        errors = []

        if not self.title.strip():
            errors.append("Title is required")

        if not self.description.strip():
            errors.append("Description is required")

        if self.price < 0:
            errors.append("Valid price is required")

        if self.max_group_size < 1:
            errors.append("Max group size must be at least 1")

        if self.difficulty not in {d.value for d in Difficulty}:
            errors.append("Difficulty must be easy, moderate, challenging, or extreme")

        return ValidationResult.from_errors(errors)
