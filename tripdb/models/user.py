"""
User account entity with wishlist.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tripdb.models.base import DomainModel, ValidationResult, now_iso

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


class WishlistItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    type: str = "trip"
    added_at: str = Field(default_factory=now_iso)


class User(DomainModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    phone_number: str = ""
    date_of_birth: Optional[str] = None
    profile_image: str = ""
    role: str = "user"
    is_verified: bool = False
    preferences: Dict[str, Any] = Field(default_factory=dict)
    wishlist: List[WishlistItem] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_json(self) -> Dict[str, Any]:
        obj = self.to_object()
        obj.pop("password", None)
        return obj

    def add_to_wishlist(self, item_id: str, item_type: str = "trip") -> bool:
        """Append an item unless one with the same id is already listed."""
        if any(item.id == item_id for item in self.wishlist):
            return False
        self.wishlist.append(WishlistItem(id=item_id, type=item_type))
        return True

    def remove_from_wishlist(self, item_id: str) -> None:
        self.wishlist = [item for item in self.wishlist if item.id != item_id]

    @staticmethod
    def validate_email(email: str) -> bool:
        return bool(EMAIL_PATTERN.match(email or ""))

    @staticmethod
    def validate_password(password: str) -> bool:
        return bool(password) and len(password) >= MIN_PASSWORD_LENGTH

    def validate_fields(self) -> ValidationResult:
        errors = []

        if not self.first_name.strip():
            errors.append("First name is required")

        if not self.last_name.strip():
            errors.append("Last name is required")

        if not User.validate_email(self.email):
            errors.append("Valid email is required")

        if not User.validate_password(self.password):
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        return ValidationResult.from_errors(errors)
