"""
Base class for entities persisted in the document store.

Entities are pydantic models whose aliases are the camelCase keys of the
stored JSON object. Python code uses the snake_case attribute names; the store
only ever sees the aliased form produced by ``to_object``.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from tripdb.store.document_store import isoformat


def now_iso() -> str:
    return isoformat(datetime.now(timezone.utc))


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def as_utc(value: Union[datetime, str]) -> datetime:
    """Accept an ISO string or a datetime; naive datetimes are taken as UTC."""
    if isinstance(value, str):
        return parse_timestamp(value)
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@dataclass
class ValidationResult:
    """Outcome of an advisory ``validate_fields`` check."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=errors)


M = TypeVar("M", bound="DomainModel")


@dataclass
class CreateResult(Generic[M]):
    """Either a persisted entity or the reasons it was not persisted."""
    model: Optional[M] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.model is not None


class DomainModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, alias="_id")
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)
    version: int = Field(default=0, alias="_version")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # A stored null falls back to the field default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @classmethod
    def from_document(cls: type[M], document: Mapping[str, Any]) -> M:
        return cls.model_validate(dict(document))

    @classmethod
    def to_aliases(cls, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Map attribute names in ``values`` to their stored keys."""
        aliases = {name: info.alias or name for name, info in cls.model_fields.items()}
        return {aliases.get(key, key): value for key, value in values.items()}

    def apply(self, values: Mapping[str, Any]) -> None:
        """Assign ``values`` (attribute names or stored keys) in place, with type coercion."""
        merged = type(self).from_document({**self.to_object(), **type(self).to_aliases(values)})
        for name in type(self).model_fields:
            setattr(self, name, getattr(merged, name))

    def refresh_from(self, document: Mapping[str, Any]) -> None:
        """Copy the store-managed fields back after a write."""
        self.created_at = document.get("createdAt", self.created_at)
        self.updated_at = document.get("updatedAt", self.updated_at)
        self.version = document.get("_version", self.version)

    def touch(self) -> None:
        self.updated_at = now_iso()

    def to_object(self) -> Dict[str, Any]:
        """Storage form: every field under its stored key."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self) -> Dict[str, Any]:
        """Public form handed to callers outside the store."""
        return self.to_object()

    def validate_fields(self) -> ValidationResult:
        return ValidationResult(is_valid=True)
