from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_serializer


class StringProperties(BaseModel):
    """Derived properties of a string, computed once at creation."""
    length: int
    is_palindrome: bool
    unique_characters: int
    word_count: int
    sha256_hash: str
    character_frequency_map: Dict[str, int]

    class Config:
        frozen = True
        from_attributes = True


class StringResponse(BaseModel):
    id: str
    value: str
    properties: StringProperties
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("created_at")
    def serialize_created_at(self, created_at: datetime) -> str:
        # SQLite hands back naive datetimes; everything is stored as UTC
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        created_at = created_at.astimezone(timezone.utc)
        return created_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @classmethod
    def from_record(cls, record) -> "StringResponse":
        return cls(
            id=record.id,
            value=record.value,
            properties=StringProperties.model_validate(record),
            created_at=record.created_at
        )


class StringListResponse(BaseModel):
    data: List[StringResponse]
    count: int
    filters_applied: Dict[str, Any] = Field(default_factory=dict)


class InterpretedQuery(BaseModel):
    original: str
    parsed_filters: Dict[str, Any]


class NaturalLanguageResponse(BaseModel):
    data: List[StringResponse]
    count: int
    interpreted_query: InterpretedQuery
