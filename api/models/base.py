# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_date(value: Any) -> Any:
    """
    Truncate datetimes and ISO datetime strings to their date.

    Stored documents carry either plain dates ("2025-03-31") or full ISO
    timestamps ("2025-03-31T14:00:00.000Z"); all rules compare dates only.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class BaseEntity(BaseModel):
    """Base entity with common fields for all domain objects."""

    model_config = ConfigDict(
        # Documents are stored with camelCase keys
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
        # Unknown document keys (e.g. "_id" leftovers) are ignored
        extra="ignore"
    )

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")

    def update_timestamp(self) -> None:
        """Refresh the updated_at timestamp."""
        self.updated_at = utc_now()

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a storage document (camelCase, JSON-compatible, no id)."""
        return self.model_dump(by_alias=True, mode="json", exclude={"id"})

    @classmethod
    def from_document(cls, document: Dict[str, Any], doc_id: Optional[str] = None):
        """Build an entity from a storage document."""
        data = dict(document)
        if doc_id is not None:
            data["id"] = doc_id
        return cls.model_validate(data)


class BaseEntityCreate(BaseModel):
    """Base model for entity creation requests."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True
    )
