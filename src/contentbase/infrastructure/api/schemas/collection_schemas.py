"""Pydantic schemas for collection and field endpoints."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class CreateCollectionRequest(BaseModel):
    """Request body for creating a collection."""

    name: str = Field(..., min_length=1, max_length=255, description="Collection name")
    slug: str | None = Field(
        default=None,
        max_length=255,
        description="URL-safe identifier; derived from the name when omitted",
    )
    is_singleton: bool = Field(
        default=False,
        description="Allow at most one entry per locale",
    )


class CreateFieldRequest(BaseModel):
    """Request body for adding a field to a collection."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Field name (lowercase letters, digits and underscores, starts with a letter)",
    )
    label: str | None = Field(default=None, max_length=255, description="Display label")
    type: str = Field(
        ...,
        description=(
            "Field type: text, longtext, email, slug, password, number, enumeration, boolean, "
            "color, date, time, media, relation, richtext, json, group"
        ),
    )
    description: str | None = Field(default=None, description="Help text shown with the field")
    parent_field_id: int | None = Field(
        default=None,
        description="Enclosing group field, for group children",
    )
    order: int | None = Field(default=None, description="Position; appended when omitted")
    options: dict[str, Any] = Field(default_factory=dict, description="Type-specific options")
    validations: dict[str, Any] = Field(
        default_factory=dict,
        description="Rules: required, unique and charcount",
    )

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        """Normalize field type to lowercase."""
        return v.lower()


class ReorderFieldsRequest(BaseModel):
    field_ids: list[int] = Field(..., description="Field ids in their new order")


class FieldResponse(BaseModel):
    """A field definition."""

    id: int
    name: str
    label: str
    type: str
    order: int
    parent_field_id: int | None = None
    options: dict[str, Any] = Field(default_factory=dict)
    validations: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None


class CollectionResponse(BaseModel):
    """A collection with its flat field list."""

    id: int
    project_id: int
    name: str
    slug: str
    is_singleton: bool
    fields: list[FieldResponse] = Field(default_factory=list)


class CollectionListResponse(BaseModel):
    items: list[CollectionResponse]
    total: int
