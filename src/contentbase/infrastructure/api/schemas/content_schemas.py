"""Pydantic schemas for content entry endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class EntryPayload(BaseModel):
    """Request body for creating or updating an entry."""

    data: dict[str, Any] = Field(default_factory=dict, description="Field values keyed by field name")
    status: Literal["draft", "published"] | None = Field(
        default=None,
        description="Entry status; new entries default to draft",
    )
    locale: str | None = Field(
        default=None,
        description="Entry locale; new entries default to the project's default locale",
    )


class TranslationRequest(BaseModel):
    translation_entry_id: int = Field(..., description="The other entry of the translation pair")


class ExportRequest(BaseModel):
    format: Literal["json", "csv", "excel"] = Field(default="json", description="Export file format")


class BulkDeleteRequest(BaseModel):
    """Request body for permanently deleting several entries."""

    ids: list[int] = Field(..., min_length=1, description="Entries to delete")
    password: str | None = Field(default=None, description="The acting user's password, re-entered")


class SavedResponse(BaseModel):
    """Response of a save, duplicate or other mutating entry operation."""

    message: str
    entry_id: int | None = None


class MessageResponse(BaseModel):
    message: str


class TranslationLinkResponse(BaseModel):
    message: str
    translation_group_id: str


class BulkDeleteResponse(BaseModel):
    message: str
    deleted: list[int] = Field(default_factory=list, description="Ids deleted permanently")
    failed: dict[int, str] = Field(default_factory=dict, description="Error message per id not deleted")


class ImportResponse(BaseModel):
    imported: int = Field(..., description="Number of entries created")
    errors: list[str] = Field(default_factory=list, description="One message per rejected row")


class ContentValidationErrorResponse(BaseModel):
    """Response for entry validation errors."""

    error: str = Field(default="Validation error", description="Error type")
    message: str = Field(..., description="First error message")
    errors: dict[str, list[str]] = Field(..., description="Messages keyed by field path")


class EntryPage(BaseModel):
    """One page of entries."""

    data: list[dict[str, Any]]
    current_page: int
    last_page: int
    per_page: int
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None
    total: int

    model_config = {"populate_by_name": True}
