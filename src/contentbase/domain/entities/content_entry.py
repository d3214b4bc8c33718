"""Content entry entity.

One entry is one row of content for one locale within a collection.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class EntryStatus(str, Enum):
    """Publish state of an entry."""

    DRAFT = "draft"
    PUBLISHED = "published"


# Pseudo status used by list filters to select soft-deleted entries
TRASHED_FILTER = "trashed"


@dataclass
class ContentEntry:
    """Content entry entity.

    Attributes:
        id: Numeric identifier.
        uuid: Public identifier.
        project_id: Owning project.
        collection_id: Owning collection.
        locale: Locale code from the project's configured set.
        status: Draft or published.
        translation_group_id: Shared id of entries that translate each other.
        published_at: First publication time.
        created_at: Creation time.
        updated_at: Last update time.
        created_by: Creator identity.
        updated_by: Last updater identity.
        deleted_at: Soft-trash marker.
        data: Field values keyed by field name.
    """

    id: int
    uuid: str
    project_id: int
    collection_id: int
    locale: str
    status: EntryStatus = EntryStatus.DRAFT
    translation_group_id: str | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None
    deleted_at: datetime | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.locale:
            raise ValueError("Entry locale is required")
        if not isinstance(self.status, EntryStatus):
            self.status = EntryStatus(self.status)

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_published(self) -> bool:
        return self.status is EntryStatus.PUBLISHED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentEntry":
        """Build an entry from an API row (timestamps as ISO strings)."""
        return cls(
            id=data["id"],
            uuid=data.get("uuid") or "",
            project_id=data.get("project_id") or 0,
            collection_id=data.get("collection_id") or 0,
            locale=data.get("locale") or "en",
            status=data.get("status") or EntryStatus.DRAFT,
            translation_group_id=data.get("translation_group_id"),
            published_at=_parse_datetime(data.get("published_at")),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            created_by=data.get("created_by"),
            updated_by=data.get("updated_by"),
            deleted_at=_parse_datetime(data.get("deleted_at")),
            data=dict(data.get("data") or data.get("fields") or {}),
        )


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
