"""Project and collection entities.

A project configures the locales its content is written in; collections
are schema-bearing buckets of content entries inside a project.
"""

from dataclasses import dataclass, field
from typing import Any

from contentbase.domain.entities.field import Field, organize_fields


@dataclass
class Project:
    """Project entity.

    Attributes:
        id: Project identifier.
        name: Display name.
        default_locale: Locale used when none is chosen.
        locales: Configured locale codes (always contains ``default_locale``).
    """

    id: int
    name: str
    default_locale: str = "en"
    locales: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate project data after initialization."""
        if not self.name:
            raise ValueError("Project name is required")
        if not self.default_locale:
            self.default_locale = self.locales[0] if self.locales else "en"
        if not self.locales:
            self.locales = [self.default_locale]
        elif self.default_locale not in self.locales:
            self.locales = [self.default_locale, *self.locales]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            name=data.get("name") or f"project-{data['id']}",
            default_locale=data.get("default_locale") or "en",
            locales=list(data.get("locales") or []),
        )

    def has_locale(self, locale: str | None) -> bool:
        return locale in self.locales


@dataclass
class Collection:
    """Collection entity holding the field schema.

    Attributes:
        id: Collection identifier.
        project_id: Owning project.
        name: Display name.
        slug: URL-friendly name.
        is_singleton: At most one non-trashed entry per locale.
        fields: Flat field list (children included).
    """

    id: int
    project_id: int
    name: str
    slug: str = ""
    is_singleton: bool = False
    fields: list[Field] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Collection name is required")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Collection":
        flat: list[Field] = []
        for item in data.get("fields") or []:
            parsed = Field.from_dict(item)
            flat.append(parsed)
            # Nested payloads carry children inline; keep the list flat
            for child in parsed.children:
                flat.append(child)
            parsed.children = []
        return cls(
            id=data["id"],
            project_id=data["project_id"],
            name=data["name"],
            slug=data.get("slug") or "",
            is_singleton=bool(data.get("is_singleton", False)),
            fields=flat,
        )

    @property
    def organized_fields(self) -> list[Field]:
        """Top-level fields with group children attached."""
        return organize_fields(self.fields)

    def field_by_name(self, name: str) -> Field | None:
        """Find a top-level field by name."""
        for f in self.organized_fields:
            if f.name == name:
                return f
        return None
