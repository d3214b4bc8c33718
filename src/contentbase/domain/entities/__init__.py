"""Domain entities for ContentBase.

Entities are pure Python dataclasses that represent core content concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from contentbase.domain.entities.capabilities import UserCan
from contentbase.domain.entities.content_entry import (
    TRASHED_FILTER,
    ContentEntry,
    EntryStatus,
)
from contentbase.domain.entities.field import (
    MEDIA_TYPE_MULTIPLE,
    RELATION_TYPE_SINGLE,
    CharCountRule,
    Field,
    FieldType,
    FieldValidations,
    ValidationRule,
    flatten_fields,
    organize_fields,
)
from contentbase.domain.entities.project import Collection, Project

__all__ = [
    "CharCountRule",
    "Collection",
    "ContentEntry",
    "EntryStatus",
    "Field",
    "FieldType",
    "FieldValidations",
    "MEDIA_TYPE_MULTIPLE",
    "Project",
    "RELATION_TYPE_SINGLE",
    "TRASHED_FILTER",
    "UserCan",
    "ValidationRule",
    "flatten_fields",
    "organize_fields",
]
