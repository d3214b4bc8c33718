"""Repositories for ContentBase tables."""

from contentbase.infrastructure.persistence.repositories.collection_repository import (
    CollectionRepository,
)
from contentbase.infrastructure.persistence.repositories.content_entry_repository import (
    DATE_FILTER_COLUMNS,
    SORTABLE_COLUMNS,
    ContentEntryRepository,
    EntrySearch,
)
from contentbase.infrastructure.persistence.repositories.field_repository import FieldRepository
from contentbase.infrastructure.persistence.repositories.project_repository import (
    ProjectRepository,
)

__all__ = [
    "CollectionRepository",
    "ContentEntryRepository",
    "DATE_FILTER_COLUMNS",
    "EntrySearch",
    "FieldRepository",
    "ProjectRepository",
    "SORTABLE_COLUMNS",
]
