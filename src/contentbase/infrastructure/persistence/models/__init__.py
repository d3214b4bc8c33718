"""SQLAlchemy models for ContentBase tables.

All models inherit from the Base class defined in database.py.
"""

from contentbase.infrastructure.persistence.models.collection import CollectionModel
from contentbase.infrastructure.persistence.models.content_entry import ContentEntryModel
from contentbase.infrastructure.persistence.models.content_field_group import (
    ContentFieldGroupModel,
)
from contentbase.infrastructure.persistence.models.content_field_value import (
    ContentFieldValueModel,
)
from contentbase.infrastructure.persistence.models.content_media_value import (
    ContentMediaValueModel,
)
from contentbase.infrastructure.persistence.models.content_relation_value import (
    ContentRelationValueModel,
)
from contentbase.infrastructure.persistence.models.field import FieldModel
from contentbase.infrastructure.persistence.models.project import ProjectModel

__all__ = [
    "CollectionModel",
    "ContentEntryModel",
    "ContentFieldGroupModel",
    "ContentFieldValueModel",
    "ContentMediaValueModel",
    "ContentRelationValueModel",
    "FieldModel",
    "ProjectModel",
]
