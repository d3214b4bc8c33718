"""Application services for ContentBase.

The client-side content engines (entry form, content list, translations,
relations, bulk actions) and the server-side ``ContentService``.
"""

from contentbase.application.services.bulk_actions import BulkActions, BulkResult
from contentbase.application.services.content_columns import (
    Column,
    ColumnFilter,
    FilterOption,
    FilterType,
    build_columns,
)
from contentbase.application.services.content_service import ContentService, serialize_entry
from contentbase.application.services.content_table import (
    ContentTable,
    FetchToken,
    PageInfo,
    TableState,
    content_page_name,
)
from contentbase.application.services.entry_form import EntryForm, SubmitAction, SubmitOutcome
from contentbase.application.services.errors import (
    ContentServiceError,
    ContentValidationError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from contentbase.application.services.ports import (
    Confirmer,
    LoggingNotifier,
    Navigator,
    Notifier,
    NullNavigator,
)
from contentbase.application.services.relation_resolver import RelationResolver, ResolvedRelation
from contentbase.application.services.schema_service import SchemaService
from contentbase.application.services.translation_linker import TranslationLinker

__all__ = [
    "BulkActions",
    "BulkResult",
    "Column",
    "ColumnFilter",
    "Confirmer",
    "ContentService",
    "ContentServiceError",
    "ContentTable",
    "ContentValidationError",
    "EntryForm",
    "FetchToken",
    "FilterOption",
    "FilterType",
    "LoggingNotifier",
    "Navigator",
    "Notifier",
    "NullNavigator",
    "PageInfo",
    "RelationResolver",
    "ResolvedRelation",
    "ResourceConflictError",
    "ResourceNotFoundError",
    "SchemaService",
    "SubmitAction",
    "SubmitOutcome",
    "TableState",
    "TranslationLinker",
    "build_columns",
    "content_page_name",
    "serialize_entry",
]
