"""Pydantic request and response schemas of the API."""

from contentbase.infrastructure.api.schemas.collection_schemas import (
    CollectionListResponse,
    CollectionResponse,
    CreateCollectionRequest,
    CreateFieldRequest,
    FieldResponse,
    ReorderFieldsRequest,
)
from contentbase.infrastructure.api.schemas.content_schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ContentValidationErrorResponse,
    EntryPage,
    EntryPayload,
    ExportRequest,
    ImportResponse,
    MessageResponse,
    SavedResponse,
    TranslationLinkResponse,
    TranslationRequest,
)
from contentbase.infrastructure.api.schemas.project_schemas import (
    CreateProjectRequest,
    ProjectListResponse,
    ProjectResponse,
)

__all__ = [
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "CollectionListResponse",
    "CollectionResponse",
    "ContentValidationErrorResponse",
    "CreateCollectionRequest",
    "CreateFieldRequest",
    "CreateProjectRequest",
    "EntryPage",
    "EntryPayload",
    "ExportRequest",
    "FieldResponse",
    "ImportResponse",
    "MessageResponse",
    "ProjectListResponse",
    "ProjectResponse",
    "ReorderFieldsRequest",
    "SavedResponse",
    "TranslationLinkResponse",
    "TranslationRequest",
]
