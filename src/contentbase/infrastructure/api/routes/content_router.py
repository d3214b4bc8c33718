"""Content entry API routes.

Entry CRUD, trash handling, search, translation links, export and import
for one collection. Static paths are declared before ``/{entry_id}``.
"""

from typing import Any

from fastapi import APIRouter, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse, Response

from contentbase.application.services import ContentServiceError, ContentValidationError
from contentbase.core.logging import get_logger
from contentbase.infrastructure.api.dependencies import ContentServiceDep, DbSession
from contentbase.infrastructure.api.errors import error_response
from contentbase.infrastructure.api.schemas import (
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

logger = get_logger(__name__)

router = APIRouter()

VALIDATION_RESPONSE = {422: {"model": ContentValidationErrorResponse, "description": "Validation error"}}


@router.get("/search", response_model=EntryPage, responses=VALIDATION_RESPONSE)
async def search_entries(
    project_id: int,
    collection_id: int,
    request: Request,
    service: ContentServiceDep,
) -> dict[str, Any] | JSONResponse:
    """Search entries of a collection.

    Accepts ``search``, ``sort``, ``direction``, ``page``, ``per_page``,
    ``filter_status`` (``trashed`` lists the trash), ``filter_locale``,
    ``filter_translation_group_id`` and ``filter_<column>_from/_to`` date
    ranges for created_at, updated_at and published_at.
    """
    try:
        return await service.search(project_id, collection_id, dict(request.query_params))
    except ContentServiceError as e:
        return error_response(e)


@router.get("/find", response_model=None)
async def find_entries(
    project_id: int,
    collection_id: int,
    service: ContentServiceDep,
    ids: str = Query(default="", description="Comma separated entry ids"),
) -> list[dict[str, Any]] | JSONResponse:
    """Entries by id, in the requested order; unknown ids are skipped."""
    entry_ids = [int(part) for part in ids.split(",") if part.strip().isdigit()]
    try:
        return await service.find(project_id, collection_id, entry_ids)
    except ContentServiceError as e:
        return error_response(e)


@router.get(
    "/relation-collection",
    response_model=None,
    responses={404: {"description": "Collection not found"}},
)
async def relation_collection(
    project_id: int,
    collection_id: int,
    request: Request,
    service: ContentServiceDep,
) -> dict[str, Any] | JSONResponse:
    """Target collection of a relation field with its list columns.

    The ``collection_id`` query parameter names the target; it defaults to
    the current collection for self-relations.
    """
    raw_target = request.query_params.get("collection_id")
    target_id = int(raw_target) if raw_target and raw_target.isdigit() else collection_id
    try:
        return await service.relation_collection(project_id, target_id)
    except ContentServiceError as e:
        return error_response(e)


@router.post("/export", responses=VALIDATION_RESPONSE)
async def export_entries(
    project_id: int,
    collection_id: int,
    request: ExportRequest,
    service: ContentServiceDep,
) -> Response:
    try:
        content, media_type, filename = await service.export(project_id, collection_id, request.format)
    except ContentServiceError as e:
        return error_response(e)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=ImportResponse, responses=VALIDATION_RESPONSE)
async def import_entries(
    project_id: int,
    collection_id: int,
    file: UploadFile,
    service: ContentServiceDep,
    session: DbSession,
) -> ImportResponse | JSONResponse:
    """Import a JSON array or CSV file; invalid rows are reported and skipped."""
    content = await file.read()
    try:
        result = await service.import_entries(
            project_id, collection_id, file.filename or "import.json", content
        )
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return ImportResponse(**result)


@router.post("/bulk-delete", response_model=BulkDeleteResponse, responses=VALIDATION_RESPONSE)
async def bulk_delete_entries(
    project_id: int,
    collection_id: int,
    request: BulkDeleteRequest,
    service: ContentServiceDep,
    session: DbSession,
) -> BulkDeleteResponse | JSONResponse:
    """Permanently delete several entries; the acting user's password is required."""
    try:
        result = await service.bulk_force_delete(project_id, collection_id, request.ids, request.password)
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return BulkDeleteResponse(**result)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SavedResponse,
    responses={
        **VALIDATION_RESPONSE,
        404: {"description": "Collection not found"},
        409: {"description": "Singleton collection already has an entry in this locale"},
    },
)
async def create_entry(
    project_id: int,
    collection_id: int,
    payload: EntryPayload,
    service: ContentServiceDep,
    session: DbSession,
) -> SavedResponse | JSONResponse:
    try:
        result = await service.create_entry(project_id, collection_id, payload.model_dump())
        await session.commit()
    except ContentValidationError as e:
        logger.info(
            "Entry creation failed: validation errors",
            collection_id=collection_id,
            error_count=len(e.errors),
        )
        return error_response(e)
    except ContentServiceError as e:
        return error_response(e)
    return SavedResponse(**result)


@router.get("/{entry_id}", response_model=None, responses={404: {"description": "Entry not found"}})
async def get_entry(
    project_id: int,
    collection_id: int,
    entry_id: int,
    service: ContentServiceDep,
) -> dict[str, Any] | JSONResponse:
    try:
        return await service.get_entry(project_id, collection_id, entry_id)
    except ContentServiceError as e:
        return error_response(e)


@router.put(
    "/{entry_id}",
    response_model=SavedResponse,
    responses={**VALIDATION_RESPONSE, 404: {"description": "Entry not found"}},
)
async def update_entry(
    project_id: int,
    collection_id: int,
    entry_id: int,
    payload: EntryPayload,
    service: ContentServiceDep,
    session: DbSession,
) -> SavedResponse | JSONResponse:
    try:
        result = await service.update_entry(
            project_id, collection_id, entry_id, payload.model_dump(exclude_unset=True)
        )
        await session.commit()
    except ContentValidationError as e:
        logger.info(
            "Entry update failed: validation errors",
            collection_id=collection_id,
            entry_id=entry_id,
            error_count=len(e.errors),
        )
        return error_response(e)
    except ContentServiceError as e:
        return error_response(e)
    return SavedResponse(**result)


@router.delete(
    "/{entry_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Entry not found"}},
)
async def trash_entry(
    project_id: int,
    collection_id: int,
    entry_id: int,
    service: ContentServiceDep,
    session: DbSession,
) -> MessageResponse | JSONResponse:
    """Move an entry to the trash."""
    try:
        result = await service.trash(project_id, collection_id, entry_id)
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return MessageResponse(**result)


@router.delete(
    "/{entry_id}/force",
    response_model=MessageResponse,
    responses={404: {"description": "Entry not found"}},
)
async def force_delete_entry(
    project_id: int,
    collection_id: int,
    entry_id: int,
    service: ContentServiceDep,
    session: DbSession,
) -> MessageResponse | JSONResponse:
    """Permanently delete an entry, trashed or not."""
    try:
        result = await service.force_delete(project_id, collection_id, entry_id)
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return MessageResponse(**result)


@router.put(
    "/{entry_id}/restore",
    response_model=MessageResponse,
    responses={
        404: {"description": "Entry not found in the trash"},
        409: {"description": "Singleton collection already has an entry in this locale"},
    },
)
async def restore_entry(
    project_id: int,
    collection_id: int,
    entry_id: int,
    service: ContentServiceDep,
    session: DbSession,
) -> MessageResponse | JSONResponse:
    try:
        result = await service.restore(project_id, collection_id, entry_id)
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return MessageResponse(**result)


@router.post(
    "/{entry_id}/duplicate",
    status_code=status.HTTP_201_CREATED,
    response_model=SavedResponse,
    responses={
        404: {"description": "Entry not found"},
        409: {"description": "Singleton collection already has an entry in this locale"},
    },
)
async def duplicate_entry(
    project_id: int,
    collection_id: int,
    entry_id: int,
    service: ContentServiceDep,
    session: DbSession,
) -> SavedResponse | JSONResponse:
    try:
        result = await service.duplicate(project_id, collection_id, entry_id)
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return SavedResponse(**result)


@router.post(
    "/{entry_id}/link-translation",
    response_model=TranslationLinkResponse,
    responses={**VALIDATION_RESPONSE, 404: {"description": "Entry not found"}},
)
async def link_translation(
    project_id: int,
    collection_id: int,
    entry_id: int,
    request: TranslationRequest,
    service: ContentServiceDep,
    session: DbSession,
) -> TranslationLinkResponse | JSONResponse:
    try:
        result = await service.link_translation(
            project_id, collection_id, entry_id, request.translation_entry_id
        )
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return TranslationLinkResponse(**result)


@router.post(
    "/{entry_id}/unlink-translation",
    response_model=MessageResponse,
    responses={**VALIDATION_RESPONSE, 404: {"description": "Entry not found"}},
)
async def unlink_translation(
    project_id: int,
    collection_id: int,
    entry_id: int,
    request: TranslationRequest,
    service: ContentServiceDep,
    session: DbSession,
) -> MessageResponse | JSONResponse:
    try:
        result = await service.unlink_translation(
            project_id, collection_id, entry_id, request.translation_entry_id
        )
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return MessageResponse(**result)
