"""Collections and fields API routes.

The schema-management surface: create and read collections of a project,
add fields and change their order.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from contentbase.application.services import ContentServiceError
from contentbase.application.services.schema_service import collection_to_dict
from contentbase.core.logging import get_logger
from contentbase.infrastructure.api.dependencies import DbSession, SchemaServiceDep
from contentbase.infrastructure.api.errors import error_response
from contentbase.infrastructure.api.schemas import (
    CollectionListResponse,
    CollectionResponse,
    CreateCollectionRequest,
    CreateFieldRequest,
    FieldResponse,
    ReorderFieldsRequest,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CollectionResponse,
    responses={
        404: {"description": "Project not found"},
        409: {"description": "Slug already used in the project"},
        422: {"description": "Invalid name or slug"},
    },
)
async def create_collection(
    project_id: int,
    request: CreateCollectionRequest,
    service: SchemaServiceDep,
    session: DbSession,
) -> CollectionResponse | JSONResponse:
    try:
        collection = await service.create_collection(
            project_id,
            name=request.name,
            slug=request.slug,
            is_singleton=request.is_singleton,
        )
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return CollectionResponse(**collection_to_dict(collection))


@router.get(
    "",
    response_model=CollectionListResponse,
    responses={404: {"description": "Project not found"}},
)
async def list_collections(
    project_id: int, service: SchemaServiceDep
) -> CollectionListResponse | JSONResponse:
    try:
        collections = await service.list_collections(project_id)
    except ContentServiceError as e:
        return error_response(e)
    return CollectionListResponse(
        items=[CollectionResponse(**collection_to_dict(c)) for c in collections],
        total=len(collections),
    )


@router.get(
    "/{collection_id}",
    response_model=CollectionResponse,
    responses={404: {"description": "Collection not found"}},
)
async def get_collection(
    project_id: int, collection_id: int, service: SchemaServiceDep
) -> CollectionResponse | JSONResponse:
    """Get a collection with all of its fields, group children included."""
    try:
        collection = await service.get_collection(project_id, collection_id)
    except ContentServiceError as e:
        return error_response(e)
    return CollectionResponse(**collection_to_dict(collection))


@router.get(
    "/{collection_id}/fields",
    response_model=list[FieldResponse],
    responses={404: {"description": "Collection not found"}},
)
async def list_fields(
    project_id: int, collection_id: int, service: SchemaServiceDep
) -> list[FieldResponse] | JSONResponse:
    try:
        collection = await service.get_collection(project_id, collection_id)
    except ContentServiceError as e:
        return error_response(e)
    return [FieldResponse(**f) for f in collection_to_dict(collection)["fields"]]


@router.post(
    "/{collection_id}/fields",
    status_code=status.HTTP_201_CREATED,
    response_model=FieldResponse,
    responses={
        404: {"description": "Collection not found"},
        409: {"description": "Field name already used"},
        422: {"description": "Invalid field definition"},
    },
)
async def create_field(
    project_id: int,
    collection_id: int,
    request: CreateFieldRequest,
    service: SchemaServiceDep,
    session: DbSession,
) -> FieldResponse | JSONResponse:
    """Add a field to a collection.

    Group children are created by passing the group's id as
    ``parent_field_id``; groups cannot be nested.
    """
    try:
        field = await service.create_field(project_id, collection_id, request.model_dump())
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)

    data = field.to_dict()
    data.pop("children", None)
    return FieldResponse(**data)


@router.put(
    "/{collection_id}/fields/reorder",
    response_model=list[FieldResponse],
    responses={404: {"description": "Collection not found"}},
)
async def reorder_fields(
    project_id: int,
    collection_id: int,
    request: ReorderFieldsRequest,
    service: SchemaServiceDep,
    session: DbSession,
) -> list[FieldResponse] | JSONResponse:
    try:
        await service.reorder_fields(project_id, collection_id, request.field_ids)
        await session.commit()
        collection = await service.get_collection(project_id, collection_id)
    except ContentServiceError as e:
        return error_response(e)

    logger.info("Fields reordered", collection_id=collection_id, count=len(request.field_ids))
    return [FieldResponse(**f) for f in collection_to_dict(collection)["fields"]]
