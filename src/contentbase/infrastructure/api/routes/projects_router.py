"""Projects API routes."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from contentbase.application.services import ContentServiceError
from contentbase.application.services.schema_service import project_to_dict
from contentbase.core.logging import get_logger
from contentbase.infrastructure.api.dependencies import DbSession, SchemaServiceDep
from contentbase.infrastructure.api.errors import error_response
from contentbase.infrastructure.api.schemas import (
    CreateProjectRequest,
    ProjectListResponse,
    ProjectResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProjectResponse,
    responses={422: {"description": "Invalid name or locale"}},
)
async def create_project(
    request: CreateProjectRequest,
    service: SchemaServiceDep,
    session: DbSession,
) -> ProjectResponse | JSONResponse:
    """Create a project with its supported locales."""
    try:
        project = await service.create_project(
            name=request.name,
            default_locale=request.default_locale,
            locales=request.locales,
        )
        await session.commit()
    except ContentServiceError as e:
        return error_response(e)
    return ProjectResponse(**project_to_dict(project))


@router.get("", response_model=ProjectListResponse)
async def list_projects(service: SchemaServiceDep) -> ProjectListResponse:
    projects = await service.list_projects()
    return ProjectListResponse(
        items=[ProjectResponse(**project_to_dict(p)) for p in projects],
        total=len(projects),
    )


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    responses={404: {"description": "Project not found"}},
)
async def get_project(project_id: int, service: SchemaServiceDep) -> ProjectResponse | JSONResponse:
    try:
        project = await service.get_project(project_id)
    except ContentServiceError as e:
        return error_response(e)
    return ProjectResponse(**project_to_dict(project))
