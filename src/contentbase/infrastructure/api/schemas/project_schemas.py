"""Pydantic schemas for project endpoints."""

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    """Request body for creating a project."""

    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    default_locale: str = Field(default="en", description="Locale used when none is given")
    locales: list[str] = Field(
        default_factory=list,
        description="Supported locale codes; the default locale is always included",
    )


class ProjectResponse(BaseModel):
    """A project and its locale configuration."""

    id: int
    name: str
    default_locale: str
    locales: list[str]


class ProjectListResponse(BaseModel):
    items: list[ProjectResponse]
    total: int
