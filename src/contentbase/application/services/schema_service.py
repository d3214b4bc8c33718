"""Schema management: projects, collections and their fields.

The content engines consume schemas read-only; this service backs the
endpoints that create and arrange them.
"""

import re
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.application.services.errors import (
    ContentValidationError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from contentbase.core.logging import get_logger
from contentbase.domain.entities import Collection, Field, FieldType, FieldValidations, Project
from contentbase.domain.services.slug_generator import SlugGenerator
from contentbase.infrastructure.persistence.models import CollectionModel, FieldModel, ProjectModel
from contentbase.infrastructure.persistence.repositories import (
    CollectionRepository,
    FieldRepository,
    ProjectRepository,
)

logger = get_logger(__name__)

FIELD_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
LOCALE_PATTERN = re.compile(r"^[a-z]{2,3}([_-][A-Za-z]{2,4})?$")


def to_project(model: ProjectModel) -> Project:
    return Project(
        id=model.id,
        name=model.name,
        default_locale=model.default_locale,
        locales=list(model.locales or []),
    )


def to_field(model: FieldModel) -> Field:
    return Field(
        id=model.id,
        name=model.name,
        label=model.label,
        type=model.type,
        order=model.order,
        parent_field_id=model.parent_field_id,
        options=dict(model.options or {}),
        validations=FieldValidations.from_dict(model.validations),
        description=model.description,
    )


def to_collection(model: CollectionModel, fields: list[FieldModel]) -> Collection:
    return Collection(
        id=model.id,
        project_id=model.project_id,
        name=model.name,
        slug=model.slug,
        is_singleton=model.is_singleton,
        fields=[to_field(f) for f in fields],
    )


def project_to_dict(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "default_locale": project.default_locale,
        "locales": project.locales,
    }


def collection_to_dict(collection: Collection, fields: list[Field] | None = None) -> dict[str, Any]:
    """API shape of a collection; ``fields`` defaults to all of its fields."""
    field_list = collection.fields if fields is None else fields
    return {
        "id": collection.id,
        "project_id": collection.project_id,
        "name": collection.name,
        "slug": collection.slug,
        "is_singleton": collection.is_singleton,
        "fields": [_field_to_dict(f) for f in field_list],
    }


def _field_to_dict(field: Field) -> dict[str, Any]:
    data = field.to_dict()
    data.pop("children", None)
    return data


class SchemaService:
    """Create and read projects, collections and fields."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.projects = ProjectRepository(session)
        self.collections = CollectionRepository(session)
        self.fields = FieldRepository(session)

    async def create_project(
        self, name: str, default_locale: str = "en", locales: list[str] | None = None
    ) -> Project:
        """Create a project.

        Raises:
            ContentValidationError: If the name or a locale code is invalid.
        """
        errors: dict[str, list[str]] = {}
        if not name or not name.strip():
            errors["name"] = ["The name field is required."]
        codes = [default_locale, *(locales or [])]
        invalid = [code for code in codes if not code or not LOCALE_PATTERN.match(code)]
        if invalid:
            errors["locales"] = [f"Invalid locale code '{code}'." for code in invalid]
        if errors:
            raise ContentValidationError(errors)

        ordered = list(dict.fromkeys(codes))
        model = await self.projects.create(
            ProjectModel(name=name.strip(), default_locale=default_locale, locales=ordered)
        )
        logger.info("Project created", project_id=model.id, locales=ordered)
        return to_project(model)

    async def get_project(self, project_id: int) -> Project:
        model = await self.projects.get_by_id(project_id)
        if model is None:
            raise ResourceNotFoundError(f"Project with ID '{project_id}' not found")
        return to_project(model)

    async def list_projects(self) -> list[Project]:
        return [to_project(model) for model in await self.projects.list_all()]

    async def create_collection(
        self, project_id: int, name: str, slug: str | None = None, is_singleton: bool = False
    ) -> Collection:
        """Create an empty collection in a project.

        Raises:
            ResourceNotFoundError: If the project does not exist.
            ContentValidationError: If the name or slug is invalid.
            ResourceConflictError: If the slug is already used in the project.
        """
        await self.get_project(project_id)
        if not name or not name.strip():
            raise ContentValidationError({"name": ["The name field is required."]})

        slug = slug or SlugGenerator.generate(name)
        slug_errors = SlugGenerator.validate(slug, "slug")
        if slug_errors:
            raise ContentValidationError({"slug": [e.message for e in slug_errors]})
        if await self.collections.slug_exists(project_id, slug):
            raise ResourceConflictError(f"A collection with slug '{slug}' already exists")

        model = await self.collections.create(
            CollectionModel(
                project_id=project_id,
                name=name.strip(),
                slug=slug,
                is_singleton=is_singleton,
            )
        )
        logger.info("Collection created", project_id=project_id, collection_id=model.id, slug=slug)
        return to_collection(model, [])

    async def get_collection(self, project_id: int, collection_id: int) -> Collection:
        """Load a collection with its flat field list.

        Raises:
            ResourceNotFoundError: If the collection is not in the project.
        """
        model = await self.collections.get_by_id(project_id, collection_id)
        if model is None:
            raise ResourceNotFoundError(f"Collection with ID '{collection_id}' not found")
        fields = await self.fields.list_for_collection(collection_id)
        return to_collection(model, fields)

    async def list_collections(self, project_id: int) -> list[Collection]:
        await self.get_project(project_id)
        return [to_collection(model, []) for model in await self.collections.list_for_project(project_id)]

    async def load(self, project_id: int, collection_id: int) -> tuple[Project, Collection]:
        return await self.get_project(project_id), await self.get_collection(project_id, collection_id)

    async def create_field(self, project_id: int, collection_id: int, data: dict[str, Any]) -> Field:
        """Add a field to a collection.

        Raises:
            ResourceNotFoundError: If the collection does not exist.
            ContentValidationError: If the definition is invalid.
            ResourceConflictError: If a sibling already uses the name.
        """
        collection = await self.get_collection(project_id, collection_id)
        name = (data.get("name") or "").strip()
        field_type = data.get("type")
        parent_id = data.get("parent_field_id")

        errors: dict[str, list[str]] = {}
        if not FIELD_NAME_PATTERN.match(name):
            errors["name"] = [
                "The name must start with a lowercase letter and contain only "
                "lowercase letters, digits and underscores."
            ]
        if field_type not in {t.value for t in FieldType}:
            errors["type"] = [f"Unknown field type '{field_type}'."]
        if parent_id is not None:
            parent = next((f for f in collection.fields if f.id == parent_id), None)
            if parent is None or parent.type is not FieldType.GROUP or parent.parent_field_id is not None:
                errors["parent_field_id"] = ["The parent must be a top-level group field."]
            elif field_type == FieldType.GROUP.value:
                errors["type"] = ["Groups cannot be nested."]
        if errors:
            raise ContentValidationError(errors)

        if await self.fields.name_exists(collection_id, name, parent_id):
            raise ResourceConflictError(f"A field named '{name}' already exists")

        order = data.get("order")
        if order is None:
            order = await self.fields.next_order(collection_id)
        model = await self.fields.create(
            FieldModel(
                collection_id=collection_id,
                parent_field_id=parent_id,
                name=name,
                label=data.get("label") or name,
                type=field_type,
                description=data.get("description"),
                options=dict(data.get("options") or {}),
                validations=FieldValidations.from_dict(data.get("validations")).to_dict(),
                order=order,
            )
        )
        logger.info("Field created", collection_id=collection_id, field=name, type=field_type)
        return to_field(model)

    async def reorder_fields(self, project_id: int, collection_id: int, field_ids: list[int]) -> list[Field]:
        await self.get_collection(project_id, collection_id)
        models = await self.fields.reorder(collection_id, field_ids)
        return [to_field(model) for model in models]
