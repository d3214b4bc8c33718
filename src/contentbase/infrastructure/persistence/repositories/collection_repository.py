"""Repository for collection operations.

Provides CRUD operations for the collections table.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.infrastructure.persistence.models import CollectionModel


class CollectionRepository:
    """Repository for collection database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, collection: CollectionModel) -> CollectionModel:
        self.session.add(collection)
        await self.session.flush()
        return collection

    async def get_by_id(self, project_id: int, collection_id: int) -> CollectionModel | None:
        """Get a collection of a project.

        Args:
            project_id: The owning project.
            collection_id: The collection ID.

        Returns:
            The collection model if found in that project, None otherwise.
        """
        result = await self.session.execute(
            select(CollectionModel).where(
                CollectionModel.id == collection_id,
                CollectionModel.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, project_id: int, slug: str) -> bool:
        result = await self.session.execute(
            select(CollectionModel.id)
            .where(CollectionModel.project_id == project_id, CollectionModel.slug == slug)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_for_project(self, project_id: int) -> list[CollectionModel]:
        result = await self.session.execute(
            select(CollectionModel)
            .where(CollectionModel.project_id == project_id)
            .order_by(CollectionModel.name)
        )
        return list(result.scalars().all())
