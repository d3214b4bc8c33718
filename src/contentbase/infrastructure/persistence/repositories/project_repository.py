"""Repository for project operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.infrastructure.persistence.models import ProjectModel


class ProjectRepository:
    """Repository for project database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, project: ProjectModel) -> ProjectModel:
        self.session.add(project)
        await self.session.flush()
        return project

    async def get_by_id(self, project_id: int) -> ProjectModel | None:
        result = await self.session.execute(
            select(ProjectModel).where(ProjectModel.id == project_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[ProjectModel]:
        result = await self.session.execute(select(ProjectModel).order_by(ProjectModel.id))
        return list(result.scalars().all())
