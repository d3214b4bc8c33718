"""Repository for collection field operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.infrastructure.persistence.models import FieldModel


class FieldRepository:
    """Repository for field database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, field: FieldModel) -> FieldModel:
        self.session.add(field)
        await self.session.flush()
        return field

    async def get_by_id(self, collection_id: int, field_id: int) -> FieldModel | None:
        result = await self.session.execute(
            select(FieldModel).where(
                FieldModel.id == field_id,
                FieldModel.collection_id == collection_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_collection(self, collection_id: int) -> list[FieldModel]:
        """All fields of a collection (children included), in display order."""
        result = await self.session.execute(
            select(FieldModel)
            .where(FieldModel.collection_id == collection_id)
            .order_by(FieldModel.order, FieldModel.id)
        )
        return list(result.scalars().all())

    async def name_exists(
        self, collection_id: int, name: str, parent_field_id: int | None = None
    ) -> bool:
        """Check whether a sibling field already uses ``name``."""
        query = select(FieldModel.id).where(
            FieldModel.collection_id == collection_id,
            FieldModel.name == name,
        )
        if parent_field_id is None:
            query = query.where(FieldModel.parent_field_id.is_(None))
        else:
            query = query.where(FieldModel.parent_field_id == parent_field_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def next_order(self, collection_id: int) -> int:
        fields = await self.list_for_collection(collection_id)
        return max((f.order for f in fields), default=-1) + 1

    async def reorder(self, collection_id: int, field_ids: list[int]) -> list[FieldModel]:
        """Assign ``order`` following ``field_ids``; unknown ids are ignored.

        Returns:
            The fields of the collection in their new order.
        """
        fields = {f.id: f for f in await self.list_for_collection(collection_id)}
        for position, field_id in enumerate(field_ids):
            if field_id in fields:
                fields[field_id].order = position
        await self.session.flush()
        return await self.list_for_collection(collection_id)
