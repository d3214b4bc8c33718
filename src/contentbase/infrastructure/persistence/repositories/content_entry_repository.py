"""Repository for content entry operations.

Provides CRUD, search and translation-group updates for the
content_entries table. Field values are handled by ``EntryValueStore``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any

from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from contentbase.domain.entities import FieldType
from contentbase.infrastructure.persistence.models import (
    ContentEntryModel,
    ContentFieldValueModel,
    FieldModel,
)

# Columns the search endpoint may sort on directly
SORTABLE_COLUMNS = ("id", "uuid", "status", "locale", "created_at", "updated_at", "published_at")

# Columns the search endpoint may filter by date range
DATE_FILTER_COLUMNS = ("created_at", "updated_at", "published_at")

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


@dataclass
class EntrySearch:
    """Search criteria of the content list.

    Attributes:
        search: Free text matched against text/number values, id and uuid.
        status: ``draft`` or ``published``.
        trashed: Select soft-deleted entries instead of live ones.
        locale: Restrict to one locale.
        translation_group_id: Restrict to one translation group.
        date_ranges: Inclusive day ranges per timestamp column.
        sort: Standard column to sort on.
        sort_value: ``(field_id, value column)`` to sort on a field value.
        direction: ``asc`` or ``desc``.
        page: One-based page.
        per_page: Page size.
    """

    search: str | None = None
    status: str | None = None
    trashed: bool = False
    locale: str | None = None
    translation_group_id: str | None = None
    date_ranges: dict[str, tuple[date | None, date | None]] = field(default_factory=dict)
    sort: str = "updated_at"
    sort_value: tuple[int, str] | None = None
    direction: str = "desc"
    page: int = 1
    per_page: int = 10


class ContentEntryRepository:
    """Repository for content entry database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, entry: ContentEntryModel) -> ContentEntryModel:
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def save(self, entry: ContentEntryModel) -> ContentEntryModel:
        """Flush pending changes of an entry and reload server-side defaults."""
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_id(
        self, collection_id: int, entry_id: int, include_trashed: bool = False
    ) -> ContentEntryModel | None:
        """Get an entry of a collection.

        Args:
            collection_id: The owning collection.
            entry_id: The entry ID.
            include_trashed: Also return soft-deleted entries.

        Returns:
            The entry model if found, None otherwise.
        """
        query = select(ContentEntryModel).where(
            ContentEntryModel.id == entry_id,
            ContentEntryModel.collection_id == collection_id,
        )
        if not include_trashed:
            query = query.where(ContentEntryModel.deleted_at.is_(None))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_ids(self, collection_id: int, entry_ids: list[int]) -> list[ContentEntryModel]:
        """Live entries by id, in the order of ``entry_ids``."""
        if not entry_ids:
            return []
        result = await self.session.execute(
            select(ContentEntryModel).where(
                ContentEntryModel.collection_id == collection_id,
                ContentEntryModel.id.in_(entry_ids),
                ContentEntryModel.deleted_at.is_(None),
            )
        )
        by_id = {entry.id: entry for entry in result.scalars().all()}
        return [by_id[i] for i in entry_ids if i in by_id]

    async def list_for_collection(self, collection_id: int) -> list[ContentEntryModel]:
        """All live entries of a collection, oldest first."""
        result = await self.session.execute(
            select(ContentEntryModel)
            .where(
                ContentEntryModel.collection_id == collection_id,
                ContentEntryModel.deleted_at.is_(None),
            )
            .order_by(ContentEntryModel.id)
        )
        return list(result.scalars().all())

    async def locale_taken(
        self, collection_id: int, locale: str, exclude_entry_id: int | None = None
    ) -> bool:
        """Whether a live entry already exists in ``locale`` (singleton check)."""
        query = select(ContentEntryModel.id).where(
            ContentEntryModel.collection_id == collection_id,
            ContentEntryModel.locale == locale,
            ContentEntryModel.deleted_at.is_(None),
        )
        if exclude_entry_id is not None:
            query = query.where(ContentEntryModel.id != exclude_entry_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def value_taken(
        self,
        collection_id: int,
        field_id: int,
        column: str,
        value: Any,
        exclude_entry_id: int | None = None,
    ) -> bool:
        """Whether another live entry holds ``value`` for a field (unique rule)."""
        value_column = getattr(ContentFieldValueModel, column)
        query = (
            select(ContentFieldValueModel.id)
            .join(ContentEntryModel, ContentEntryModel.id == ContentFieldValueModel.entry_id)
            .where(
                ContentEntryModel.collection_id == collection_id,
                ContentEntryModel.deleted_at.is_(None),
                ContentFieldValueModel.field_id == field_id,
                value_column == value,
            )
        )
        if exclude_entry_id is not None:
            query = query.where(ContentEntryModel.id != exclude_entry_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def search(self, collection_id: int, criteria: EntrySearch) -> tuple[list[ContentEntryModel], int]:
        """Search entries of a collection.

        Returns:
            The requested page of entries and the total number of matches.
        """
        conditions: list[ColumnElement[bool]] = [ContentEntryModel.collection_id == collection_id]
        if criteria.trashed:
            conditions.append(ContentEntryModel.deleted_at.is_not(None))
        else:
            conditions.append(ContentEntryModel.deleted_at.is_(None))
        if criteria.status:
            conditions.append(ContentEntryModel.status == criteria.status)
        if criteria.locale:
            conditions.append(ContentEntryModel.locale == criteria.locale)
        if criteria.translation_group_id:
            conditions.append(
                ContentEntryModel.translation_group_id == criteria.translation_group_id
            )
        for column_name, (start, end) in criteria.date_ranges.items():
            column = getattr(ContentEntryModel, column_name)
            if start is not None:
                conditions.append(column >= datetime.combine(start, time.min))
            if end is not None:
                conditions.append(column < datetime.combine(end + timedelta(days=1), time.min))
        if criteria.search:
            conditions.append(self._search_condition(criteria.search))

        total = await self.session.scalar(
            select(func.count()).select_from(ContentEntryModel).where(*conditions)
        )

        query = select(ContentEntryModel).where(*conditions)
        descending = criteria.direction == "desc"
        if criteria.sort_value is not None:
            field_id, column_name = criteria.sort_value
            value_column = getattr(ContentFieldValueModel, column_name)
            sort_key = (
                select(value_column)
                .where(
                    ContentFieldValueModel.entry_id == ContentEntryModel.id,
                    ContentFieldValueModel.field_id == field_id,
                    ContentFieldValueModel.group_instance_id.is_(None),
                )
                .order_by(ContentFieldValueModel.sort_order)
                .limit(1)
                .scalar_subquery()
            )
            ordering = sort_key.desc() if descending else sort_key.asc()
            query = query.order_by(ordering.nulls_last(), ContentEntryModel.id.desc())
        else:
            column = getattr(ContentEntryModel, criteria.sort)
            ordering = column.desc() if descending else column.asc()
            query = query.order_by(ordering.nulls_last(), ContentEntryModel.id.desc())

        query = query.offset((criteria.page - 1) * criteria.per_page).limit(criteria.per_page)
        result = await self.session.execute(query)
        return list(result.scalars().all()), int(total or 0)

    @staticmethod
    def _search_condition(search: str) -> ColumnElement[bool]:
        pattern = f"%{escape_like(search)}%"
        # Password hashes are stored as text values and must never be searchable
        matching_values = (
            select(ContentFieldValueModel.entry_id)
            .join(FieldModel, FieldModel.id == ContentFieldValueModel.field_id)
            .where(
                FieldModel.type != FieldType.PASSWORD.value,
                or_(
                    ContentFieldValueModel.text_value.ilike(pattern, escape=LIKE_ESCAPE),
                    cast(ContentFieldValueModel.number_value, String).like(pattern, escape=LIKE_ESCAPE),
                ),
            )
        )
        conditions = [
            ContentEntryModel.id.in_(matching_values),
            ContentEntryModel.uuid.like(pattern, escape=LIKE_ESCAPE),
        ]
        if search.isdigit():
            conditions.append(ContentEntryModel.id == int(search))
        return or_(*conditions)

    async def delete(self, entry: ContentEntryModel) -> None:
        await self.session.delete(entry)
        await self.session.flush()

    async def reassign_translation_group(self, collection_id: int, old_group: str, new_group: str) -> int:
        """Move every entry of ``old_group`` into ``new_group``.

        Returns:
            Number of entries moved.
        """
        result = await self.session.execute(
            update(ContentEntryModel)
            .where(
                ContentEntryModel.collection_id == collection_id,
                ContentEntryModel.translation_group_id == old_group,
            )
            .values(translation_group_id=new_group)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

