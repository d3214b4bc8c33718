"""Typed storage of entry field values.

Maps form values onto the typed value tables and back:

- scalar values go to ``content_field_values``, one typed column per type;
- repeatable (wrapped) fields store one row per item and read back as
  ``[{"value": ...}]``;
- groups store one ``content_field_groups`` row per instance; non-repeatable
  groups read back as a one-element list;
- media and relation values store one row per id, in order.
"""

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, assert_never

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.core.logging import get_logger
from contentbase.domain.entities import Field, FieldType
from contentbase.domain.services.entry_validator import DATE_RANGE_SEPARATOR, is_empty
from contentbase.domain.services.value_normalizer import (
    coerce_media_change,
    default_instance,
    empty_value,
    extract_id,
    parse_enumeration,
    parse_id_list,
)
from contentbase.infrastructure.persistence.models import (
    ContentFieldGroupModel,
    ContentFieldValueModel,
    ContentMediaValueModel,
    ContentRelationValueModel,
)
from contentbase.infrastructure.security import hash_password, is_password_hash

logger = get_logger(__name__)

# (field_id, group position or None) -> stored password hash
PasswordHashes = dict[tuple[int, int | None], str]


def value_column(field: Field) -> str | None:
    """The typed column holding a field's comparable value.

    Used for unique checks and for sorting on a field. ``None`` for types
    that are not compared by value.
    """
    match field.type:
        case (
            FieldType.TEXT
            | FieldType.LONGTEXT
            | FieldType.EMAIL
            | FieldType.SLUG
            | FieldType.COLOR
            | FieldType.TIME
        ):
            return "text_value"
        case FieldType.NUMBER:
            return "number_value"
        case FieldType.BOOLEAN:
            return "boolean_value"
        case FieldType.DATE:
            return "datetime_value" if field.include_time else "date_value"
        case (
            FieldType.PASSWORD
            | FieldType.ENUMERATION
            | FieldType.RICHTEXT
            | FieldType.JSON
            | FieldType.MEDIA
            | FieldType.RELATION
            | FieldType.GROUP
        ):
            return None
        case _:
            assert_never(field.type)


def to_columns(field: Field, value: Any) -> dict[str, Any]:
    """Typed column values for one non-empty scalar value.

    Raises:
        ValueError: If the value cannot be stored in the field's column,
            or the field type is not stored as a scalar.
    """
    match field.type:
        case (
            FieldType.TEXT
            | FieldType.LONGTEXT
            | FieldType.EMAIL
            | FieldType.SLUG
            | FieldType.PASSWORD
            | FieldType.COLOR
            | FieldType.TIME
        ):
            return {"text_value": str(value)}
        case FieldType.NUMBER:
            return {"number_value": float(value)}
        case FieldType.BOOLEAN:
            if isinstance(value, str):
                return {"boolean_value": value.strip().lower() in ("1", "true", "yes", "on")}
            return {"boolean_value": bool(value)}
        case FieldType.ENUMERATION:
            return {"json_value": parse_enumeration(value)}
        case FieldType.DATE:
            return _date_columns(field, value)
        case FieldType.RICHTEXT:
            if isinstance(value, dict) and ("json" in value or "html" in value):
                return {"json_value": value.get("json"), "text_value": value.get("html")}
            if isinstance(value, str):
                return {"text_value": value}
            return {"json_value": value}
        case FieldType.JSON:
            return {"json_value": value}
        case FieldType.MEDIA | FieldType.RELATION | FieldType.GROUP:
            raise ValueError(f"{field.type.value} values are not stored as scalars")
        case _:
            assert_never(field.type)


def from_columns(field: Field, row: ContentFieldValueModel) -> Any:
    """Inverse of ``to_columns``."""
    match field.type:
        case (
            FieldType.TEXT
            | FieldType.LONGTEXT
            | FieldType.EMAIL
            | FieldType.SLUG
            | FieldType.COLOR
            | FieldType.TIME
        ):
            return row.text_value or ""
        case FieldType.PASSWORD:
            return ""
        case FieldType.NUMBER:
            number = row.number_value
            if number is not None and float(number).is_integer():
                return int(number)
            return number
        case FieldType.BOOLEAN:
            return bool(row.boolean_value)
        case FieldType.ENUMERATION:
            values = parse_enumeration(row.json_value)
            if field.allows_multiple:
                return values
            return values[0] if values else ""
        case FieldType.DATE:
            return _format_date_columns(field, row)
        case FieldType.RICHTEXT:
            return {"json": row.json_value, "html": row.text_value or ""}
        case FieldType.JSON:
            return row.json_value
        case FieldType.MEDIA | FieldType.RELATION | FieldType.GROUP:
            raise ValueError(f"{field.type.value} values are not stored as scalars")
        case _:
            assert_never(field.type)


def _parse_day(text: str) -> date:
    return date.fromisoformat(text.strip()[:10])


def _parse_moment(text: str) -> datetime:
    moment = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def _date_columns(field: Field, value: Any) -> dict[str, Any]:
    if isinstance(value, (date, datetime)):
        value = value.isoformat()
    text = str(value)
    parts = text.split(DATE_RANGE_SEPARATOR, 1) if field.is_date_range else [text]
    start = parts[0]
    end = parts[1] if len(parts) > 1 else None
    if field.include_time:
        return {
            "datetime_value": _parse_moment(start),
            "datetime_value_end": _parse_moment(end) if end else None,
        }
    return {
        "date_value": _parse_day(start),
        "date_value_end": _parse_day(end) if end else None,
    }


def _format_date_columns(field: Field, row: ContentFieldValueModel) -> str:
    if field.include_time:
        start, end = row.datetime_value, row.datetime_value_end
    else:
        start, end = row.date_value, row.date_value_end
    if start is None:
        return ""
    if field.is_date_range and end is not None:
        return f"{start.isoformat()}{DATE_RANGE_SEPARATOR}{end.isoformat()}"
    return start.isoformat()


def _numeric_ids(ids: list[Any]) -> list[int]:
    numeric = []
    for item in ids:
        if isinstance(item, bool) or item is None or item == "":
            continue
        try:
            numeric.append(int(item))
        except (TypeError, ValueError):
            continue
    return numeric


class _LoadedValues:
    """Value rows of several entries indexed for reading."""

    def __init__(self) -> None:
        self.scalars: dict[tuple, list[ContentFieldValueModel]] = defaultdict(list)
        self.media: dict[tuple, list[int]] = defaultdict(list)
        self.relations: dict[tuple, list[int]] = defaultdict(list)
        self.groups: dict[tuple, list[ContentFieldGroupModel]] = defaultdict(list)

    def field_value(self, field: Field, entry_id: int, group_id: int | None) -> Any:
        key = (entry_id, field.id, group_id)
        if field.type is FieldType.MEDIA:
            return [{"id": asset_id} for asset_id in self.media[key]]
        if field.type is FieldType.RELATION:
            return list(self.relations[key])
        if field.type is FieldType.GROUP:
            # Groups are only meaningful at the top level
            return []
        rows = self.scalars[key]
        if field.wraps_repeatable_items:
            return [{"value": from_columns(field, row)} for row in rows]
        if not rows:
            return empty_value(field)
        return from_columns(field, rows[0])


class EntryValueStore:
    """Reads and writes the field values of entries."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def write(self, entry_id: int, fields: list[Field], data: dict[str, Any]) -> None:
        """Replace every stored value of an entry.

        Args:
            entry_id: The entry.
            fields: Organized fields of the collection.
            data: Submitted values keyed by field name.
        """
        previous_hashes = await self._password_hashes(entry_id, fields)
        await self.clear(entry_id)

        for f in fields:
            value = data.get(f.name)
            if f.type is FieldType.GROUP:
                await self._write_group(entry_id, f, value, previous_hashes)
            else:
                self._write_field(entry_id, f, value, None, previous_hashes.get((f.id, None)))
        await self.session.flush()

    async def _write_group(
        self, entry_id: int, group: Field, value: Any, previous_hashes: PasswordHashes
    ) -> None:
        if isinstance(value, dict):
            value = [value]
        instances = [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []
        if not group.is_repeatable:
            instances = instances[:1]

        for position, instance in enumerate(instances):
            group_row = ContentFieldGroupModel(entry_id=entry_id, field_id=group.id, sort_order=position)
            self.session.add(group_row)
            await self.session.flush()
            for child in group.children:
                self._write_field(
                    entry_id,
                    child,
                    instance.get(child.name),
                    group_row.id,
                    previous_hashes.get((child.id, position)),
                )

    def _write_field(
        self,
        entry_id: int,
        field: Field,
        value: Any,
        group_id: int | None,
        previous_hash: str | None,
    ) -> None:
        if field.type is FieldType.MEDIA:
            asset_ids = _numeric_ids([extract_id(item) for item in coerce_media_change(value)])
            for position, asset_id in enumerate(asset_ids):
                self.session.add(
                    ContentMediaValueModel(
                        entry_id=entry_id,
                        field_id=field.id,
                        group_instance_id=group_id,
                        asset_id=asset_id,
                        sort_order=position,
                    )
                )
            return

        if field.type is FieldType.RELATION:
            for position, related_id in enumerate(_numeric_ids(parse_id_list(value))):
                self.session.add(
                    ContentRelationValueModel(
                        entry_id=entry_id,
                        field_id=field.id,
                        group_instance_id=group_id,
                        related_entry_id=related_id,
                        sort_order=position,
                    )
                )
            return

        if field.type is FieldType.GROUP:
            logger.warning("Ignoring nested group value", field=field.name)
            return

        if field.wraps_repeatable_items:
            raw_items = value if isinstance(value, list) else ([] if value is None else [value])
            items = [item.get("value") if isinstance(item, dict) else item for item in raw_items]
        else:
            items = [value]

        for position, item in enumerate(items):
            if field.type is FieldType.PASSWORD:
                item = self._password_value(item, previous_hash if position == 0 else None)
            if is_empty(item):
                continue
            self.session.add(
                ContentFieldValueModel(
                    entry_id=entry_id,
                    field_id=field.id,
                    group_instance_id=group_id,
                    sort_order=position,
                    **to_columns(field, item),
                )
            )

    @staticmethod
    def _password_value(value: Any, previous_hash: str | None) -> str | None:
        if is_empty(value):
            return previous_hash
        text = str(value)
        return text if is_password_hash(text) else hash_password(text)

    async def _password_hashes(self, entry_id: int, fields: list[Field]) -> PasswordHashes:
        password_ids = [
            f.id
            for parent in fields
            for f in [parent, *parent.children]
            if f.type is FieldType.PASSWORD
        ]
        if not password_ids:
            return {}
        result = await self.session.execute(
            select(
                ContentFieldValueModel.field_id,
                ContentFieldValueModel.text_value,
                ContentFieldGroupModel.sort_order,
            )
            .outerjoin(
                ContentFieldGroupModel,
                ContentFieldGroupModel.id == ContentFieldValueModel.group_instance_id,
            )
            .where(
                ContentFieldValueModel.entry_id == entry_id,
                ContentFieldValueModel.field_id.in_(password_ids),
                ContentFieldValueModel.sort_order == 0,
            )
        )
        return {(field_id, position): text for field_id, text, position in result.all() if text}

    async def clear(self, entry_id: int) -> None:
        """Delete every stored value of an entry."""
        for model in (
            ContentFieldValueModel,
            ContentMediaValueModel,
            ContentRelationValueModel,
            ContentFieldGroupModel,
        ):
            await self.session.execute(delete(model).where(model.entry_id == entry_id))

    async def read(self, entry_ids: list[int], fields: list[Field]) -> dict[int, dict[str, Any]]:
        """Stored values of several entries in canonical API shape.

        Args:
            entry_ids: Entries to read.
            fields: Organized fields of the collection.

        Returns:
            Values keyed by entry id, then by field name.
        """
        if not entry_ids:
            return {}
        loaded = await self._load(entry_ids)

        data_by_entry: dict[int, dict[str, Any]] = {}
        for entry_id in entry_ids:
            data: dict[str, Any] = {}
            for f in fields:
                if f.type is FieldType.GROUP:
                    instances = [
                        {child.name: loaded.field_value(child, entry_id, group.id) for child in f.children}
                        for group in loaded.groups[(entry_id, f.id)]
                    ]
                    if not f.is_repeatable:
                        instances = instances[:1] or [default_instance(f)]
                    data[f.name] = instances
                else:
                    data[f.name] = loaded.field_value(f, entry_id, None)
            data_by_entry[entry_id] = data
        return data_by_entry

    async def _load(self, entry_ids: list[int]) -> _LoadedValues:
        loaded = _LoadedValues()

        values = await self.session.execute(
            select(ContentFieldValueModel)
            .where(ContentFieldValueModel.entry_id.in_(entry_ids))
            .order_by(ContentFieldValueModel.sort_order, ContentFieldValueModel.id)
        )
        for row in values.scalars():
            loaded.scalars[(row.entry_id, row.field_id, row.group_instance_id)].append(row)

        media = await self.session.execute(
            select(ContentMediaValueModel)
            .where(ContentMediaValueModel.entry_id.in_(entry_ids))
            .order_by(ContentMediaValueModel.sort_order, ContentMediaValueModel.id)
        )
        for row in media.scalars():
            loaded.media[(row.entry_id, row.field_id, row.group_instance_id)].append(row.asset_id)

        relations = await self.session.execute(
            select(ContentRelationValueModel)
            .where(ContentRelationValueModel.entry_id.in_(entry_ids))
            .order_by(ContentRelationValueModel.sort_order, ContentRelationValueModel.id)
        )
        for row in relations.scalars():
            loaded.relations[(row.entry_id, row.field_id, row.group_instance_id)].append(
                row.related_entry_id
            )

        groups = await self.session.execute(
            select(ContentFieldGroupModel)
            .where(ContentFieldGroupModel.entry_id.in_(entry_ids))
            .order_by(ContentFieldGroupModel.sort_order, ContentFieldGroupModel.id)
        )
        for row in groups.scalars():
            loaded.groups[(row.entry_id, row.field_id)].append(row)

        return loaded

    async def copy(self, source_entry_id: int, target_entry_id: int) -> None:
        """Copy every stored value row of one entry to another, hashes included."""
        groups = await self.session.execute(
            select(ContentFieldGroupModel).where(ContentFieldGroupModel.entry_id == source_entry_id)
        )
        group_ids: dict[int, int] = {}
        for group in groups.scalars().all():
            clone = ContentFieldGroupModel(
                entry_id=target_entry_id, field_id=group.field_id, sort_order=group.sort_order
            )
            self.session.add(clone)
            await self.session.flush()
            group_ids[group.id] = clone.id

        for model in (ContentFieldValueModel, ContentMediaValueModel, ContentRelationValueModel):
            rows = await self.session.execute(select(model).where(model.entry_id == source_entry_id))
            columns = [c.key for c in model.__table__.columns if c.key not in ("id", "entry_id")]
            for row in rows.scalars().all():
                values = {key: getattr(row, key) for key in columns}
                values["group_instance_id"] = group_ids.get(row.group_instance_id)
                self.session.add(model(entry_id=target_entry_id, **values))
        await self.session.flush()
