"""Server-side content entry operations.

Backs the content endpoints: create, update, trash/restore/delete,
duplicate, search, translation linking, export and import. Every
operation flushes but never commits; the caller owns the transaction.
"""

import csv
import io
import json
import math
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from openpyxl import Workbook
from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.application.services.content_columns import is_list_column
from contentbase.application.services.errors import (
    ContentValidationError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from contentbase.application.services.schema_service import SchemaService, collection_to_dict
from contentbase.core.config import get_settings
from contentbase.core.logging import get_logger
from contentbase.domain.entities import TRASHED_FILTER, Collection, EntryStatus, Field, FieldType, Project
from contentbase.domain.services.entry_validator import EntryValidator, errors_by_field, is_empty
from contentbase.infrastructure.persistence.entry_value_store import (
    EntryValueStore,
    to_columns,
    value_column,
)
from contentbase.infrastructure.persistence.models import ContentEntryModel
from contentbase.infrastructure.persistence.repositories import (
    DATE_FILTER_COLUMNS,
    SORTABLE_COLUMNS,
    ContentEntryRepository,
    EntrySearch,
)
from contentbase.infrastructure.security import PasswordConfirmation

logger = get_logger(__name__)

EXPORT_FORMATS = ("json", "csv", "excel")
EXPORT_COLUMNS = (
    "id",
    "uuid",
    "locale",
    "status",
    "translation_group_id",
    "published_at",
    "created_at",
    "updated_at",
)

EXPORT_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
EXPORT_EXTENSIONS = {"json": "json", "csv": "csv", "excel": "xlsx"}

NOT_LINKED_MESSAGE = "Entries are not linked as translations."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def serialize_entry(entry: ContentEntryModel, data: dict[str, Any]) -> dict[str, Any]:
    """API representation of an entry with its field values."""
    return {
        "id": entry.id,
        "uuid": entry.uuid,
        "project_id": entry.project_id,
        "collection_id": entry.collection_id,
        "locale": entry.locale,
        "status": entry.status,
        "translation_group_id": entry.translation_group_id,
        "published_at": _isoformat(entry.published_at),
        "created_at": _isoformat(entry.created_at),
        "updated_at": _isoformat(entry.updated_at),
        "created_by": entry.created_by,
        "updated_by": entry.updated_by,
        "deleted_at": _isoformat(entry.deleted_at),
        "data": data,
    }


class ContentService:
    """Content entry operations of one request.

    Args:
        session: Database session; committed by the caller.
        actor: Identifier of the acting user, recorded as created_by/updated_by.
        confirmation: Password check for permanent bulk deletes; defaults to
            the configured confirmation hash.
    """

    def __init__(
        self,
        session: AsyncSession,
        actor: str | None = None,
        confirmation: PasswordConfirmation | None = None,
    ) -> None:
        self.session = session
        self.actor = actor
        self.confirmation = confirmation or PasswordConfirmation(get_settings().confirm_password_hash)
        self.schema = SchemaService(session)
        self.entries = ContentEntryRepository(session)
        self.values = EntryValueStore(session)

    async def _get_model(
        self, collection_id: int, entry_id: int, include_trashed: bool = False
    ) -> ContentEntryModel:
        entry = await self.entries.get_by_id(collection_id, entry_id, include_trashed=include_trashed)
        if entry is None:
            raise ResourceNotFoundError(f"Content entry with ID '{entry_id}' not found")
        return entry

    async def _serialize(self, entry: ContentEntryModel, collection: Collection) -> dict[str, Any]:
        data = await self.values.read([entry.id], collection.organized_fields)
        return serialize_entry(entry, data[entry.id])

    async def get_entry(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        """A single entry, trashed ones included."""
        collection = await self.schema.get_collection(project_id, collection_id)
        entry = await self._get_model(collection_id, entry_id, include_trashed=True)
        return await self._serialize(entry, collection)

    async def _validate(
        self,
        project: Project,
        collection: Collection,
        data: Any,
        locale: str | None,
        status: str | None,
        exclude_entry_id: int | None = None,
    ) -> None:
        """Raise ``ContentValidationError`` when submitted values are invalid.

        Type, required and charcount rules come from ``EntryValidator``;
        unique rules need the database and are checked here.
        """
        fields = collection.organized_fields
        errors = errors_by_field(
            EntryValidator.validate(data, fields, locale, project.locales, status)
        )
        if isinstance(data, dict):
            for f in fields:
                if not f.validations.unique.status or f.name in errors or f.is_repeatable:
                    continue
                value = data.get(f.name)
                column = value_column(f)
                if column is None or is_empty(value):
                    continue
                try:
                    stored = to_columns(f, value).get(column)
                except ValueError:
                    continue
                if await self.entries.value_taken(collection.id, f.id, column, stored, exclude_entry_id):
                    message = f.validations.unique.message or f"The {f.label} has already been taken."
                    errors.setdefault(f.name, []).append(message)
        if errors:
            raise ContentValidationError(errors)

    async def _ensure_singleton_slot(
        self, collection: Collection, locale: str, exclude_entry_id: int | None = None
    ) -> None:
        if collection.is_singleton and await self.entries.locale_taken(
            collection.id, locale, exclude_entry_id
        ):
            raise ResourceConflictError(
                f"Singleton collection '{collection.name}' already has an entry for locale '{locale}'"
            )

    @staticmethod
    def _saved_message(status: str) -> str:
        if status == EntryStatus.PUBLISHED.value:
            return "Content published successfully"
        return "Content saved successfully"

    async def create_entry(
        self, project_id: int, collection_id: int, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Create an entry from ``{data, status, locale}``.

        Returns:
            ``{message, entry_id}``.

        Raises:
            ResourceNotFoundError: If the collection does not exist.
            ContentValidationError: If the submitted values are invalid.
            ResourceConflictError: If a singleton already has an entry in the locale.
        """
        project, collection = await self.schema.load(project_id, collection_id)
        return await self._create(project, collection, payload)

    async def _create(
        self, project: Project, collection: Collection, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        data = payload.get("data")
        if data is None:
            data = {}
        status = payload.get("status") or EntryStatus.DRAFT.value
        locale = payload.get("locale") or project.default_locale

        await self._validate(project, collection, data, locale, status)
        await self._ensure_singleton_slot(collection, locale)

        now = _utcnow()
        entry = await self.entries.create(
            ContentEntryModel(
                uuid=str(uuid.uuid4()),
                project_id=project.id,
                collection_id=collection.id,
                locale=locale,
                status=status,
                published_at=now if status == EntryStatus.PUBLISHED.value else None,
                created_by=self.actor,
                updated_by=self.actor,
                created_at=now,
                updated_at=now,
            )
        )
        await self.values.write(entry.id, collection.organized_fields, data)

        logger.info(
            "Content entry created",
            collection_id=collection.id,
            entry_id=entry.id,
            locale=locale,
            status=status,
        )
        return {"message": self._saved_message(status), "entry_id": entry.id}

    async def update_entry(
        self, project_id: int, collection_id: int, entry_id: int, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Replace the values of an entry.

        ``published_at`` is set on the first publish and kept afterwards.

        Raises:
            ResourceNotFoundError: If the entry does not exist or is trashed.
            ContentValidationError: If the submitted values are invalid.
            ResourceConflictError: If a singleton already has an entry in the new locale.
        """
        project, collection = await self.schema.load(project_id, collection_id)
        entry = await self._get_model(collection_id, entry_id)

        data = payload.get("data")
        if data is None:
            data = {}
        status = payload.get("status") or entry.status
        locale = payload.get("locale") or entry.locale

        await self._validate(project, collection, data, locale, status, exclude_entry_id=entry.id)
        if locale != entry.locale:
            await self._ensure_singleton_slot(collection, locale, exclude_entry_id=entry.id)

        now = _utcnow()
        entry.locale = locale
        entry.status = status
        if status == EntryStatus.PUBLISHED.value and entry.published_at is None:
            entry.published_at = now
        entry.updated_at = now
        entry.updated_by = self.actor
        await self.values.write(entry.id, collection.organized_fields, data)
        await self.entries.save(entry)

        logger.info("Content entry updated", collection_id=collection_id, entry_id=entry.id, status=status)
        return {"message": self._saved_message(status), "entry_id": entry.id}

    async def trash(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        await self.schema.get_collection(project_id, collection_id)
        entry = await self._get_model(collection_id, entry_id)
        entry.deleted_at = _utcnow()
        await self.entries.save(entry)
        logger.info("Content entry moved to trash", collection_id=collection_id, entry_id=entry_id)
        return {"message": "Content moved to trash"}

    async def force_delete(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        """Permanently delete an entry and its values, trashed or not."""
        await self.schema.get_collection(project_id, collection_id)
        entry = await self._get_model(collection_id, entry_id, include_trashed=True)
        await self.values.clear(entry.id)
        await self.entries.delete(entry)
        logger.info("Content entry deleted", collection_id=collection_id, entry_id=entry_id)
        return {"message": "Content deleted permanently"}

    async def bulk_force_delete(
        self, project_id: int, collection_id: int, entry_ids: list[int], password: str | None
    ) -> dict[str, Any]:
        """Permanently delete several entries after re-checking the user's password.

        Each entry is deleted in its own savepoint; a failing entry is
        reported and the others are still deleted.

        Returns:
            ``{message, deleted, failed}`` where ``failed`` maps ids to messages.

        Raises:
            ContentValidationError: If the password is missing or incorrect.
        """
        if not password:
            raise ContentValidationError({"password": ["Please enter your password to confirm."]})
        if not self.confirmation.verify(password, actor=self.actor):
            raise ContentValidationError({"password": ["The provided password is incorrect."]})
        await self.schema.get_collection(project_id, collection_id)

        deleted: list[int] = []
        failed: dict[int, str] = {}
        for entry_id in entry_ids:
            try:
                async with self.session.begin_nested():
                    await self.force_delete(project_id, collection_id, entry_id)
            except ResourceNotFoundError as e:
                failed[entry_id] = e.message
            else:
                deleted.append(entry_id)

        return {
            "message": f"{len(deleted)} of {len(entry_ids)} deleted",
            "deleted": deleted,
            "failed": failed,
        }

    async def restore(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        """Bring a trashed entry back.

        Raises:
            ResourceNotFoundError: If the entry does not exist or is not trashed.
            ResourceConflictError: If a singleton has meanwhile got a live entry in the locale.
        """
        collection = await self.schema.get_collection(project_id, collection_id)
        entry = await self._get_model(collection_id, entry_id, include_trashed=True)
        if entry.deleted_at is None:
            raise ResourceNotFoundError(f"Trashed content entry with ID '{entry_id}' not found")
        await self._ensure_singleton_slot(collection, entry.locale, exclude_entry_id=entry.id)

        entry.deleted_at = None
        await self.entries.save(entry)
        logger.info("Content entry restored", collection_id=collection_id, entry_id=entry_id)
        return {"message": "Content restored"}

    async def duplicate(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        """Copy an entry as a new, unlinked draft in the same locale."""
        collection = await self.schema.get_collection(project_id, collection_id)
        source = await self._get_model(collection_id, entry_id)
        await self._ensure_singleton_slot(collection, source.locale)

        now = _utcnow()
        copy = await self.entries.create(
            ContentEntryModel(
                uuid=str(uuid.uuid4()),
                project_id=source.project_id,
                collection_id=source.collection_id,
                locale=source.locale,
                status=EntryStatus.DRAFT.value,
                translation_group_id=None,
                published_at=None,
                created_by=self.actor,
                updated_by=self.actor,
                created_at=now,
                updated_at=now,
            )
        )
        await self.values.copy(source.id, copy.id)

        logger.info("Content entry duplicated", collection_id=collection_id, source_id=entry_id, entry_id=copy.id)
        return {"message": "Content duplicated", "entry_id": copy.id}

    def build_search(self, collection: Collection, params: Mapping[str, Any]) -> EntrySearch:
        """Translate list query parameters into search criteria.

        Raises:
            ContentValidationError: If a date filter is not ``YYYY-MM-DD``.
        """
        settings = get_settings()
        criteria = EntrySearch(
            search=(params.get("search") or "").strip() or None,
            locale=params.get("filter_locale") or None,
            translation_group_id=params.get("filter_translation_group_id") or None,
            direction="asc" if params.get("direction") == "asc" else "desc",
            page=max(1, _to_int(params.get("page"), 1)),
            per_page=min(
                max(1, _to_int(params.get("per_page"), settings.table_default_per_page)),
                settings.search_max_per_page,
            ),
        )

        status = params.get("filter_status")
        if status == TRASHED_FILTER:
            criteria.trashed = True
        elif status in (EntryStatus.DRAFT.value, EntryStatus.PUBLISHED.value):
            criteria.status = status

        errors: dict[str, list[str]] = {}
        for column in DATE_FILTER_COLUMNS:
            bounds: list[date | None] = []
            for suffix in ("from", "to"):
                key = f"filter_{column}_{suffix}"
                raw = params.get(key)
                try:
                    bounds.append(date.fromisoformat(raw) if raw else None)
                except (TypeError, ValueError):
                    errors[key] = [f"The {key} must be a date in YYYY-MM-DD format."]
                    bounds.append(None)
            if bounds[0] is not None or bounds[1] is not None:
                criteria.date_ranges[column] = (bounds[0], bounds[1])
        if errors:
            raise ContentValidationError(errors)

        sort = params.get("sort") or "updated_at"
        if sort in SORTABLE_COLUMNS:
            criteria.sort = sort
        else:
            f = collection.field_by_name(sort)
            column = value_column(f) if f is not None and not f.is_repeatable else None
            if f is not None and column is not None:
                criteria.sort_value = (f.id, column)
            else:
                logger.debug("Ignoring unknown sort column", sort=sort, collection_id=collection.id)
        return criteria

    async def search(
        self, project_id: int, collection_id: int, params: Mapping[str, Any]
    ) -> dict[str, Any]:
        """One page of entries in the paginated envelope shape."""
        collection = await self.schema.get_collection(project_id, collection_id)
        criteria = self.build_search(collection, params)
        rows, total = await self.entries.search(collection_id, criteria)
        data = await self.values.read([row.id for row in rows], collection.organized_fields)

        offset = (criteria.page - 1) * criteria.per_page
        return {
            "data": [serialize_entry(row, data[row.id]) for row in rows],
            "current_page": criteria.page,
            "last_page": max(1, math.ceil(total / criteria.per_page)),
            "per_page": criteria.per_page,
            "from": offset + 1 if rows else None,
            "to": offset + len(rows) if rows else None,
            "total": total,
        }

    async def find(self, project_id: int, collection_id: int, ids: list[int]) -> list[dict[str, Any]]:
        """Live entries by id, in the requested order."""
        collection = await self.schema.get_collection(project_id, collection_id)
        rows = await self.entries.find_by_ids(collection_id, ids)
        data = await self.values.read([row.id for row in rows], collection.organized_fields)
        return [serialize_entry(row, data[row.id]) for row in rows]

    async def relation_collection(self, project_id: int, target_collection_id: int) -> dict[str, Any]:
        """A relation's target collection with the fields shown in relation lists."""
        target = await self.schema.get_collection(project_id, target_collection_id)
        displayable = [
            f for f in target.fields if f.parent_field_id is None and is_list_column(f)
        ]
        return collection_to_dict(target, displayable)

    async def _translation_target(self, source: ContentEntryModel, target_id: Any) -> ContentEntryModel:
        target = await self.session.get(ContentEntryModel, _to_int(target_id, 0))
        if target is None or target.deleted_at is not None:
            raise ResourceNotFoundError(f"Content entry with ID '{target_id}' not found")
        if target.project_id != source.project_id or target.collection_id != source.collection_id:
            raise ContentValidationError(
                {"translation_entry_id": ["Translations must belong to the same collection."]}
            )
        return target

    async def link_translation(
        self, project_id: int, collection_id: int, entry_id: int, translation_entry_id: Any
    ) -> dict[str, Any]:
        """Put two entries in the same translation group.

        An existing group id is reused; when both entries already have one,
        the target's group is merged into the source's.
        """
        await self.schema.get_collection(project_id, collection_id)
        source = await self._get_model(collection_id, entry_id)
        target = await self._translation_target(source, translation_entry_id)
        if target.locale == source.locale:
            raise ContentValidationError(
                {"translation_entry_id": ["Translations must have a different locale."]}
            )

        source_group = source.translation_group_id
        target_group = target.translation_group_id
        if source_group and target_group and source_group != target_group:
            moved = await self.entries.reassign_translation_group(collection_id, target_group, source_group)
            logger.info("Translation groups merged", into=source_group, merged=target_group, moved=moved)
            group = source_group
        else:
            group = source_group or target_group or str(uuid.uuid4())
        source.translation_group_id = group
        target.translation_group_id = group
        await self.session.flush()

        logger.info(
            "Translation linked",
            collection_id=collection_id,
            entry_id=source.id,
            translation_entry_id=target.id,
            translation_group_id=group,
        )
        return {"message": "Translation linked successfully", "translation_group_id": group}

    async def unlink_translation(
        self, project_id: int, collection_id: int, entry_id: int, translation_entry_id: Any
    ) -> dict[str, Any]:
        await self.schema.get_collection(project_id, collection_id)
        source = await self._get_model(collection_id, entry_id)
        target = await self._translation_target(source, translation_entry_id)
        if not source.translation_group_id or source.translation_group_id != target.translation_group_id:
            raise ContentValidationError({"translation_entry_id": [NOT_LINKED_MESSAGE]}, NOT_LINKED_MESSAGE)

        target.translation_group_id = None
        await self.session.flush()
        logger.info("Translation unlinked", entry_id=source.id, translation_entry_id=target.id)
        return {"message": "Translation unlinked successfully"}

    async def export(self, project_id: int, collection_id: int, fmt: str) -> tuple[bytes, str, str]:
        """Export every live entry of a collection.

        Returns:
            File content, media type and file name.

        Raises:
            ContentValidationError: If the format is not json, csv or excel.
        """
        if fmt not in EXPORT_FORMATS:
            raise ContentValidationError({"format": ["The selected format is invalid."]})
        collection = await self.schema.get_collection(project_id, collection_id)
        fields = collection.organized_fields
        rows = await self.entries.list_for_collection(collection_id)
        data = await self.values.read([row.id for row in rows], fields)

        records = []
        for row in rows:
            serialized = serialize_entry(row, data[row.id])
            record = {column: serialized[column] for column in EXPORT_COLUMNS}
            record.update(data[row.id])
            records.append(record)

        header = [*EXPORT_COLUMNS, *(f.name for f in fields)]
        if fmt == "json":
            content = json.dumps(records, ensure_ascii=False, indent=2, default=str).encode("utf-8")
        elif fmt == "csv":
            content = _write_csv(header, records)
        else:
            content = _write_workbook(collection.slug or "content", header, records)

        logger.info("Content exported", collection_id=collection_id, format=fmt, count=len(records))
        filename = f"{collection.slug or collection.id}.{EXPORT_EXTENSIONS[fmt]}"
        return content, EXPORT_MEDIA_TYPES[fmt], filename

    async def import_entries(
        self, project_id: int, collection_id: int, filename: str, content: bytes
    ) -> dict[str, Any]:
        """Create entries from a JSON array or CSV file.

        Rows are processed independently: an invalid row is reported and
        skipped, the others are still imported.

        Returns:
            ``{imported, errors}`` with one ``"Row N: message"`` per failed row.

        Raises:
            ContentValidationError: If the file is too large or cannot be parsed.
        """
        settings = get_settings()
        if len(content) > settings.max_import_size:
            raise ContentValidationError({"file": ["The file is too large."]})
        project, collection = await self.schema.load(project_id, collection_id)
        records = _parse_import(filename, content)
        fields = collection.organized_fields

        imported = 0
        errors: list[str] = []
        for number, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                errors.append(f"Row {number}: Each row must be an object.")
                continue
            payload = {
                "locale": record.get("locale") or None,
                "status": record.get("status") or None,
                "data": {
                    f.name: _import_value(f, record[f.name]) for f in fields if f.name in record
                },
            }
            try:
                async with self.session.begin_nested():
                    await self._create(project, collection, payload)
            except (ContentValidationError, ResourceConflictError) as e:
                errors.append(f"Row {number}: {e.message}")
            except (ValueError, OverflowError) as e:
                logger.warning("Import row rejected", collection_id=collection_id, row=number, error=str(e))
                errors.append(f"Row {number}: The row contains a value that cannot be stored.")
            else:
                imported += 1

        logger.info("Content imported", collection_id=collection_id, imported=imported, failed=len(errors))
        return {"imported": imported, "errors": errors}


def _export_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return value


def _write_csv(header: list[str], records: list[dict[str, Any]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    for record in records:
        writer.writerow([_export_cell(record.get(column)) for column in header])
    return buffer.getvalue().encode("utf-8")


def _write_workbook(title: str, header: list[str], records: list[dict[str, Any]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    # Excel limits sheet titles to 31 characters
    sheet.title = title[:31]
    sheet.append(header)
    for record in records:
        sheet.append([_export_cell(record.get(column)) for column in header])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _parse_import(filename: str, content: bytes) -> list[Any]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ContentValidationError({"file": ["The file must be UTF-8 encoded."]}) from None

    if filename.lower().endswith(".csv") or not text.lstrip().startswith("["):
        return list(csv.DictReader(io.StringIO(text)))
    try:
        records = json.loads(text)
    except json.JSONDecodeError as e:
        raise ContentValidationError({"file": [f"Invalid JSON: {e.msg}"]}) from None
    if not isinstance(records, list):
        raise ContentValidationError({"file": ["The file must contain an array of entries."]})
    return records


def _is_structured(field: Field) -> bool:
    if field.wraps_repeatable_items:
        return True
    if field.type is FieldType.ENUMERATION:
        return field.allows_multiple
    return field.type in (
        FieldType.GROUP,
        FieldType.MEDIA,
        FieldType.RELATION,
        FieldType.JSON,
        FieldType.RICHTEXT,
    )


def _import_value(field: Field, raw: Any) -> Any:
    """Field value from an import cell; CSV cells hold JSON for structured values."""
    if not isinstance(raw, str):
        return raw
    if raw == "":
        return None
    if _is_structured(field):
        try:
            return json.loads(raw)
        except ValueError:
            return raw
    return raw
