"""Relation resolution.

Turns a relation field's id list into entry rows of the target collection
and writes edits (add, remove, reorder) back into the owning form's state.
Nothing is persisted here; the owning entry's save does that.
"""

from dataclasses import dataclass, field
from typing import Any

from contentbase.application.services.entry_form import EntryForm
from contentbase.application.services.ports import Notifier
from contentbase.core.logging import get_logger
from contentbase.domain.entities import Collection, EntryStatus, Field, FieldType
from contentbase.domain.services.value_normalizer import parse_id_list
from contentbase.infrastructure.client import ContentApiClient, ContentApiError

logger = get_logger(__name__)


@dataclass
class ResolvedRelation:
    """Target collection and the related rows, in relation order."""

    collection: Collection | None = None
    entries: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ids(self) -> list[Any]:
        return [row.get("id") for row in self.entries]


class RelationResolver:
    """Resolves and edits the value of one relation field.

    Args:
        api: Content API client.
        project_id: Owning project.
        collection_id: Collection of the entry that owns the field.
        field: The relation field.
        notifier: Receives failure notifications.
        show_status: Whether the status column is shown.
        show_created: Whether the created column is shown.
    """

    def __init__(
        self,
        api: ContentApiClient,
        project_id: int,
        collection_id: int,
        field: Field,
        notifier: Notifier,
        show_status: bool = False,
        show_created: bool = False,
    ) -> None:
        if field.type is not FieldType.RELATION:
            raise ValueError(f"Field '{field.name}' is not a relation field")
        self.api = api
        self.project_id = project_id
        self.collection_id = collection_id
        self.field = field
        self.notifier = notifier
        self.show_status = show_status
        self.show_created = show_created
        self.target_collection_id = field.relation_collection_id or collection_id
        self.resolved = ResolvedRelation()

    @property
    def sortable(self) -> bool:
        """Manual ordering is offered only in the compact (reorderable) view."""
        return not (self.show_status and self.show_created)

    @property
    def include_drafts(self) -> bool:
        return bool(self.field.options.get("includeDraft"))

    async def resolve(self, ids: Any) -> ResolvedRelation:
        """Fetch the target collection and the rows for ``ids``."""
        id_list = parse_id_list(ids)
        try:
            collection_data = await self.api.get_relation_collection(
                self.project_id, self.collection_id, self.target_collection_id
            )
            rows = await self.api.find_entries(self.project_id, self.target_collection_id, id_list)
        except ContentApiError as e:
            logger.warning(
                "Relation lookup failed",
                field=self.field.name,
                target_collection_id=self.target_collection_id,
                error=e.message,
            )
            self.notifier.error(e.message)
            return self.resolved

        by_id = {row.get("id"): row for row in rows}
        self.resolved = ResolvedRelation(
            collection=Collection.from_dict(collection_data),
            entries=[by_id[i] for i in id_list if i in by_id],
        )
        return self.resolved

    def picker_params(self, search: str = "", page: int = 1) -> dict[str, Any]:
        params: dict[str, Any] = {"search": search, "page": page}
        if not self.include_drafts:
            params["filter_status"] = EntryStatus.PUBLISHED.value
        return params

    async def candidates(self, search: str = "", page: int = 1) -> list[dict[str, Any]]:
        """Rows of the target collection offered by the relation picker."""
        try:
            envelope = await self.api.search_entries(
                self.project_id, self.target_collection_id, self.picker_params(search, page)
            )
        except ContentApiError as e:
            self.notifier.error(e.message)
            return []
        return list(envelope.get("data") or [])

    def _write(self, form: EntryForm, ids: list[Any]) -> list[Any]:
        if self.field.is_single_relation:
            ids = ids[:1]
        form.apply_field_change(self.field, ids)
        return ids

    def add(self, form: EntryForm, entry_id: Any) -> list[Any]:
        """Add a related entry; single relations replace their value."""
        if self.field.is_single_relation:
            return self._write(form, [entry_id])
        current = parse_id_list(form.state.get(self.field.name))
        if entry_id in current:
            return current
        return self._write(form, [*current, entry_id])

    def remove(self, form: EntryForm, entry_id: Any) -> list[Any]:
        current = parse_id_list(form.state.get(self.field.name))
        self.resolved.entries = [row for row in self.resolved.entries if row.get("id") != entry_id]
        return self._write(form, [i for i in current if i != entry_id])

    def reorder(self, form: EntryForm, old_index: int, new_index: int) -> list[Any]:
        """Move a related entry and write the new id order into the form.

        Raises:
            ValueError: If ordering is not offered in the current view.
            IndexError: If either index is out of range.
        """
        if not self.sortable:
            raise ValueError("Reordering is disabled while status and created columns are shown")
        entries = list(self.resolved.entries)
        moved = entries.pop(old_index)
        entries.insert(new_index, moved)
        self.resolved.entries = entries
        return self._write(form, self.resolved.ids)
