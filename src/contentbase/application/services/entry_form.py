"""Entry form engine.

Holds the editable state of one content entry and applies field edits
with schema-aware semantics. Saving, publishing and the side-effecting
entry actions go through the content API client; every failure is caught
at the operation that started the request and surfaced through the
``Notifier`` port.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contentbase.application.services.ports import Confirmer, Navigator, Notifier
from contentbase.core.logging import get_logger
from contentbase.domain.entities import (
    Collection,
    ContentEntry,
    EntryStatus,
    Field,
    FieldType,
    Project,
    UserCan,
)
from contentbase.domain.services.entry_validator import EntryValidator, errors_by_field
from contentbase.domain.services.slug_generator import SlugGenerator
from contentbase.domain.services.value_normalizer import (
    coerce_media_change,
    defaults_for,
    normalize_for_edit,
)
from contentbase.infrastructure.client import ContentApiClient, ContentApiError, ValidationFailed

logger = get_logger(__name__)


class SubmitAction(str, Enum):
    """What happens after a successful save."""

    STAY = "stay"
    CLOSE = "close"
    NEW = "new"


@dataclass
class SubmitOutcome:
    """Result of ``EntryForm.submit``."""

    ok: bool
    entry_id: int | None = None
    message: str | None = None
    errors: dict[str, str] = field(default_factory=dict)


class EntryForm:
    """Editable state for one entry of a collection.

    Attributes:
        state: Field values keyed by field name, in canonical form shape.
        errors: First validation message per field path.
        processing: True while a save or entry action is in flight.
        loading: True while the entry is being (re)loaded.
        locale: Selected locale, one of the project's locales.
    """

    def __init__(
        self,
        api: ContentApiClient,
        project: Project,
        collection: Collection,
        can: UserCan,
        navigator: Navigator,
        notifier: Notifier,
        confirmer: Confirmer,
        entry: ContentEntry | None = None,
        locale: str | None = None,
        validate_before_submit: bool = False,
    ) -> None:
        self.api = api
        self.project = project
        self.collection = collection
        self.can = can
        self.navigator = navigator
        self.notifier = notifier
        self.confirmer = confirmer
        self.entry = entry
        self.validate_before_submit = validate_before_submit

        self.fields: list[Field] = collection.organized_fields
        self.errors: dict[str, str] = {}
        self.processing = False
        self.loading = False

        if entry is not None:
            self.locale = entry.locale
            self.state = normalize_for_edit(entry.data, self.fields)
        else:
            self.locale = locale if project.has_locale(locale) else project.default_locale
            self.state = defaults_for(self.fields)

    @classmethod
    async def open(
        cls,
        api: ContentApiClient,
        project_id: int,
        collection_id: int,
        entry_id: int | None = None,
        **kwargs: Any,
    ) -> "EntryForm":
        """Fetch the schema (and the entry when editing) and build a form.

        Raises:
            ContentApiError: If any of the initial requests fails.
        """
        project = Project.from_dict(await api.get_project(project_id))
        collection = Collection.from_dict(await api.get_collection(project_id, collection_id))
        entry = None
        if entry_id is not None:
            entry = ContentEntry.from_dict(await api.get_entry(project_id, collection_id, entry_id))
        return cls(api, project, collection, entry=entry, **kwargs)

    @property
    def entry_id(self) -> int | None:
        return self.entry.id if self.entry else None

    @property
    def is_new(self) -> bool:
        return self.entry is None

    # -- state -----------------------------------------------------------

    def apply_field_change(self, field: Field, value: Any, index: int | None = None) -> dict[str, Any]:
        """Apply one field edit and any derived slug update.

        Args:
            field: Top-level field being edited.
            value: New value (item value when ``index`` is given).
            index: Item position inside a repeatable list.

        Returns:
            The new form state (also stored on the form).
        """
        state = dict(self.state)

        if field.type is FieldType.GROUP:
            state[field.name] = value
        elif field.wraps_repeatable_items and index is not None:
            items = [dict(item) if isinstance(item, dict) else {"value": item}
                     for item in state.get(field.name) or []]
            while len(items) <= index:
                items.append({"value": None})
            items[index]["value"] = value
            state[field.name] = items
        elif field.type is FieldType.MEDIA:
            state[field.name] = coerce_media_change(value)
        else:
            state[field.name] = value

        if not field.is_repeatable and not field.is_group:
            for slug_field in self.fields:
                if slug_field.type is FieldType.SLUG and slug_field.slug_source == field.name:
                    state[slug_field.name] = SlugGenerator.generate(value)

        self.state = state
        self.errors.pop(field.name, None)
        return state

    def set_locale(self, locale: str) -> None:
        """Select a locale.

        Raises:
            ValueError: If the locale is not configured for the project.
        """
        if not self.project.has_locale(locale):
            raise ValueError(f"Locale '{locale}' is not configured for this project")
        self.locale = locale

    def reset(self) -> None:
        """Reset to a brand-new entry with schema defaults."""
        self.entry = None
        self.state = defaults_for(self.fields)
        self.errors = {}

    def validate(self, status: EntryStatus | str | None = None) -> dict[str, str]:
        """Run the local pre-submit checks. The server stays authoritative."""
        errors = EntryValidator.validate(
            self.state,
            self.fields,
            locale=self.locale,
            allowed_locales=self.project.locales,
            status=EntryStatus(status).value if status else None,
        )
        return {key: messages[0] for key, messages in errors_by_field(errors).items()}

    async def reload(self) -> bool:
        """Re-fetch the entry so server-computed fields are reflected."""
        if self.entry is None:
            return False
        self.loading = True
        try:
            data = await self.api.get_entry(self.project.id, self.collection.id, self.entry.id)
        except ContentApiError as e:
            self.notifier.error(e.message)
            return False
        finally:
            self.loading = False

        self.entry = ContentEntry.from_dict(data)
        self.locale = self.entry.locale
        self.state = normalize_for_edit(self.entry.data, self.fields)
        return True

    # -- saving ----------------------------------------------------------

    def _denied(self, message: str) -> SubmitOutcome:
        self.notifier.error(message)
        return SubmitOutcome(ok=False, entry_id=self.entry_id, message=message)

    async def submit(
        self,
        action: SubmitAction | str = SubmitAction.STAY,
        status: EntryStatus | str = EntryStatus.DRAFT,
    ) -> SubmitOutcome:
        """Persist the form and navigate according to ``action``.

        On validation failure the form state is kept, field errors are set
        and nothing navigates.
        """
        action = SubmitAction(action)
        status = EntryStatus(status)
        was_new = self.is_new

        if was_new and not self.can.create_content:
            return self._denied("You are not allowed to create content.")
        if not was_new and not self.can.update_content:
            return self._denied("You are not allowed to update content.")
        if self.collection.is_singleton:
            status = EntryStatus.PUBLISHED
        if status is EntryStatus.PUBLISHED and not self.can.publish_content:
            return self._denied("You are not allowed to publish content.")

        if self.validate_before_submit:
            errors = self.validate(status)
            if errors:
                self.errors = errors
                self.notifier.error("Please correct the highlighted fields.")
                return SubmitOutcome(ok=False, entry_id=self.entry_id, errors=errors)

        response = await self._save(status)
        if response is None:
            return SubmitOutcome(ok=False, entry_id=self.entry_id, errors=dict(self.errors))

        entry_id = response.get("entry_id") or self.entry_id
        message = response.get("message")
        self.errors = {}
        self.notifier.success(message or "Content saved successfully")
        logger.info(
            "Entry saved",
            collection_id=self.collection.id,
            entry_id=entry_id,
            status=status.value,
            action=action.value,
        )

        # A new entry the user may not edit cannot be reopened in the form
        if action is SubmitAction.CLOSE or (was_new and not self.can.update_content):
            self.navigator.to_listing(self.project.id, self.collection.id)
            return SubmitOutcome(ok=True, entry_id=entry_id, message=message)

        match action:
            case SubmitAction.NEW:
                self.reset()
                self.navigator.scroll_to_top()
            case SubmitAction.STAY if was_new:
                if entry_id:
                    self.navigator.to_edit(self.project.id, self.collection.id, entry_id)
                else:
                    self.navigator.to_listing(self.project.id, self.collection.id)
            case SubmitAction.STAY:
                await self.reload()

        return SubmitOutcome(ok=True, entry_id=entry_id, message=message)

    async def _save(self, status: EntryStatus) -> dict[str, Any] | None:
        payload = {"data": self.state, "status": status.value, "locale": self.locale}
        self.processing = True
        try:
            if self.entry is None:
                return await self.api.create_entry(self.project.id, self.collection.id, payload)
            return await self.api.update_entry(
                self.project.id, self.collection.id, self.entry.id, payload
            )
        except ValidationFailed as e:
            self.errors = e.first_errors()
            self.notifier.error(e.message)
            return None
        except ContentApiError as e:
            self.notifier.error(e.message)
            return None
        finally:
            self.processing = False

    # -- entry actions ---------------------------------------------------

    async def _confirmed(self, capability: str, message: str) -> bool:
        if self.entry is None:
            return False
        if not self.can.allows(capability):
            self.notifier.error("You are not allowed to perform this action.")
            return False
        return await self.confirmer.confirm(message)

    async def unpublish(self) -> bool:
        """Save the entry as draft without leaving the editor."""
        if not await self._confirmed("unpublish_content", "Unpublish this entry?"):
            return False
        response = await self._save(EntryStatus.DRAFT)
        if response is None:
            return False
        self.notifier.success("Content unpublished")
        await self.reload()
        return True

    async def trash(self) -> bool:
        """Soft-delete the entry and return to the listing."""
        if not await self._confirmed("move_content_to_trash", "Move this entry to trash?"):
            return False
        return await self._run_action(self.api.trash_entry, "Content moved to trash")

    async def delete(self) -> bool:
        """Permanently delete the entry and return to the listing."""
        if not await self._confirmed("delete_content", "Permanently delete this entry?"):
            return False
        return await self._run_action(self.api.force_delete_entry, "Content deleted")

    async def duplicate(self) -> bool:
        """Copy the entry server-side and open the copy."""
        if not await self._confirmed("create_content", "Duplicate this entry?"):
            return False
        self.processing = True
        try:
            response = await self.api.duplicate_entry(
                self.project.id, self.collection.id, self.entry.id
            )
        except ContentApiError as e:
            self.notifier.error(e.message)
            return False
        finally:
            self.processing = False

        self.notifier.success(response.get("message") or "Content duplicated")
        new_id = response.get("entry_id")
        if new_id:
            self.navigator.to_edit(self.project.id, self.collection.id, new_id)
        else:
            await self.reload()
        return True

    async def _run_action(self, call: Any, success_message: str) -> bool:
        self.processing = True
        try:
            response = await call(self.project.id, self.collection.id, self.entry.id)
        except ContentApiError as e:
            self.notifier.error(e.message)
            return False
        finally:
            self.processing = False

        self.notifier.success((response or {}).get("message") or success_message)
        self.navigator.to_listing(self.project.id, self.collection.id)
        return True
