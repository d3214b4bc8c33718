"""Translation linking engine.

Entries that translate each other share a ``translation_group_id``. The
linker builds the locale -> entry map for one entry and links or unlinks
other entries to its group.
"""

from typing import Any

from contentbase.application.services.ports import Navigator, Notifier, NullNavigator
from contentbase.core.config import get_settings
from contentbase.core.logging import get_logger
from contentbase.domain.entities import Collection, ContentEntry, Project, UserCan
from contentbase.infrastructure.client import ContentApiClient, ContentApiError

logger = get_logger(__name__)

TranslationMap = dict[str, ContentEntry | None]

_CURRENT_GROUP = object()


class TranslationLinker:
    """Locale-linked entries of one entry."""

    def __init__(
        self,
        api: ContentApiClient,
        project: Project,
        collection: Collection,
        entry: ContentEntry,
        can: UserCan,
        notifier: Notifier,
        navigator: Navigator | None = None,
    ) -> None:
        self.api = api
        self.project = project
        self.collection = collection
        self.entry = entry
        self.can = can
        self.notifier = notifier
        self.navigator = navigator or NullNavigator()
        self.translations: TranslationMap = {}
        self.loading = False

    async def fetch_translations(self, group_id: Any = _CURRENT_GROUP) -> TranslationMap:
        """Map every project locale to its linked entry, or None.

        Locales are looked up one after another; a failed lookup yields
        None for that locale only.

        Args:
            group_id: Group to resolve; defaults to the entry's own group.
        """
        if group_id is _CURRENT_GROUP:
            group_id = self.entry.translation_group_id

        translations: TranslationMap = {}
        self.loading = True
        try:
            for locale in self.project.locales:
                if locale == self.entry.locale:
                    translations[locale] = self.entry
                elif not group_id:
                    translations[locale] = None
                else:
                    translations[locale] = await self._find_in_locale(locale, group_id)
        finally:
            self.loading = False

        self.translations = translations
        return translations

    async def _find_in_locale(self, locale: str, group_id: str) -> ContentEntry | None:
        params = {
            "filter_locale": locale,
            "filter_translation_group_id": group_id,
            "per_page": get_settings().search_max_per_page,
        }
        try:
            page = await self.api.search_entries(self.project.id, self.collection.id, params)
        except ContentApiError as e:
            logger.warning(
                "Translation lookup failed",
                entry_id=self.entry.id,
                locale=locale,
                error=e.message,
            )
            return None

        for row in page.get("data") or []:
            if row.get("translation_group_id") == group_id and row.get("id") != self.entry.id:
                return ContentEntry.from_dict(row)
        return None

    @property
    def linked_ids(self) -> set[int]:
        return {e.id for e in self.translations.values() if e is not None}

    async def link(self, target: ContentEntry) -> TranslationMap:
        """Link ``target`` into this entry's group, then refetch.

        The refetch uses the group id reported by the server, which may be
        a new group when neither entry had one.
        """
        if not self.can.update_content:
            self.notifier.error("You are not allowed to link translations.")
            return self.translations
        try:
            response = await self.api.link_translation(
                self.project.id, self.collection.id, self.entry.id, target.id
            )
        except ContentApiError as e:
            self.notifier.error(e.message)
            return self.translations

        group_id = response.get("translation_group_id")
        self.entry.translation_group_id = group_id
        self.notifier.success(response.get("message") or "Translation linked")
        logger.info("Translation linked", entry_id=self.entry.id, target_id=target.id, group_id=group_id)
        return await self.fetch_translations(group_id)

    async def unlink(self, locale: str, target: ContentEntry) -> TranslationMap:
        """Remove ``target`` (the entry of ``locale``) from the group, then refetch."""
        if not self.can.update_content:
            self.notifier.error("You are not allowed to unlink translations.")
            return self.translations
        try:
            response = await self.api.unlink_translation(
                self.project.id, self.collection.id, self.entry.id, target.id
            )
        except ContentApiError as e:
            self.notifier.error(e.message)
            return self.translations

        self.notifier.success(response.get("message") or "Translation unlinked")
        logger.info("Translation unlinked", entry_id=self.entry.id, locale=locale, target_id=target.id)
        return await self.fetch_translations()

    async def candidates(self, locale: str, search: str = "") -> list[ContentEntry]:
        """Entries of ``locale`` that may be linked to this entry.

        Excludes the current entry and every entry already linked.
        """
        excluded = self.linked_ids | {self.entry.id}
        params = {
            "filter_locale": locale,
            "search": search,
            "per_page": get_settings().search_max_per_page,
        }
        try:
            page = await self.api.search_entries(self.project.id, self.collection.id, params)
        except ContentApiError as e:
            self.notifier.error(e.message)
            return []
        return [
            ContentEntry.from_dict(row)
            for row in page.get("data") or []
            if row.get("id") not in excluded
        ]

    async def select_slot(self, locale: str, choice: ContentEntry | None) -> TranslationMap:
        """Fill an empty locale slot with an existing entry or a new one."""
        if choice is not None:
            return await self.link(choice)
        self.navigator.to_create(self.project.id, self.collection.id, locale)
        return self.translations
