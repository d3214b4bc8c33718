"""Content list engine.

A ``ContentTable`` owns the query settings of one logical list (its
``page_name``) and drives fetches against the search endpoint:

    initializing --load settings--> idle --debounce--> fetching --> idle

Settings changes while idle restart a short debounce timer. Every fetch
carries a ``FetchToken``; a newer change or ``close()`` cancels the token
and the late response is dropped instead of overwriting newer rows.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import partial
from typing import Any

from contentbase.application.services.content_columns import Column, build_columns
from contentbase.application.services.ports import LoggingNotifier, Notifier
from contentbase.core.config import get_settings
from contentbase.core.logging import get_logger
from contentbase.domain.entities import Collection, Project
from contentbase.domain.services.table_settings import (
    FILTER_PREFIX,
    DateRange,
    TableSettings,
    decode_settings,
    encode_settings,
)
from contentbase.infrastructure.client import ContentApiClient, ContentApiError
from contentbase.infrastructure.storage import SettingsStore

logger = get_logger(__name__)

Fetcher = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def content_page_name(project_id: int, collection_id: int) -> str:
    """Settings key of a collection's content list."""
    return f"content_{project_id}_{collection_id}"


def filter_key(column: str) -> str:
    return column if column.startswith(FILTER_PREFIX) else f"{FILTER_PREFIX}{column}"


class TableState(str, Enum):
    INITIALIZING = "initializing"
    IDLE = "idle"
    FETCHING = "fetching"


class FetchToken:
    """Cancellation flag of one in-flight fetch."""

    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class PageInfo:
    """Pagination part of a search envelope."""

    current_page: int = 1
    last_page: int = 1
    per_page: int = 10
    from_: int | None = None
    to: int | None = None
    total: int = 0

    @classmethod
    def from_envelope(cls, envelope: dict[str, Any], per_page: int) -> "PageInfo":
        return cls(
            current_page=int(envelope.get("current_page") or 1),
            last_page=int(envelope.get("last_page") or 1),
            per_page=int(envelope.get("per_page") or per_page),
            from_=envelope.get("from"),
            to=envelope.get("to"),
            total=int(envelope.get("total") or 0),
        )


class ContentTable:
    """Filterable, sortable, paginated list of entries.

    Attributes:
        settings: Current query settings (persisted per ``page_name``).
        state: State machine position.
        rows: Rows of the last applied response.
        page: Pagination of the last applied response.
        selected: Selected rows keyed by ``item_key``.
        error: Message of the last failed fetch, if any.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        page_name: str,
        store: SettingsStore,
        columns: list[Column] | None = None,
        item_key: Callable[[dict[str, Any]], Any] | None = None,
        notifier: Notifier | None = None,
        debounce_seconds: float | None = None,
        default_per_page: int | None = None,
        obfuscate_settings: bool = False,
    ) -> None:
        app_settings = get_settings()
        self.fetcher = fetcher
        self.page_name = page_name
        self.store = store
        self.columns = columns or []
        self.item_key = item_key or (lambda row: row.get("id"))
        self.notifier = notifier or LoggingNotifier()
        self.debounce_seconds = (
            app_settings.table_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self.default_per_page = default_per_page or app_settings.table_default_per_page
        self.obfuscate_settings = obfuscate_settings

        self.settings = self._default_settings()
        self.state = TableState.INITIALIZING
        self.rows: list[dict[str, Any]] = []
        self.page = PageInfo(per_page=self.default_per_page)
        self.selected: dict[Any, dict[str, Any]] = {}
        self.error: str | None = None

        self._timer: asyncio.Task | None = None
        self._token: FetchToken | None = None
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @classmethod
    def for_collection(
        cls,
        api: ContentApiClient,
        project: Project,
        collection: Collection,
        store: SettingsStore,
        **kwargs: Any,
    ) -> "ContentTable":
        """Table over a collection's search endpoint with its default columns."""
        return cls(
            partial(api.search_entries, project.id, collection.id),
            content_page_name(project.id, collection.id),
            store,
            columns=build_columns(project, collection),
            **kwargs,
        )

    def _default_settings(self) -> TableSettings:
        return TableSettings(per_page=self.default_per_page)

    # -- lifecycle -------------------------------------------------------

    async def initialize(self) -> None:
        """Load persisted settings, then fetch immediately (no debounce)."""
        self.state = TableState.INITIALIZING
        loaded = decode_settings(await self.store.load(self.page_name))
        if loaded is not None:
            self.settings = loaded
        self.state = TableState.IDLE
        await self.fetch()

    def close(self) -> None:
        """Stop reacting: cancel the debounce timer and any in-flight fetch."""
        self._closed = True
        if self._token is not None:
            self._token.cancel()
        for task in list(self._tasks):
            task.cancel()
        self._timer = None

    async def wait_idle(self) -> None:
        """Wait until pending timers, saves and fetches have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _changed(self, reset_page: bool = True) -> None:
        if reset_page:
            self.settings.current_page = 1
        if self._closed:
            return
        if self._timer is not None:
            self._timer.cancel()
        if self._token is not None:
            self._token.cancel()
        self._timer = self._spawn(self._debounced_fetch())

    async def _debounced_fetch(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._timer = None
        await self.save_settings()
        await self.fetch()

    async def save_settings(self) -> None:
        await self.store.save(
            self.page_name, encode_settings(self.settings, obfuscate=self.obfuscate_settings)
        )

    # -- fetching --------------------------------------------------------

    def request_params(self) -> dict[str, Any]:
        """Query parameters of the current settings.

        ``None`` and empty values are dropped, except ``search`` which is
        always sent.
        """
        s = self.settings
        params: dict[str, Any] = {
            "page": s.current_page,
            "per_page": s.per_page,
            "search": s.search,
            "sort": s.sort_column,
            "direction": s.sort_direction if s.sort_column else None,
        }
        params.update(s.filters)
        for column, date_range in s.date_ranges.items():
            if not date_range.is_active:
                continue
            params[f"{filter_key(column)}_from"] = date_range.from_.isoformat()
            params[f"{filter_key(column)}_to"] = (date_range.to or date_range.from_).isoformat()
        return {k: v for k, v in params.items() if k == "search" or v not in (None, "")}

    async def fetch(self) -> bool:
        """Fetch the current page now.

        Returns:
            True if the response was applied, False on failure or when the
            response was superseded.
        """
        if self._closed:
            return False
        if self._token is not None:
            self._token.cancel()
        token = self._token = FetchToken()
        self.state = TableState.FETCHING
        params = self.request_params()

        try:
            envelope = await self.fetcher(params)
        except ContentApiError as e:
            logger.warning("Content list fetch failed", page_name=self.page_name, error=e.message)
            if not token.cancelled:
                self.error = e.message
                self.notifier.error(e.message)
            return False
        finally:
            if self._token is token:
                self._token = None
                self.state = TableState.IDLE

        if token.cancelled:
            logger.debug("Discarding superseded content list response", page_name=self.page_name)
            return False

        self.rows = list(envelope.get("data") or [])
        self.page = PageInfo.from_envelope(envelope, self.settings.per_page)
        self.error = None
        return True

    async def refresh(self) -> bool:
        """Refetch immediately with unchanged settings."""
        return await self.fetch()

    # -- settings changes ------------------------------------------------

    def set_search(self, text: str | None) -> None:
        self.settings.search = text or ""
        self._changed()

    def set_filter(self, column: str, value: Any) -> None:
        """Set a select/text filter; an empty value clears it."""
        key = filter_key(column)
        if value in (None, ""):
            self.settings.filters.pop(key, None)
        else:
            self.settings.filters[key] = str(value)
        self._changed()

    def set_date_range(self, column: str, start: date | str | None, end: date | str | None = None) -> None:
        """Set a date filter; no start clears it."""
        if start in (None, ""):
            self.settings.date_ranges.pop(column, None)
        else:
            self.settings.date_ranges[column] = DateRange(from_=start, to=end)
        self._changed()

    def clear_filter(self, column: str) -> None:
        self.settings.filters.pop(filter_key(column), None)
        self.settings.date_ranges.pop(column, None)
        self._changed()

    def clear_all_filters(self) -> None:
        self.settings.filters.clear()
        self.settings.date_ranges.clear()
        self._changed()

    def handle_sort(self, column: str) -> None:
        """Toggle direction on the sorted column, otherwise sort ascending."""
        if self.settings.sort_column == column:
            self.settings.sort_direction = "desc" if self.settings.sort_direction == "asc" else "asc"
        else:
            self.settings.sort_column = column
            self.settings.sort_direction = "asc"
        self._changed()

    def set_per_page(self, per_page: int | str) -> None:
        self.settings.per_page = max(1, int(per_page))
        self._changed()

    def set_page(self, page: int) -> None:
        self.settings.current_page = max(1, int(page))
        self._changed(reset_page=False)

    def set_column_visibility(self, accessor_key: str, visible: bool) -> None:
        """Show or hide a column; persisted without refetching."""
        self.settings.column_visibility[accessor_key] = visible
        if not self._closed:
            self._spawn(self.save_settings())

    def reset(self) -> None:
        """Restore default settings and refetch."""
        self.settings = self._default_settings()
        self._changed()

    @property
    def visible_columns(self) -> list[Column]:
        return [c for c in self.columns if self.settings.column_visibility.get(c.accessor_key, True)]

    @property
    def has_active_filters(self) -> bool:
        return bool(self.settings.filters or self.settings.date_ranges)

    # -- selection -------------------------------------------------------

    def is_selected(self, row: dict[str, Any]) -> bool:
        return self.item_key(row) in self.selected

    def toggle_row(self, row: dict[str, Any], selected: bool | None = None) -> None:
        key = self.item_key(row)
        if selected is None:
            selected = key not in self.selected
        if selected:
            self.selected[key] = row
        else:
            self.selected.pop(key, None)

    def select_all(self) -> None:
        """Select exactly the rows of the current page."""
        self.selected = {self.item_key(row): row for row in self.rows}

    def clear_selection(self) -> None:
        self.selected = {}

    @property
    def selected_keys(self) -> list[Any]:
        return list(self.selected)

    @property
    def all_selected(self) -> bool:
        return bool(self.rows) and all(self.is_selected(row) for row in self.rows)
