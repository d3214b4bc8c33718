"""Unit tests for the content list engine."""

import asyncio
import json

import pytest

from contentbase.application.services.content_table import (
    ContentTable,
    TableState,
    content_page_name,
)
from contentbase.domain.services.table_settings import TableSettings, encode_settings
from contentbase.infrastructure.client import ContentApiError
from contentbase.infrastructure.storage import MemorySettingsStore


class FakeFetcher:
    """Search endpoint stand-in recording every request."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.error: ContentApiError | None = None

    async def __call__(self, params: dict) -> dict:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        page = params.get("page", 1)
        return {
            "data": [{"id": page * 10 + 1}, {"id": page * 10 + 2}],
            "current_page": page,
            "last_page": 3,
            "per_page": params.get("per_page", 10),
            "from": 1,
            "to": 2,
            "total": 25,
        }


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def store() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def table(fetcher, store, notifier) -> ContentTable:
    return ContentTable(
        fetcher,
        "content_1_10",
        store,
        notifier=notifier,
        debounce_seconds=0,
        default_per_page=10,
    )


class TestInitialize:
    """Tests for loading persisted settings."""

    async def test_fetches_immediately_with_defaults(self, table, fetcher):
        await table.initialize()

        assert fetcher.calls == [{"page": 1, "per_page": 10, "search": ""}]
        assert table.state is TableState.IDLE
        assert table.rows == [{"id": 11}, {"id": 12}]
        assert table.page.total == 25
        assert table.page.last_page == 3

    async def test_restores_saved_settings(self, fetcher, store):
        saved = TableSettings(filters={"status": "draft"}, sort_column="title", per_page=25, current_page=2)
        await store.save("content_1_10", encode_settings(saved))
        table = ContentTable(fetcher, "content_1_10", store, debounce_seconds=0)

        await table.initialize()

        assert fetcher.calls[-1] == {
            "page": 2,
            "per_page": 25,
            "search": "",
            "sort": "title",
            "direction": "asc",
            "filter_status": "draft",
        }

    async def test_corrupt_settings_keep_defaults(self, fetcher):
        store = MemorySettingsStore({"table_settings:content_1_10": "%%%"})
        table = ContentTable(fetcher, "content_1_10", store, debounce_seconds=0, default_per_page=10)

        await table.initialize()

        assert table.settings.per_page == 10


class TestSettingsChanges:
    """Tests for debounced refetches after settings changes."""

    async def test_filter_change_resets_page_and_persists(self, table, fetcher, store):
        await table.initialize()
        table.set_page(3)
        await table.wait_idle()

        table.set_filter("status", "published")
        await table.wait_idle()

        assert fetcher.calls[-1]["page"] == 1
        assert fetcher.calls[-1]["filter_status"] == "published"
        saved = json.loads(await store.load("content_1_10"))
        assert saved["payload"]["filters"] == {"filter_status": "published"}

    @pytest.mark.parametrize(
        ("change", "expected"),
        [
            (lambda t: t.set_search("hello"), {"search": "hello"}),
            (lambda t: t.handle_sort("title"), {"sort": "title", "direction": "asc"}),
            (lambda t: t.set_per_page(25), {"per_page": 25}),
        ],
        ids=["search", "sort", "per_page"],
    )
    async def test_query_changes_reset_page(self, table, fetcher, change, expected):
        """Test that changing search, sort or page size starts again from the first page."""
        await table.initialize()
        table.set_page(3)
        await table.wait_idle()
        assert fetcher.calls[-1]["page"] == 3

        change(table)
        await table.wait_idle()

        assert fetcher.calls[-1]["page"] == 1
        assert table.settings.current_page == 1
        for key, value in expected.items():
            assert fetcher.calls[-1][key] == value

    async def test_page_change_keeps_filters(self, table, fetcher):
        await table.initialize()
        table.set_filter("locale", "fr")
        table.set_page(2)
        await table.wait_idle()

        assert fetcher.calls[-1]["page"] == 2
        assert fetcher.calls[-1]["filter_locale"] == "fr"

    async def test_rapid_changes_are_debounced(self, fetcher, store):
        table = ContentTable(fetcher, "content_1_10", store, debounce_seconds=0.05)
        await table.initialize()

        table.set_search("h")
        table.set_search("he")
        table.set_search("hello")
        await table.wait_idle()

        assert len(fetcher.calls) == 2
        assert fetcher.calls[-1]["search"] == "hello"

    async def test_empty_filter_clears_it(self, table, fetcher):
        await table.initialize()
        table.set_filter("status", "draft")
        table.set_filter("status", "")
        await table.wait_idle()

        assert "filter_status" not in fetcher.calls[-1]
        assert not table.has_active_filters

    async def test_date_range_params(self, table, fetcher):
        await table.initialize()
        table.set_date_range("updated_at", "2026-01-01")
        await table.wait_idle()

        assert fetcher.calls[-1]["filter_updated_at_from"] == "2026-01-01"
        assert fetcher.calls[-1]["filter_updated_at_to"] == "2026-01-01"

    async def test_sort_toggles_direction(self, table):
        table.handle_sort("title")
        assert (table.settings.sort_column, table.settings.sort_direction) == ("title", "asc")
        table.handle_sort("title")
        assert table.settings.sort_direction == "desc"
        table.handle_sort("created_at")
        assert (table.settings.sort_column, table.settings.sort_direction) == ("created_at", "asc")
        table.close()
        await table.wait_idle()

    async def test_column_visibility_saves_without_fetching(self, table, fetcher, store):
        await table.initialize()
        table.set_column_visibility("locale", False)
        await table.wait_idle()

        assert len(fetcher.calls) == 1
        saved = json.loads(await store.load("content_1_10"))
        assert saved["payload"]["columnVisibility"] == {"locale": False}

    async def test_reset_restores_defaults(self, table, fetcher):
        await table.initialize()
        table.set_search("x")
        table.set_per_page(50)
        table.reset()
        await table.wait_idle()

        assert fetcher.calls[-1] == {"page": 1, "per_page": 10, "search": ""}


class TestFetching:
    """Tests for stale-response handling and failures."""

    async def test_superseded_response_is_discarded(self, store):
        gate = asyncio.Event()
        calls: list[dict] = []

        async def fetcher(params):
            calls.append(params)
            if len(calls) == 1:
                await gate.wait()
                return {"data": [{"id": "stale"}], "total": 1}
            return {"data": [{"id": "fresh"}], "total": 1}

        table = ContentTable(fetcher, "content_1_10", store, debounce_seconds=0)
        first = asyncio.create_task(table.fetch())
        await asyncio.sleep(0)

        assert await table.fetch() is True
        gate.set()

        assert await first is False
        assert table.rows == [{"id": "fresh"}]
        assert table.state is TableState.IDLE

    async def test_closed_table_ignores_changes(self, table, fetcher):
        await table.initialize()
        table.close()

        table.set_search("late")
        await table.wait_idle()

        assert await table.fetch() is False
        assert len(fetcher.calls) == 1

    async def test_failure_keeps_rows(self, table, fetcher, notifier):
        await table.initialize()
        fetcher.error = ContentApiError("Request failed with status 500", 500)

        assert await table.refresh() is False

        assert table.rows == [{"id": 11}, {"id": 12}]
        assert table.error == "Request failed with status 500"
        assert notifier.errors == ["Request failed with status 500"]


class TestSelection:
    async def test_select_all_and_toggle(self, table):
        await table.initialize()

        table.select_all()
        assert table.all_selected
        assert table.selected_keys == [11, 12]

        table.toggle_row({"id": 11})
        assert table.selected_keys == [12]
        assert not table.all_selected

        table.clear_selection()
        assert table.selected == {}


def test_content_page_name():
    assert content_page_name(1, 10) == "content_1_10"
