"""Unit tests for relation resolution."""

from unittest.mock import AsyncMock

import pytest

from contentbase.application.services.entry_form import EntryForm
from contentbase.application.services.relation_resolver import RelationResolver
from contentbase.domain.entities import Field
from contentbase.infrastructure.client import ContentApiClient, NotFoundError


@pytest.fixture
def api():
    return AsyncMock(spec=ContentApiClient)


@pytest.fixture
def form(api, project, blog_collection, can_all, navigator, notifier, confirmer) -> EntryForm:
    return EntryForm(
        api,
        project,
        blog_collection,
        can=can_all,
        navigator=navigator,
        notifier=notifier,
        confirmer=confirmer,
    )


@pytest.fixture
def related_field(blog_collection) -> Field:
    return blog_collection.field_by_name("related")


def _resolver(api, field, notifier, **kwargs) -> RelationResolver:
    return RelationResolver(api, 1, 10, field, notifier, **kwargs)


class TestResolve:
    """Tests for RelationResolver.resolve."""

    async def test_rows_follow_relation_order(self, api, related_field, notifier):
        api.get_relation_collection.return_value = {"id": 10, "project_id": 1, "name": "Posts"}
        api.find_entries.return_value = [{"id": 2}, {"id": 1}]
        resolver = _resolver(api, related_field, notifier)

        resolved = await resolver.resolve("[1, 2, 3]")

        api.find_entries.assert_awaited_once_with(1, 10, [1, 2, 3])
        assert resolved.ids == [1, 2]
        assert resolved.collection.name == "Posts"

    async def test_failure_is_notified(self, api, related_field, notifier):
        api.get_relation_collection.side_effect = NotFoundError("Collection with ID '10' not found", 404)
        resolver = _resolver(api, related_field, notifier)

        resolved = await resolver.resolve([1])

        assert resolved.entries == []
        assert notifier.errors == ["Collection with ID '10' not found"]

    def test_rejects_non_relation_fields(self, api, blog_collection, notifier):
        with pytest.raises(ValueError):
            _resolver(api, blog_collection.field_by_name("title"), notifier)

    def test_self_relation_targets_own_collection(self, api, notifier):
        field = Field(id=1, name="parent", label="Parent", type="relation")
        assert _resolver(api, field, notifier).target_collection_id == 10


class TestEditing:
    """Tests for add, remove and reorder."""

    def test_add_appends_once(self, api, related_field, notifier, form):
        resolver = _resolver(api, related_field, notifier)

        resolver.add(form, 4)
        resolver.add(form, 5)
        resolver.add(form, 4)

        assert form.state["related"] == [4, 5]

    def test_single_relation_replaces(self, api, notifier, form):
        field = Field(
            id=9,
            name="related",
            label="Related",
            type="relation",
            options={"relation": {"collection": 10, "type": 1}},
        )
        resolver = _resolver(api, field, notifier)

        resolver.add(form, 4)
        resolver.add(form, 5)

        assert form.state["related"] == [5]

    async def test_remove_and_reorder(self, api, related_field, notifier, form):
        api.get_relation_collection.return_value = {"id": 10, "project_id": 1, "name": "Posts"}
        api.find_entries.return_value = [{"id": 1}, {"id": 2}, {"id": 3}]
        resolver = _resolver(api, related_field, notifier)
        await resolver.resolve([1, 2, 3])
        form.state["related"] = [1, 2, 3]

        resolver.remove(form, 2)
        assert form.state["related"] == [1, 3]

        resolver.reorder(form, 1, 0)
        assert form.state["related"] == [3, 1]

    def test_reorder_disabled_in_detailed_view(self, api, related_field, notifier, form):
        resolver = _resolver(api, related_field, notifier, show_status=True, show_created=True)

        assert not resolver.sortable
        with pytest.raises(ValueError):
            resolver.reorder(form, 0, 1)


class TestPicker:
    def test_published_only_by_default(self, api, related_field, notifier):
        params = _resolver(api, related_field, notifier).picker_params("hello", 2)
        assert params == {"search": "hello", "page": 2, "filter_status": "published"}

    def test_include_drafts(self, api, notifier):
        field = Field(
            id=1,
            name="related",
            label="Related",
            type="relation",
            options={"includeDraft": True},
        )
        assert "filter_status" not in _resolver(api, field, notifier).picker_params()

    async def test_candidates(self, api, related_field, notifier):
        api.search_entries.return_value = {"data": [{"id": 7}]}

        rows = await _resolver(api, related_field, notifier).candidates("x")

        assert rows == [{"id": 7}]
        api.search_entries.assert_awaited_once_with(
            1, 10, {"search": "x", "page": 1, "filter_status": "published"}
        )
