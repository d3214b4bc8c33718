"""Unit tests for the entry form engine."""

from unittest.mock import AsyncMock

import pytest

from contentbase.application.services.entry_form import EntryForm, SubmitAction
from contentbase.domain.entities import ContentEntry, EntryStatus, UserCan
from contentbase.infrastructure.client import ContentApiClient, ContentApiError, ValidationFailed


@pytest.fixture
def api():
    return AsyncMock(spec=ContentApiClient)


@pytest.fixture
def make_form(api, project, blog_collection, can_all, navigator, notifier, confirmer):
    def _make(**kwargs) -> EntryForm:
        kwargs.setdefault("can", can_all)
        return EntryForm(
            api,
            project,
            kwargs.pop("collection", blog_collection),
            navigator=navigator,
            notifier=notifier,
            confirmer=confirmer,
            **kwargs,
        )

    return _make


@pytest.fixture
def existing_entry() -> ContentEntry:
    return ContentEntry(
        id=5,
        uuid="c0ffee",
        project_id=1,
        collection_id=10,
        locale="fr",
        status=EntryStatus.DRAFT,
        data={"title": "Bonjour", "cover": {"id": 3}, "tags": ["a"]},
    )


class TestEntryFormState:
    """Tests for form state and field edits."""

    def test_new_form_has_defaults(self, make_form):
        form = make_form()

        assert form.is_new
        assert form.locale == "en"
        assert form.state["title"] == ""
        assert form.state["cover"] == []
        assert form.state["address"] == [{"street": "", "photo": []}]

    def test_requested_locale_must_be_configured(self, make_form):
        assert make_form(locale="fr").locale == "fr"
        assert make_form(locale="it").locale == "en"

    def test_existing_entry_is_normalized(self, make_form, existing_entry):
        form = make_form(entry=existing_entry)

        assert form.locale == "fr"
        assert form.state["cover"] == [3]
        assert form.state["tags"] == [{"value": "a"}]

    def test_title_change_derives_slug(self, make_form, blog_collection):
        """Test that editing the slug source regenerates the slug."""
        form = make_form()
        form.errors = {"title": "The Title field is required."}

        state = form.apply_field_change(blog_collection.field_by_name("title"), "Hello World!")

        assert state["title"] == "Hello World!"
        assert state["slug"] == "hello-world"
        assert "title" not in form.errors

    def test_repeatable_item_change_pads_list(self, make_form, blog_collection):
        form = make_form()

        form.apply_field_change(blog_collection.field_by_name("tags"), "third", index=2)

        assert form.state["tags"] == [{"value": None}, {"value": None}, {"value": "third"}]

    def test_media_change_is_coerced(self, make_form, blog_collection):
        form = make_form()

        form.apply_field_change(blog_collection.field_by_name("cover"), 9)

        assert form.state["cover"] == [9]

    def test_set_locale_rejects_unknown(self, make_form):
        form = make_form()
        with pytest.raises(ValueError):
            form.set_locale("it")
        form.set_locale("de")
        assert form.locale == "de"

    def test_local_validation(self, make_form):
        form = make_form()
        assert form.validate() == {"title": "The Title field is required."}


class TestEntryFormSubmit:
    """Tests for EntryForm.submit."""

    async def test_create_then_edit(self, make_form, api, blog_collection, navigator, notifier):
        """Test that a first save opens the editor of the new entry."""
        api.create_entry.return_value = {"message": "Content saved successfully", "entry_id": 42}
        form = make_form()
        form.apply_field_change(blog_collection.field_by_name("title"), "Hello")

        outcome = await form.submit()

        assert outcome.ok
        assert outcome.entry_id == 42
        payload = api.create_entry.await_args.args[2]
        assert payload["status"] == "draft"
        assert payload["locale"] == "en"
        assert payload["data"]["slug"] == "hello"
        assert navigator.calls == [("edit", 1, 10, 42)]
        assert notifier.successes == ["Content saved successfully"]

    async def test_server_validation_keeps_state(self, make_form, api, navigator, notifier):
        """Test that a 422 sets field errors and nothing navigates."""
        api.create_entry.side_effect = ValidationFailed(
            "The Title field is required.",
            {"title": ["The Title field is required."], "tags.0.value": ["Too short", "Other"]},
        )
        form = make_form()
        before = dict(form.state)

        outcome = await form.submit(SubmitAction.CLOSE)

        assert not outcome.ok
        assert form.errors == {
            "title": "The Title field is required.",
            "tags.0.value": "Too short",
        }
        assert form.state == before
        assert form.processing is False
        assert navigator.calls == []
        assert notifier.errors == ["The Title field is required."]

    async def test_validate_before_submit_skips_request(self, make_form, api, navigator):
        form = make_form(validate_before_submit=True)

        outcome = await form.submit()

        assert not outcome.ok
        assert outcome.errors == {"title": "The Title field is required."}
        api.create_entry.assert_not_awaited()
        assert navigator.calls == []

    async def test_transport_error_is_reported(self, make_form, api, notifier):
        api.create_entry.side_effect = ContentApiError("Could not reach the content API")
        form = make_form()

        outcome = await form.submit()

        assert not outcome.ok
        assert notifier.errors == ["Could not reach the content API"]

    async def test_create_requires_capability(self, make_form, api, notifier):
        form = make_form(can=UserCan(update_content=True))

        outcome = await form.submit()

        assert not outcome.ok
        api.create_entry.assert_not_awaited()
        assert notifier.errors == ["You are not allowed to create content."]

    async def test_publish_requires_capability(self, make_form, api):
        form = make_form(can=UserCan(create_content=True, update_content=True))

        outcome = await form.submit(status=EntryStatus.PUBLISHED)

        assert not outcome.ok
        api.create_entry.assert_not_awaited()

    async def test_singleton_always_publishes(self, make_form, api, blog_collection):
        blog_collection.is_singleton = True
        api.create_entry.return_value = {"entry_id": 1}
        form = make_form()

        await form.submit()

        assert api.create_entry.await_args.args[2]["status"] == "published"

    async def test_singleton_save_requires_publish_capability(
        self, make_form, api, blog_collection, notifier
    ):
        """Test that a draft save of a singleton is checked as the publish it becomes."""
        blog_collection.is_singleton = True
        form = make_form(can=UserCan(create_content=True, update_content=True))
        form.apply_field_change(blog_collection.field_by_name("title"), "Settings")

        outcome = await form.submit(status=EntryStatus.DRAFT)

        assert not outcome.ok
        assert outcome.message == "You are not allowed to publish content."
        api.create_entry.assert_not_awaited()
        assert notifier.errors == ["You are not allowed to publish content."]

    @pytest.mark.parametrize("action", [SubmitAction.STAY, SubmitAction.NEW, SubmitAction.CLOSE])
    async def test_new_entry_without_update_capability_returns_to_listing(
        self, make_form, api, blog_collection, navigator, action
    ):
        api.create_entry.return_value = {"message": "Content saved successfully", "entry_id": 7}
        form = make_form(can=UserCan(create_content=True))
        form.apply_field_change(blog_collection.field_by_name("title"), "Hello")

        outcome = await form.submit(action)

        assert outcome.ok
        assert navigator.calls == [("listing", 1, 10)]

    async def test_close_returns_to_listing(self, make_form, api, navigator):
        api.create_entry.return_value = {"entry_id": 7}

        await make_form().submit(SubmitAction.CLOSE)

        assert navigator.calls == [("listing", 1, 10)]

    async def test_new_resets_form(self, make_form, api, navigator, blog_collection):
        api.create_entry.return_value = {"entry_id": 7}
        form = make_form()
        form.apply_field_change(blog_collection.field_by_name("title"), "Hello")

        await form.submit(SubmitAction.NEW)

        assert form.is_new
        assert form.state["title"] == ""
        assert navigator.calls == [("top",)]

    async def test_update_reloads_entry(self, make_form, api, existing_entry, navigator):
        api.update_entry.return_value = {"message": "Content saved successfully", "entry_id": 5}
        api.get_entry.return_value = {
            "id": 5,
            "locale": "fr",
            "status": "draft",
            "data": {"title": "Bonjour!"},
        }
        form = make_form(entry=existing_entry)

        outcome = await form.submit()

        assert outcome.ok
        api.update_entry.assert_awaited_once()
        assert form.state["title"] == "Bonjour!"
        assert navigator.calls == []


class TestEntryFormActions:
    """Tests for unpublish, trash, delete and duplicate."""

    async def test_unpublish_saves_draft_and_stays(
        self, make_form, api, existing_entry, navigator, notifier
    ):
        existing_entry.status = EntryStatus.PUBLISHED
        api.update_entry.return_value = {"message": "Content saved successfully", "entry_id": 5}
        api.get_entry.return_value = {"id": 5, "locale": "fr", "status": "draft", "data": {"title": "Bonjour"}}
        form = make_form(entry=existing_entry)

        assert await form.unpublish() is True

        assert api.update_entry.await_args.args[3]["status"] == "draft"
        api.get_entry.assert_awaited_once_with(1, 10, 5)
        assert form.entry.status is EntryStatus.DRAFT
        assert navigator.calls == []
        assert notifier.successes == ["Content unpublished"]

    async def test_unpublish_requires_capability(self, make_form, api, existing_entry, notifier):
        form = make_form(entry=existing_entry, can=UserCan(update_content=True))

        assert await form.unpublish() is False
        api.update_entry.assert_not_awaited()
        assert notifier.errors == ["You are not allowed to perform this action."]

    async def test_trash_confirmed(self, make_form, api, existing_entry, navigator, notifier):
        api.trash_entry.return_value = {"message": "Content moved to trash"}
        form = make_form(entry=existing_entry)

        assert await form.trash() is True

        api.trash_entry.assert_awaited_once_with(1, 10, 5)
        assert navigator.calls == [("listing", 1, 10)]
        assert notifier.successes == ["Content moved to trash"]

    async def test_trash_cancelled(self, make_form, api, existing_entry, confirmer):
        confirmer.answer = False
        form = make_form(entry=existing_entry)

        assert await form.trash() is False
        api.trash_entry.assert_not_awaited()

    async def test_delete_requires_capability(self, make_form, api, existing_entry, notifier):
        form = make_form(entry=existing_entry, can=UserCan(update_content=True))

        assert await form.delete() is False
        api.force_delete_entry.assert_not_awaited()
        assert notifier.errors

    async def test_duplicate_opens_copy(self, make_form, api, existing_entry, navigator):
        api.duplicate_entry.return_value = {"message": "Content duplicated", "entry_id": 6}
        form = make_form(entry=existing_entry)

        assert await form.duplicate() is True
        assert navigator.calls == [("edit", 1, 10, 6)]

    async def test_actions_need_an_entry(self, make_form, api):
        assert await make_form().trash() is False
        api.trash_entry.assert_not_awaited()


class TestEntryFormOpen:
    async def test_open_fetches_schema_and_entry(self, api, can_all, navigator, notifier, confirmer):
        api.get_project.return_value = {"id": 1, "name": "Website", "locales": ["en", "fr"]}
        api.get_collection.return_value = {
            "id": 10,
            "project_id": 1,
            "name": "Posts",
            "fields": [{"id": 1, "name": "title", "type": "text"}],
        }
        api.get_entry.return_value = {"id": 5, "locale": "fr", "data": {"title": "Salut"}}

        form = await EntryForm.open(
            api,
            1,
            10,
            5,
            can=can_all,
            navigator=navigator,
            notifier=notifier,
            confirmer=confirmer,
        )

        assert form.entry_id == 5
        assert form.state == {"title": "Salut"}
