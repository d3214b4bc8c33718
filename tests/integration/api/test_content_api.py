"""Integration tests for the content API."""

import json

import pytest
from httpx import AsyncClient

from contentbase.infrastructure.security import PasswordConfirmation, hash_password

pytestmark = pytest.mark.integration

PROJECTS = "/api/v1/projects"


@pytest.fixture
async def content_url(client: AsyncClient) -> str:
    """Create a project with a post collection over HTTP and return its content URL."""
    project = await client.post(PROJECTS, json={"name": "Website", "default_locale": "en", "locales": ["fr"]})
    assert project.status_code == 201
    project_id = project.json()["id"]

    collection = await client.post(f"{PROJECTS}/{project_id}/collections", json={"name": "Posts"})
    assert collection.status_code == 201
    collection_id = collection.json()["id"]

    fields_url = f"{PROJECTS}/{project_id}/collections/{collection_id}/fields"
    title = await client.post(
        fields_url,
        json={"name": "title", "label": "Title", "type": "text", "validations": {"required": {"status": True}}},
    )
    assert title.status_code == 201
    await client.post(fields_url, json={"name": "body", "label": "Body", "type": "longtext"})

    return f"{PROJECTS}/{project_id}/collections/{collection_id}/content"


async def _create(client: AsyncClient, url: str, **payload) -> int:
    payload.setdefault("data", {"title": "Hello"})
    response = await client.post(url, json=payload)
    assert response.status_code == 201
    return response.json()["entry_id"]


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestEntryCrud:
    """Tests for creating, reading and updating entries."""

    async def test_create_and_get(self, client, content_url):
        response = await client.post(
            content_url,
            json={"data": {"title": "Hello", "body": "World"}, "status": "published"},
            headers={"X-Actor-Id": "editor-7"},
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Content published successfully"

        entry = (await client.get(f"{content_url}/{response.json()['entry_id']}")).json()
        assert entry["data"] == {"title": "Hello", "body": "World"}
        assert entry["locale"] == "en"
        assert entry["created_by"] == "editor-7"

    async def test_validation_error_shape(self, client, content_url):
        response = await client.post(content_url, json={"data": {"body": "No title"}})

        assert response.status_code == 422
        assert response.json() == {
            "error": "Validation error",
            "message": "The Title field is required.",
            "errors": {"title": ["The Title field is required."]},
        }

    async def test_malformed_body_uses_the_same_shape(self, client, content_url):
        response = await client.post(content_url, json={"data": {"title": "x"}, "status": "archived"})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation error"
        assert "status" in body["errors"]

    async def test_update(self, client, content_url):
        entry_id = await _create(client, content_url)

        response = await client.put(f"{content_url}/{entry_id}", json={"data": {"title": "Changed"}})

        assert response.status_code == 200
        assert response.json() == {"message": "Content saved successfully", "entry_id": entry_id}
        entry = (await client.get(f"{content_url}/{entry_id}")).json()
        assert entry["data"]["title"] == "Changed"

    async def test_missing_entry(self, client, content_url):
        response = await client.get(f"{content_url}/999")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Not Found",
            "message": "Content entry with ID '999' not found",
        }


class TestSearch:
    async def test_envelope(self, client, content_url):
        for title in ("one", "two", "three"):
            await _create(client, content_url, data={"title": title})

        response = await client.get(f"{content_url}/search", params={"per_page": 2})

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 3
        assert body["last_page"] == 2
        assert body["from"] == 1
        assert body["to"] == 2
        assert len(body["data"]) == 2

    async def test_invalid_date_filter(self, client, content_url):
        response = await client.get(f"{content_url}/search", params={"filter_updated_at_to": "soon"})

        assert response.status_code == 422
        assert list(response.json()["errors"]) == ["filter_updated_at_to"]

    async def test_find(self, client, content_url):
        first = await _create(client, content_url)
        second = await _create(client, content_url)

        response = await client.get(f"{content_url}/find", params={"ids": f"{second},{first}"})

        assert [row["id"] for row in response.json()] == [second, first]


class TestTrash:
    """Tests for the trash lifecycle over HTTP."""

    async def test_trash_restore_and_force_delete(self, client, content_url):
        entry_id = await _create(client, content_url)

        trashed = await client.delete(f"{content_url}/{entry_id}")
        listing = (await client.get(f"{content_url}/search", params={"filter_status": "trashed"})).json()
        restored = await client.put(f"{content_url}/{entry_id}/restore")
        deleted = await client.delete(f"{content_url}/{entry_id}/force")
        missing = await client.get(f"{content_url}/{entry_id}")

        assert trashed.json() == {"message": "Content moved to trash"}
        assert [row["id"] for row in listing["data"]] == [entry_id]
        assert restored.json() == {"message": "Content restored"}
        assert deleted.json() == {"message": "Content deleted permanently"}
        assert missing.status_code == 404

    async def test_restore_live_entry(self, client, content_url):
        entry_id = await _create(client, content_url)

        response = await client.put(f"{content_url}/{entry_id}/restore")

        assert response.status_code == 404


class TestBulkDelete:
    """Tests for password-confirmed bulk deletion over HTTP."""

    @pytest.fixture(autouse=True)
    def confirmation(self):
        from contentbase.infrastructure.api.app import app
        from contentbase.infrastructure.api.dependencies import get_password_confirmation

        confirmation = PasswordConfirmation(hash_password("s3cret"))
        app.dependency_overrides[get_password_confirmation] = lambda: confirmation
        yield confirmation
        app.dependency_overrides.pop(get_password_confirmation, None)

    async def test_correct_password(self, client, content_url):
        first = await _create(client, content_url)
        second = await _create(client, content_url)

        response = await client.post(
            f"{content_url}/bulk-delete", json={"ids": [first, second], "password": "s3cret"}
        )
        missing = await client.get(f"{content_url}/{first}")

        assert response.status_code == 200
        assert response.json() == {"message": "2 of 2 deleted", "deleted": [first, second], "failed": {}}
        assert missing.status_code == 404

    @pytest.mark.parametrize("body", [{}, {"password": ""}, {"password": "guess"}])
    async def test_missing_or_wrong_password(self, client, content_url, body):
        entry_id = await _create(client, content_url)

        response = await client.post(f"{content_url}/bulk-delete", json={"ids": [entry_id], **body})
        still_there = await client.get(f"{content_url}/{entry_id}")

        assert response.status_code == 422
        assert list(response.json()["errors"]) == ["password"]
        assert still_there.status_code == 200


class TestDuplicateAndTranslations:
    async def test_duplicate(self, client, content_url):
        entry_id = await _create(client, content_url, status="published")

        response = await client.post(f"{content_url}/{entry_id}/duplicate")

        assert response.status_code == 201
        copy = (await client.get(f"{content_url}/{response.json()['entry_id']}")).json()
        assert copy["status"] == "draft"
        assert copy["data"]["title"] == "Hello"

    async def test_link_and_unlink(self, client, content_url):
        english = await _create(client, content_url)
        french = await _create(client, content_url, locale="fr")

        linked = await client.post(
            f"{content_url}/{english}/link-translation", json={"translation_entry_id": french}
        )
        group = linked.json()["translation_group_id"]
        members = (
            await client.get(f"{content_url}/search", params={"filter_translation_group_id": group})
        ).json()
        unlinked = await client.post(
            f"{content_url}/{english}/unlink-translation", json={"translation_entry_id": french}
        )

        assert linked.status_code == 200
        assert sorted(row["id"] for row in members["data"]) == sorted([english, french])
        assert unlinked.json() == {"message": "Translation unlinked successfully"}

    async def test_link_same_locale(self, client, content_url):
        first = await _create(client, content_url)
        second = await _create(client, content_url)

        response = await client.post(
            f"{content_url}/{first}/link-translation", json={"translation_entry_id": second}
        )

        assert response.status_code == 422
        assert "translation_entry_id" in response.json()["errors"]


class TestSingleton:
    async def test_second_entry_in_locale_conflicts(self, client):
        project = (await client.post(PROJECTS, json={"name": "Site"})).json()
        collection = (
            await client.post(
                f"{PROJECTS}/{project['id']}/collections",
                json={"name": "Settings", "is_singleton": True},
            )
        ).json()
        url = f"{PROJECTS}/{project['id']}/collections/{collection['id']}/content"

        first = await client.post(url, json={"data": {}})
        second = await client.post(url, json={"data": {}})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "Conflict"


class TestExportImport:
    """Tests for file export and import."""

    async def test_export_csv(self, client, content_url):
        await _create(client, content_url, data={"title": "Exported"})

        response = await client.post(f"{content_url}/export", json={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="posts.csv"'
        assert b"Exported" in response.content

    async def test_import_json(self, client, content_url):
        payload = json.dumps([{"title": "Imported"}, {"body": "untitled"}]).encode("utf-8")

        response = await client.post(
            f"{content_url}/import",
            files={"file": ("posts.json", payload, "application/json")},
        )

        assert response.status_code == 200
        assert response.json() == {
            "imported": 1,
            "errors": ["Row 2: The Title field is required."],
        }
