"""HTTP client for the content API.

Wraps ``httpx.AsyncClient`` and exposes one coroutine per endpoint the
content engines consume. Non-2xx responses and transport failures are
raised as ``ContentApiError`` subclasses.
"""

from typing import Any

import httpx

from contentbase.core.config import get_settings
from contentbase.core.logging import get_logger
from contentbase.infrastructure.client.errors import (
    ContentApiError,
    TransportError,
    error_from_response,
)

logger = get_logger(__name__)


class ContentApiClient:
    """Async client for project, collection and content entry endpoints.

    The client owns its ``httpx.AsyncClient`` unless one is passed in; use
    it as an async context manager or call ``aclose`` when done.

    Example:
        async with ContentApiClient("http://localhost:8000/api/v1") as api:
            page = await api.search_entries(1, 2, {"page": 1})
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root including the version prefix.
            timeout: Request timeout in seconds.
            headers: Extra headers sent with every request (e.g. auth).
            client: Pre-configured client, mainly for tests.
        """
        settings = get_settings()
        self.base_url = (base_url or settings.client_base_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.client_timeout_seconds,
            headers={"Accept": "application/json", **(headers or {})},
        )

    async def __aenter__(self) -> "ContentApiClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _content_path(project_id: int, collection_id: int, suffix: str = "") -> str:
        return f"/projects/{project_id}/collections/{collection_id}/content{suffix}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Content API request failed", method=method, path=path, error=str(e))
            raise TransportError(f"Could not reach the content API: {e}") from e

        if response.is_success:
            return response

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        error = error_from_response(response.status_code, body)
        logger.info(
            "Content API returned an error",
            method=method,
            path=path,
            status_code=response.status_code,
            error_type=type(error).__name__,
        )
        raise error

    async def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ContentApiError("Content API returned invalid JSON", response.status_code) from e

    # -- schema ----------------------------------------------------------

    async def get_project(self, project_id: int) -> dict[str, Any]:
        return await self._json("GET", f"/projects/{project_id}")

    async def get_collection(self, project_id: int, collection_id: int) -> dict[str, Any]:
        return await self._json("GET", f"/projects/{project_id}/collections/{collection_id}")

    async def get_relation_collection(
        self, project_id: int, collection_id: int, relation_collection_id: int
    ) -> dict[str, Any]:
        """Fetch a relation's target collection with its displayable fields."""
        return await self._json(
            "GET",
            self._content_path(project_id, collection_id, "/relation-collection"),
            params={"collection_id": relation_collection_id},
        )

    # -- entries ---------------------------------------------------------

    async def get_entry(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        return await self._json("GET", self._content_path(project_id, collection_id, f"/{entry_id}"))

    async def create_entry(
        self, project_id: int, collection_id: int, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """Create an entry from ``{data, status, locale}``; returns ``{message, entry_id}``."""
        return await self._json("POST", self._content_path(project_id, collection_id), json=payload)

    async def update_entry(
        self, project_id: int, collection_id: int, entry_id: int, payload: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._json(
            "PUT", self._content_path(project_id, collection_id, f"/{entry_id}"), json=payload
        )

    async def trash_entry(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        return await self._json("DELETE", self._content_path(project_id, collection_id, f"/{entry_id}"))

    async def force_delete_entry(
        self, project_id: int, collection_id: int, entry_id: int
    ) -> dict[str, Any]:
        return await self._json(
            "DELETE", self._content_path(project_id, collection_id, f"/{entry_id}/force")
        )

    async def bulk_delete_entries(
        self, project_id: int, collection_id: int, entry_ids: list[Any], password: str
    ) -> dict[str, Any]:
        """Permanently delete several entries; returns ``{message, deleted, failed}``.

        ``failed`` maps entry ids (as strings) to error messages. A missing
        or wrong password is rejected as a whole with a validation error.
        """
        return await self._json(
            "POST",
            self._content_path(project_id, collection_id, "/bulk-delete"),
            json={"ids": list(entry_ids), "password": password},
        )

    async def restore_entry(self, project_id: int, collection_id: int, entry_id: int) -> dict[str, Any]:
        return await self._json(
            "PUT", self._content_path(project_id, collection_id, f"/{entry_id}/restore")
        )

    async def duplicate_entry(
        self, project_id: int, collection_id: int, entry_id: int
    ) -> dict[str, Any]:
        return await self._json(
            "POST", self._content_path(project_id, collection_id, f"/{entry_id}/duplicate")
        )

    async def search_entries(
        self, project_id: int, collection_id: int, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Search entries; returns the paginated envelope."""
        return await self._json(
            "GET", self._content_path(project_id, collection_id, "/search"), params=params or {}
        )

    async def find_entries(
        self, project_id: int, collection_id: int, ids: list[Any]
    ) -> list[dict[str, Any]]:
        """Fetch entries by id, in the order of ``ids``."""
        if not ids:
            return []
        return await self._json(
            "GET",
            self._content_path(project_id, collection_id, "/find"),
            params={"ids": ",".join(str(i) for i in ids)},
        )

    # -- translations ----------------------------------------------------

    async def link_translation(
        self, project_id: int, collection_id: int, entry_id: int, translation_entry_id: int
    ) -> dict[str, Any]:
        return await self._json(
            "POST",
            self._content_path(project_id, collection_id, f"/{entry_id}/link-translation"),
            json={"translation_entry_id": translation_entry_id},
        )

    async def unlink_translation(
        self, project_id: int, collection_id: int, entry_id: int, translation_entry_id: int
    ) -> dict[str, Any]:
        return await self._json(
            "POST",
            self._content_path(project_id, collection_id, f"/{entry_id}/unlink-translation"),
            json={"translation_entry_id": translation_entry_id},
        )

    # -- import / export -------------------------------------------------

    async def export_entries(self, project_id: int, collection_id: int, fmt: str) -> bytes:
        """Download all entries as ``json``, ``csv`` or ``excel``."""
        response = await self._request(
            "POST", self._content_path(project_id, collection_id, "/export"), json={"format": fmt}
        )
        return response.content

    async def import_entries(
        self, project_id: int, collection_id: int, filename: str, content: bytes
    ) -> dict[str, Any]:
        """Upload a JSON or CSV file; returns ``{imported, errors}``."""
        return await self._json(
            "POST",
            self._content_path(project_id, collection_id, "/import"),
            files={"file": (filename, content)},
        )
