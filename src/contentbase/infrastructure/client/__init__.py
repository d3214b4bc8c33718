"""Content API client."""

from contentbase.infrastructure.client.content_api_client import ContentApiClient
from contentbase.infrastructure.client.errors import (
    AuthorizationError,
    ConflictError,
    ContentApiError,
    NotFoundError,
    TransportError,
    ValidationFailed,
    error_from_response,
)

__all__ = [
    "AuthorizationError",
    "ConflictError",
    "ContentApiClient",
    "ContentApiError",
    "NotFoundError",
    "TransportError",
    "ValidationFailed",
    "error_from_response",
]
