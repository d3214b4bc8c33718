"""Errors raised by the content API client.

Every failure of a request maps onto one class, so engine operations can
catch ``ContentApiError`` at their boundary and branch on the subclass.
"""

from typing import Any


class ContentApiError(Exception):
    """Base class for content API failures.

    Attributes:
        message: Human readable message (from the server when available).
        status_code: HTTP status, or None for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationFailed(ContentApiError):
    """The server rejected submitted values (HTTP 422).

    Attributes:
        errors: Messages keyed by dotted field path (``title``, ``tags.0.value``).
    """

    def __init__(
        self,
        message: str,
        errors: dict[str, list[str]] | None = None,
        status_code: int = 422,
    ) -> None:
        super().__init__(message, status_code)
        self.errors = errors or {}

    def first_errors(self) -> dict[str, str]:
        """First message per field, the shape forms display inline."""
        return {key: messages[0] for key, messages in self.errors.items() if messages}


class AuthorizationError(ContentApiError):
    """The acting user may not perform the request (HTTP 401/403)."""


class NotFoundError(ContentApiError):
    """The addressed entry, collection or project does not exist (HTTP 404)."""


class ConflictError(ContentApiError):
    """The request conflicts with current state (HTTP 409)."""


class TransportError(ContentApiError):
    """The request never produced an HTTP response (network, timeout)."""


def error_from_response(status_code: int, body: Any) -> ContentApiError:
    """Build the matching error for a failed response.

    Args:
        status_code: HTTP status of the response.
        body: Decoded JSON body, or raw text when the body is not JSON.

    Returns:
        The error instance to raise.
    """
    message = f"Request failed with status {status_code}"
    errors: dict[str, list[str]] = {}
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or message
        raw_errors = body.get("errors")
        if isinstance(raw_errors, dict):
            errors = {
                str(key): [str(m) for m in (value if isinstance(value, list) else [value])]
                for key, value in raw_errors.items()
            }
    elif isinstance(body, str) and body:
        message = body

    if status_code == 422:
        return ValidationFailed(message, errors)
    if status_code in (401, 403):
        return AuthorizationError(message, status_code)
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code == 409:
        return ConflictError(message, status_code)
    return ContentApiError(message, status_code)
