"""Errors raised by the server-side services and mapped to HTTP responses."""


class ContentServiceError(Exception):
    """Base class for service failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ResourceNotFoundError(ContentServiceError):
    """A project, collection, field or entry does not exist."""


class ResourceConflictError(ContentServiceError):
    """The request conflicts with current state (e.g. singleton locale taken)."""


class ContentValidationError(ContentServiceError):
    """Submitted data is invalid.

    Attributes:
        errors: Messages keyed by field path.
    """

    def __init__(self, errors: dict[str, list[str]], message: str | None = None) -> None:
        if message is None:
            first = next((msgs[0] for msgs in errors.values() if msgs), "The given data was invalid.")
            extra = sum(len(msgs) for msgs in errors.values()) - 1
            message = first if extra <= 0 else f"{first} (and {extra} more errors)"
        super().__init__(message)
        self.errors = errors
