"""Mapping of service errors onto JSON error responses."""

from fastapi import status
from fastapi.responses import JSONResponse

from contentbase.application.services import (
    ContentServiceError,
    ContentValidationError,
    ResourceConflictError,
    ResourceNotFoundError,
)


def error_response(exc: ContentServiceError) -> JSONResponse:
    """JSON response for a service error.

    Validation errors carry their field-keyed messages; not-found and
    conflict errors carry only the message.
    """
    if isinstance(exc, ContentValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "Validation error", "message": exc.message, "errors": exc.errors},
        )
    if isinstance(exc, ResourceNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Not Found", "message": exc.message},
        )
    if isinstance(exc, ResourceConflictError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Conflict", "message": exc.message},
        )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Bad request", "message": exc.message},
    )
