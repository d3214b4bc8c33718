"""API Routes for ContentBase."""

from contentbase.infrastructure.api.routes.collections_router import router as collections_router
from contentbase.infrastructure.api.routes.content_router import router as content_router
from contentbase.infrastructure.api.routes.projects_router import router as projects_router

__all__ = [
    "collections_router",
    "content_router",
    "projects_router",
]
