"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from contentbase.application.services import ContentService, SchemaService
from contentbase.core.config import get_settings
from contentbase.infrastructure.persistence.database import get_db_session
from contentbase.infrastructure.security import PasswordConfirmation

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_actor(
    x_actor_id: Annotated[str | None, Header(alias="X-Actor-Id")] = None,
) -> str | None:
    """Identifier of the acting user, recorded on entries it creates or updates.

    Authentication is handled in front of this service; the gateway forwards
    the authenticated user in the ``X-Actor-Id`` header.
    """
    if x_actor_id is None:
        return None
    return x_actor_id.strip() or None


Actor = Annotated[str | None, Depends(get_actor)]


def get_password_confirmation() -> PasswordConfirmation:
    """Password check for permanent bulk deletes."""
    return PasswordConfirmation(get_settings().confirm_password_hash)


Confirmation = Annotated[PasswordConfirmation, Depends(get_password_confirmation)]


async def get_content_service(
    session: DbSession, actor: Actor, confirmation: Confirmation
) -> ContentService:
    return ContentService(session, actor=actor, confirmation=confirmation)


async def get_schema_service(session: DbSession) -> SchemaService:
    return SchemaService(session)


ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
SchemaServiceDep = Annotated[SchemaService, Depends(get_schema_service)]
