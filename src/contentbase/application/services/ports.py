"""Ports through which the client engines reach the user interface.

Engines never render or route themselves; they call these ports and leave
presentation to whatever drives them (a UI, a CLI, a test).
"""

from typing import Protocol

from contentbase.core.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    """Transient notifications (toasts)."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class Navigator(Protocol):
    """Routing between the listing and the entry editor."""

    def to_listing(self, project_id: int, collection_id: int) -> None: ...

    def to_edit(self, project_id: int, collection_id: int, entry_id: int) -> None: ...

    def to_create(self, project_id: int, collection_id: int, locale: str | None = None) -> None: ...

    def scroll_to_top(self) -> None: ...


class Confirmer(Protocol):
    """Explicit confirmation step before destructive actions."""

    async def confirm(self, message: str) -> bool: ...


class LoggingNotifier:
    """Notifier that writes notifications to the structured log."""

    def success(self, message: str) -> None:
        logger.info("Notification", kind="success", notification=message)

    def error(self, message: str) -> None:
        logger.warning("Notification", kind="error", notification=message)


class NullNavigator:
    """Navigator for headless use; every route is a no-op."""

    def to_listing(self, project_id: int, collection_id: int) -> None:
        logger.debug("Navigate to listing", project_id=project_id, collection_id=collection_id)

    def to_edit(self, project_id: int, collection_id: int, entry_id: int) -> None:
        logger.debug("Navigate to editor", collection_id=collection_id, entry_id=entry_id)

    def to_create(self, project_id: int, collection_id: int, locale: str | None = None) -> None:
        logger.debug("Navigate to create", collection_id=collection_id, locale=locale)

    def scroll_to_top(self) -> None:
        pass

