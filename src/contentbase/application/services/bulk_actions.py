"""Bulk actions over selected entries.

Each entry is processed on its own: a failure is recorded for that entry
and the remaining entries are still processed. Nothing is rolled back.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from contentbase.application.services.content_table import ContentTable
from contentbase.application.services.ports import Confirmer, Notifier
from contentbase.core.logging import get_logger
from contentbase.domain.entities import UserCan
from contentbase.infrastructure.client import ContentApiClient, ContentApiError

logger = get_logger(__name__)


@dataclass
class BulkResult:
    """Per-entry outcome of a bulk action.

    Attributes:
        succeeded: Ids processed successfully.
        failed: Error message per failed id.
    """

    succeeded: list[Any] = field(default_factory=list)
    failed: dict[Any, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self, verb: str) -> str:
        return f"{len(self.succeeded)} of {self.total} {verb}"


class BulkActions:
    """Trash, permanently delete or restore several entries."""

    def __init__(
        self,
        api: ContentApiClient,
        project_id: int,
        collection_id: int,
        can: UserCan,
        notifier: Notifier,
        confirmer: Confirmer,
        table: ContentTable | None = None,
    ) -> None:
        self.api = api
        self.project_id = project_id
        self.collection_id = collection_id
        self.can = can
        self.notifier = notifier
        self.confirmer = confirmer
        self.table = table
        self.processing = False

    async def trash(self, ids: list[Any]) -> BulkResult:
        if not self.can.move_content_to_trash:
            return self._denied(ids)
        if not await self.confirmer.confirm(f"Move {len(ids)} entries to trash?"):
            return BulkResult()
        return await self._run(ids, self.api.trash_entry, "moved to trash")

    async def delete(self, ids: list[Any], password: str | None) -> BulkResult:
        """Permanently delete entries; the acting user's password must be re-entered.

        The server checks the password once and deletes each entry on its own.
        """
        if not self.can.delete_content:
            return self._denied(ids)
        if not password:
            message = "Please enter your password to confirm."
            self.notifier.error(message)
            return BulkResult(failed={i: message for i in ids})
        if not await self.confirmer.confirm(f"Permanently delete {len(ids)} entries?"):
            return BulkResult()

        result = BulkResult()
        self.processing = True
        try:
            response = await self.api.bulk_delete_entries(
                self.project_id, self.collection_id, ids, password
            )
        except ContentApiError as e:
            logger.warning("Bulk delete rejected", collection_id=self.collection_id, error=e.message)
            self.notifier.error(e.message)
            return BulkResult(failed={i: e.message for i in ids})
        else:
            deleted = {str(i) for i in response.get("deleted", [])}
            failed = {str(k): v for k, v in (response.get("failed") or {}).items()}
            for entry_id in ids:
                if str(entry_id) in deleted:
                    result.succeeded.append(entry_id)
                else:
                    result.failed[entry_id] = failed.get(str(entry_id), "Entry was not deleted.")
        finally:
            self.processing = False
        return await self._finish(result, "deleted")

    async def restore(self, ids: list[Any]) -> BulkResult:
        if not self.can.move_content_to_trash:
            return self._denied(ids)
        if not await self.confirmer.confirm(f"Restore {len(ids)} entries?"):
            return BulkResult()
        return await self._run(ids, self.api.restore_entry, "restored")

    def _denied(self, ids: list[Any]) -> BulkResult:
        message = "You are not allowed to perform this action."
        self.notifier.error(message)
        return BulkResult(failed={i: message for i in ids})

    async def _run(
        self, ids: list[Any], call: Callable[[int, int, Any], Awaitable[Any]], verb: str
    ) -> BulkResult:
        result = BulkResult()
        self.processing = True
        try:
            for entry_id in ids:
                try:
                    await call(self.project_id, self.collection_id, entry_id)
                except ContentApiError as e:
                    logger.warning("Bulk action failed for entry", entry_id=entry_id, error=e.message)
                    result.failed[entry_id] = e.message
                else:
                    result.succeeded.append(entry_id)
        finally:
            self.processing = False
        return await self._finish(result, verb)

    async def _finish(self, result: BulkResult, verb: str) -> BulkResult:
        logger.info(
            "Bulk action finished",
            collection_id=self.collection_id,
            action=verb,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        if result.ok:
            self.notifier.success(result.summary(verb))
        else:
            self.notifier.error(result.summary(verb))

        if self.table is not None:
            for entry_id in result.succeeded:
                self.table.selected.pop(entry_id, None)
            await self.table.refresh()
        return result
