"""Reverse every file-producing side effect of a session in one action."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from mediatool.exceptions import BackupMissingError
from mediatool.models.jobs import DeleteResult, UndoReport
from mediatool.session.handles import HandleRegistry
from mediatool.session.ledger import ArtifactLedger
from mediatool.utils.files import delete_files, restore_backup

logger = logging.getLogger(__name__)

DeleteFn = Callable[[Iterable[str]], list[DeleteResult]]
RestoreFn = Callable[[str, str], None]


class UndoCoordinator:
    """Release handles, delete tracked files, restore backups, reset the ledger.

    Filesystem failures are collected into the returned `UndoReport`; the
    ledger is cleared whatever happens so it never references files the user
    believes were cleaned up.
    """

    def __init__(
        self,
        handles: HandleRegistry | None = None,
        *,
        delete: DeleteFn = delete_files,
        restore: RestoreFn = restore_backup,
    ) -> None:
        self.handles = handles or HandleRegistry()
        self._delete = delete
        self._restore = restore

    async def undo(self, ledger: ArtifactLedger) -> UndoReport:
        report = UndoReport()
        plan = ledger.all_paths()
        backups = ledger.backups()
        try:
            if not plan and not backups:
                logger.info("undo: nothing to do")
                return report

            locked = [*plan, *(b.original_path for b in backups)]
            release_errors = await self.handles.release(locked)
            for err in release_errors:
                logger.warning("undo: %s", err)

            logger.info("undo: deleting %d file(s), restoring %d backup(s)", len(plan), len(backups))
            if plan:
                results = await asyncio.to_thread(self._delete, plan)
                for r in results:
                    if r.deleted:
                        report.deleted.append(r.path)
                    else:
                        report.failed.append(r)
                        logger.warning("undo: could not delete %s (%s)", r.path, r.error)

            for backup in backups:
                try:
                    await asyncio.to_thread(self._restore, backup.original_path, backup.backup_path)
                except BackupMissingError as exc:
                    report.restore_errors.append(str(exc))
                    logger.warning("undo: %s", exc)
                except OSError as exc:
                    msg = f"{backup.original_path}: {exc}"
                    report.restore_errors.append(msg)
                    logger.warning("undo: restore failed %s", msg)
                else:
                    report.restored.append(backup)
        finally:
            ledger.clear()

        logger.info(
            "undo finished (outcome=%s, deleted=%d, failed=%d)",
            report.outcome.value,
            len(report.deleted),
            len(report.failed),
        )
        return report
