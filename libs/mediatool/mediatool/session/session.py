"""Media session: imported items, job orchestration and artifact bookkeeping."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path

from mediatool.config import Settings
from mediatool.exceptions import InvalidInputError
from mediatool.jobs import ExtractionJob, TranscriptionJob, get_extraction_job, get_transcription_job
from mediatool.models.artifact import ArtifactKind, BackupReference
from mediatool.models.jobs import ExtractionResult, TranscriptionResult, UndoReport
from mediatool.models.media import MediaItem
from mediatool.session.guard import InFlightGuard
from mediatool.session.handles import HandleRegistry
from mediatool.session.ledger import ArtifactLedger
from mediatool.session.state import SessionState
from mediatool.session.undo import UndoCoordinator
from mediatool.utils.files import safe_base_name

logger = logging.getLogger(__name__)


class MediaSession:
    """Single-writer session driven by one UI/event loop.

    Jobs are awaited, never cancelled. A job registers its outputs only after it
    succeeded, and undo is refused while any job is pending.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        extraction_job: ExtractionJob | None = None,
        transcription_job: TranscriptionJob | None = None,
        ledger: ArtifactLedger | None = None,
        handles: HandleRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.extraction_job = extraction_job or get_extraction_job(settings)
        self.transcription_job = transcription_job or get_transcription_job(settings)
        self.ledger = ledger if ledger is not None else ArtifactLedger()
        self.handles = handles or HandleRegistry()
        self.guard = InFlightGuard()
        self.state = SessionState(self.ledger, self.guard)
        self.undo_coordinator = UndoCoordinator(self.handles)
        self._items: list[MediaItem] = []
        self.selected_id: str | None = None

    @property
    def items(self) -> list[MediaItem]:
        return list(self._items)

    @property
    def selected(self) -> MediaItem | None:
        if self.selected_id is None:
            return None
        return next((i for i in self._items if i.id == self.selected_id), None)

    def import_paths(self, paths: Iterable[str]) -> list[MediaItem]:
        """Import files, newest first. Already-imported paths are skipped.

        Returns the newly added items.
        """
        known = {i.path for i in self._items}
        stamp = int(time.time() * 1000)
        added: list[MediaItem] = []
        for raw in paths:
            if not raw or not str(raw).strip():
                raise InvalidInputError("Invalid input path")
            if not Path(raw).is_file():
                raise InvalidInputError(f"Input file not found: {raw}")
            item = MediaItem.from_path(str(raw), imported_at_ms=stamp)
            if item.path in known:
                logger.debug("already imported: %s", item.path)
                continue
            known.add(item.path)
            added.append(item)

        self._items = [*added, *self._items]
        if self.selected_id is None and added:
            self.selected_id = added[0].id
        return added

    def get_item(self, item_id: str) -> MediaItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise InvalidInputError(f"Unknown media item: {item_id}")

    def select(self, item_id: str) -> MediaItem:
        item = self.get_item(item_id)
        self.selected_id = item.id
        return item

    def suggest_audio_output_path(self, item_id: str) -> str:
        """Default destination offered by a "save audio as" dialog."""
        item = self.get_item(item_id)
        out_dir = self.settings.extracted_audio_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        return str(out_dir / f"{safe_base_name(item.path, 'audio')}{self.settings.output.audio_ext}")

    async def extract_audio(
        self,
        item_id: str,
        *,
        output_path: str | None = None,
        mute: bool | None = None,
    ) -> ExtractionResult:
        item = self.get_item(item_id)
        if not item.is_video:
            raise InvalidInputError(f"Audio extraction needs a video file: {item.name}")
        if mute is None:
            mute = self.settings.output.mute_by_default

        with self.guard.hold(item.id):
            result = await self.extraction_job.run(item.path, output_path=output_path, mute=mute)

        entries: list[tuple[ArtifactKind, str]] = [(ArtifactKind.EXTRACTED_AUDIO, result.output_path)]
        if result.muted_video_path:
            entries.append((ArtifactKind.MUTED_VIDEO, result.muted_video_path))
        self.ledger.register_many(item.id, entries)
        if result.backup is not None:
            self._record_backup(item.id, result.backup)
        if result.mute_error:
            logger.warning("audio extracted but muting failed (item=%s): %s", item.name, result.mute_error)
        return result

    async def transcribe(self, item_id: str, *, output_dir: str | None = None) -> TranscriptionResult:
        item = self.get_item(item_id)
        audio_path = self.state.extracted_audio_path(item.id)
        if not audio_path:
            raise InvalidInputError(f"Extract audio from {item.name} before generating subtitles")

        with self.guard.hold(item.id):
            result = await self.transcription_job.run(audio_path, output_dir=output_dir)

        self.ledger.register(item.id, ArtifactKind.SUBTITLE, result.output_path, result.srt_text)
        return result

    def _record_backup(self, item_id: str, backup: BackupReference) -> None:
        if self.ledger.backup_for(item_id) is None:
            self.ledger.record_backup(item_id, backup)
            return
        # The earlier backup already holds the untouched original.
        try:
            Path(backup.backup_path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("failed to remove redundant backup %s (%s)", backup.backup_path, exc)

    def subtitle_text(self, item_id: str) -> str:
        return self.state.subtitle_text(item_id)

    def preview_path(self, item_id: str) -> str:
        return self.state.preview_path(self.get_item(item_id))

    async def undo(self) -> UndoReport:
        """Delete every generated file and restore mutated originals.

        Raises `JobInFlightError` while a job (or another undo) is running; jobs
        started during undo are refused the same way. Filesystem failures are
        reported, never raised.
        """
        with self.guard.undo_window():
            return await self.undo_coordinator.undo(self.ledger)
