"""Read-only per-item projection of the ledger, used to drive UI affordances."""

from __future__ import annotations

from mediatool.models.artifact import ArtifactKind
from mediatool.models.media import MediaItem
from mediatool.session.guard import InFlightGuard
from mediatool.session.ledger import ArtifactLedger


class SessionState:
    """Every query is a direct ledger lookup, so it can never drift out of sync."""

    def __init__(self, ledger: ArtifactLedger, guard: InFlightGuard | None = None) -> None:
        self.ledger = ledger
        self.guard = guard or InFlightGuard()

    def has_extracted_audio(self, item_id: str) -> bool:
        return self.ledger.get(item_id, ArtifactKind.EXTRACTED_AUDIO) is not None

    def has_subtitles(self, item_id: str) -> bool:
        return self.ledger.get(item_id, ArtifactKind.SUBTITLE) is not None

    def muted_preview_path(self, item_id: str) -> str | None:
        artifact = self.ledger.get(item_id, ArtifactKind.MUTED_VIDEO)
        return artifact.path if artifact else None

    def extracted_audio_path(self, item_id: str) -> str | None:
        artifact = self.ledger.get(item_id, ArtifactKind.EXTRACTED_AUDIO)
        return artifact.path if artifact else None

    def subtitle_path(self, item_id: str) -> str | None:
        artifact = self.ledger.get(item_id, ArtifactKind.SUBTITLE)
        return artifact.path if artifact else None

    def subtitle_text(self, item_id: str) -> str:
        artifact = self.ledger.get(item_id, ArtifactKind.SUBTITLE)
        return (artifact.text or "") if artifact else ""

    def preview_path(self, item: MediaItem) -> str:
        return self.muted_preview_path(item.id) or item.path

    def _busy(self, item_id: str | None = None) -> bool:
        return self.guard.undoing or self.guard.is_pending(item_id)

    def can_extract(self, item: MediaItem) -> bool:
        return item.is_video and not self._busy(item.id)

    def can_transcribe(self, item_id: str) -> bool:
        return self.has_extracted_audio(item_id) and not self._busy(item_id)

    @property
    def can_undo(self) -> bool:
        return not self.ledger.is_empty and not self._busy()
