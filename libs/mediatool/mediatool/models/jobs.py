"""Job and filesystem operation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from mediatool.models.artifact import BackupReference


@dataclass(frozen=True)
class ExtractionResult:
    output_path: str
    muted_video_path: str = ""
    muted: bool = False
    mute_error: str = ""
    backup: BackupReference | None = None


@dataclass(frozen=True)
class TranscriptionResult:
    output_path: str
    srt_text: str
    runner: str = ""


@dataclass(frozen=True)
class DeleteResult:
    path: str
    deleted: bool
    error: str = ""


class UndoOutcome(str, Enum):
    FULLY_SUCCEEDED = "fully_succeeded"
    PARTIAL = "partial"


@dataclass
class UndoReport:
    deleted: list[str] = field(default_factory=list)
    failed: list[DeleteResult] = field(default_factory=list)
    restored: list[BackupReference] = field(default_factory=list)
    restore_errors: list[str] = field(default_factory=list)

    @property
    def outcome(self) -> UndoOutcome:
        if self.failed or self.restore_errors:
            return UndoOutcome.PARTIAL
        return UndoOutcome.FULLY_SUCCEEDED

    @property
    def fully_succeeded(self) -> bool:
        return self.outcome == UndoOutcome.FULLY_SUCCEEDED

    @property
    def failed_paths(self) -> list[str]:
        return [r.path for r in self.failed]

    def to_dict(self) -> dict[str, object]:
        return {
            "outcome": self.outcome.value,
            "deleted": list(self.deleted),
            "failed": [{"path": r.path, "error": r.error} for r in self.failed],
            "restored": [r.original_path for r in self.restored],
            "restore_errors": list(self.restore_errors),
        }
