"""Core data models for MediaTool."""

from mediatool.models.artifact import Artifact, ArtifactKind, BackupReference
from mediatool.models.jobs import (
    DeleteResult,
    ExtractionResult,
    TranscriptionResult,
    UndoOutcome,
    UndoReport,
)
from mediatool.models.media import MediaItem, MediaKind, guess_media_kind

__all__ = [
    "Artifact",
    "ArtifactKind",
    "BackupReference",
    "DeleteResult",
    "ExtractionResult",
    "MediaItem",
    "MediaKind",
    "TranscriptionResult",
    "UndoOutcome",
    "UndoReport",
    "guess_media_kind",
]
