"""Generated artifact model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ArtifactKind(str, Enum):
    EXTRACTED_AUDIO = "extracted-audio"
    MUTED_VIDEO = "muted-video"
    SUBTITLE = "subtitle"


@dataclass(frozen=True)
class Artifact:
    item_id: str
    kind: ArtifactKind
    path: str  # absolute
    text: str | None = None  # cached subtitle content


@dataclass(frozen=True)
class BackupReference:
    """Original file that was overwritten in place, and the copy taken before."""

    original_path: str
    backup_path: str
