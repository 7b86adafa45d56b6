"""Imported media items."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".aac", ".m4a", ".flac", ".ogg"})


class MediaKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"


def guess_media_kind(file_name: str) -> MediaKind:
    """Classify by extension; anything not a known audio container is video."""
    if Path(str(file_name or "")).suffix.lower() in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    return MediaKind.VIDEO


@dataclass(frozen=True)
class MediaItem:
    id: str
    name: str
    kind: MediaKind
    path: str

    @classmethod
    def from_path(cls, path: str, *, imported_at_ms: int | None = None) -> "MediaItem":
        p = Path(path).expanduser().resolve()
        stamp = int(imported_at_ms if imported_at_ms is not None else time.time() * 1000)
        return cls(
            id=f"{p}-{stamp}",
            name=p.name,
            kind=guess_media_kind(p.name),
            path=str(p),
        )

    @property
    def is_video(self) -> bool:
        return self.kind == MediaKind.VIDEO
