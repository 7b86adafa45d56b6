"""Job runner abstractions.

A job is one opaque long-running operation: path in, path(s) out. Jobs raise
`ExternalToolMissingError`, `ExternalToolFailedError`, `InvalidInputError` or
`JobTimeoutError` and never leave partial outputs behind on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from mediatool.exceptions import InvalidInputError
from mediatool.models.jobs import ExtractionResult, TranscriptionResult


def require_existing_file(path: str | None, *, label: str = "input") -> Path:
    if not path or not isinstance(path, str) or not path.strip():
        raise InvalidInputError(f"Invalid {label} path")
    p = Path(path)
    if not p.is_file():
        raise InvalidInputError(f"{label.capitalize()} file not found: {path}")
    return p


class ExtractionJob(ABC):
    @abstractmethod
    async def run(
        self,
        input_path: str,
        *,
        output_path: str | None = None,
        mute: bool = True,
    ) -> ExtractionResult:
        """Extract the audio track, optionally producing a muted copy of the video."""

    async def close(self) -> None:  # pragma: no cover
        return None


class TranscriptionJob(ABC):
    @abstractmethod
    async def run(self, input_path: str, *, output_dir: str | None = None) -> TranscriptionResult:
        """Generate an `.srt` subtitle file for an audio file."""

    async def close(self) -> None:  # pragma: no cover
        return None
