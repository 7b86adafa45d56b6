"""Audio extraction (and optional muting) of a video file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from mediatool.config import Settings
from mediatool.exceptions import ExternalToolError, InvalidInputError
from mediatool.jobs.base import ExtractionJob, require_existing_file
from mediatool.jobs.ffmpeg import FFmpegRunner
from mediatool.models.artifact import BackupReference
from mediatool.models.jobs import ExtractionResult
from mediatool.utils.files import derived_output_path, take_backup

logger = logging.getLogger(__name__)


def _discard(path: str | Path) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("failed to remove partial output %s (%s)", path, exc)


class FFmpegExtractionJob(ExtractionJob):
    def __init__(self, settings: Settings, ffmpeg: FFmpegRunner | None = None) -> None:
        self.settings = settings
        self.ffmpeg = ffmpeg or FFmpegRunner(settings.ffmpeg.bin, settings.ffmpeg.timeout_s)

    async def run(
        self,
        input_path: str,
        *,
        output_path: str | None = None,
        mute: bool = True,
    ) -> ExtractionResult:
        src = require_existing_file(input_path)
        out_cfg = self.settings.output

        if output_path and str(output_path).strip():
            audio_path = Path(output_path)
            if audio_path.resolve() == src.resolve():
                raise InvalidInputError(f"Output path must differ from the input: {output_path}")
        else:
            audio_path = derived_output_path(src, out_cfg.audio_tag, out_cfg.audio_ext)

        logger.info("extract audio start (input=%s, output=%s)", src, audio_path)
        preexisting = audio_path.exists()
        try:
            await self.ffmpeg.extract_audio(
                str(src),
                str(audio_path),
                codec=self.settings.ffmpeg.audio_codec,
                bitrate=self.settings.ffmpeg.audio_bitrate,
            )
        except ExternalToolError:
            # Only remove what this run created.
            if not preexisting:
                _discard(audio_path)
            raise
        logger.info("extracted audio to %s", audio_path)

        if not mute:
            return ExtractionResult(output_path=str(audio_path))

        muted_path = derived_output_path(src, out_cfg.muted_tag, src.suffix or ".mp4")
        try:
            await self.ffmpeg.mute_video(str(src), str(muted_path))
        except ExternalToolError as exc:
            _discard(muted_path)
            logger.warning("mute failed (input=%s): %s", src, exc)
            return ExtractionResult(output_path=str(audio_path), muted=False, mute_error=str(exc))

        if not out_cfg.mute_in_place:
            logger.info("muted video written to %s", muted_path)
            return ExtractionResult(
                output_path=str(audio_path),
                muted_video_path=str(muted_path),
                muted=True,
            )

        backup = self._replace_in_place(src, muted_path)
        if backup is None:
            return ExtractionResult(
                output_path=str(audio_path),
                muted=False,
                mute_error=f"could not replace {src} with its muted copy",
            )
        return ExtractionResult(output_path=str(audio_path), muted=True, backup=backup)

    def _replace_in_place(self, src: Path, muted_path: Path) -> BackupReference | None:
        try:
            backup = take_backup(src, self.settings.backup_dir)
        except OSError as exc:
            logger.warning("backup failed (input=%s): %s", src, exc)
            _discard(muted_path)
            return None
        try:
            os.replace(muted_path, src)
        except OSError as exc:
            logger.warning("in-place mute failed (input=%s): %s", src, exc)
            _discard(muted_path)
            _discard(backup.backup_path)
            return None
        logger.info("replaced %s with muted copy (backup=%s)", src, backup.backup_path)
        return backup
