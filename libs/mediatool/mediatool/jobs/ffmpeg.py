"""FFmpeg command wrappers."""

from __future__ import annotations

import logging
from pathlib import Path

from mediatool.exceptions import ExternalToolFailedError, ExternalToolMissingError
from mediatool.utils.ffmpeg import resolve_ffmpeg_bin
from mediatool.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)

FASTSTART_EXTS = frozenset({".mp4", ".m4v", ".mov"})


class FFmpegRunner:
    def __init__(self, ffmpeg_bin: str = "ffmpeg", timeout_s: float | None = None) -> None:
        self.ffmpeg_bin = resolve_ffmpeg_bin(ffmpeg_bin)
        self.timeout_s = timeout_s

    @property
    def bin_dir(self) -> str:
        parent = Path(self.ffmpeg_bin).parent
        return "" if str(parent) == "." else str(parent)

    async def _run(self, args: list[str]) -> None:
        logger.debug("ffmpeg cmd: %s", " ".join(args))
        try:
            result = await run_subprocess(args, timeout_s=self.timeout_s)
        except ExternalToolMissingError as exc:
            raise ExternalToolMissingError(
                "ffmpeg",
                f"ffmpeg binary not found: {self.ffmpeg_bin}. "
                "Install ffmpeg and ensure it is in PATH (or install `imageio-ffmpeg` in the env, "
                "or set FFMPEG_BIN).",
            ) from exc
        if result.returncode != 0:
            raise ExternalToolFailedError(
                "ffmpeg",
                "ffmpeg failed "
                f"(code={result.returncode}).\n"
                f"cmd: {' '.join(args)}\n"
                f"stdout: {result.stdout_text}\n"
                f"stderr: {result.stderr_text}",
                returncode=result.returncode,
                stderr=result.stderr_text,
            )

    async def extract_audio(
        self,
        input_path: str,
        output_path: str,
        *,
        codec: str = "aac",
        bitrate: str = "192k",
    ) -> str:
        """Drop the video stream and encode the audio track."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        await self._run(
            [
                self.ffmpeg_bin,
                "-y",
                "-i",
                str(input_path),
                "-vn",
                "-c:a",
                codec,
                "-b:a",
                bitrate,
                "-movflags",
                "+faststart",
                str(output_path),
            ]
        )
        return str(output_path)

    async def mute_video(self, input_path: str, output_path: str) -> str:
        """Copy the first video stream without audio (no re-encode)."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        extra: list[str] = []
        if Path(output_path).suffix.lower() in FASTSTART_EXTS:
            extra = ["-movflags", "+faststart"]
        await self._run(
            [
                self.ffmpeg_bin,
                "-y",
                "-i",
                str(input_path),
                "-map",
                "0:v:0?",
                "-an",
                "-c:v",
                "copy",
                *extra,
                str(output_path),
            ]
        )
        return str(output_path)

    async def to_wav_16k_mono(self, input_path: str, output_path: str) -> str:
        """Normalise to 16kHz mono PCM WAV, the input format of whisper.cpp."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        await self._run(
            [
                self.ffmpeg_bin,
                "-y",
                "-i",
                str(input_path),
                "-ar",
                "16000",
                "-ac",
                "1",
                "-c:a",
                "pcm_s16le",
                "-f",
                "wav",
                str(output_path),
            ]
        )
        return str(output_path)
