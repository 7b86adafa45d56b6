"""FFmpeg binary resolution helper.

Prefer the configured/system `ffmpeg`, fallback to `imageio-ffmpeg` bundled binary.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from mediatool.exceptions import ExternalToolFailedError
from mediatool.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)


def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    ffmpeg_bin = (ffmpeg_bin or "ffmpeg").strip()

    if Path(ffmpeg_bin).exists():
        return ffmpeg_bin

    found = shutil.which(ffmpeg_bin)
    if found:
        return found

    try:
        import imageio_ffmpeg

        return str(imageio_ffmpeg.get_ffmpeg_exe())
    except Exception as exc:
        logger.warning("failed to resolve bundled ffmpeg (%s); fallback to %r", exc, ffmpeg_bin)
        return ffmpeg_bin


async def ffmpeg_version(ffmpeg_bin: str = "ffmpeg") -> str:
    """Return the version token from `ffmpeg -version` (e.g. `6.1.1`)."""
    binary = resolve_ffmpeg_bin(ffmpeg_bin)
    result = await run_subprocess([binary, "-version"])
    if result.returncode != 0:
        raise ExternalToolFailedError(
            "ffmpeg",
            f"-version exited with code {result.returncode}",
            returncode=result.returncode,
            stderr=result.stderr_text,
        )
    first_line = result.stdout_text.splitlines()[0] if result.stdout else ""
    # "ffmpeg version 6.1.1 Copyright (c) ..."
    parts = first_line.split()
    if len(parts) >= 3 and parts[1] == "version":
        return parts[2]
    return first_line.strip()
