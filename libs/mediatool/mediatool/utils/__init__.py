"""Utility helpers."""

from mediatool.utils.ffmpeg import ffmpeg_version, resolve_ffmpeg_bin
from mediatool.utils.files import (
    delete_files,
    derived_output_path,
    pick_unique_path,
    restore_backup,
    safe_base_name,
    take_backup,
)
from mediatool.utils.subprocess import RunResult, run_subprocess

__all__ = [
    "RunResult",
    "delete_files",
    "derived_output_path",
    "ffmpeg_version",
    "pick_unique_path",
    "resolve_ffmpeg_bin",
    "restore_backup",
    "run_subprocess",
    "safe_base_name",
    "take_backup",
]
