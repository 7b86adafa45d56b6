"""Filesystem helpers for generated files: naming, deletion and backup/restore."""

from __future__ import annotations

import logging
import re
import shutil
import time
from pathlib import Path
from typing import Iterable

from mediatool.exceptions import BackupMissingError
from mediatool.models.artifact import BackupReference
from mediatool.models.jobs import DeleteResult

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')


def safe_base_name(path: str | Path, default: str = "media") -> str:
    """File stem with characters that are invalid on common filesystems replaced by `_`."""
    stem = Path(str(path)).stem or default
    return _UNSAFE_CHARS.sub("_", stem)


def pick_unique_path(directory: str | Path, file_name: str) -> Path:
    """Return `directory/file_name`, or `name (N).ext` with the first free N >= 1."""
    directory = Path(directory)
    name = Path(file_name)
    base = name.stem
    ext = name.suffix
    candidate = directory / f"{base}{ext}"
    if not candidate.exists():
        return candidate
    i = 1
    while True:
        candidate = directory / f"{base} ({i}){ext}"
        if not candidate.exists():
            return candidate
        i += 1


def derived_output_path(source: str | Path, tag: str, ext: str, *, directory: str | Path | None = None) -> Path:
    """Collision-avoided `{dir}/{safe_base}{tag}{ext}` next to `source` by default."""
    src = Path(source)
    out_dir = Path(directory) if directory is not None else src.parent
    return pick_unique_path(out_dir, f"{safe_base_name(src)}{tag}{ext}")


def delete_files(paths: Iterable[str]) -> list[DeleteResult]:
    """Delete each path; a missing file counts as deleted. Never raises."""
    results: list[DeleteResult] = []
    for raw in paths:
        path = str(raw or "")
        if not path:
            results.append(DeleteResult(path=path, deleted=False, error="empty path"))
            continue
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("failed to delete %s (%s)", path, exc)
            results.append(DeleteResult(path=path, deleted=False, error=str(exc)))
            continue
        results.append(DeleteResult(path=path, deleted=True))
    return results


def take_backup(original_path: str | Path, backup_dir: str | Path) -> BackupReference:
    """Copy `original_path` to `{backup_dir}/{safe_base}-{epoch_ms}{ext}`."""
    src = Path(original_path)
    out_dir = Path(backup_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    backup = pick_unique_path(out_dir, f"{safe_base_name(src)}-{int(time.time() * 1000)}{src.suffix}")
    shutil.copy2(src, backup)
    logger.info("backed up %s to %s", src, backup)
    return BackupReference(original_path=str(src), backup_path=str(backup))


def restore_backup(original_path: str | Path, backup_path: str | Path) -> None:
    """Copy the backup over the original, then remove the backup."""
    if not str(original_path or "").strip():
        raise ValueError("original_path is required")
    backup = Path(str(backup_path or ""))
    if not str(backup_path or "").strip() or not backup.is_file():
        raise BackupMissingError(str(backup_path))

    shutil.copyfile(backup, original_path)
    try:
        backup.unlink()
    except OSError as exc:
        logger.warning("restored %s but could not remove backup %s (%s)", original_path, backup, exc)
    logger.info("restored %s from %s", original_path, backup)
