"""Logging initialization helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mediatool.config import LoggingSettings, Settings

_ROOT = "mediatool"
# Subsystem logger -> LoggingSettings field holding its level override.
_SUBSYSTEMS = {
    "mediatool.jobs": "jobs_level",
    "mediatool.session": "session_level",
}


def _parse_level(name: str | None, default: int) -> int:
    if not name or not str(name).strip():
        return default
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


def _handlers(settings: Settings) -> list[logging.Handler]:
    cfg = settings.logging
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))

    handlers: list[logging.Handler] = []
    if cfg.console:
        handlers.append(logging.StreamHandler())
    if cfg.file:
        file_path = Path(str(cfg.file))
        if not file_path.is_absolute():
            file_path = Path(settings.log_dir) / file_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=int(cfg.max_bytes),
                backupCount=int(cfg.backup_count),
                encoding="utf-8",
            )
        )
    for h in handlers:
        h.setFormatter(formatter)
    return handlers


def subsystem_levels(cfg: LoggingSettings) -> dict[str, int]:
    """Effective level per subsystem logger; unset overrides follow `cfg.level`."""
    base = _parse_level(cfg.level, logging.INFO)
    return {name: _parse_level(getattr(cfg, field), base) for name, field in _SUBSYSTEMS.items()}


def setup_logging(settings: Settings, *, force: bool = False) -> None:
    """Attach handlers to the `mediatool` logger and apply per-subsystem levels.

    Handlers carry no level of their own, so `LOG_JOBS_LEVEL=DEBUG` surfaces ffmpeg
    and whisper command lines while the rest of the tool stays at `LOG_LEVEL`.
    Calling it again is a no-op unless `force` is set.
    """
    root = logging.getLogger(_ROOT)
    if getattr(root, "_mediatool_configured", False) and not force:
        return

    for h in root.handlers:
        h.close()
    root.handlers = _handlers(settings)
    root.setLevel(_parse_level(settings.logging.level, logging.INFO))
    root.propagate = False

    for name, level in subsystem_levels(settings.logging).items():
        logging.getLogger(name).setLevel(level)

    root._mediatool_configured = True  # type: ignore[attr-defined]
