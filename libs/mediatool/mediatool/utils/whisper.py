"""whisper.cpp binary and model discovery."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

PREFERRED_MODELS = (
    "ggml-small.bin",
    "ggml-base.bin",
    "ggml-medium.bin",
    "ggml-tiny.bin",
)


def _binary_names() -> tuple[str, ...]:
    if sys.platform == "win32":
        return ("whisper.exe", "whisper-cli.exe")
    return ("whisper", "whisper-cli")


def first_existing_path(candidates: Iterable[str | Path]) -> str:
    for p in candidates:
        if p and Path(p).exists():
            return str(p)
    return ""


def resolve_whisper_cpp_bin(configured: str = "", vendor_dirs: Iterable[str] = ()) -> str:
    """Configured binary if it exists, else the first vendored one; "" when absent."""
    configured = (configured or "").strip()
    if configured and Path(configured).exists():
        return configured
    if configured:
        logger.debug("configured whisper.cpp binary does not exist: %s", configured)
    return first_existing_path(
        Path(d) / name for d in vendor_dirs for name in _binary_names()
    )


def pick_model_from_dir(directory: str | Path) -> str:
    d = Path(directory)
    if not d.is_dir():
        return ""
    for name in PREFERRED_MODELS:
        candidate = d / name
        if candidate.exists():
            return str(candidate)
    for candidate in sorted(d.iterdir()):
        if candidate.name.lower().endswith(".bin"):
            return str(candidate)
    return ""


def resolve_whisper_cpp_model(configured: str = "", vendor_dirs: Iterable[str] = ()) -> str:
    """Configured model if it exists, else a preferred ggml model from `{vendor}/models`."""
    configured = (configured or "").strip()
    if configured and Path(configured).exists():
        return configured
    for d in vendor_dirs:
        found = pick_model_from_dir(Path(d) / "models")
        if found:
            return found
    return ""

