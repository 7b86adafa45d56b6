"""Registry of open file handles that must be released before files are removed.

Media players on some platforms keep the file they are playing locked, so a
delete or restore fails until playback is detached. Whatever owns such a
handle registers a release callback here.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ReleaseCallback = Callable[[], None] | Callable[[], Awaitable[None]]


@dataclass
class _Handle:
    path: str | None
    release: ReleaseCallback


class HandleRegistry:
    def __init__(self) -> None:
        self._handles: dict[int, _Handle] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._handles)

    def register(self, path: str | None, release: ReleaseCallback) -> Callable[[], None]:
        """Track a handle on `path` (`None` = any file); returns an unregister callable."""
        handle_id = self._next_id
        self._next_id += 1
        self._handles[handle_id] = _Handle(path=str(path) if path else None, release=release)

        def _unregister() -> None:
            self._handles.pop(handle_id, None)

        return _unregister

    async def release(self, paths: Iterable[str]) -> list[str]:
        """Release and forget every handle on one of `paths` (plus path-less ones).

        Returns error messages for callbacks that raised; those handles are
        dropped as well.
        """
        targets = {str(p) for p in paths}
        errors: list[str] = []
        for handle_id, handle in list(self._handles.items()):
            if handle.path is not None and handle.path not in targets:
                continue
            self._handles.pop(handle_id, None)
            try:
                outcome = handle.release()
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:
                logger.warning("failed to release handle on %s (%s)", handle.path, exc)
                errors.append(f"{handle.path or '<any>'}: {exc}")
        return errors
