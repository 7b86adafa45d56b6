"""Tracks which media items have a job in flight, and whether undo is running."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from mediatool.exceptions import JobInFlightError


class InFlightGuard:
    def __init__(self) -> None:
        self._pending: set[str] = set()
        self._undoing = False

    def is_pending(self, item_id: str | None = None) -> bool:
        """Whether `item_id` (or, when omitted, any item) has a pending job."""
        if item_id is None:
            return bool(self._pending)
        return item_id in self._pending

    @property
    def undoing(self) -> bool:
        return self._undoing

    @contextmanager
    def hold(self, item_id: str) -> Iterator[None]:
        if self._undoing:
            raise JobInFlightError(f"Cannot start a job for {item_id} while undo is running")
        if item_id in self._pending:
            raise JobInFlightError(f"A job is already running for {item_id}")
        self._pending.add(item_id)
        try:
            yield
        finally:
            self._pending.discard(item_id)

    def ensure_idle(self) -> None:
        if self._undoing:
            raise JobInFlightError("Undo is already running")
        if self._pending:
            raise JobInFlightError(
                f"Cannot undo while {len(self._pending)} job(s) are running"
            )

    @contextmanager
    def undo_window(self) -> Iterator[None]:
        """Block new jobs (and a second undo) until the block exits."""
        self.ensure_idle()
        self._undoing = True
        try:
            yield
        finally:
            self._undoing = False
