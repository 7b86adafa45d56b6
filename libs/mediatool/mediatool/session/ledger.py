"""In-memory ledger of every file the session has generated.

The ledger keeps two views of the same data:

- a per-item slot map `item_id -> {kind -> Artifact}` holding the latest
  artifact of each kind (what the UI shows), and
- a global, first-seen ordered sequence of distinct paths (what undo deletes).

A path that is overwritten in its slot by a newer artifact stays in the
sequence so it is still cleaned up. The ledger also holds the backup
bookkeeping for files that were mutated in place.

It never touches the filesystem.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from mediatool.models.artifact import Artifact, ArtifactKind, BackupReference

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
LedgerEntry = tuple[ArtifactKind, str] | tuple[ArtifactKind, str, str | None]


class ArtifactLedger:
    def __init__(self) -> None:
        self._slots: dict[str, dict[ArtifactKind, Artifact]] = {}
        self._paths: list[str] = []
        self._seen: set[str] = set()
        self._backups: dict[str, BackupReference] = {}
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return str(path) in self._seen

    @property
    def is_empty(self) -> bool:
        return not self._paths and not self._backups

    def register(
        self,
        item_id: str,
        kind: ArtifactKind | str,
        path: str,
        text: str | None = None,
    ) -> Artifact:
        artifact = self._make(item_id, kind, path, text)
        self._apply(artifact)
        self._notify()
        return artifact

    def register_many(self, item_id: str, entries: Iterable[LedgerEntry]) -> list[Artifact]:
        """Register the outputs of one job together.

        Every entry is validated before any is applied, so a bad entry leaves
        the ledger untouched.
        """
        artifacts: list[Artifact] = []
        for entry in entries:
            kind, path = entry[0], entry[1]
            text = entry[2] if len(entry) > 2 else None
            artifacts.append(self._make(item_id, kind, path, text))
        if not artifacts:
            return []
        for artifact in artifacts:
            self._apply(artifact)
        self._notify()
        return artifacts

    def get(self, item_id: str, kind: ArtifactKind | str) -> Artifact | None:
        return self._slots.get(item_id, {}).get(ArtifactKind(kind))

    def artifacts_for(self, item_id: str) -> dict[ArtifactKind, Artifact]:
        return dict(self._slots.get(item_id, {}))

    def all_paths(self) -> list[str]:
        """Distinct paths in first-seen order: the deletion plan for undo."""
        return list(self._paths)

    def record_backup(self, item_id: str, backup: BackupReference) -> None:
        """Replaces any earlier backup for `item_id`; callers decide which one to keep."""
        self._backups[item_id] = backup
        self._notify()

    def backup_for(self, item_id: str) -> BackupReference | None:
        return self._backups.get(item_id)

    def backups(self) -> list[BackupReference]:
        return list(self._backups.values())

    def clear(self) -> None:
        self._slots.clear()
        self._paths.clear()
        self._seen.clear()
        self._backups.clear()
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every mutation; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @staticmethod
    def _make(item_id: str, kind: ArtifactKind | str, path: str, text: str | None) -> Artifact:
        if not item_id:
            raise ValueError("item_id is required")
        if not path or not str(path).strip():
            raise ValueError("path is required")
        return Artifact(item_id=item_id, kind=ArtifactKind(kind), path=str(path), text=text)

    def _apply(self, artifact: Artifact) -> None:
        self._slots.setdefault(artifact.item_id, {})[artifact.kind] = artifact
        if artifact.path not in self._seen:
            self._seen.add(artifact.path)
            self._paths.append(artifact.path)
        logger.debug(
            "registered %s for item_id=%s: %s", artifact.kind.value, artifact.item_id, artifact.path
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("ledger listener failed")
