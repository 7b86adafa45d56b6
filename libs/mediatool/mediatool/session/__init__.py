"""Session bookkeeping: artifact ledger, projection, undo."""

from mediatool.session.guard import InFlightGuard
from mediatool.session.handles import HandleRegistry
from mediatool.session.ledger import ArtifactLedger
from mediatool.session.session import MediaSession
from mediatool.session.state import SessionState
from mediatool.session.undo import UndoCoordinator

__all__ = [
    "ArtifactLedger",
    "HandleRegistry",
    "InFlightGuard",
    "MediaSession",
    "SessionState",
    "UndoCoordinator",
]
