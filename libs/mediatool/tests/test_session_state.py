from __future__ import annotations

import pytest

from mediatool.exceptions import JobInFlightError
from mediatool.models.artifact import ArtifactKind
from mediatool.models.media import MediaItem, MediaKind
from mediatool.session.guard import InFlightGuard
from mediatool.session.ledger import ArtifactLedger
from mediatool.session.state import SessionState


def _item(item_id: str = "clip", kind: MediaKind = MediaKind.VIDEO) -> MediaItem:
    return MediaItem(id=item_id, name=f"{item_id}.mp4", kind=kind, path=f"/m/{item_id}.mp4")


def test_projection_follows_ledger() -> None:
    ledger = ArtifactLedger()
    state = SessionState(ledger)
    item = _item()

    assert not state.has_extracted_audio(item.id)
    assert state.preview_path(item) == item.path

    ledger.register(item.id, ArtifactKind.EXTRACTED_AUDIO, "/m/clip__audio.m4a")
    ledger.register(item.id, ArtifactKind.MUTED_VIDEO, "/m/clip__muted.mp4")
    ledger.register(item.id, ArtifactKind.SUBTITLE, "/m/clip__audio__subtitles.srt", "1\nhi\n")

    assert state.has_extracted_audio(item.id)
    assert state.has_subtitles(item.id)
    assert state.muted_preview_path(item.id) == "/m/clip__muted.mp4"
    assert state.preview_path(item) == "/m/clip__muted.mp4"
    assert state.subtitle_text(item.id) == "1\nhi\n"
    assert state.can_transcribe(item.id)
    assert state.can_undo

    ledger.clear()

    assert not state.has_extracted_audio(item.id)
    assert not state.has_subtitles(item.id)
    assert state.muted_preview_path(item.id) is None
    assert state.subtitle_text(item.id) == ""
    assert state.preview_path(item) == item.path
    assert not state.can_undo


def test_affordances_respect_pending_jobs() -> None:
    ledger = ArtifactLedger()
    guard = InFlightGuard()
    state = SessionState(ledger, guard)
    clip, other = _item("clip"), _item("other")
    ledger.register(clip.id, ArtifactKind.EXTRACTED_AUDIO, "/m/clip__audio.m4a")

    with guard.hold(other.id):
        assert state.can_extract(clip)
        assert not state.can_extract(other)
        assert state.can_transcribe(clip.id)
        assert not state.can_undo
        with pytest.raises(JobInFlightError):
            with guard.hold(other.id):
                pass
        with pytest.raises(JobInFlightError):
            guard.ensure_idle()

    assert state.can_undo
    guard.ensure_idle()


def test_audio_items_never_extractable() -> None:
    state = SessionState(ArtifactLedger())
    assert not state.can_extract(_item("song", MediaKind.AUDIO))


def test_affordances_are_off_during_undo() -> None:
    ledger = ArtifactLedger()
    guard = InFlightGuard()
    state = SessionState(ledger, guard)
    clip = _item("clip")
    ledger.register(clip.id, ArtifactKind.EXTRACTED_AUDIO, "/m/clip__audio.m4a")

    with guard.undo_window():
        assert not state.can_extract(clip)
        assert not state.can_transcribe(clip.id)
        assert not state.can_undo
        with pytest.raises(JobInFlightError, match="undo is running"):
            with guard.hold(clip.id):
                pass

    assert state.can_extract(clip)
    assert state.can_transcribe(clip.id)
    with guard.hold(clip.id):
        with pytest.raises(JobInFlightError):
            with guard.undo_window():
                pass
    assert not guard.undoing
