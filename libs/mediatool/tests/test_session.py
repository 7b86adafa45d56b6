from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import pytest

from mediatool.exceptions import ExternalToolFailedError, InvalidInputError, JobInFlightError
from mediatool.jobs.base import ExtractionJob, TranscriptionJob
from mediatool.jobs.extraction import FFmpegExtractionJob
from mediatool.models.artifact import ArtifactKind
from mediatool.models.jobs import ExtractionResult, TranscriptionResult, UndoOutcome
from mediatool.models.media import MediaKind
from mediatool.session import MediaSession, UndoCoordinator
from mediatool.utils.files import delete_files, derived_output_path


class FakeTranscriptionJob(TranscriptionJob):
    def __init__(self) -> None:
        self.inputs: list[str] = []

    async def run(self, input_path: str, *, output_dir: str | None = None) -> TranscriptionResult:
        self.inputs.append(input_path)
        out = derived_output_path(input_path, "__subtitles", ".srt", directory=output_dir)
        text = "1\n00:00:00,000 --> 00:00:01,000\nhello\n"
        out.write_text(text, encoding="utf-8")
        return TranscriptionResult(output_path=str(out), srt_text=text, runner="fake")


class FailingTranscriptionJob(TranscriptionJob):
    async def run(self, input_path: str, *, output_dir: str | None = None) -> TranscriptionResult:
        raise ExternalToolFailedError("whisper", "exited with code 1", returncode=1)


class BlockingExtractionJob(ExtractionJob):
    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def run(self, input_path: str, *, output_path: str | None = None, mute: bool = True) -> ExtractionResult:
        self.started.set()
        await self.release.wait()
        out = derived_output_path(input_path, "__audio", ".m4a")
        out.write_bytes(b"audio")
        return ExtractionResult(output_path=str(out))


@pytest.fixture()
def session(settings, fake_ffmpeg) -> MediaSession:
    return MediaSession(
        settings,
        extraction_job=FFmpegExtractionJob(settings, ffmpeg=fake_ffmpeg),
        transcription_job=FakeTranscriptionJob(),
    )


def test_import_dedupes_by_path_and_selects_first(session: MediaSession, clip: Path) -> None:
    song = clip.parent / "song.MP3"
    song.write_bytes(b"mp3")

    added = session.import_paths([str(clip)])
    assert [i.name for i in added] == ["clip.mp4"]
    assert added[0].kind == MediaKind.VIDEO
    assert session.selected == added[0]

    again = session.import_paths([str(clip), str(song)])
    assert [i.name for i in again] == ["song.MP3"]
    assert again[0].kind == MediaKind.AUDIO
    assert [i.name for i in session.items] == ["song.MP3", "clip.mp4"]
    assert session.selected_id == added[0].id


def test_import_rejects_missing_files(session: MediaSession, tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError):
        session.import_paths([str(tmp_path / "nope.mp4")])
    with pytest.raises(InvalidInputError):
        session.import_paths([""])
    assert session.items == []


@pytest.mark.asyncio
async def test_extract_transcribe_undo_scenario(session: MediaSession, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])
    assert session.state.can_extract(item)
    assert not session.state.can_transcribe(item.id)
    assert not session.state.can_undo

    extraction = await session.extract_audio(item.id, mute=False)
    assert session.state.has_extracted_audio(item.id)
    assert not session.state.has_subtitles(item.id)
    assert session.state.can_transcribe(item.id)

    transcription = await session.transcribe(item.id)
    assert session.state.has_subtitles(item.id)
    assert "hello" in session.subtitle_text(item.id)
    assert session.transcription_job.inputs == [extraction.output_path]

    plan = session.ledger.all_paths()
    assert plan == [extraction.output_path, transcription.output_path]

    report = await session.undo()

    assert report.outcome == UndoOutcome.FULLY_SUCCEEDED
    assert report.deleted == plan
    assert not session.state.has_extracted_audio(item.id)
    assert not session.state.has_subtitles(item.id)
    assert not Path(extraction.output_path).exists()
    assert not Path(transcription.output_path).exists()
    assert clip.read_bytes() == b"original video"


@pytest.mark.asyncio
async def test_extraction_twice_avoids_collisions(session: MediaSession, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])

    await session.extract_audio(item.id, mute=False)
    await session.extract_audio(item.id, mute=False)

    first = str(Path(item.path).parent / "clip__audio.m4a")
    second = str(Path(item.path).parent / "clip__audio (1).m4a")
    assert session.state.extracted_audio_path(item.id) == second
    assert session.ledger.all_paths() == [first, second]

    report = await session.undo()
    assert report.deleted == [first, second]
    assert not Path(first).exists() and not Path(second).exists()


@pytest.mark.asyncio
async def test_muted_preview_reverts_to_source_after_undo(session: MediaSession, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])
    result = await session.extract_audio(item.id)

    assert result.muted
    assert session.state.muted_preview_path(item.id) == result.muted_video_path
    assert session.preview_path(item.id) == result.muted_video_path
    assert session.ledger.all_paths() == [result.output_path, result.muted_video_path]

    await session.undo()

    assert session.preview_path(item.id) == item.path
    assert not Path(result.muted_video_path).exists()


@pytest.mark.asyncio
async def test_failed_job_registers_nothing(settings, fake_ffmpeg, clip: Path) -> None:
    session = MediaSession(
        settings,
        extraction_job=FFmpegExtractionJob(settings, ffmpeg=fake_ffmpeg),
        transcription_job=FailingTranscriptionJob(),
    )
    (item,) = session.import_paths([str(clip)])
    await session.extract_audio(item.id, mute=False)
    before = session.ledger.all_paths()

    with pytest.raises(ExternalToolFailedError):
        await session.transcribe(item.id)

    assert session.ledger.all_paths() == before
    assert not session.state.has_subtitles(item.id)
    assert not session.guard.is_pending()


@pytest.mark.asyncio
async def test_audio_items_cannot_be_extracted(session: MediaSession, clip: Path) -> None:
    song = clip.parent / "song.wav"
    song.write_bytes(b"RIFF")
    (item,) = session.import_paths([str(song)])

    assert not session.state.can_extract(item)
    with pytest.raises(InvalidInputError):
        await session.extract_audio(item.id)


@pytest.mark.asyncio
async def test_transcribe_requires_extracted_audio(session: MediaSession, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])
    with pytest.raises(InvalidInputError, match="Extract audio"):
        await session.transcribe(item.id)


@pytest.mark.asyncio
async def test_undo_is_refused_while_a_job_is_in_flight(settings, clip: Path) -> None:
    job = BlockingExtractionJob()
    session = MediaSession(settings, extraction_job=job, transcription_job=FakeTranscriptionJob())
    (item,) = session.import_paths([str(clip)])

    task = asyncio.create_task(session.extract_audio(item.id))
    await job.started.wait()

    assert not session.state.can_undo
    assert not session.state.can_extract(item)
    with pytest.raises(JobInFlightError):
        await session.undo()
    with pytest.raises(JobInFlightError):
        await session.extract_audio(item.id)

    job.release.set()
    result = await task

    assert session.state.can_undo
    report = await session.undo()
    assert report.deleted == [result.output_path]


@pytest.mark.asyncio
async def test_in_place_mute_is_restored_on_undo(settings, fake_ffmpeg, clip: Path) -> None:
    settings.output.mute_in_place = True
    session = MediaSession(
        settings,
        extraction_job=FFmpegExtractionJob(settings, ffmpeg=fake_ffmpeg),
        transcription_job=FakeTranscriptionJob(),
    )
    (item,) = session.import_paths([str(clip)])

    result = await session.extract_audio(item.id)
    assert result.muted and result.backup is not None
    assert clip.read_bytes() == b"muted"
    assert session.state.muted_preview_path(item.id) is None
    assert session.ledger.all_paths() == [result.output_path]

    # A second in-place run must not replace the backup of the untouched original.
    second = await session.extract_audio(item.id)
    assert second.backup is not None
    assert not Path(second.backup.backup_path).exists()
    assert session.ledger.backup_for(item.id) == result.backup

    report = await session.undo()

    assert report.fully_succeeded
    assert clip.read_bytes() == b"original video"
    assert not Path(result.backup.backup_path).exists()
    assert session.ledger.is_empty


def test_suggest_audio_output_path(session: MediaSession, settings, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])
    suggested = Path(session.suggest_audio_output_path(item.id))
    assert suggested == Path(settings.data_dir) / "extracted-audio" / "clip.m4a"
    assert suggested.parent.is_dir()


@pytest.mark.asyncio
async def test_ledger_kinds_after_extraction(session: MediaSession, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])
    await session.extract_audio(item.id)
    assert set(session.ledger.artifacts_for(item.id)) == {
        ArtifactKind.EXTRACTED_AUDIO,
        ArtifactKind.MUTED_VIDEO,
    }


@pytest.mark.asyncio
async def test_jobs_are_refused_while_undo_is_running(session: MediaSession, clip: Path) -> None:
    (item,) = session.import_paths([str(clip)])
    first = await session.extract_audio(item.id, mute=False)

    entered = threading.Event()
    go_on = threading.Event()

    def slow_delete(paths: list[str]):
        entered.set()
        go_on.wait(timeout=5)
        return delete_files(paths)

    session.undo_coordinator = UndoCoordinator(session.handles, delete=slow_delete)
    undo_task = asyncio.create_task(session.undo())
    assert await asyncio.to_thread(entered.wait, 5)

    assert session.guard.undoing
    assert not session.state.can_extract(item)
    assert not session.state.can_undo
    with pytest.raises(JobInFlightError):
        await session.extract_audio(item.id, mute=False)
    with pytest.raises(JobInFlightError):
        await session.undo()

    go_on.set()
    report = await undo_task

    assert report.deleted == [first.output_path]
    assert not session.guard.undoing
    assert session.state.can_extract(item)
    assert sorted(p.name for p in clip.parent.iterdir()) == ["clip.mp4"]
