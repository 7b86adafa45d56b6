from __future__ import annotations

from pathlib import Path

import pytest

from mediatool.config import FFmpegConfig, OutputConfig, Settings, WhisperConfig
from mediatool.exceptions import ExternalToolFailedError
from mediatool.jobs.ffmpeg import FFmpegRunner


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
        ffmpeg=FFmpegConfig(),
        whisper=WhisperConfig(),
        output=OutputConfig(),
    )


class FakeFFmpeg(FFmpegRunner):
    """Writes placeholder files instead of spawning ffmpeg."""

    def __init__(self, *, fail_mute: bool = False, fail_extract: bool = False) -> None:
        self.ffmpeg_bin = "ffmpeg"
        self.timeout_s = None
        self.fail_mute = fail_mute
        self.fail_extract = fail_extract
        self.calls: list[tuple[str, str, str]] = []

    async def _run(self, args: list[str]) -> None:  # pragma: no cover
        raise AssertionError("FakeFFmpeg must not spawn processes")

    async def extract_audio(self, input_path: str, output_path: str, *, codec: str = "aac", bitrate: str = "192k") -> str:
        self.calls.append(("extract", input_path, output_path))
        Path(output_path).write_bytes(b"partial")
        if self.fail_extract:
            raise ExternalToolFailedError("ffmpeg", "ffmpeg failed (code=1)", returncode=1)
        Path(output_path).write_bytes(b"audio")
        return output_path

    async def mute_video(self, input_path: str, output_path: str) -> str:
        self.calls.append(("mute", input_path, output_path))
        Path(output_path).write_bytes(b"partial")
        if self.fail_mute:
            raise ExternalToolFailedError("ffmpeg", "no video stream", returncode=1)
        Path(output_path).write_bytes(b"muted")
        return output_path

    async def to_wav_16k_mono(self, input_path: str, output_path: str) -> str:
        self.calls.append(("wav", input_path, output_path))
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(b"RIFF")
        return output_path


@pytest.fixture()
def fake_ffmpeg() -> FakeFFmpeg:
    return FakeFFmpeg()


@pytest.fixture()
def clip(tmp_path) -> Path:
    media = tmp_path / "media"
    media.mkdir()
    p = media / "clip.mp4"
    p.write_bytes(b"original video")
    return p
