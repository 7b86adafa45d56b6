"""Subtitle generation with whisper.cpp, falling back to openai-whisper."""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from mediatool.config import Settings
from mediatool.exceptions import (
    ExternalToolError,
    ExternalToolFailedError,
    ExternalToolMissingError,
)
from mediatool.jobs.base import TranscriptionJob, require_existing_file
from mediatool.jobs.ffmpeg import FFmpegRunner
from mediatool.models.jobs import TranscriptionResult
from mediatool.utils.files import derived_output_path, safe_base_name
from mediatool.utils.subprocess import env_with_path_prefix, run_subprocess
from mediatool.utils.whisper import resolve_whisper_cpp_bin, resolve_whisper_cpp_model

logger = logging.getLogger(__name__)

REMEDIATION_HINT = (
    "Subtitle recognition is unavailable: no whisper.cpp binary/model was found "
    "and the system whisper is not usable either.\n"
    "Fix it by one of:\n"
    "1) place whisper.cpp and a ggml model under vendor/whisper (models in vendor/whisper/models)\n"
    "2) set WHISPER_CPP_BIN / WHISPER_CPP_MODEL to your whisper.cpp binary and model\n"
    "3) install openai-whisper so that `whisper` or `python -m whisper` works."
)


@dataclass(frozen=True)
class _RunnerOutput:
    runner: str
    srt_path: Path


def _find_srt(directory: Path, preferred: Path) -> Path | None:
    if preferred.is_file():
        return preferred
    for candidate in sorted(directory.iterdir()):
        if candidate.suffix.lower() == ".srt" and candidate.is_file():
            return candidate
    return None


class WhisperTranscriptionJob(TranscriptionJob):
    def __init__(self, settings: Settings, ffmpeg: FFmpegRunner | None = None) -> None:
        self.settings = settings
        self.ffmpeg = ffmpeg or FFmpegRunner(settings.ffmpeg.bin, settings.ffmpeg.timeout_s)

    async def run(self, input_path: str, *, output_dir: str | None = None) -> TranscriptionResult:
        src = require_existing_file(input_path)
        out_dir = Path(output_dir) if output_dir else src.parent
        out_dir.mkdir(parents=True, exist_ok=True)

        work_dir = self.settings.subtitles_tmp_dir / f"{int(time.time() * 1000)}-{uuid4().hex[:8]}"
        work_dir.mkdir(parents=True, exist_ok=True)
        logger.info("transcribe start (input=%s, work_dir=%s)", src, work_dir)
        try:
            wav_path = work_dir / f"{safe_base_name(src)}.wav"
            await self.ffmpeg.to_wav_16k_mono(str(src), str(wav_path))
            produced = await self._transcribe(wav_path, work_dir)

            output_path = derived_output_path(
                src, self.settings.output.subtitle_tag, ".srt", directory=out_dir
            )
            shutil.copyfile(produced.srt_path, output_path)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

        try:
            srt_text = output_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("could not read back subtitles %s (%s)", output_path, exc)
            srt_text = ""
        logger.info("subtitles written to %s (runner=%s)", output_path, produced.runner)
        return TranscriptionResult(output_path=str(output_path), srt_text=srt_text, runner=produced.runner)

    async def _transcribe(self, wav_path: Path, work_dir: Path) -> _RunnerOutput:
        errors: list[tuple[str, ExternalToolError]] = []
        try:
            return await self._run_whisper_cpp(wav_path, work_dir)
        except (ExternalToolMissingError, ExternalToolFailedError) as exc:
            logger.info("whisper.cpp unavailable, falling back to system whisper: %s", exc)
            errors.append(("whisper.cpp", exc))

        cfg = self.settings.whisper
        cli_runners = (
            (cfg.cli_bin, [cfg.cli_bin]),
            (f"{cfg.python_bin} -m whisper", [cfg.python_bin, "-m", "whisper"]),
        )
        for runner, argv in cli_runners:
            try:
                return await self._run_whisper_cli(runner, argv, wav_path, work_dir)
            except (ExternalToolMissingError, ExternalToolFailedError) as exc:
                errors.append((runner, exc))

        details = "\n".join(f"{name}: {exc.message}" for name, exc in errors)
        message = f"{REMEDIATION_HINT}\n\n{details}"
        if all(isinstance(exc, ExternalToolMissingError) for _, exc in errors):
            raise ExternalToolMissingError("whisper", message)
        raise ExternalToolFailedError("whisper", message)

    async def _run_whisper_cpp(self, wav_path: Path, work_dir: Path) -> _RunnerOutput:
        cfg = self.settings.whisper
        binary = resolve_whisper_cpp_bin(cfg.cpp_bin, cfg.vendor_dirs)
        model = resolve_whisper_cpp_model(cfg.cpp_model, cfg.vendor_dirs)
        if not binary or not model:
            raise ExternalToolMissingError(
                "whisper.cpp",
                "whisper.cpp not found. Set WHISPER_CPP_BIN and WHISPER_CPP_MODEL or place vendor files.",
            )

        out_base = work_dir / "whispercpp_out"
        args = [binary, "-m", model, "-f", str(wav_path), "-of", str(out_base), "-osrt"]
        result = await run_subprocess(
            args, timeout_s=cfg.timeout_s, env=env_with_path_prefix(self.ffmpeg.bin_dir)
        )
        if result.returncode != 0:
            raise ExternalToolFailedError(
                "whisper.cpp",
                result.stderr_text or result.stdout_text or f"exited with code {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr_text,
            )
        srt = _find_srt(work_dir, Path(f"{out_base}.srt"))
        if srt is None:
            raise ExternalToolFailedError("whisper.cpp", "did not produce .srt output")
        return _RunnerOutput(runner="whisper.cpp", srt_path=srt)

    async def _run_whisper_cli(
        self, runner: str, argv: list[str], wav_path: Path, work_dir: Path
    ) -> _RunnerOutput:
        args = [
            *argv,
            str(wav_path),
            "--output_dir",
            str(work_dir),
            "--output_format",
            "srt",
            "--verbose",
            "False",
            "--fp16",
            "False",
        ]
        # openai-whisper shells out to ffmpeg; make the resolved binary discoverable.
        result = await run_subprocess(
            args,
            timeout_s=self.settings.whisper.timeout_s,
            env=env_with_path_prefix(self.ffmpeg.bin_dir),
        )
        if result.returncode != 0:
            raise ExternalToolFailedError(
                runner,
                result.stderr_text or result.stdout_text or f"exited with code {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr_text,
            )
        srt = _find_srt(work_dir, work_dir / f"{wav_path.stem}.srt")
        if srt is None:
            raise ExternalToolFailedError(runner, "Transcription did not produce .srt output")
        return _RunnerOutput(runner=runner, srt_path=srt)
