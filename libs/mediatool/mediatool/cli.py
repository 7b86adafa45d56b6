"""Command-line front-end."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any

from mediatool.config import Settings
from mediatool.exceptions import DeleteFailedError, MediaToolError
from mediatool.jobs import get_extraction_job, get_transcription_job
from mediatool.session import MediaSession
from mediatool.utils.ffmpeg import ffmpeg_version
from mediatool.utils.files import restore_backup
from mediatool.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _dump(obj: Any) -> None:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        obj = dataclasses.asdict(obj)
    print(json.dumps(obj, ensure_ascii=False, indent=2))


async def _undo(session: MediaSession) -> bool:
    report = await session.undo()
    _dump(report.to_dict())
    for failure in report.failed:
        err = DeleteFailedError(failure.path, failure.error)
        print(f"[{err.error_code.value}] {err}", file=sys.stderr)
    return report.fully_succeeded


async def _process(settings: Settings, args: argparse.Namespace) -> int:
    session = MediaSession(settings)
    session.import_paths(args.inputs)
    cleaned = True
    try:
        for item in reversed(session.items):
            if not session.state.can_extract(item):
                logger.info("skip %s (not a video)", item.name)
                continue
            await session.extract_audio(item.id, mute=not args.no_mute)
            if args.transcribe:
                result = await session.transcribe(item.id)
                if args.print_subtitles:
                    print(result.srt_text)

        _dump(
            {
                "items": [
                    {
                        "name": item.name,
                        "preview": session.preview_path(item.id),
                        "extracted_audio": session.state.extracted_audio_path(item.id),
                        "subtitles": session.state.subtitle_path(item.id),
                    }
                    for item in session.items
                ],
                "created": session.ledger.all_paths(),
            }
        )
    finally:
        # Outputs of earlier inputs are cleaned up even when a later one fails.
        if args.undo:
            cleaned = await _undo(session)
    return 0 if cleaned else 2


async def _run(args: argparse.Namespace) -> int:
    settings = Settings()
    setup_logging(settings)

    match args.command:
        case "version":
            print(await ffmpeg_version(settings.ffmpeg.bin))
        case "extract":
            mute = settings.output.mute_by_default and not args.no_mute
            _dump(await get_extraction_job(settings).run(args.input, output_path=args.output, mute=mute))
        case "transcribe":
            result = await get_transcription_job(settings).run(args.input, output_dir=args.output_dir)
            _dump({"output_path": result.output_path, "runner": result.runner})
        case "process":
            return await _process(settings, args)
        case "restore":
            restore_backup(args.original, args.backup)
            _dump({"restored": True})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mediatool")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("version", help="Print the ffmpeg version")

    p = sub.add_parser("extract", help="Extract audio (and a muted copy) from a video")
    p.add_argument("input")
    p.add_argument("--output", default=None, help="Audio output path (default: next to input)")
    p.add_argument("--no-mute", action="store_true", help="Do not produce a muted video")

    p = sub.add_parser("transcribe", help="Generate .srt subtitles for an audio file")
    p.add_argument("input")
    p.add_argument("--output-dir", default=None)

    p = sub.add_parser("process", help="Extract (and transcribe) several files in one session")
    p.add_argument("inputs", nargs="+")
    p.add_argument("--no-mute", action="store_true")
    p.add_argument("--transcribe", action="store_true")
    p.add_argument("--print-subtitles", action="store_true")
    p.add_argument("--undo", action="store_true", help="Delete everything generated at the end")

    p = sub.add_parser("restore", help="Copy a backup over its original and delete the backup")
    p.add_argument("original")
    p.add_argument("backup")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except MediaToolError as exc:
        print(f"[{exc.error_code.value}] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
