"""Async-friendly subprocess helpers.

We prefer `subprocess.run()` executed via `asyncio.to_thread()` instead of
`asyncio.create_subprocess_exec()` since some runtime environments have flaky
child watchers that can cause `.wait()`/`.communicate()` to hang.
"""

from __future__ import annotations

import asyncio
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from mediatool.exceptions import ExternalToolMissingError, JobTimeoutError


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode(errors="ignore")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode(errors="ignore")


async def run_subprocess(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    check: bool = False,
    timeout_s: float | None = None,
    env: Mapping[str, str] | None = None,
) -> RunResult:
    """Run a command off the event loop.

    Raises `ExternalToolMissingError` when the executable cannot be spawned and
    `JobTimeoutError` when `timeout_s` elapses.
    """
    argv = list(args)
    tool = Path(argv[0]).name if argv else ""

    def _run() -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            argv,
            stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            check=check,
            timeout=timeout_s,
            env=dict(env) if env is not None else None,
        )

    try:
        cp = await asyncio.to_thread(_run)
    except FileNotFoundError as exc:
        raise ExternalToolMissingError(tool, f"executable not found: {argv[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise JobTimeoutError(tool, f"timed out after {timeout_s}s") from exc
    return RunResult(
        returncode=int(cp.returncode),
        stdout=cp.stdout or b"",
        stderr=cp.stderr or b"",
    )


def env_with_path_prefix(directory: str | Path) -> dict[str, str]:
    """Copy of the environment with `directory` prepended to PATH."""
    env = dict(os.environ)
    if not str(directory or ""):
        return env
    env["PATH"] = f"{directory}{os.pathsep}{env.get('PATH', '')}"
    return env
