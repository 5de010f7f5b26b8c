"""Process execution capability for the entity generator.

The generator only ever talks to a :class:`ProcessRunner`, so tests can
substitute a fake that records the arguments and returns a canned result
without spawning anything.
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass
class ProcessResult:
    """Exit status and captured output of a finished process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    """Anything that can run a command to completion and capture its output.

    Implementations raise ``OSError`` (typically ``FileNotFoundError`` or
    ``PermissionError``) when the command cannot be started at all.
    """

    def run(self, args: list[str], cwd: Path | None = None) -> ProcessResult: ...


class SubprocessRunner:
    """Runs commands with :func:`subprocess.run`, blocking until they exit.

    No timeout is applied: the generator is a short-lived batch tool and a
    hang is surfaced to the developer as a hang.
    """

    def run(self, args: list[str], cwd: Path | None = None) -> ProcessResult:
        start_time = time.monotonic()
        completed = subprocess.run(
            args,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_seconds=time.monotonic() - start_time,
        )
