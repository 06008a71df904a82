"""Process invocation for external version-control commands."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class SyncError(RuntimeError):
    """Fatal condition that aborts a sync or git operation."""


class ProcessInvocationError(SyncError):
    """External process could not be started or did not finish."""

    def __init__(self, message: str, *, args: Sequence[str]) -> None:
        super().__init__(message)
        self.command = tuple(args)


class CommandTimeoutError(ProcessInvocationError):
    """External process exceeded its time budget and was killed."""


@dataclass(slots=True)
class CommandResult:
    """Outcome of one finished external command."""

    args: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Both streams, stderr first, for substring classification."""

        return f"{self.stderr}\n{self.stdout}"


class CommandRunner(Protocol):
    """Protocol implemented by process runners."""

    def run(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        """Run a command to completion and return its exit status and output."""


class SubprocessRunner:
    """Run commands with ``subprocess.run`` under a bounded timeout."""

    def __init__(self, *, timeout_seconds: float = 120.0) -> None:
        self.timeout_seconds = timeout_seconds

    def run(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        argv = [str(arg) for arg in args]
        if not argv:
            raise ProcessInvocationError("Cannot run an empty command.", args=argv)
        logger.debug("Running %s in %s", argv, cwd)
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                cwd=cwd,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as error:
            raise CommandTimeoutError(
                f"{_describe(argv)} timed out after {self.timeout_seconds:g}s",
                args=argv,
            ) from error
        except FileNotFoundError as error:
            raise ProcessInvocationError(
                f"{_describe(argv)} failed to start: command not found: {argv[0]}",
                args=argv,
            ) from error
        except OSError as error:
            raise ProcessInvocationError(
                f"{_describe(argv)} failed to start: {error}",
                args=argv,
            ) from error

        return CommandResult(
            args=tuple(argv),
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def _describe(argv: Sequence[str]) -> str:
    return " ".join(argv[:2])
