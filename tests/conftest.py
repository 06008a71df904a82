"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

import pytest

from mdtasks.sync.git import GitClient
from mdtasks.sync.orchestrator import SyncOrchestrator
from mdtasks.sync.process import CommandResult, ProcessInvocationError

OK = (0, "", "")
FIXED_NOW = datetime(2026, 3, 14, 9, 26)


class ScriptedRunner:
    """Answer git commands by subcommand name and record every call.

    ``responses`` maps a subcommand (``pull``, ``status`` ...) to one
    ``(exit_code, stdout, stderr)`` tuple, a list of them consumed in order
    (the last one repeats), or an exception instance to raise.
    Unknown subcommands succeed with empty output.
    """

    def __init__(self, responses: dict[str, object] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    def run(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        argv = tuple(args)
        self.calls.append(argv)
        response = self.responses.get(argv[1], OK)
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, ProcessInvocationError):
            raise response
        exit_code, stdout, stderr = response
        return CommandResult(args=argv, exit_code=exit_code, stdout=stdout, stderr=stderr)

    def subcommands(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture()
def make_orchestrator(
    tmp_path: Path,
) -> Callable[[dict[str, object]], tuple[SyncOrchestrator, ScriptedRunner]]:
    """Build an orchestrator over a scripted runner with a frozen clock."""

    def _make(responses: dict[str, object]) -> tuple[SyncOrchestrator, ScriptedRunner]:
        runner = ScriptedRunner(responses)
        git = GitClient(tmp_path, runner=runner)
        return SyncOrchestrator(git, clock=lambda: FIXED_NOW), runner

    return _make


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop MDTASKS_* variables inherited from the developer shell."""

    for name in (
        "MDTASKS_FOLDER",
        "MDTASKS_RESERVED_NAMES",
        "MDTASKS_GIT_EXECUTABLE",
        "MDTASKS_GIT_REMOTE",
        "MDTASKS_GIT_BRANCH",
        "MDTASKS_GIT_TIMEOUT_SECONDS",
        "MDTASKS_COMMIT_LABEL",
        "MDTASKS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
