"""Controllers for git CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mdtasks.config import Settings
from mdtasks.sync.git import GitClient, is_repository
from mdtasks.sync.orchestrator import SyncOrchestrator, SyncOutcome
from mdtasks.sync.process import SubprocessRunner


@dataclass(slots=True)
class GitCheckCommand:
    """CLI inputs for repository detection."""

    folder: Path | None


@dataclass(slots=True)
class GitBranchesCommand:
    """CLI inputs for branch listing."""

    folder: Path | None


@dataclass(slots=True)
class GitSyncCommand:
    """CLI inputs for the sync workflow."""

    folder: Path | None
    branch: str | None


@dataclass(slots=True)
class GitSyncResult:
    """Sync outcome with printable lines."""

    outcome: SyncOutcome
    lines: list[str]


class SyncCliController:
    """Coordinates git command execution."""

    def check(self, command: GitCheckCommand) -> list[str]:
        settings = Settings.from_env(folder=command.folder)
        folder = settings.tasks.folder
        if is_repository(folder):
            return [f"{folder} is inside a git repository."]
        return [f"{folder} is not inside a git repository."]

    def branches(self, command: GitBranchesCommand) -> list[str]:
        settings = Settings.from_env(folder=command.folder)
        settings.validate()
        git = _git_client(settings)
        current = git.current_branch()
        return [
            f"* {name}" if name == current else f"  {name}"
            for name in git.branches()
        ]

    def sync(self, command: GitSyncCommand) -> GitSyncResult:
        settings = Settings.from_env(folder=command.folder)
        settings.validate()
        branch = command.branch or settings.git.branch
        orchestrator = SyncOrchestrator(
            _git_client(settings),
            commit_label=settings.git.commit_label,
        )
        outcome = orchestrator.run(branch)
        lines = [
            outcome.message,
            f"branch={branch} pulled={_yes_no(outcome.pulled)} "
            f"pushed={_yes_no(outcome.pushed)} conflicts={_yes_no(outcome.conflicts)}",
        ]
        return GitSyncResult(outcome=outcome, lines=lines)


def _git_client(settings: Settings) -> GitClient:
    return GitClient(
        settings.tasks.folder,
        runner=SubprocessRunner(timeout_seconds=settings.git.timeout_seconds),
        executable=settings.git.executable,
        remote=settings.git.remote,
    )


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"
