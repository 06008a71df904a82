"""Runtime configuration for task folders and git synchronization."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_RESERVED_NAMES: tuple[str, ...] = ("template.md", "task-naming.md")
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(slots=True)
class TaskFolderSettings:
    """Task folder settings."""

    folder: Path = Path()
    reserved_names: tuple[str, ...] = DEFAULT_RESERVED_NAMES


@dataclass(slots=True)
class GitSettings:
    """Git synchronization settings."""

    executable: str = "git"
    remote: str = "origin"
    branch: str = "main"
    timeout_seconds: float = 120.0
    commit_label: str = "Task sync"


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    tasks: TaskFolderSettings = field(default_factory=TaskFolderSettings)
    git: GitSettings = field(default_factory=GitSettings)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, folder: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local use."""

        return cls(
            tasks=TaskFolderSettings(
                folder=folder or Path(os.getenv("MDTASKS_FOLDER", ".")),
                reserved_names=_collect_reserved_names(),
            ),
            git=GitSettings(
                executable=os.getenv("MDTASKS_GIT_EXECUTABLE", "git"),
                remote=os.getenv("MDTASKS_GIT_REMOTE", "origin"),
                branch=os.getenv("MDTASKS_GIT_BRANCH", "main"),
                timeout_seconds=float(os.getenv("MDTASKS_GIT_TIMEOUT_SECONDS", "120")),
                commit_label=os.getenv("MDTASKS_COMMIT_LABEL", "Task sync"),
            ),
            log_level=os.getenv("MDTASKS_LOG_LEVEL", "WARNING").strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error on values the runtime cannot work with."""

        if self.git.timeout_seconds <= 0:
            raise ValueError("MDTASKS_GIT_TIMEOUT_SECONDS must be > 0.")
        if not self.git.executable.strip():
            raise ValueError("MDTASKS_GIT_EXECUTABLE must not be empty.")
        if not self.git.remote.strip():
            raise ValueError("MDTASKS_GIT_REMOTE must not be empty.")
        if not self.git.branch.strip():
            raise ValueError("MDTASKS_GIT_BRANCH must not be empty.")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid MDTASKS_LOG_LEVEL: {self.log_level!r}. "
                f"Expected one of {', '.join(sorted(_LOG_LEVELS))}.",
            )
        for name in self.tasks.reserved_names:
            if "/" in name or "\\" in name:
                raise ValueError(f"Reserved name must be a bare file name: {name!r}")


def _collect_reserved_names() -> tuple[str, ...]:
    raw = os.getenv("MDTASKS_RESERVED_NAMES")
    if raw is None:
        return DEFAULT_RESERVED_NAMES

    names: list[str] = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)
