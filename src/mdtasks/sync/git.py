"""Typed wrapper over the git command surface used by task folders."""

from __future__ import annotations

from pathlib import Path

from mdtasks.sync.process import CommandResult, CommandRunner, SubprocessRunner, SyncError

_REMOTE_BRANCH_PREFIX = "remotes/"


class CommandFailedError(SyncError):
    """External command ran but returned a non-success status."""

    def __init__(self, result: CommandResult) -> None:
        operation = " ".join(result.args[1:2]) or "command"
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.exit_code}"
        super().__init__(f"git {operation} failed: {detail}")
        self.result = result


class GitClient:
    """Run git operations inside one working directory.

    Operations return the raw ``CommandResult`` so callers can classify
    failures by their output; ``require`` turns a failure into an error.
    """

    def __init__(
        self,
        workdir: Path,
        *,
        runner: CommandRunner | None = None,
        executable: str = "git",
        remote: str = "origin",
    ) -> None:
        self.workdir = workdir
        self.runner = runner or SubprocessRunner()
        self.executable = executable
        self.remote = remote

    def _git(self, *args: str) -> CommandResult:
        return self.runner.run([self.executable, *args], cwd=self.workdir)

    def rev_parse_head(self) -> CommandResult:
        return self._git("rev-parse", "--abbrev-ref", "HEAD")

    def checkout(self, branch: str) -> CommandResult:
        return self._git("checkout", branch)

    def fetch(self, branch: str) -> CommandResult:
        return self._git("fetch", self.remote, branch)

    def pull(self, branch: str) -> CommandResult:
        return self._git("pull", self.remote, branch)

    def add_all(self) -> CommandResult:
        return self._git("add", ".")

    def status_porcelain(self) -> CommandResult:
        return self._git("status", "--porcelain")

    def commit(self, message: str) -> CommandResult:
        return self._git("commit", "-m", message)

    def push(self, branch: str) -> CommandResult:
        return self._git("push", self.remote, branch)

    def list_branches(self) -> CommandResult:
        return self._git("branch", "-a")

    def current_branch(self) -> str:
        """Return the checked-out branch name; raise when git cannot tell."""

        return require(self.rev_parse_head()).stdout.strip()

    def branches(self) -> list[str]:
        """Local and remote-tracking branch names without duplicates."""

        result = require(self.list_branches())
        remote_prefix = f"{_REMOTE_BRANCH_PREFIX}{self.remote}/"
        names: set[str] = set()
        for line in result.stdout.splitlines():
            name = line.strip().removeprefix("* ").removeprefix(remote_prefix)
            if not name or "HEAD" in name:
                continue
            names.add(name)
        return sorted(names)


def require(result: CommandResult) -> CommandResult:
    if not result.succeeded:
        raise CommandFailedError(result)
    return result


def is_repository(path: Path) -> bool:
    """True when ``path`` or any of its parents holds a ``.git`` entry."""

    current = path.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return True
    return False
