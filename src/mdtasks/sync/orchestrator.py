"""Git synchronization workflow for a task folder.

The workflow is a linear state machine: every state runs one git operation,
looks at its exit status and output, and names the next state. A pull conflict
ends the run early with a conflict outcome; a clean working tree skips commit
and push. There is no rollback: a failed push leaves the local commit in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from mdtasks.sync.git import CommandFailedError, GitClient, require
from mdtasks.sync.process import ProcessInvocationError

logger = logging.getLogger(__name__)

COMMIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
CONFLICT_MESSAGE = "Merge conflict detected. Resolve it manually, then sync again."

_CONFLICT_PATTERNS: tuple[str, ...] = ("conflict",)
_UP_TO_DATE_PATTERNS: tuple[str, ...] = ("already up to date", "already up-to-date")
_MISSING_REMOTE_REF_PATTERNS: tuple[str, ...] = ("couldn't find remote ref",)
_NOTHING_TO_COMMIT_PATTERNS: tuple[str, ...] = ("nothing to commit",)

_OUTCOME_MESSAGES: dict[tuple[bool, bool], str] = {
    (True, True): "Fetched remote changes and pushed local changes.",
    (True, False): "Fetched remote changes.",
    (False, True): "Pushed local changes.",
    (False, False): "No changes.",
}


class SyncState(str, Enum):
    """States of the sync workflow, in execution order."""

    DETECT_BRANCH = "detect_branch"
    ENSURE_BRANCH = "ensure_branch"
    FETCH = "fetch"
    PULL = "pull"
    STAGE_ALL = "stage_all"
    DETECT_CHANGES = "detect_changes"
    COMMIT = "commit"
    PUSH = "push"
    FINALIZE = "finalize"
    CONFLICT = "conflict"


@dataclass(slots=True)
class SyncOutcome:
    """Result of one sync run. ``conflicts`` is data, not an error."""

    pulled: bool
    pushed: bool
    conflicts: bool
    message: str


@dataclass(slots=True)
class _SyncRun:
    branch: str
    current_branch: str = ""
    pulled: bool = False
    pushed: bool = False


def outcome_message(*, pulled: bool, pushed: bool) -> str:
    return _OUTCOME_MESSAGES[(pulled, pushed)]


class SyncOrchestrator:
    """Reconcile a working directory with one remote branch."""

    def __init__(
        self,
        git: GitClient,
        *,
        commit_label: str = "Task sync",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.git = git
        self.commit_label = commit_label
        self.clock = clock
        self._handlers: dict[SyncState, Callable[[_SyncRun], SyncState]] = {
            SyncState.DETECT_BRANCH: self._detect_branch,
            SyncState.ENSURE_BRANCH: self._ensure_branch,
            SyncState.FETCH: self._fetch,
            SyncState.PULL: self._pull,
            SyncState.STAGE_ALL: self._stage_all,
            SyncState.DETECT_CHANGES: self._detect_changes,
            SyncState.COMMIT: self._commit,
            SyncState.PUSH: self._push,
        }

    def run(self, branch: str) -> SyncOutcome:
        """Run the whole workflow; raise ``SyncError`` on any fatal condition."""

        run = _SyncRun(branch=branch)
        state = SyncState.DETECT_BRANCH
        while state not in (SyncState.FINALIZE, SyncState.CONFLICT):
            logger.debug("Sync state=%s branch=%s", state.value, branch)
            state = self._handlers[state](run)

        if state is SyncState.CONFLICT:
            logger.warning("Sync stopped on merge conflict in %s", self.git.workdir)
            return SyncOutcome(pulled=False, pushed=False, conflicts=True, message=CONFLICT_MESSAGE)

        message = outcome_message(pulled=run.pulled, pushed=run.pushed)
        logger.info(
            "Sync finished workdir=%s branch=%s pulled=%s pushed=%s",
            self.git.workdir,
            branch,
            run.pulled,
            run.pushed,
        )
        return SyncOutcome(pulled=run.pulled, pushed=run.pushed, conflicts=False, message=message)

    def commit_message(self) -> str:
        return f"{self.commit_label} {self.clock().strftime(COMMIT_TIMESTAMP_FORMAT)}"

    def _detect_branch(self, run: _SyncRun) -> SyncState:
        result = self.git.rev_parse_head()
        run.current_branch = result.stdout.strip() if result.succeeded else ""
        return SyncState.ENSURE_BRANCH

    def _ensure_branch(self, run: _SyncRun) -> SyncState:
        if run.current_branch and run.current_branch != run.branch:
            logger.info("Switching branch %s -> %s", run.current_branch, run.branch)
            require(self.git.checkout(run.branch))
        return SyncState.FETCH

    def _fetch(self, run: _SyncRun) -> SyncState:
        try:
            result = self.git.fetch(run.branch)
        except ProcessInvocationError as error:
            logger.debug("Ignoring fetch failure: %s", error)
            return SyncState.PULL
        if not result.succeeded:
            logger.debug("Ignoring fetch failure: %s", result.stderr.strip())
        return SyncState.PULL

    def _pull(self, run: _SyncRun) -> SyncState:
        result = self.git.pull(run.branch)
        if result.succeeded:
            run.pulled = _first_match(result.output, _UP_TO_DATE_PATTERNS) is None
            return SyncState.STAGE_ALL
        if _first_match(result.output, _CONFLICT_PATTERNS) is not None:
            return SyncState.CONFLICT
        if _first_match(result.output, _MISSING_REMOTE_REF_PATTERNS) is not None:
            logger.info("Remote branch %s does not exist yet", run.branch)
            return SyncState.STAGE_ALL
        raise CommandFailedError(result)

    def _stage_all(self, run: _SyncRun) -> SyncState:
        require(self.git.add_all())
        return SyncState.DETECT_CHANGES

    def _detect_changes(self, run: _SyncRun) -> SyncState:
        result = require(self.git.status_porcelain())
        if not result.stdout.strip():
            return SyncState.FINALIZE
        return SyncState.COMMIT

    def _commit(self, run: _SyncRun) -> SyncState:
        result = self.git.commit(self.commit_message())
        if not result.succeeded:
            if _first_match(result.output, _NOTHING_TO_COMMIT_PATTERNS) is None:
                raise CommandFailedError(result)
            logger.debug("Nothing to commit")
        return SyncState.PUSH

    def _push(self, run: _SyncRun) -> SyncState:
        require(self.git.push(run.branch))
        run.pushed = True
        return SyncState.FINALIZE


def _first_match(text: str, patterns: tuple[str, ...]) -> str | None:
    haystack = text.lower()
    for pattern in patterns:
        if pattern in haystack:
            return pattern
    return None
