"""Git synchronization of task folders."""

from mdtasks.sync.git import CommandFailedError, GitClient, is_repository
from mdtasks.sync.orchestrator import SyncOrchestrator, SyncOutcome, SyncState
from mdtasks.sync.process import (
    CommandResult,
    CommandRunner,
    CommandTimeoutError,
    ProcessInvocationError,
    SubprocessRunner,
    SyncError,
)

__all__ = [
    "CommandFailedError",
    "CommandResult",
    "CommandRunner",
    "CommandTimeoutError",
    "GitClient",
    "ProcessInvocationError",
    "SubprocessRunner",
    "SyncError",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncState",
    "is_repository",
]
