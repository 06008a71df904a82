"""File-backed task repository: one markdown document per task."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from mdtasks.config import DEFAULT_RESERVED_NAMES
from mdtasks.tasks.codec import decode, encode
from mdtasks.tasks.models import SubTask, Task

logger = logging.getLogger(__name__)

TASK_FILE_SUFFIX = ".md"
TEMPLATE_FILE_NAME = "template.md"
NAMING_GUIDE_FILE_NAME = "task-naming.md"
TEMPLATE_TITLE = "Task title"

_NAMING_GUIDE = """\
# Task naming guide

Start a task title with a verb and keep it short enough to read on one line.

- Good: `Review quarterly budget`
- Good: `Fix login redirect on mobile`
- Avoid: `Budget` (no action)
- Avoid: `Things to do this week` (more than one task)

The file name is derived from the title: characters other than letters,
digits, `-` and `_` become `_`, followed by a creation timestamp.
"""


class TaskFileError(OSError):
    """Task file could not be read, written, created or deleted."""


class TaskFileFilter:
    """Decides which files in a folder are task documents."""

    def __init__(self, reserved_names: Iterable[str] = DEFAULT_RESERVED_NAMES) -> None:
        self.reserved_names = frozenset(reserved_names)

    def accepts(self, path: Path) -> bool:
        return (
            path.suffix == TASK_FILE_SUFFIX
            and path.name not in self.reserved_names
            and path.is_file()
        )


class TaskRepository:
    """Loads and persists task records inside one folder."""

    def __init__(self, folder: Path, *, file_filter: TaskFileFilter | None = None) -> None:
        self.folder = folder
        self.file_filter = file_filter or TaskFileFilter()

    def load_all(self) -> list[Task]:
        """Decode every task file; unreadable files are logged and skipped."""

        if not self.folder.is_dir():
            raise TaskFileError(f"Task folder does not exist: {self.folder}")

        tasks: list[Task] = []
        for path in sorted(self.folder.iterdir()):
            if not self.file_filter.accepts(path):
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as error:
                logger.warning("Skipping unreadable task file %s: %s", path, error)
                continue
            tasks.append(decode(text, str(path)))
        logger.debug("Loaded %d task(s) from %s", len(tasks), self.folder)
        return tasks

    def load(self, location: str | Path) -> Task:
        path = Path(location)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise TaskFileError(f"Failed to read task file {path}: {error}") from error
        return decode(text, str(path))

    def save(self, task: Task, *, now: datetime | None = None) -> None:
        """Refresh ``updated`` and replace the backing file with the new document."""

        task.touch(now)
        _write_atomic(Path(task.location), encode(task))
        logger.info("Saved task %s", task.location)

    def create(  # noqa: PLR0913
        self,
        *,
        title: str,
        status: str | None = None,
        priority: str | None = None,
        due: str | None = None,
        assignee: str | None = None,
        sub_tasks: list[SubTask] | None = None,
        memo: str | None = None,
        now: datetime | None = None,
    ) -> Task:
        """Create a new task file in the folder with a single write."""

        moment = now or datetime.now()
        path = self.folder / task_file_name(title, moment)
        if path.exists():
            raise TaskFileError(f"Task file already exists: {path}")
        task = Task.new(
            str(path),
            title=title,
            status=status,
            priority=priority,
            due=due,
            assignee=assignee,
            sub_tasks=sub_tasks,
            memo=memo,
            now=moment,
        )
        _write_atomic(path, encode(task))
        logger.info("Created task %s", path)
        return task

    def delete(self, location: str | Path) -> None:
        path = Path(location)
        try:
            path.unlink()
        except OSError as error:
            raise TaskFileError(f"Failed to delete task file {path}: {error}") from error
        logger.info("Deleted task %s", path)


def task_file_name(title: str, moment: datetime) -> str:
    """File name for a new task: sanitized title plus creation timestamp."""

    safe_title = "".join(char if char.isalnum() or char in "-_" else "_" for char in title)
    return f"{safe_title}_{moment.strftime('%Y%m%d%H%M%S')}{TASK_FILE_SUFFIX}"


def init_folder(parent: Path, name: str) -> Path:
    """Create a new task folder holding the blank template and the naming guide."""

    folder = parent / name
    if folder.exists():
        raise TaskFileError(f"Folder already exists: {folder}")
    try:
        folder.mkdir(parents=False)
    except OSError as error:
        raise TaskFileError(f"Failed to create task folder {folder}: {error}") from error

    template = Task(location=str(folder / TEMPLATE_FILE_NAME), title=TEMPLATE_TITLE)
    _write_atomic(folder / TEMPLATE_FILE_NAME, encode(template))
    _write_atomic(folder / NAMING_GUIDE_FILE_NAME, _NAMING_GUIDE)
    logger.info("Initialized task folder %s", folder)
    return folder


def _write_atomic(path: Path, content: str) -> None:
    try:
        handle, temp_name = tempfile.mkstemp(
            prefix=f".{path.name}.",
            suffix=".tmp",
            dir=path.parent,
        )
    except OSError as error:
        raise TaskFileError(f"Failed to write task file {path}: {error}") from error

    temp_path = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8", newline="\n") as stream:
            stream.write(content)
        os.chmod(temp_path, _target_mode(path))
        os.replace(temp_path, path)
    except OSError as error:
        temp_path.unlink(missing_ok=True)
        raise TaskFileError(f"Failed to write task file {path}: {error}") from error


def _target_mode(path: Path) -> int:
    # mkstemp creates 0600; keep the mode of the replaced file, or the umask default
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
