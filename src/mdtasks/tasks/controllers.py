"""Controllers for task CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mdtasks.config import Settings
from mdtasks.tasks.codec import encode
from mdtasks.tasks.editing import TaskChanges, apply_changes
from mdtasks.tasks.models import SubTask, Task
from mdtasks.tasks.ordering import DEFAULT_SORT, sort_tasks
from mdtasks.tasks.repository import TaskFileFilter, TaskRepository, init_folder


@dataclass(slots=True)
class TaskListCommand:
    """CLI inputs for task listing."""

    folder: Path | None
    status: str | None
    sort: str = DEFAULT_SORT.value


@dataclass(slots=True)
class TaskShowCommand:
    """CLI inputs for printing one task document."""

    file: Path


@dataclass(slots=True)
class TaskCreateCommand:
    """CLI inputs for task creation."""

    folder: Path | None
    title: str
    status: str | None
    priority: str | None
    due: str | None
    assignee: str | None
    sub_tasks: tuple[str, ...]
    memo: str | None


@dataclass(slots=True)
class TaskSetStatusCommand:
    """CLI inputs for status updates."""

    file: Path
    status: str


@dataclass(slots=True)
class TaskEditCommand:
    """CLI inputs for field edits."""

    file: Path
    changes: TaskChanges


@dataclass(slots=True)
class TaskDeleteCommand:
    """CLI inputs for task deletion."""

    file: Path


@dataclass(slots=True)
class FolderInitCommand:
    """CLI inputs for task folder provisioning."""

    parent: Path
    name: str


class TaskCliController:
    """Coordinates task command execution."""

    def list_tasks(self, command: TaskListCommand) -> list[str]:
        repository = _repository(command.folder)
        tasks = repository.load_all()
        if command.status is not None:
            tasks = [task for task in tasks if task.status == command.status]
        if not tasks:
            return [f"No tasks in {repository.folder}"]
        return [_summary_line(task) for task in sort_tasks(tasks, command.sort)]

    def show_task(self, command: TaskShowCommand) -> list[str]:
        task = _repository(command.file.parent).load(command.file)
        return encode(task).removesuffix("\n").split("\n")

    def create_task(self, command: TaskCreateCommand) -> list[str]:
        repository = _repository(command.folder)
        task = repository.create(
            title=command.title,
            status=command.status,
            priority=command.priority,
            due=command.due,
            assignee=command.assignee,
            sub_tasks=[SubTask(text=text) for text in command.sub_tasks if text.strip()],
            memo=command.memo,
        )
        return [f"Created task: {task.location}"]

    def set_status(self, command: TaskSetStatusCommand) -> list[str]:
        repository = _repository(command.file.parent)
        task = repository.load(command.file)
        previous = task.status
        task.status = command.status
        repository.save(task)
        return [f"Updated status: {previous} -> {task.status} ({task.location})"]

    def edit_task(self, command: TaskEditCommand) -> list[str]:
        repository = _repository(command.file.parent)
        task = repository.load(command.file)
        described = apply_changes(task, command.changes)
        if not described:
            return [f"No changes: {task.location}"]
        repository.save(task)
        return [f"Updated task: {task.location}", *(f"  {line}" for line in described)]

    def delete_task(self, command: TaskDeleteCommand) -> list[str]:
        _repository(command.file.parent).delete(command.file)
        return [f"Deleted task: {command.file}"]

    def init_folder(self, command: FolderInitCommand) -> list[str]:
        folder = init_folder(command.parent, command.name)
        return [f"Created task folder: {folder}"]


def _repository(folder: Path | None) -> TaskRepository:
    settings = Settings.from_env(folder=folder)
    settings.validate()
    return TaskRepository(
        settings.tasks.folder,
        file_filter=TaskFileFilter(settings.tasks.reserved_names),
    )


def _summary_line(task: Task) -> str:
    done = sum(1 for sub_task in task.sub_tasks if sub_task.completed)
    return (
        f"[{task.status}] {task.title} "
        f"priority={task.priority} due={task.due} assignee={task.assignee} "
        f"sub_tasks={done}/{len(task.sub_tasks)} file={Path(task.location).name}"
    )
