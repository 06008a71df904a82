"""CLI entrypoint for mdtasks."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import rich_click as click

from mdtasks import __version__
from mdtasks.config import Settings
from mdtasks.sync.controllers import (
    GitBranchesCommand,
    GitCheckCommand,
    GitSyncCommand,
    SyncCliController,
)
from mdtasks.sync.process import SyncError
from mdtasks.tasks.controllers import (
    FolderInitCommand,
    TaskCliController,
    TaskCreateCommand,
    TaskDeleteCommand,
    TaskEditCommand,
    TaskListCommand,
    TaskSetStatusCommand,
    TaskShowCommand,
)
from mdtasks.tasks.editing import TaskChanges
from mdtasks.tasks.models import TaskPriority, TaskStatus
from mdtasks.tasks.ordering import DEFAULT_SORT, SortOption
from mdtasks.tasks.repository import TaskFileError

click.rich_click.USE_MARKDOWN = True
TASK_CONTROLLER = TaskCliController()
SYNC_CONTROLLER = SyncCliController()
CONFLICT_EXIT_CODE = 2

_STATUS_CHOICES = [status.value for status in TaskStatus]
_PRIORITY_CHOICES = [priority.value for priority in TaskPriority]
_SORT_CHOICES = [option.value for option in SortOption]
_folder_option = click.option(
    "--folder",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Task folder. Defaults to MDTASKS_FOLDER or the current directory.",
)
_file_option = click.option(
    "--file",
    "file",
    type=click.Path(path_type=Path, dir_okay=False),
    required=True,
    help="Task file path.",
)


@click.group()
@click.version_option(version=__version__, prog_name="mdtasks")
def mdtasks() -> None:
    """Markdown task files with git sync."""

    with _domain_errors():
        settings = Settings.from_env()
    _configure_logging(settings.log_level)


@mdtasks.group()
def tasks() -> None:
    """Task file commands."""


@tasks.command("list")
@_folder_option
@click.option(
    "--status",
    default=None,
    help="Only show tasks with this status, for example `in progress`.",
)
@click.option(
    "--sort",
    type=click.Choice(_SORT_CHOICES),
    default=DEFAULT_SORT.value,
    show_default=True,
    help="Listing order. Tasks without a due date come last in both `due` orders.",
)
def tasks_list(folder: Path | None, status: str | None, sort: str) -> None:
    """List tasks found in the folder."""

    with _domain_errors():
        _emit_lines(
            TASK_CONTROLLER.list_tasks(TaskListCommand(folder=folder, status=status, sort=sort)),
        )


@tasks.command("show")
@_file_option
def tasks_show(file: Path) -> None:
    """Print one task in canonical form."""

    with _domain_errors():
        _emit_lines(TASK_CONTROLLER.show_task(TaskShowCommand(file=file)))


@tasks.command("new")
@_folder_option
@click.option("--title", required=True, help="Task title.")
@click.option("--status", type=click.Choice(_STATUS_CHOICES), default=None, help="Initial status.")
@click.option(
    "--priority",
    type=click.Choice(_PRIORITY_CHOICES),
    default=None,
    help="Initial priority.",
)
@click.option("--due", default=None, help="Due date (YYYY-MM-DD). Defaults to today.")
@click.option("--assignee", default=None, help="Assignee name.")
@click.option(
    "--sub-task",
    "sub_tasks",
    multiple=True,
    help="Sub-task text. Can be repeated.",
)
@click.option("--memo", default=None, help="Free-text memo.")
def tasks_new(  # noqa: PLR0913
    folder: Path | None,
    title: str,
    status: str | None,
    priority: str | None,
    due: str | None,
    assignee: str | None,
    sub_tasks: tuple[str, ...],
    memo: str | None,
) -> None:
    """Create a new task file."""

    with _domain_errors():
        _emit_lines(
            TASK_CONTROLLER.create_task(
                TaskCreateCommand(
                    folder=folder,
                    title=title,
                    status=status,
                    priority=priority,
                    due=due,
                    assignee=assignee,
                    sub_tasks=sub_tasks,
                    memo=memo,
                ),
            ),
        )


@tasks.command("set-status")
@_file_option
@click.option("--status", required=True, help="New status value.")
def tasks_set_status(file: Path, status: str) -> None:
    """Change the status of a task and refresh its update time."""

    with _domain_errors():
        _emit_lines(TASK_CONTROLLER.set_status(TaskSetStatusCommand(file=file, status=status)))


@tasks.command("edit")
@_file_option
@click.option("--title", default=None, help="New title.")
@click.option("--status", type=click.Choice(_STATUS_CHOICES), default=None, help="New status.")
@click.option(
    "--priority",
    type=click.Choice(_PRIORITY_CHOICES),
    default=None,
    help="New priority.",
)
@click.option("--due", default=None, help="New due date (YYYY-MM-DD); empty clears it.")
@click.option("--assignee", default=None, help="New assignee; empty clears it.")
@click.option("--memo", default=None, help="Replace the memo; empty clears it.")
@click.option(
    "--toggle-sub-task",
    "toggle_sub_tasks",
    type=click.IntRange(min=1),
    multiple=True,
    help="Flip completion of the sub-task at this 1-based position. Can be repeated.",
)
@click.option(
    "--remove-sub-task",
    "remove_sub_tasks",
    type=click.IntRange(min=1),
    multiple=True,
    help="Remove the sub-task at this 1-based position. Can be repeated.",
)
@click.option(
    "--add-sub-task",
    "add_sub_tasks",
    multiple=True,
    help="Append a sub-task. Can be repeated.",
)
def tasks_edit(  # noqa: PLR0913
    file: Path,
    title: str | None,
    status: str | None,
    priority: str | None,
    due: str | None,
    assignee: str | None,
    memo: str | None,
    toggle_sub_tasks: tuple[int, ...],
    remove_sub_tasks: tuple[int, ...],
    add_sub_tasks: tuple[str, ...],
) -> None:
    """Edit task fields and sub-tasks in one save.

    Positions refer to the sub-task list as shown by `tasks show`, before the edit.
    """

    changes = TaskChanges(
        title=title,
        status=status,
        priority=priority,
        due=due,
        assignee=assignee,
        memo=memo,
        toggle_sub_tasks=toggle_sub_tasks,
        remove_sub_tasks=remove_sub_tasks,
        add_sub_tasks=add_sub_tasks,
    )
    with _domain_errors():
        _emit_lines(TASK_CONTROLLER.edit_task(TaskEditCommand(file=file, changes=changes)))


@tasks.command("delete")
@_file_option
def tasks_delete(file: Path) -> None:
    """Delete a task file."""

    with _domain_errors():
        _emit_lines(TASK_CONTROLLER.delete_task(TaskDeleteCommand(file=file)))


@tasks.command("init-folder")
@click.option(
    "--parent",
    type=click.Path(path_type=Path, file_okay=False, exists=True),
    required=True,
    help="Directory in which the new task folder is created.",
)
@click.option("--name", required=True, help="New folder name.")
def tasks_init_folder(parent: Path, name: str) -> None:
    """Create a task folder with `template.md` and `task-naming.md`."""

    with _domain_errors():
        _emit_lines(TASK_CONTROLLER.init_folder(FolderInitCommand(parent=parent, name=name)))


@mdtasks.group()
def git() -> None:
    """Git repository and sync commands."""


@git.command("check")
@_folder_option
def git_check(folder: Path | None) -> None:
    """Report whether the folder is inside a git repository."""

    _emit_lines(SYNC_CONTROLLER.check(GitCheckCommand(folder=folder)))


@git.command("branches")
@_folder_option
def git_branches(folder: Path | None) -> None:
    """List local and remote branches; the current one is starred."""

    with _domain_errors():
        _emit_lines(SYNC_CONTROLLER.branches(GitBranchesCommand(folder=folder)))


@git.command("sync")
@_folder_option
@click.option(
    "--branch",
    default=None,
    help="Branch to sync. Defaults to MDTASKS_GIT_BRANCH (main).",
)
def git_sync(folder: Path | None, branch: str | None) -> None:
    """Pull, commit and push task changes.

    Exits with status 2 when the pull hits a merge conflict.
    """

    with _domain_errors():
        result = SYNC_CONTROLLER.sync(GitSyncCommand(folder=folder, branch=branch))
    _emit_lines(result.lines)
    if result.outcome.conflicts:
        click.get_current_context().exit(CONFLICT_EXIT_CODE)


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except (TaskFileError, SyncError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    mdtasks()
