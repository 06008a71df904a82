"""Field-level edits of a task record."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from mdtasks.tasks.models import PLACEHOLDER, SubTask, Task


@dataclass(slots=True)
class TaskChanges:
    """Requested edits. ``None`` leaves a field alone.

    Sub-task positions are 1-based and refer to the list before the edit.
    Toggles run first, then removals, then additions.
    """

    title: str | None = None
    status: str | None = None
    priority: str | None = None
    due: str | None = None
    assignee: str | None = None
    memo: str | None = None
    toggle_sub_tasks: Sequence[int] = ()
    remove_sub_tasks: Sequence[int] = ()
    add_sub_tasks: Sequence[str] = ()


_SCALAR_FIELDS: tuple[str, ...] = ("title", "status", "priority", "due", "assignee")


def apply_changes(task: Task, changes: TaskChanges) -> list[str]:
    """Apply edits in place and describe every field that actually changed.

    Raises ``ValueError`` for a sub-task position outside the current list;
    the task is left untouched in that case.
    """

    count = len(task.sub_tasks)
    for position in (*changes.toggle_sub_tasks, *changes.remove_sub_tasks):
        if not 1 <= position <= count:
            raise ValueError(f"Sub-task position {position} is out of range (task has {count}).")

    described: list[str] = []
    for name in _SCALAR_FIELDS:
        requested = getattr(changes, name)
        if requested is None:
            continue
        value = requested.strip() or PLACEHOLDER
        previous = getattr(task, name)
        if value != previous:
            setattr(task, name, value)
            described.append(f"{name}: {previous} -> {value}")

    if changes.memo is not None and changes.memo != task.memo:
        task.memo = changes.memo
        described.append("memo updated")

    sub_tasks = [SubTask(text=item.text, completed=item.completed) for item in task.sub_tasks]
    for position in dict.fromkeys(changes.toggle_sub_tasks):
        item = sub_tasks[position - 1]
        item.completed = not item.completed
        mark = "done" if item.completed else "open"
        described.append(f"sub-task {position} {mark}: {item.text}")
    for position in sorted(set(changes.remove_sub_tasks), reverse=True):
        removed = sub_tasks.pop(position - 1)
        described.append(f"sub-task {position} removed: {removed.text}")
    for text in changes.add_sub_tasks:
        if text.strip():
            sub_tasks.append(SubTask(text=text.strip()))
            described.append(f"sub-task added: {text.strip()}")
    task.sub_tasks = sub_tasks

    return described
