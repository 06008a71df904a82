"""Sort orders for task listings."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from mdtasks.tasks.models import PLACEHOLDER, Task, TaskPriority

PRIORITY_WEIGHT: dict[str, int] = {
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}


class SortOption(str, Enum):
    """Listing orders; ``<field>-desc`` means newest, latest or highest first."""

    CREATED_DESC = "created-desc"
    CREATED_ASC = "created-asc"
    UPDATED_DESC = "updated-desc"
    UPDATED_ASC = "updated-asc"
    DUE_ASC = "due-asc"
    DUE_DESC = "due-desc"
    PRIORITY_DESC = "priority-desc"
    PRIORITY_ASC = "priority-asc"


DEFAULT_SORT = SortOption.CREATED_DESC


def sort_tasks(tasks: Iterable[Task], option: SortOption | str = DEFAULT_SORT) -> list[Task]:
    """Return tasks in the requested order. Ties keep their input order.

    Tasks without a due date go last in both due orders. Unknown priorities
    weigh less than ``low``.
    """

    option = SortOption(option)
    field, _, direction = option.value.partition("-")
    descending = direction == "desc"
    items = list(tasks)

    if field == "due":
        dated = [task for task in items if task.due != PLACEHOLDER]
        undated = [task for task in items if task.due == PLACEHOLDER]
        return sorted(dated, key=lambda task: task.due, reverse=descending) + undated
    if field == "priority":
        return sorted(
            items,
            key=lambda task: PRIORITY_WEIGHT.get(task.priority, 0),
            reverse=descending,
        )
    return sorted(items, key=lambda task: getattr(task, field), reverse=descending)
