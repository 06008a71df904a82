"""Domain models for markdown task records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

TIMESTAMP_FORMAT = "%Y-%m-%d-%H:%M"
DATE_FORMAT = "%Y-%m-%d"
PLACEHOLDER = "-"


class TaskStatus(str, Enum):
    """Known task statuses. Documents may carry other values."""

    NOT_STARTED = "not started"
    IN_PROGRESS = "in progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Known task priorities. Documents may carry other values."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(slots=True)
class SubTask:
    """One checklist entry of a task."""

    text: str
    completed: bool = False


@dataclass(slots=True)
class Task:
    """Structured view of one task file.

    ``location`` is the path of the backing file and acts as the record identity.
    ``updated`` is refreshed by the repository on save, never by the codec.
    """

    location: str
    title: str = PLACEHOLDER
    created: str = PLACEHOLDER
    updated: str = PLACEHOLDER
    status: str = TaskStatus.NOT_STARTED.value
    priority: str = TaskPriority.LOW.value
    due: str = PLACEHOLDER
    assignee: str = PLACEHOLDER
    sub_tasks: list[SubTask] = field(default_factory=list)
    memo: str = ""

    @classmethod
    def new(  # noqa: PLR0913
        cls,
        location: str,
        *,
        title: str = "",
        status: str | None = None,
        priority: str | None = None,
        due: str | None = None,
        assignee: str | None = None,
        sub_tasks: list[SubTask] | None = None,
        memo: str | None = None,
        now: datetime | None = None,
    ) -> Task:
        """Build a fresh task; every omitted field gets its default."""

        moment = now or datetime.now()
        stamp = format_timestamp(moment)
        return cls(
            location=location,
            title=title or PLACEHOLDER,
            created=stamp,
            updated=stamp,
            status=status or TaskStatus.NOT_STARTED.value,
            priority=priority or TaskPriority.LOW.value,
            due=due or moment.strftime(DATE_FORMAT),
            assignee=assignee or PLACEHOLDER,
            sub_tasks=list(sub_tasks or []),
            memo=memo or "",
        )

    def touch(self, now: datetime | None = None) -> None:
        """Refresh ``updated`` to the given moment (local now by default)."""

        self.updated = format_timestamp(now or datetime.now())


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def date_part(timestamp: str) -> str | None:
    """Return ``YYYY-MM-DD`` of a task timestamp, or None when it does not parse."""

    try:
        parsed = datetime.strptime(timestamp, TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return parsed.strftime(DATE_FORMAT)
