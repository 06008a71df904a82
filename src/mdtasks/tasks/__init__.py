"""Task records, their markdown codec and the file-backed repository."""

from mdtasks.tasks.codec import decode, encode
from mdtasks.tasks.editing import TaskChanges, apply_changes
from mdtasks.tasks.models import SubTask, Task, TaskPriority, TaskStatus
from mdtasks.tasks.ordering import SortOption, sort_tasks
from mdtasks.tasks.repository import TaskFileError, TaskFileFilter, TaskRepository

__all__ = [
    "SortOption",
    "SubTask",
    "Task",
    "TaskChanges",
    "TaskFileError",
    "TaskFileFilter",
    "TaskPriority",
    "TaskRepository",
    "TaskStatus",
    "apply_changes",
    "decode",
    "encode",
    "sort_tasks",
]
