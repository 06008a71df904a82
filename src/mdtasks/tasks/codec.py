"""Markdown codec for task documents.

Decoding is a single pass over the document lines with a small cursor state.
Lines end at ``\n`` only (a trailing ``\r`` is dropped), so other Unicode line
breaks inside a field stay part of that field.
A line *containing* a section marker opens that section, any other level-2
heading closes it. Metadata bullets and the title are only read outside the
sub-task and memo sections. Missing or broken fields fall back to defaults, so
``decode`` never raises for a malformed document.

Encoding always renders the same fixed layout. Runs of ``#`` inside free text
are escaped (``##`` -> ``#\\#``) so user text can never open or close a section
on the next decode. An empty memo is written as the ``-`` placeholder; a memo
that is itself a run of backslashes followed by ``-`` gets one more backslash,
so both round-trip.
"""

from __future__ import annotations

import re
from enum import Enum

from mdtasks.tasks.models import PLACEHOLDER, SubTask, Task, TaskPriority, TaskStatus, date_part

TITLE_PREFIX = "# "
SECTION_PREFIX = "## "
METADATA_MARKER = "## Metadata"
SUB_TASKS_MARKER = "## Sub-tasks"
MEMO_MARKER = "## Memo"
ANNOTATION_OPEN = "\uff08"  # full-width open parenthesis only
EMPTY_SUB_TASKS_LINE = "- [ ] -"

METADATA_KEYS: tuple[str, ...] = ("created", "updated", "status", "priority", "due", "assignee")

_METADATA_RE = re.compile(r"^-\s*(created|updated|status|priority|due|assignee):\s*(.*)$")
_CHECKBOX_RE = re.compile(r"^-\s*\[([ xX])\]\s*(.+)$")
_HASH_ESCAPE_RE = re.compile(r"#(\\*)(?=#)")
_HASH_UNESCAPE_RE = re.compile(r"#(\\*)\\(?=#)")
_PLACEHOLDER_LIKE_RE = re.compile(r"\\*-")
_LINE_BREAK_RE = re.compile(r"\r\n|[\r\n]")


class _Cursor(Enum):
    SCANNING = "scanning"
    IN_SUB_TASKS = "in_sub_tasks"
    IN_MEMO = "in_memo"


def decode(text: str, location: str, *, fallback_date: str | None = None) -> Task:
    """Parse a task document. Never raises on malformed content."""

    title: str | None = None
    metadata: dict[str, str] = {}
    sub_tasks: list[SubTask] = []
    memo_lines: list[str] = []
    seen_sections: set[_Cursor] = set()
    cursor = _Cursor.SCANNING

    for line in _split_lines(text):
        opened = _opened_section(line, seen_sections)
        if opened is not None:
            cursor = opened
            seen_sections.add(opened)
            continue
        if line.startswith(SECTION_PREFIX):
            cursor = _Cursor.SCANNING
            continue

        if cursor is _Cursor.IN_SUB_TASKS:
            sub_task = _parse_checkbox(line)
            if sub_task is not None:
                sub_tasks.append(sub_task)
        elif cursor is _Cursor.IN_MEMO:
            if line.strip():
                memo_lines.append(unescape(line))
        elif title is None and line.startswith(TITLE_PREFIX):
            title = unescape(line[len(TITLE_PREFIX) :].strip())
        else:
            _collect_metadata(line, metadata)

    created = metadata.get("created", PLACEHOLDER)
    due = metadata.get("due") or date_part(created) or fallback_date or PLACEHOLDER
    memo = _decode_memo("\n".join(memo_lines))

    return Task(
        location=location,
        title=title or PLACEHOLDER,
        created=created,
        updated=metadata.get("updated", PLACEHOLDER),
        status=metadata.get("status", TaskStatus.NOT_STARTED.value),
        priority=metadata.get("priority", TaskPriority.LOW.value),
        due=due,
        assignee=metadata.get("assignee", PLACEHOLDER),
        sub_tasks=sub_tasks,
        memo=memo,
    )


def encode(task: Task) -> str:
    """Render a task in the canonical document layout."""

    lines = [
        f"{TITLE_PREFIX}{_inline(task.title)}",
        "",
        METADATA_MARKER,
        "",
    ]
    for key in METADATA_KEYS:
        lines.append(f"- {key}: {_inline(getattr(task, key))}")
    lines.append("")

    lines.append(SUB_TASKS_MARKER)
    lines.append("")
    if task.sub_tasks:
        for sub_task in task.sub_tasks:
            checkbox = "[x]" if sub_task.completed else "[ ]"
            lines.append(f"- {checkbox} {_inline(sub_task.text)}")
    else:
        lines.append(EMPTY_SUB_TASKS_LINE)
    lines.append("")

    lines.append(MEMO_MARKER)
    lines.append("")
    lines.append(_encode_memo(task.memo))
    lines.append("")

    return "\n".join(lines)


def escape(value: str) -> str:
    """Break up every ``#`` run so free text cannot look like a section heading."""

    return _HASH_ESCAPE_RE.sub(lambda match: f"#{match.group(1)}\\", value)


def unescape(value: str) -> str:
    return _HASH_UNESCAPE_RE.sub(lambda match: f"#{match.group(1)}", value)


def _opened_section(line: str, seen_sections: set[_Cursor]) -> _Cursor | None:
    if SUB_TASKS_MARKER in line and _Cursor.IN_SUB_TASKS not in seen_sections:
        return _Cursor.IN_SUB_TASKS
    if MEMO_MARKER in line and _Cursor.IN_MEMO not in seen_sections:
        return _Cursor.IN_MEMO
    return None


def _parse_checkbox(line: str) -> SubTask | None:
    match = _CHECKBOX_RE.match(line)
    if match is None:
        return None
    text = unescape(match.group(2).strip())
    if not text or text == PLACEHOLDER:
        return None
    return SubTask(text=text, completed=match.group(1) != " ")


def _collect_metadata(line: str, metadata: dict[str, str]) -> None:
    match = _METADATA_RE.match(line)
    if match is None:
        return
    key = match.group(1)
    if key in metadata:
        return
    value = match.group(2).split(ANNOTATION_OPEN, 1)[0].strip()
    if value:
        metadata[key] = unescape(value)


def _inline(value: str) -> str:
    # title, metadata values and sub-task text must stay on one line
    return escape(_LINE_BREAK_RE.sub(" ", value))


def _split_lines(text: str) -> list[str]:
    return [line.removesuffix("\r") for line in text.split("\n")]


def _encode_memo(memo: str) -> str:
    if not memo:
        return PLACEHOLDER
    if _PLACEHOLDER_LIKE_RE.fullmatch(memo.strip()):
        memo = memo.replace(PLACEHOLDER, f"\\{PLACEHOLDER}", 1)
    return escape(memo)


def _decode_memo(memo: str) -> str:
    stripped = memo.strip()
    if stripped == PLACEHOLDER:
        return ""
    if _PLACEHOLDER_LIKE_RE.fullmatch(stripped):
        return memo.replace(f"\\{PLACEHOLDER}", PLACEHOLDER, 1)
    return memo
