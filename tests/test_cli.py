from __future__ import annotations

from pathlib import Path

import allure
from click.testing import CliRunner

from mdtasks.main import mdtasks
from mdtasks.sync.controllers import SyncCliController
from mdtasks.sync.orchestrator import CONFLICT_MESSAGE, SyncOrchestrator, SyncOutcome
from mdtasks.sync.process import CommandTimeoutError
from mdtasks.tasks.codec import decode

pytestmark = [
    allure.epic("Command Line"),
    allure.feature("mdtasks CLI"),
]


def test_new_list_set_status_and_delete(tmp_path: Path, clean_env) -> None:
    runner = CliRunner()

    created = runner.invoke(
        mdtasks,
        [
            "tasks",
            "new",
            "--folder",
            str(tmp_path),
            "--title",
            "Order laptops",
            "--priority",
            "high",
            "--sub-task",
            "Get quotes",
            "--sub-task",
            "Approve budget",
        ],
    )
    assert created.exit_code == 0, created.output
    assert "Created task:" in created.output
    [task_file] = [path for path in tmp_path.iterdir() if path.suffix == ".md"]

    listed = runner.invoke(mdtasks, ["tasks", "list", "--folder", str(tmp_path)])
    assert listed.exit_code == 0, listed.output
    assert "[not started] Order laptops priority=high" in listed.output
    assert "sub_tasks=0/2" in listed.output

    updated = runner.invoke(
        mdtasks,
        ["tasks", "set-status", "--file", str(task_file), "--status", "in progress"],
    )
    assert updated.exit_code == 0, updated.output
    assert "not started -> in progress" in updated.output
    task = decode(task_file.read_text(encoding="utf-8"), str(task_file))
    assert task.status == "in progress"
    assert [sub_task.text for sub_task in task.sub_tasks] == ["Get quotes", "Approve budget"]

    filtered = runner.invoke(
        mdtasks,
        ["tasks", "list", "--folder", str(tmp_path), "--status", "done"],
    )
    assert "No tasks in" in filtered.output

    deleted = runner.invoke(mdtasks, ["tasks", "delete", "--file", str(task_file)])
    assert deleted.exit_code == 0, deleted.output
    assert not task_file.exists()


def test_show_prints_canonical_document(tmp_path: Path, clean_env) -> None:
    task_file = tmp_path / "loose.md"
    task_file.write_text("#  Loose title\n- status: done\n", encoding="utf-8")

    result = CliRunner().invoke(mdtasks, ["tasks", "show", "--file", str(task_file)])

    assert result.exit_code == 0, result.output
    assert result.output.startswith("# Loose title\n\n## Metadata\n")
    assert "- status: done" in result.output


def test_init_folder_and_missing_file_error(tmp_path: Path, clean_env) -> None:
    runner = CliRunner()

    created = runner.invoke(
        mdtasks,
        ["tasks", "init-folder", "--parent", str(tmp_path), "--name", "board"],
    )
    assert created.exit_code == 0, created.output
    assert (tmp_path / "board" / "template.md").exists()

    again = runner.invoke(
        mdtasks,
        ["tasks", "init-folder", "--parent", str(tmp_path), "--name", "board"],
    )
    assert again.exit_code == 1
    assert "already exists" in again.output

    missing = runner.invoke(mdtasks, ["tasks", "delete", "--file", str(tmp_path / "x.md")])
    assert missing.exit_code == 1
    assert "Failed to delete" in missing.output


def test_git_check_reports_repository(tmp_path: Path, clean_env) -> None:
    (tmp_path / ".git").mkdir()

    result = CliRunner().invoke(mdtasks, ["git", "check", "--folder", str(tmp_path)])

    assert result.exit_code == 0
    assert "is inside a git repository" in result.output


def test_git_sync_prints_outcome(tmp_path: Path, clean_env, monkeypatch) -> None:
    branches: list[str] = []

    def _run(_self: SyncOrchestrator, branch: str) -> SyncOutcome:
        branches.append(branch)
        return SyncOutcome(
            pulled=True,
            pushed=False,
            conflicts=False,
            message="Fetched remote changes.",
        )

    monkeypatch.setattr(SyncOrchestrator, "run", _run)
    monkeypatch.setenv("MDTASKS_GIT_BRANCH", "tasks")

    result = CliRunner().invoke(mdtasks, ["git", "sync", "--folder", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert branches == ["tasks"]
    assert "Fetched remote changes." in result.output
    assert "branch=tasks pulled=yes pushed=no conflicts=no" in result.output


def test_git_sync_conflict_exits_with_status_two(tmp_path: Path, clean_env, monkeypatch) -> None:
    def _run(_self: SyncOrchestrator, _branch: str) -> SyncOutcome:
        return SyncOutcome(pulled=False, pushed=False, conflicts=True, message=CONFLICT_MESSAGE)

    monkeypatch.setattr(SyncOrchestrator, "run", _run)

    result = CliRunner().invoke(
        mdtasks,
        ["git", "sync", "--folder", str(tmp_path), "--branch", "main"],
    )

    assert result.exit_code == 2
    assert CONFLICT_MESSAGE in result.output


def test_git_sync_error_is_reported(tmp_path: Path, clean_env, monkeypatch) -> None:
    def _sync(_self: SyncCliController, _command):
        raise CommandTimeoutError("git pull timed out after 120s", args=["git", "pull"])

    monkeypatch.setattr(SyncCliController, "sync", _sync)

    result = CliRunner().invoke(mdtasks, ["git", "sync", "--folder", str(tmp_path)])

    assert result.exit_code == 1
    assert "git pull timed out after 120s" in result.output


def test_invalid_configuration_is_reported(tmp_path: Path, clean_env, monkeypatch) -> None:
    monkeypatch.setenv("MDTASKS_GIT_TIMEOUT_SECONDS", "0")

    result = CliRunner().invoke(mdtasks, ["git", "sync", "--folder", str(tmp_path)])

    assert result.exit_code == 1
    assert "MDTASKS_GIT_TIMEOUT_SECONDS must be > 0." in result.output


def _write(folder: Path, name: str, title: str, *, created: str, due: str) -> Path:
    path = folder / name
    path.write_text(
        f"# {title}\n\n## Metadata\n\n- created: {created}\n- due: {due}\n",
        encoding="utf-8",
    )
    return path


def test_list_sort_option(tmp_path: Path, clean_env) -> None:
    _write(tmp_path, "a.md", "Older", created="2026-01-01-09:00", due="2026-03-01")
    _write(tmp_path, "b.md", "Newer", created="2026-02-01-09:00", due="-")
    _write(tmp_path, "c.md", "Middle", created="2026-01-15-09:00", due="2026-02-01")
    runner = CliRunner()

    default = runner.invoke(mdtasks, ["tasks", "list", "--folder", str(tmp_path)])
    by_due = runner.invoke(
        mdtasks,
        ["tasks", "list", "--folder", str(tmp_path), "--sort", "due-asc"],
    )
    invalid = runner.invoke(
        mdtasks,
        ["tasks", "list", "--folder", str(tmp_path), "--sort", "title"],
    )

    assert default.exit_code == 0, default.output
    assert [line.split("] ")[1].split(" ")[0] for line in default.output.splitlines()] == [
        "Newer",
        "Middle",
        "Older",
    ]
    assert [line.split("] ")[1].split(" ")[0] for line in by_due.output.splitlines()] == [
        "Middle",
        "Older",
        "Newer",
    ]
    assert invalid.exit_code == 2


def test_edit_updates_fields_and_sub_tasks(tmp_path: Path, clean_env) -> None:
    runner = CliRunner()
    runner.invoke(
        mdtasks,
        [
            "tasks",
            "new",
            "--folder",
            str(tmp_path),
            "--title",
            "Plan offsite",
            "--sub-task",
            "Book venue",
            "--sub-task",
            "Send invites",
        ],
    )
    [task_file] = [path for path in tmp_path.iterdir() if path.suffix == ".md"]

    edited = runner.invoke(
        mdtasks,
        [
            "tasks",
            "edit",
            "--file",
            str(task_file),
            "--priority",
            "medium",
            "--assignee",
            "Jo",
            "--toggle-sub-task",
            "1",
            "--remove-sub-task",
            "2",
            "--add-sub-task",
            "Order catering",
            "--memo",
            "Budget approved",
        ],
    )

    assert edited.exit_code == 0, edited.output
    assert f"Updated task: {task_file}" in edited.output
    assert "priority: low -> medium" in edited.output
    task = decode(task_file.read_text(encoding="utf-8"), str(task_file))
    assert (task.priority, task.assignee, task.memo) == ("medium", "Jo", "Budget approved")
    assert [(item.text, item.completed) for item in task.sub_tasks] == [
        ("Book venue", True),
        ("Order catering", False),
    ]

    unchanged = runner.invoke(
        mdtasks,
        ["tasks", "edit", "--file", str(task_file), "--assignee", "Jo"],
    )
    assert unchanged.exit_code == 0
    assert "No changes" in unchanged.output

    out_of_range = runner.invoke(
        mdtasks,
        ["tasks", "edit", "--file", str(task_file), "--toggle-sub-task", "9"],
    )
    assert out_of_range.exit_code == 1
    assert "out of range" in out_of_range.output
