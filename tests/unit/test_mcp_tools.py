"""Tests for MCP tool core functions."""

import sqlite3

import pytest

from taskmark.core.store.projects import ProjectStore
from taskmark.mcp.server import (
    taskmark_add_task,
    taskmark_delete_line,
    taskmark_list_events,
    taskmark_list_projects,
    taskmark_project_stats,
    taskmark_read_project,
    taskmark_toggle_task,
)
from taskmark.models.project import Project


@pytest.fixture
def launch(store: ProjectStore, sample_document: str) -> Project:
    return store.create("Launch", content=sample_document, project_id="launch")


def _content(conn: sqlite3.Connection, project_id: str) -> str:
    project = ProjectStore(conn).get(project_id)
    assert project is not None
    return project.content


def test_list_projects(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_list_projects(conn)

    assert result["count"] == 1
    (entry,) = result["projects"]
    assert entry["id"] == "launch"
    assert entry["tasks"] == 4
    assert entry["completed"] == 2
    assert entry["shared"] is False


def test_read_project_formats(conn: sqlite3.Connection, launch: Project) -> None:
    raw = taskmark_read_project(conn, project="Launch")
    assert raw["content"] == launch.content

    preview = taskmark_read_project(conn, project="launch", output_format="preview")
    assert "   3  [ ] Write brief" in preview["content"]

    as_json = taskmark_read_project(conn, project="launch", output_format="json")
    assert as_json["nodes"][2]["id"] == "task-3"


def test_unknown_project_returns_error(conn: sqlite3.Connection) -> None:
    assert taskmark_read_project(conn, project="nope") == {"error": "Project 'nope' not found."}
    assert "error" in taskmark_toggle_task(conn, project="nope", line_index=0)
    assert "error" in taskmark_project_stats(conn, project="nope")


def test_toggle_task_persists(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_toggle_task(conn, project="launch", line_index=3)

    assert result["success"] is True
    assert result["task"]["completed"] is True
    assert _content(conn, "launch").split("\n")[3].startswith("- [x] Write brief")


def test_toggle_promotes_plain_task(conn: sqlite3.Connection, launch: Project) -> None:
    taskmark_toggle_task(conn, project="launch", line_index=5)
    assert _content(conn, "launch").split("\n")[5] == "- [x] Book venue @2024-03-20"


def test_toggle_non_task_fails(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_toggle_task(conn, project="launch", line_index=0)

    assert result == {"success": False, "error": "Line 0 is not a task."}
    assert _content(conn, "launch") == launch.content


def test_add_task(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_add_task(conn, project="launch", text="Print flyers @2024-03-22")

    assert result["success"] is True
    assert result["line_index"] == 11
    assert result["task"]["title"] == "Print flyers"
    assert _content(conn, "launch").endswith("\n- [ ] Print flyers @2024-03-22")


def test_add_task_keeps_dash_lines_and_plain_option(
    conn: sqlite3.Connection, launch: Project
) -> None:
    taskmark_add_task(conn, project="launch", text="-- [x] already formatted")
    taskmark_add_task(conn, project="launch", text="no box", checkbox=False)

    lines = _content(conn, "launch").split("\n")
    assert lines[-2:] == ["-- [x] already formatted", "- no box"]


def test_add_empty_task_fails(conn: sqlite3.Connection, launch: Project) -> None:
    assert taskmark_add_task(conn, project="launch", text="  ")["success"] is False


def test_delete_line(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_delete_line(conn, project="launch", line_index=1)

    assert result == {"success": True, "line_count": 10}
    assert _content(conn, "launch").split("\n")[1] == "## Planning"
    assert taskmark_delete_line(conn, project="launch", line_index=99)["success"] is False


def test_project_stats(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_project_stats(conn, project="launch")

    assert result["total"] == 4
    assert result["completed"] == 2
    assert result["scheduled"] == 2
    assert result["priority"] == {"high": 1, "medium": 1, "low": 0}
    assert result["completion_rate"] == 50.0


def test_list_events(conn: sqlite3.Connection, launch: Project) -> None:
    result = taskmark_list_events(conn, project="launch")
    assert [e["title"] for e in result["events"]] == ["Write brief 🔥", "Book venue"]
    assert result["events"][0]["time"] == "14:30"

    on_day = taskmark_list_events(conn, project="launch", day="2024-03-20")
    assert on_day["count"] == 1

    assert "error" in taskmark_list_events(conn, project="launch", day="March 20")
