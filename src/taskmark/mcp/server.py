"""MCP server exposing taskmark projects, tasks and statistics."""

import asyncio
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from taskmark.config import DB_FILENAME, resolve_data_directory
from taskmark.core.database.schema import migrate_schema
from taskmark.core.markup.mutator import append_line, delete_line, toggle_task
from taskmark.core.markup.parser import node_at, parse
from taskmark.core.markup.render import node_to_dict, render_json, render_preview
from taskmark.core.store.projects import ProjectStore
from taskmark.core.views.analytics import analyze_content, completion_rate
from taskmark.core.views.calendar import events_on, extract_events
from taskmark.core.views.projects import completed_count, task_count
from taskmark.models.project import Project


def _resolve(conn: sqlite3.Connection, project: str) -> Project | None:
    return ProjectStore(conn).resolve(project)


def _not_found(project: str) -> dict[str, Any]:
    return {"error": f"Project '{project}' not found."}


# --- Core functions (testable without MCP context) ---


def taskmark_list_projects(conn: sqlite3.Connection) -> dict[str, Any]:
    """List all projects with task counters."""
    projects = ProjectStore(conn).list_projects()
    return {
        "projects": [
            {
                "id": p.id,
                "name": p.name,
                "description": p.description,
                "color": p.color,
                "tasks": task_count(p.content),
                "completed": completed_count(p.content),
                "shared": p.share_token is not None,
            }
            for p in projects
        ],
        "count": len(projects),
    }


def taskmark_read_project(
    conn: sqlite3.Connection,
    *,
    project: str,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a project's document as raw markdown, a preview, or parsed JSON nodes.

    Args:
        project: Project name or id.
        output_format: "markdown" (raw text), "preview" or "json".
    """
    found = _resolve(conn, project)
    if found is None:
        return _not_found(project)

    output: dict[str, Any] = {"project_id": found.id, "name": found.name}
    if output_format == "json":
        output["nodes"] = render_json(parse(found.content))
    elif output_format == "preview":
        output["content"] = render_preview(
            parse(found.content), now=datetime.now(), line_numbers=True
        )
    else:
        output["content"] = found.content
    return output


def taskmark_toggle_task(
    conn: sqlite3.Connection,
    *,
    project: str,
    line_index: int,
) -> dict[str, Any]:
    """Toggle the task on a line of a project's document.

    Args:
        project: Project name or id.
        line_index: 0-based line index, as reported by read/preview.
    """
    found = _resolve(conn, project)
    if found is None:
        return _not_found(project)

    node = node_at(found.content, line_index)
    if node is None or not node.is_task:
        return {"success": False, "error": f"Line {line_index} is not a task."}

    content = toggle_task(found.content, line_index)
    ProjectStore(conn).save_content(found.id, content)
    toggled = node_at(content, line_index)
    if toggled is None:
        return {"success": False, "error": f"Line {line_index} is no longer a task."}
    return {"success": True, "task": node_to_dict(toggled)}


def taskmark_add_task(
    conn: sqlite3.Connection,
    *,
    project: str,
    text: str,
    checkbox: bool = True,
) -> dict[str, Any]:
    """Append a task line to a project's document.

    Args:
        project: Project name or id.
        text: Task text; written as-is if it already starts with a dash.
        checkbox: Write the task as ``- [ ]`` rather than ``- ``.
    """
    found = _resolve(conn, project)
    if found is None:
        return _not_found(project)
    if not text.strip():
        return {"success": False, "error": "No task text provided."}

    line = text.strip()
    if not line.startswith("-"):
        line = f"- [ ] {line}" if checkbox else f"- {line}"

    content = append_line(found.content, line)
    ProjectStore(conn).save_content(found.id, content)
    line_index = len(content.split("\n")) - 1
    node = node_at(content, line_index)
    return {
        "success": True,
        "line_index": line_index,
        "task": node_to_dict(node) if node else None,
    }


def taskmark_delete_line(
    conn: sqlite3.Connection,
    *,
    project: str,
    line_index: int,
) -> dict[str, Any]:
    """Delete a line from a project's document. Later line indices shift down by one."""
    found = _resolve(conn, project)
    if found is None:
        return _not_found(project)

    content = delete_line(found.content, line_index)
    if content == found.content:
        return {"success": False, "error": f"Line {line_index} does not exist."}
    ProjectStore(conn).save_content(found.id, content)
    return {"success": True, "line_count": len(content.split("\n"))}


def taskmark_project_stats(conn: sqlite3.Connection, *, project: str) -> dict[str, Any]:
    """Task statistics for a project."""
    found = _resolve(conn, project)
    if found is None:
        return _not_found(project)

    stats = analyze_content(found.content, now=datetime.now())
    return {
        "project_id": found.id,
        "total": stats.total,
        "completed": stats.completed,
        "pending": stats.pending,
        "overdue": stats.overdue,
        "scheduled": stats.scheduled,
        "priority": {
            "high": stats.high_priority,
            "medium": stats.medium_priority,
            "low": stats.low_priority,
        },
        "completion_rate": round(completion_rate(stats), 1),
    }


def taskmark_list_events(
    conn: sqlite3.Connection,
    *,
    project: str,
    day: str | None = None,
) -> dict[str, Any]:
    """List calendar events (scheduled tasks) of a project.

    Args:
        project: Project name or id.
        day: Only events on this day (YYYY-MM-DD).
    """
    found = _resolve(conn, project)
    if found is None:
        return _not_found(project)

    events = extract_events(found.content)
    if day:
        try:
            events = events_on(events, date.fromisoformat(day))
        except ValueError:
            return {"error": f"Invalid date: {day!r}. Use YYYY-MM-DD."}

    return {
        "events": [
            {
                "id": e.id,
                "line_index": e.line_index,
                "title": e.title,
                "when": e.when.isoformat(),
                "time": e.time,
                "color": e.color,
            }
            for e in events
        ],
        "count": len(events),
    }


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    conn: sqlite3.Connection
    data_dir: Path
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open database on startup, close on shutdown."""
    data_dir = resolve_data_directory()
    data_dir.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(data_dir / DB_FILENAME))
    try:
        migrate_schema(conn)
        ProjectStore(conn).ensure_default()
        logger.info("taskmark MCP server using {}", data_dir / DB_FILENAME)
        yield ServerContext(conn=conn, data_dir=data_dir)
    finally:
        conn.close()


mcp_server = FastMCP(
    "taskmark",
    instructions="""\
taskmark projects are plain-text task documents. Each line is a header (#),
a task (- or -- for subtasks, optionally with [ ] / [x]), or free text.
Schedules are written @YYYY-MM-DD or @YYYY-MM-DD HH:MM.

Tasks are addressed by 0-based line index. Indices change when lines are
added or deleted, so read the project again before every toggle or delete.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def taskmark_list_projects_tool(ctx: Context) -> dict[str, Any]:
    """List all projects with task and completion counts."""
    return taskmark_list_projects(_ctx(ctx).conn)


@mcp_server.tool()
async def taskmark_read_project_tool(
    ctx: Context,
    project: str,
    output_format: str = "preview",
) -> dict[str, Any]:
    """Read a project's tasks.

    Args:
        project: Project name or id.
        output_format: "preview" (line-numbered), "markdown" (raw) or "json".
    """
    return taskmark_read_project(_ctx(ctx).conn, project=project, output_format=output_format)


@mcp_server.tool()
async def taskmark_toggle_task_tool(ctx: Context, project: str, line_index: int) -> dict[str, Any]:
    """Toggle a task's completion. A plain "- task" becomes "- [x] task".

    Args:
        project: Project name or id.
        line_index: Line index from taskmark_read_project_tool.
    """
    async with _ctx(ctx).write_lock:
        return taskmark_toggle_task(_ctx(ctx).conn, project=project, line_index=line_index)


@mcp_server.tool()
async def taskmark_add_task_tool(
    ctx: Context,
    project: str,
    text: str,
    checkbox: bool = True,
) -> dict[str, Any]:
    """Append a task to a project.

    Args:
        project: Project name or id.
        text: Task text, may include @YYYY-MM-DD and priority markers.
        checkbox: Add as a "- [ ]" checkbox task.
    """
    async with _ctx(ctx).write_lock:
        return taskmark_add_task(_ctx(ctx).conn, project=project, text=text, checkbox=checkbox)


@mcp_server.tool()
async def taskmark_delete_line_tool(ctx: Context, project: str, line_index: int) -> dict[str, Any]:
    """Delete a line from a project's document.

    Args:
        project: Project name or id.
        line_index: Line index from taskmark_read_project_tool.
    """
    async with _ctx(ctx).write_lock:
        return taskmark_delete_line(_ctx(ctx).conn, project=project, line_index=line_index)


@mcp_server.tool()
async def taskmark_project_stats_tool(ctx: Context, project: str) -> dict[str, Any]:
    """Completion, schedule and priority counters for a project."""
    return taskmark_project_stats(_ctx(ctx).conn, project=project)


@mcp_server.tool()
async def taskmark_list_events_tool(
    ctx: Context,
    project: str,
    day: str | None = None,
) -> dict[str, Any]:
    """List scheduled tasks of a project as calendar events.

    Args:
        project: Project name or id.
        day: Only events on this day (YYYY-MM-DD).
    """
    return taskmark_list_events(_ctx(ctx).conn, project=project, day=day)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from taskmark.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
