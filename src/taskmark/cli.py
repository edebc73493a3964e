"""CLI for taskmark: edit task files, manage projects, run the MCP server."""

import json
import sqlite3
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from taskmark.config import DB_FILENAME, PROJECT_COLORS, resolve_data_directory
from taskmark.core.database.schema import get_metadata, migrate_schema, set_metadata
from taskmark.core.markup.mutator import append_line, delete_line, toggle_task
from taskmark.core.markup.parser import node_at, parse
from taskmark.core.markup.render import render_json, render_preview
from taskmark.core.store.projects import ProjectStore
from taskmark.core.store.sessions import SessionStore
from taskmark.core.timer import completed_session, next_session_kind
from taskmark.core.views.analytics import (
    analyze_content,
    completion_rate,
    focus_minutes,
    productivity_score,
    streak,
    weekly_stats,
)
from taskmark.core.views.calendar import (
    add_event,
    delete_event,
    events_on,
    extract_events,
    update_event,
)
from taskmark.core.views.projects import completed_count, task_count
from taskmark.logging_config import configure_logging
from taskmark.models.project import Project, SessionKind

app = typer.Typer(help="taskmark: plain-text task lists with schedules and priorities.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding the project database"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


# --- Task files ---


def _read_document(path: Path) -> str:
    if not path.exists():
        logger.error("File not found: {}", path)
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _write_document(path: Path, before: str, after: str) -> None:
    if after == before:
        logger.debug("No change to {}", path)
        return
    path.write_text(after, encoding="utf-8")
    logger.debug("Wrote {}", path)


@app.command()
def preview(
    path: Path = typer.Argument(..., help="Task document"),
    output_json: JsonOption = False,
) -> None:
    """Show the parsed tasks of a document, with line indices."""
    nodes = parse(_read_document(path))
    if output_json:
        typer.echo(json.dumps({"nodes": render_json(nodes), "count": len(nodes)}, indent=2))
    else:
        typer.echo(render_preview(nodes, now=datetime.now(), line_numbers=True), nl=False)


@app.command()
def toggle(
    path: Path = typer.Argument(..., help="Task document"),
    line: int = typer.Argument(..., help="0-based line index (see 'preview')"),
) -> None:
    """Toggle a task; a plain '- task' is marked done as '- [x] task'."""
    document = _read_document(path)
    node = node_at(document, line)
    if node is None or not node.is_task:
        logger.error("Line {} of {} is not a task", line, path)
        raise typer.Exit(1)

    updated = toggle_task(document, line)
    _write_document(path, document, updated)
    state = "open" if node.completed else "done"
    typer.echo(f"{state}: {node.title}")


@app.command()
def delete(
    path: Path = typer.Argument(..., help="Task document"),
    line: int = typer.Argument(..., help="0-based line index (see 'preview')"),
) -> None:
    """Delete a line. Indices of the following lines shift down by one."""
    document = _read_document(path)
    updated = delete_line(document, line)
    if updated == document:
        logger.error("Line {} does not exist in {}", line, path)
        raise typer.Exit(1)
    _write_document(path, document, updated)


@app.command()
def add(
    path: Path = typer.Argument(..., help="Task document (created if missing)"),
    text: str = typer.Argument(..., help="Line to append, e.g. '- [ ] Call Bob @2024-03-15'"),
) -> None:
    """Append a line to a document."""
    document = path.read_text(encoding="utf-8") if path.exists() else ""
    _write_document(path, document, append_line(document, text))


@app.command()
def stats(
    path: Path = typer.Argument(..., help="Task document"),
    output_json: JsonOption = False,
) -> None:
    """Count tasks by completion, schedule and priority."""
    result = analyze_content(_read_document(path), now=datetime.now())
    rate = completion_rate(result)
    if output_json:
        data = {**asdict(result), "completion_rate": round(rate, 1)}
        typer.echo(json.dumps(data, indent=2))
        return
    typer.echo(f"Tasks:     {result.total} ({result.completed} done, {result.pending} pending)")
    typer.echo(f"Completed: {rate:.0f}%")
    typer.echo(f"Scheduled: {result.scheduled} ({result.overdue} overdue)")
    typer.echo(
        f"Priority:  {result.high_priority} high, {result.medium_priority} medium, "
        f"{result.low_priority} low"
    )


@app.command()
def events(
    path: Path = typer.Argument(..., help="Task document"),
    day: Annotated[
        str | None,
        typer.Option("--day", help="Only events on this day (YYYY-MM-DD)"),
    ] = None,
    output_json: JsonOption = False,
) -> None:
    """List scheduled tasks as calendar events."""
    found = extract_events(_read_document(path))
    if day:
        try:
            found = events_on(found, date.fromisoformat(day))
        except ValueError:
            logger.error("Invalid date: {!r}. Use YYYY-MM-DD.", day)
            raise typer.Exit(1) from None

    if output_json:
        data = {
            "events": [
                {
                    "id": e.id,
                    "line_index": e.line_index,
                    "title": e.title,
                    "when": e.when.isoformat(),
                    "color": e.color,
                }
                for e in found
            ],
            "count": len(found),
        }
        typer.echo(json.dumps(data, indent=2))
        return
    for e in sorted(found, key=lambda e: e.when):
        when = f"{e.when:%Y-%m-%d} {e.time}" if e.time else f"{e.when:%Y-%m-%d}"
        typer.echo(f"  {when:<16}  {e.title}  [line {e.line_index}, {e.color}]")


# --- Projects ---


def _open_db(data_dir: Path | None) -> sqlite3.Connection:
    """Open (and create if needed) the project database."""
    dst = data_dir or resolve_data_directory()
    dst.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(dst / DB_FILENAME))
    migrate_schema(conn)
    return conn


def _resolve_project(store: ProjectStore, name_or_id: str) -> Project:
    project = store.resolve(name_or_id)
    if project is None:
        typer.echo(f"Project '{name_or_id}' not found.")
        raise typer.Exit(1)
    return project


@app.command()
def projects(
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """List projects with task counts."""
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        store.ensure_default()
        rows = store.list_projects()
        if output_json:
            data = {
                "projects": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "tasks": task_count(p.content),
                        "completed": completed_count(p.content),
                    }
                    for p in rows
                ],
                "count": len(rows),
            }
            typer.echo(json.dumps(data, indent=2))
            return
        typer.echo(f"{len(rows)} projects:\n")
        for p in rows:
            typer.echo(
                f"  {p.name} - {completed_count(p.content)}/{task_count(p.content)} done"
                f"  [id={p.id}]"
            )
        last_export = get_metadata(conn, "last_export")
        if last_export:
            typer.echo(f"\nLast export: {last_export} to {get_metadata(conn, 'last_export_dir')}")
    finally:
        conn.close()


@app.command(name="new-project")
def new_project(
    name: str = typer.Argument(..., help="Project name"),
    description: str = typer.Option("", "--description", help="Short description"),
    color: str = typer.Option(PROJECT_COLORS[0], "--color", help="Display color (#RRGGBB)"),
    data_dir: DataDirOption = None,
) -> None:
    """Create a project seeded with a starter task list."""
    conn = _open_db(data_dir)
    try:
        try:
            project = ProjectStore(conn).create(name, description=description, color=color)
        except ValueError as e:
            logger.error("{}", e)
            raise typer.Exit(1) from None
        typer.echo(f"Created {project.name} [id={project.id}]")
    finally:
        conn.close()


@app.command()
def show(
    project: str = typer.Argument(..., help="Project name or id"),
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Preview a project's tasks."""
    conn = _open_db(data_dir)
    try:
        found = _resolve_project(ProjectStore(conn), project)
        nodes = parse(found.content)
        if output_json:
            data = {"project_id": found.id, "name": found.name, "nodes": render_json(nodes)}
            typer.echo(json.dumps(data, indent=2))
        else:
            typer.echo(render_preview(nodes, now=datetime.now(), line_numbers=True), nl=False)
    finally:
        conn.close()


@app.command()
def check(
    project: str = typer.Argument(..., help="Project name or id"),
    line: int = typer.Argument(..., help="0-based line index (see 'show')"),
    data_dir: DataDirOption = None,
) -> None:
    """Toggle a task inside a stored project."""
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        node = node_at(found.content, line)
        if node is None or not node.is_task:
            logger.error("Line {} of project {!r} is not a task", line, found.name)
            raise typer.Exit(1)
        updated = toggle_task(found.content, line)
        store.save_content(found.id, updated)
        typer.echo(f"{'open' if node.completed else 'done'}: {node.title}")
    finally:
        conn.close()


@app.command()
def share(
    project: str = typer.Argument(..., help="Project name or id"),
    data_dir: DataDirOption = None,
) -> None:
    """Print the share token of a project, creating it if needed."""
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        typer.echo(store.share(found.id))
    finally:
        conn.close()


@app.command(name="open-shared")
def open_shared(
    token: str = typer.Argument(..., help="Share token printed by 'share'"),
    data_dir: DataDirOption = None,
) -> None:
    """Open a shared project read-only and count the view."""
    conn = _open_db(data_dir)
    try:
        shared = ProjectStore(conn).open_shared(token)
        if shared is None:
            typer.echo("Shared project not found.")
            raise typer.Exit(1)
        typer.echo(f"{shared.project.name} (views: {shared.view_count})\n")
        nodes = parse(shared.project.content)
        typer.echo(render_preview(nodes, now=datetime.now()), nl=False)
    finally:
        conn.close()


@app.command(name="rename-project")
def rename_project(
    project: str = typer.Argument(..., help="Project name or id"),
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    description: Annotated[
        str | None, typer.Option("--description", help="New description")
    ] = None,
    color: Annotated[str | None, typer.Option("--color", help="New color (#RRGGBB)")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Change a project's name, description or color."""
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        updated = store.update(found.id, name=name, description=description, color=color)
        typer.echo(f"Updated {updated.name} [id={updated.id}]")
    finally:
        conn.close()


@app.command(name="delete-project")
def delete_project(
    project: str = typer.Argument(..., help="Project name or id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a project and its share link."""
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        if not yes:
            typer.confirm(f"Delete project {found.name!r}?", abort=True)
        store.delete(found.id)
        typer.echo(f"Deleted {found.name}")
    finally:
        conn.close()


def _parse_day(day: str) -> date:
    try:
        return date.fromisoformat(day)
    except ValueError:
        logger.error("Invalid date: {!r}. Use YYYY-MM-DD.", day)
        raise typer.Exit(1) from None


TimeOption = Annotated[str | None, typer.Option("--time", help="Start time (HH:MM)")]
ColorOption = Annotated[str | None, typer.Option("--color", help="Event color (#RRGGBB)")]


def _save_event_edit(store: ProjectStore, found: Project, updated: str, what: str) -> None:
    if updated == found.content:
        logger.error("Could not {} event in project {!r}", what, found.name)
        raise typer.Exit(1)
    store.save_content(found.id, updated)


@app.command(name="add-event")
def add_event_command(
    project: str = typer.Argument(..., help="Project name or id"),
    title: str = typer.Argument(..., help="Event title"),
    day: str = typer.Argument(..., help="Day (YYYY-MM-DD)"),
    time: TimeOption = None,
    color: ColorOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Add a calendar event as a scheduled task."""
    when = _parse_day(day)
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        updated = add_event(found.content, title, when, time=time, color=color)
        _save_event_edit(store, found, updated, "add")
        typer.echo(f"Added event: {title.strip()} on {when}")
    finally:
        conn.close()


@app.command(name="edit-event")
def edit_event_command(
    project: str = typer.Argument(..., help="Project name or id"),
    line: int = typer.Argument(..., help="0-based line index (see 'show')"),
    title: str = typer.Argument(..., help="Event title"),
    day: str = typer.Argument(..., help="Day (YYYY-MM-DD)"),
    time: TimeOption = None,
    color: ColorOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Rewrite the event on a line."""
    when = _parse_day(day)
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        updated = update_event(found.content, line, title, when, time=time, color=color)
        _save_event_edit(store, found, updated, "update")
        typer.echo(f"Updated event on line {line}")
    finally:
        conn.close()


@app.command(name="delete-event")
def delete_event_command(
    project: str = typer.Argument(..., help="Project name or id"),
    line: int = typer.Argument(..., help="0-based line index (see 'show')"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete the event on a line."""
    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        _save_event_edit(store, found, delete_event(found.content, line), "delete")
        typer.echo(f"Deleted event on line {line}")
    finally:
        conn.close()


@app.command()
def export(
    outdir: Path = typer.Argument(..., help="Directory for the .md files"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write anything"),
    clean: bool = typer.Option(False, "--clean", help="Remove .md files of deleted projects"),
    data_dir: DataDirOption = None,
) -> None:
    """Export every project as a Markdown file."""
    from taskmark.exporter import MarkdownExporter, export_projects

    conn = _open_db(data_dir)
    try:
        exporter = MarkdownExporter(outdir, dry_run=dry_run)
        written = export_projects(
            exporter, ProjectStore(conn).list_projects(), delete_others=clean
        )
        typer.echo(
            f"Exported {len(written)} projects: {exporter.num_created} new, "
            f"{exporter.num_updated} updated, {exporter.num_same} unchanged"
        )
        if not dry_run:
            set_metadata(conn, "last_export", datetime.now().isoformat(timespec="seconds"))
            set_metadata(conn, "last_export_dir", str(outdir.resolve()))
    finally:
        conn.close()


@app.command()
def generate(
    project: str = typer.Argument(..., help="Project name or id"),
    prompt: str = typer.Argument(..., help="What to plan"),
    data_dir: DataDirOption = None,
) -> None:
    """Generate tasks with AI and append them to a project."""
    from taskmark.api import OpenRouterApi
    from taskmark.core.generate import generate_into_project

    conn = _open_db(data_dir)
    try:
        store = ProjectStore(conn)
        found = _resolve_project(store, project)
        try:
            api = OpenRouterApi()
        except RuntimeError as e:
            logger.error("{}", e)
            raise typer.Exit(1) from None

        result = generate_into_project(store, api, project_id=found.id, prompt=prompt)
        if not result["success"]:
            logger.error("{}", result["error"])
            raise typer.Exit(1)
        typer.echo(result["content"])
        typer.echo(f"\nAdded {result['added_tasks']} tasks to {found.name}.")
    finally:
        conn.close()


# --- Focus sessions ---


@app.command()
def session(
    kind: SessionKind = typer.Option(SessionKind.WORK, "--kind", "-k", help="Session type"),
    task: Annotated[
        str | None,
        typer.Option("--task", help="Task id the session was spent on"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Record a pomodoro session that just finished."""
    conn = _open_db(data_dir)
    try:
        sessions = SessionStore(conn)
        finished = completed_session(kind, end_time=datetime.now(), task_id=task)
        sessions.record(finished)
        done_today = sessions.count_work_sessions_on(finished.start_time.date())
        following = next_session_kind(kind, done_today)
        typer.echo(f"Recorded {kind} session. Work sessions today: {done_today}. Next: {following}")
    finally:
        conn.close()


@app.command()
def focus(
    project: Annotated[
        str | None,
        typer.Option("--project", "-p", help="Project for the productivity score"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show focus time for the last week, the current streak and a productivity score."""
    conn = _open_db(data_dir)
    try:
        history = SessionStore(conn).list_sessions(limit=None)
        today = date.today()
        for daily in weekly_stats(history, today=today):
            typer.echo(f"  {daily.day:%a %m-%d}  {'#' * daily.completed} {daily.completed}")

        minutes = focus_minutes(history)
        days = streak(history, today=today)
        typer.echo(f"\nFocus time: {minutes} min, streak: {days} days")

        if project:
            found = _resolve_project(ProjectStore(conn), project)
            task_stats = analyze_content(found.content, now=datetime.now())
            score = productivity_score(task_stats, minutes, days)
            typer.echo(f"Productivity score ({found.name}): {score}")
    finally:
        conn.close()


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from taskmark.mcp.server import run_mcp_server

    run_mcp_server()
