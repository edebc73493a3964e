"""Calendar events derived from scheduled task lines."""

from datetime import date, datetime

from taskmark.config import EVENT_COLORS
from taskmark.core.markup.grammar import SCHEDULE_DATE_FORMAT, SCHEDULE_RE, schedule_time
from taskmark.core.markup.mutator import append_line, delete_line, set_line
from taskmark.core.markup.parser import tasks
from taskmark.models.project import ScheduledEvent

UNTITLED_EVENT = "Untitled Task"


def extract_events(document: str) -> list[ScheduledEvent]:
    """Turn every task with a valid schedule into an event.

    Events without a ``color:`` token get a palette color chosen by line index.
    """
    events: list[ScheduledEvent] = []
    for node in tasks(document, with_color=True):
        if node.schedule is None:
            continue
        match = SCHEDULE_RE.search(node.raw)
        events.append(
            ScheduledEvent(
                id=node.node_id,
                line_index=node.line_index,
                title=node.title or UNTITLED_EVENT,
                when=node.schedule,
                color=node.color or EVENT_COLORS[node.line_index % len(EVENT_COLORS)],
                time=schedule_time(match.group(1)) if match else None,
            )
        )
    return events


def events_on(events: list[ScheduledEvent], day: date) -> list[ScheduledEvent]:
    return [e for e in events if e.when.date() == day]


def upcoming(events: list[ScheduledEvent], *, now: datetime) -> list[ScheduledEvent]:
    return [e for e in events if e.when > now]


def format_event_line(
    title: str,
    day: date,
    *,
    time: str | None = None,
    color: str | None = None,
) -> str:
    """Build a task line for a calendar event.

    The color token is left out for the default (first palette) color.
    """
    line = f"- {title.strip()} @{day.strftime(SCHEDULE_DATE_FORMAT)}"
    if time:
        line += f" {time}"
    if color and color != EVENT_COLORS[0]:
        line += f" color:{color}"
    return line


def add_event(
    document: str,
    title: str,
    day: date,
    *,
    time: str | None = None,
    color: str | None = None,
) -> str:
    """Append an event line; blank titles leave the document unchanged."""
    if not title.strip():
        return document
    return append_line(document, format_event_line(title, day, time=time, color=color))


def _has_line(document: str, line_index: int) -> bool:
    lines = document.split("\n")
    return 0 <= line_index < len(lines) and bool(lines[line_index])


def update_event(
    document: str,
    line_index: int,
    title: str,
    day: date,
    *,
    time: str | None = None,
    color: str | None = None,
) -> str:
    """Rewrite an event's line; empty or missing lines are left alone."""
    if not _has_line(document, line_index):
        return document
    return set_line(document, line_index, format_event_line(title, day, time=time, color=color))


def delete_event(document: str, line_index: int) -> str:
    """Remove an event's line; empty or missing lines are left alone."""
    if not _has_line(document, line_index):
        return document
    return delete_line(document, line_index)
