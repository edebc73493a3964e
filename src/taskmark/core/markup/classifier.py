"""Classify single lines of task markup and serialize nodes back to lines."""

from taskmark.core.markup.grammar import (
    CHECKBOX_RE,
    COLOR_RE,
    DASH_PREFIXES,
    DASH_RE,
    HEADER_RE,
    IGNORED_PREFIXES,
    SCHEDULE_RE,
    detect_priority,
    format_schedule,
    parse_schedule,
)
from taskmark.models.node import Node, NodeKind


def classify(line: str, line_index: int, *, with_color: bool = False) -> Node | None:
    """Classify one raw line.

    Args:
        line: The raw line, without its trailing newline.
        line_index: Position of the line in the document.
        with_color: Also extract ``color:#RRGGBB`` tokens (calendar lines).

    Returns:
        The parsed node, or None for blank, ``---`` and ``*`` lines.
    """
    trimmed = line.strip()
    if not trimmed or trimmed.startswith(IGNORED_PREFIXES):
        return None

    header = HEADER_RE.match(trimmed)
    if header:
        return Node(
            kind=NodeKind.HEADER,
            line_index=line_index,
            level=len(header.group(1)),
            title=trimmed[header.end() :],
            raw=line,
        )

    checkbox = CHECKBOX_RE.match(trimmed)
    if checkbox:
        return _task(
            line,
            line_index,
            trimmed[checkbox.end() :],
            level=1 if trimmed.startswith("--") else 0,
            completed=checkbox.group(2) == "x",
            checkbox=True,
            with_color=with_color,
        )

    if trimmed.startswith(DASH_PREFIXES):
        return _task(
            line,
            line_index,
            DASH_RE.sub("", trimmed, count=1),
            level=1 if trimmed.startswith("-- ") else 0,
            completed=False,
            checkbox=False,
            with_color=with_color,
        )

    return Node(kind=NodeKind.TEXT, line_index=line_index, level=0, title=trimmed, raw=line)


def _task(
    line: str,
    line_index: int,
    text: str,
    *,
    level: int,
    completed: bool,
    checkbox: bool,
    with_color: bool,
) -> Node:
    # Schedule and color tokens are removed from the title; priority markers stay.
    schedule = None
    match = SCHEDULE_RE.search(text)
    if match:
        schedule = parse_schedule(match.group(1))
        text = text[: match.start()] + text[match.end() :]

    color = None
    if with_color:
        match = COLOR_RE.search(text)
        if match:
            color = match.group(1)
            text = text[: match.start()] + text[match.end() :]

    return Node(
        kind=NodeKind.TASK,
        line_index=line_index,
        level=level,
        title=text.strip(),
        raw=line,
        completed=completed,
        checkbox=checkbox,
        priority=detect_priority(text),
        schedule=schedule,
        color=color,
    )


def serialize(node: Node) -> str:
    """Write a node back as a line, without leading indentation.

    Classifying the result yields a node equal in kind, level, completion,
    priority, schedule, color and title.
    """
    if node.kind is NodeKind.HEADER:
        marker = "#" * max(node.level, 1)
        return f"{marker} {node.title}" if node.title else marker

    if node.kind is NodeKind.TEXT:
        return node.title

    prefix = "--" if node.level else "-"
    if node.checkbox:
        prefix += " [x]" if node.completed else " [ ]"
    body = join_task_body(
        node.title,
        schedule=f"@{format_schedule(node.schedule)}" if node.schedule is not None else None,
        color=f"color:{node.color}" if node.color else None,
    )
    return f"{prefix} {body}" if body else prefix


def join_task_body(title: str, *, schedule: str | None = None, color: str | None = None) -> str:
    """Join a task title with its schedule and color tokens.

    Tokens normally follow the title. A token goes in front of the title when
    the title itself holds a token of the same kind, so it stays the first match.
    """
    before: list[str] = []
    after: list[str] = []
    for token, pattern in ((schedule, SCHEDULE_RE), (color, COLOR_RE)):
        if token:
            (before if pattern.search(title) else after).append(token)
    return " ".join(part for part in (*before, title, *after) if part)
