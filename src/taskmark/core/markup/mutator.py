"""Rewrite task documents one line at a time.

Every function takes the full document text and returns the full new text.
Lines other than the target are returned byte-for-byte. Invalid line indices
leave the document unchanged.

Structural edits (delete, insert) shift the indices of every later line, so
callers must re-parse before issuing another index-based edit.
"""

import re
from datetime import datetime

from taskmark.core.markup.classifier import classify, join_task_body
from taskmark.core.markup.grammar import (
    CHECKBOX_RE,
    COLOR_RE,
    DASH_PREFIXES,
    DASH_RE,
    SCHEDULE_RE,
    format_schedule,
    leading_whitespace,
)
from taskmark.models.node import Node, NodeKind


def _in_range(lines: list[str], line_index: int) -> bool:
    return 0 <= line_index < len(lines)


def set_line(document: str, line_index: int, new_line: str) -> str:
    """Replace one line."""
    lines = document.split("\n")
    if not _in_range(lines, line_index):
        return document
    lines[line_index] = new_line
    return "\n".join(lines)


def delete_line(document: str, line_index: int) -> str:
    """Remove one line."""
    lines = document.split("\n")
    if not _in_range(lines, line_index):
        return document
    del lines[line_index]
    return "\n".join(lines)


def insert_line(document: str, line_index: int, text: str) -> str:
    """Insert a line before ``line_index``; the line count appends."""
    if not document:
        return text if line_index == 0 else document
    lines = document.split("\n")
    if not 0 <= line_index <= len(lines):
        return document
    lines.insert(line_index, text)
    return "\n".join(lines)


def append_line(document: str, text: str) -> str:
    """Append a line at the end of the document."""
    return f"{document}\n{text}" if document else text


def append_block(document: str, block: str) -> str:
    """Append a block of lines, separated from existing content by a blank line."""
    return f"{document}\n\n{block}" if document else block


def _promoted(line: str) -> str | None:
    indent = leading_whitespace(line)
    body = line[len(indent) :]
    for prefix in reversed(DASH_PREFIXES):
        if body.startswith(prefix):
            return f"{indent}{prefix}[x] {body[len(prefix):]}"
    return None


def promote_task(document: str, line_index: int) -> str:
    """Turn a plain ``- task`` line into a completed ``- [x] task`` line."""
    lines = document.split("\n")
    if not _in_range(lines, line_index):
        return document
    node = classify(lines[line_index], line_index)
    if node is None or node.kind is not NodeKind.TASK or node.checkbox:
        return document
    promoted = _promoted(lines[line_index])
    if promoted is None:
        return document
    lines[line_index] = promoted
    return "\n".join(lines)


def toggle_task(document: str, line_index: int) -> str:
    """Toggle a task's completion.

    Checkbox tasks flip between ``[ ]`` and ``[x]``. A plain dash task has no
    unchecked state to move to, so one toggle promotes it straight to ``[x]``.
    Headers and text lines are left alone.
    """
    lines = document.split("\n")
    if not _in_range(lines, line_index):
        return document
    line = lines[line_index]
    node = classify(line, line_index)
    if node is None or node.kind is not NodeKind.TASK:
        return document

    if not node.checkbox:
        return promote_task(document, line_index)

    offset = len(leading_whitespace(line))
    match = CHECKBOX_RE.match(line[offset:])
    if match is None:
        return document
    mark = " " if match.group(2) == "x" else "x"
    start = offset + match.start(2)
    lines[line_index] = line[:start] + mark + line[start + 1 :]
    return "\n".join(lines)


def _split_task(line: str) -> tuple[str, str, str]:
    """Split a task line into indent, prefix (dashes and checkbox) and body."""
    indent = leading_whitespace(line)
    rest = line[len(indent) :]
    match = CHECKBOX_RE.match(rest) or DASH_RE.match(rest)
    end = match.end() if match else 0
    return indent, rest[:end], rest[end:]


def _splice(body: str, match: re.Match[str] | None, token: str | None) -> str:
    """Replace the matched token in ``body``, append it, or drop it (``token`` None)."""
    if match is None:
        if token is None:
            return body
        return f"{body.rstrip()} {token}" if body.strip() else token
    if token is not None:
        return body[: match.start()] + token + body[match.end() :]
    left, right = body[: match.start()].rstrip(), body[match.end() :].lstrip()
    return f"{left} {right}" if left and right else left or right


def _replace_line(document: str, line_index: int, node: Node, new_line: str) -> str:
    # An edit that would turn the line into another kind of node is refused.
    changed = classify(new_line, line_index)
    if changed is None or changed.kind is not node.kind:
        return document
    return set_line(document, line_index, new_line)


def _task_at(document: str, line_index: int) -> tuple[Node, str] | None:
    lines = document.split("\n")
    if not _in_range(lines, line_index):
        return None
    node = classify(lines[line_index], line_index, with_color=True)
    if node is None or node.kind is not NodeKind.TASK:
        return None
    return node, lines[line_index]


def retitle(document: str, line_index: int, title: str) -> str:
    """Change the title of a header, task or text line.

    The prefix, checkbox, schedule and color tokens are kept as written, even
    when the schedule is not a real date. Blank titles are refused.
    """
    lines = document.split("\n")
    title = title.strip()
    if not title or not _in_range(lines, line_index):
        return document
    line = lines[line_index]
    node = classify(line, line_index, with_color=True)
    if node is None:
        return document

    if node.kind is NodeKind.HEADER:
        new_line = leading_whitespace(line) + f"{'#' * node.level} {title}"
    elif node.kind is NodeKind.TEXT:
        new_line = leading_whitespace(line) + title
    else:
        indent, prefix, body = _split_task(line)
        schedule = SCHEDULE_RE.search(body)
        rest = _splice(body, schedule, None)
        color = COLOR_RE.search(rest)
        new_line = indent + prefix + join_task_body(
            title,
            schedule=schedule.group(0) if schedule else None,
            color=color.group(0) if color else None,
        )
    return _replace_line(document, line_index, node, new_line)


def reschedule(document: str, line_index: int, when: datetime | None) -> str:
    """Set or clear (``None``) a task's schedule; the rest of the line is kept."""
    found = _task_at(document, line_index)
    if found is None:
        return document
    node, line = found
    indent, prefix, body = _split_task(line)
    token = f"@{format_schedule(when)}" if when is not None else None
    body = _splice(body, SCHEDULE_RE.search(body), token)
    return _replace_line(document, line_index, node, indent + prefix + body)


def recolor(document: str, line_index: int, color: str | None) -> str:
    """Set or clear (``None``) a task's event color; the rest of the line is kept."""
    found = _task_at(document, line_index)
    if found is None:
        return document
    node, line = found
    indent, prefix, body = _split_task(line)
    token = f"color:{color}" if color else None
    body = _splice(body, COLOR_RE.search(body), token)
    return _replace_line(document, line_index, node, indent + prefix + body)
