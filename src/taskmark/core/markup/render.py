"""Render parsed nodes for display."""

import io
from datetime import datetime
from typing import Any

from taskmark.core.markup.grammar import format_schedule
from taskmark.models.node import Node, NodeKind


def render_preview(
    nodes: list[Node],
    *,
    now: datetime | None = None,
    line_numbers: bool = False,
) -> str:
    """Render nodes as a plain-text preview.

    Args:
        nodes: Nodes from ``parse``.
        now: Reference time for overdue markers (None = no markers).
        line_numbers: Prefix each line with the node's line index.

    Returns:
        Preview text, one line per node.
    """
    out = io.StringIO()
    for node in nodes:
        if line_numbers:
            out.write(f"{node.line_index:>4}  ")

        if node.kind is NodeKind.HEADER:
            out.write(f"{'#' * node.level} {node.title}\n")
            continue
        if node.kind is NodeKind.TEXT:
            out.write(f"{node.title}\n")
            continue

        indent = "    " * node.level
        box = "[x]" if node.completed else "[ ]"
        out.write(f"{indent}{box} {node.title}")
        if node.schedule is not None:
            out.write(f" ({format_schedule(node.schedule)})")
            if now is not None and node.is_overdue(now):
                out.write(" OVERDUE")
        if node.priority is not None:
            out.write(f" [{node.priority}]")
        out.write("\n")

    return out.getvalue()


def node_to_dict(node: Node) -> dict[str, Any]:
    """JSON-safe representation of a node."""
    return {
        "id": node.node_id,
        "kind": str(node.kind),
        "line_index": node.line_index,
        "level": node.level,
        "title": node.title,
        "completed": node.completed,
        "checkbox": node.checkbox,
        "priority": str(node.priority) if node.priority else None,
        "schedule": node.schedule.isoformat() if node.schedule else None,
        "color": node.color,
    }


def render_json(nodes: list[Node]) -> list[dict[str, Any]]:
    return [node_to_dict(n) for n in nodes]
