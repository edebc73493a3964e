"""Parse whole task documents."""

from taskmark.core.markup.classifier import classify
from taskmark.models.node import Node, NodeKind


def parse(document: str, *, with_color: bool = False) -> list[Node]:
    """Parse a document into nodes, in line order.

    Blank and decorative lines produce no node, but every node keeps the index
    of the line it came from. Nesting is not reconciled: a ``level`` 1 task
    simply follows whatever came before it.
    """
    nodes: list[Node] = []
    for line_index, line in enumerate(document.split("\n")):
        node = classify(line, line_index, with_color=with_color)
        if node is not None:
            nodes.append(node)
    return nodes


def tasks(document: str, *, with_color: bool = False) -> list[Node]:
    """Only the task nodes of a document."""
    return [n for n in parse(document, with_color=with_color) if n.kind is NodeKind.TASK]


def node_at(document: str, line_index: int, *, with_color: bool = False) -> Node | None:
    """Re-parse and return the node on a given line, if any."""
    lines = document.split("\n")
    if not 0 <= line_index < len(lines):
        return None
    return classify(lines[line_index], line_index, with_color=with_color)
