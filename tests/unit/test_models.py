"""Tests for domain models."""

from datetime import datetime

import pytest

from taskmark.models.node import Node, NodeKind, Priority
from taskmark.models.project import Project


def test_node_is_frozen() -> None:
    node = Node(kind=NodeKind.TEXT, line_index=0, level=0, title="x")
    with pytest.raises(AttributeError):
        node.title = "changed"  # type: ignore[misc]


def test_project_is_frozen() -> None:
    project = Project(id="p", name="P", content="", color="#3b82f6", created_at=datetime(2024, 1, 1))
    with pytest.raises(AttributeError):
        project.content = "changed"  # type: ignore[misc]


def test_node_id() -> None:
    assert Node(kind=NodeKind.TASK, line_index=7, level=0, title="t").node_id == "task-7"
    assert Node(kind=NodeKind.HEADER, line_index=0, level=1, title="h").node_id == "header-0"


def test_is_overdue() -> None:
    now = datetime(2024, 3, 15, 12)
    past = datetime(2024, 3, 15, 9)

    assert Node(kind=NodeKind.TASK, line_index=0, level=0, title="t", schedule=past).is_overdue(now)
    assert not Node(
        kind=NodeKind.TASK, line_index=0, level=0, title="t", schedule=past, completed=True
    ).is_overdue(now)
    assert not Node(kind=NodeKind.TASK, line_index=0, level=0, title="t").is_overdue(now)
    assert not Node(
        kind=NodeKind.TASK, line_index=0, level=0, title="t", schedule=now
    ).is_overdue(now)


def test_enums_are_strings() -> None:
    assert str(NodeKind.TASK) == "task"
    assert Priority("high") is Priority.HIGH
