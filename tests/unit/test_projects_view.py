"""Tests for project summaries and templates."""

import pytest

from taskmark.core.markup.parser import parse
from taskmark.core.views.projects import (
    completed_count,
    default_project_content,
    export_filename,
    new_project_content,
    task_count,
)
from taskmark.models.node import NodeKind


def test_counts(sample_document: str) -> None:
    assert task_count(sample_document) == 4
    assert completed_count(sample_document) == 2
    assert task_count("") == 0


def test_default_content_parses() -> None:
    content = default_project_content()
    nodes = parse(content)

    assert nodes[0].kind is NodeKind.HEADER
    assert nodes[0].title == "My Tasks"
    assert completed_count(content) == 1
    assert any(n.schedule is not None for n in nodes)


def test_new_project_content() -> None:
    content = new_project_content("Garden", "Spring planting")

    assert content.startswith("# Garden\n\nSpring planting\n\n")
    assert task_count(content) == 4
    assert completed_count(content) == 0


def test_new_project_content_without_description() -> None:
    assert new_project_content("Garden").startswith("# Garden\n\nStart adding")


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("My Tasks", "my-tasks.md"),
        ("  Q3   Plan ", "q3-plan.md"),
        ("a/b\\c", "a-b-c.md"),
    ],
)
def test_export_filename(name: str, expected: str) -> None:
    assert export_filename(name) == expected
