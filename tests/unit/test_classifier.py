"""Tests for classify() and serialize(): single-line markup."""

from datetime import datetime

import pytest

from taskmark.core.markup.classifier import classify, serialize
from taskmark.models.node import Node, NodeKind, Priority


@pytest.mark.parametrize("line", ["", "   ", "---", "----- break", "* note", "  * bullet"])
def test_ignored_lines_produce_no_node(line: str) -> None:
    assert classify(line, 0) is None


@pytest.mark.parametrize(
    ("line", "level", "title"),
    [("# Title", 1, "Title"), ("## Sub", 2, "Sub"), ("### Deep", 3, "Deep"), ("#NoSpace", 1, "NoSpace")],
)
def test_header_level_is_hash_count(line: str, level: int, title: str) -> None:
    node = classify(line, 4)
    assert node is not None
    assert node.kind is NodeKind.HEADER
    assert node.level == level
    assert node.title == title
    assert node.line_index == 4


def test_checkbox_task_completed() -> None:
    node = classify("- [x] Done thing", 0)
    assert node is not None
    assert node.kind is NodeKind.TASK
    assert node.completed is True
    assert node.checkbox is True
    assert node.level == 0
    assert node.title == "Done thing"


def test_checkbox_subtask_open() -> None:
    node = classify("  -- [ ] Nested", 2)
    assert node is not None
    assert node.kind is NodeKind.TASK
    assert node.completed is False
    assert node.level == 1
    assert node.title == "Nested"
    assert node.raw == "  -- [ ] Nested"


def test_plain_dash_task_is_never_completed() -> None:
    node = classify("- Buy milk", 0)
    assert node is not None
    assert node.kind is NodeKind.TASK
    assert node.completed is False
    assert node.checkbox is False
    assert node.level == 0


def test_double_dash_is_subtask() -> None:
    node = classify("-- Sub item", 0)
    assert node is not None
    assert node.level == 1
    assert node.title == "Sub item"


def test_dash_without_space_is_text() -> None:
    node = classify("-dash", 0)
    assert node is not None
    assert node.kind is NodeKind.TEXT
    assert node.title == "-dash"


def test_text_line_is_trimmed() -> None:
    node = classify("   Just a note  ", 1)
    assert node is not None
    assert node.kind is NodeKind.TEXT
    assert node.level == 0
    assert node.title == "Just a note"


def test_schedule_with_time_is_extracted_and_stripped() -> None:
    node = classify("- Call client @2024-03-15 14:30", 0)
    assert node is not None
    assert node.schedule == datetime(2024, 3, 15, 14, 30)
    assert node.title == "Call client"


def test_schedule_date_only_is_midnight() -> None:
    node = classify("- [ ] Dentist @2024-07-01 bring card", 0)
    assert node is not None
    assert node.schedule == datetime(2024, 7, 1)
    assert node.title == "Dentist  bring card"


def test_invalid_date_is_stripped_without_schedule() -> None:
    node = classify("- Party @2024-02-30", 0)
    assert node is not None
    assert node.schedule is None
    assert node.title == "Party"


def test_only_first_schedule_is_taken() -> None:
    node = classify("- Trip @2024-05-01 @2024-05-09", 0)
    assert node is not None
    assert node.schedule == datetime(2024, 5, 1)
    assert node.title == "Trip  @2024-05-09"


@pytest.mark.parametrize(
    ("line", "priority"),
    [
        ("- Fix bug 🔥", Priority.HIGH),
        ("- Fix bug HIGH", Priority.HIGH),
        ("- Tidy desk ⚡", Priority.MEDIUM),
        ("- Medium effort", Priority.MEDIUM),
        ("- Read 📝", Priority.LOW),
        ("- Low hanging fruit", Priority.LOW),
        ("- Nothing special", None),
    ],
)
def test_priority_detection(line: str, priority: Priority | None) -> None:
    node = classify(line, 0)
    assert node is not None
    assert node.priority == priority


def test_priority_marker_stays_in_title() -> None:
    node = classify("- Fix bug 🔥", 0)
    assert node is not None
    assert node.priority is Priority.HIGH
    assert "🔥" in node.title


def test_high_wins_over_later_markers() -> None:
    node = classify("- 📝 then 🔥", 0)
    assert node is not None
    assert node.priority is Priority.HIGH


def test_keyword_heuristic_matches_inside_words() -> None:
    node = classify("- High school reunion", 0)
    assert node is not None
    assert node.priority is Priority.HIGH


def test_color_only_extracted_when_requested() -> None:
    line = "- Standup @2024-03-15 09:00 color:#ef4444"
    plain = classify(line, 0)
    colored = classify(line, 0, with_color=True)
    assert plain is not None and colored is not None
    assert plain.color is None
    assert plain.title == "Standup  color:#ef4444"
    assert colored.color == "#ef4444"
    assert colored.title == "Standup"


def test_headers_and_text_have_no_schedule() -> None:
    node = classify("# Plan @2024-01-01", 0)
    assert node is not None
    assert node.schedule is None
    assert node.title == "Plan @2024-01-01"


@pytest.mark.parametrize(
    "line",
    ["[x]", "- [", "@", "#", "--", "- @2024-13-45 99:99", "color:#zzzzzz", "\t\t", "-- [x]"],
)
def test_never_raises(line: str) -> None:
    classify(line, 0, with_color=True)


# --- serialize ---


@pytest.mark.parametrize(
    "line",
    [
        "# Title",
        "### Deep",
        "- Plain task",
        "-- Subtask",
        "- [ ] Open",
        "- [x] Done 🔥",
        "-- [x] Sub done",
        "- [ ] Meet @2024-03-15 14:30",
        "- Lunch @2024-03-15",
        "- Demo @2024-03-15 10:00 color:#10b981",
        "Free text",
    ],
)
def test_serialize_round_trips(line: str) -> None:
    node = classify(line, 0, with_color=True)
    assert node is not None
    assert serialize(node) == line


def test_serialize_reclassifies_to_equal_fields() -> None:
    node = Node(
        kind=NodeKind.TASK,
        line_index=0,
        level=1,
        title="Ship it ⚡",
        completed=True,
        checkbox=True,
        priority=Priority.MEDIUM,
        schedule=datetime(2024, 6, 1, 8, 15),
        color="#8b5cf6",
    )
    again = classify(serialize(node), 0, with_color=True)
    assert again is not None
    for field in ("kind", "level", "title", "completed", "priority", "schedule", "color"):
        assert getattr(again, field) == getattr(node, field)


def test_serialize_puts_schedule_first_when_title_has_one() -> None:
    node = classify("- Ship @2024-01-01 then review @2024-02-02", 0)
    assert node is not None

    line = serialize(node)

    assert line == "- @2024-01-01 Ship  then review @2024-02-02"
    again = classify(line, 0)
    assert again is not None
    assert again.schedule == datetime(2024, 1, 1)
    assert again.title == node.title


def test_serialize_puts_color_first_when_title_has_one() -> None:
    node = Node(
        kind=NodeKind.TASK, line_index=0, level=0, title="Paint color:#000000", color="#ef4444"
    )
    again = classify(serialize(node), 0, with_color=True)
    assert again is not None
    assert again.color == "#ef4444"
    assert again.title == "Paint color:#000000"
