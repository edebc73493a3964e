"""Task markup grammar shared by every view.

One line is one unit. Recognised forms::

    # Header / ## Header / ### Header
    - Task            -- Subtask
    - [ ] Open task   - [x] Done task   (also with --)
    ... @YYYY-MM-DD or @YYYY-MM-DD HH:MM   schedule, anywhere in a task
    ... color:#RRGGBB                       event color, calendar lines
    🔥 / high, ⚡ / medium, 📝 / low        priority, left in the title

Blank lines and lines starting with ``---`` or ``*`` carry no node.
"""

import re
from datetime import datetime

from taskmark.models.node import Priority

IGNORED_PREFIXES = ("---", "*")

HEADER_RE = re.compile(r"^(#+)\s*")
CHECKBOX_RE = re.compile(r"^(--?)\s*\[([ x])\]\s*")
DASH_PREFIXES = ("- ", "-- ")
DASH_RE = re.compile(r"^--?\s*")

SCHEDULE_RE = re.compile(r"@(\d{4}-\d{2}-\d{2}(?:\s+\d{2}:\d{2})?)")
COLOR_RE = re.compile(r"color:(#[0-9a-fA-F]{6})")

SCHEDULE_DATE_FORMAT = "%Y-%m-%d"
SCHEDULE_DATETIME_FORMAT = "%Y-%m-%d %H:%M"

# Checked in order; the first marker found wins.
PRIORITY_MARKERS: tuple[tuple[Priority, str, str], ...] = (
    (Priority.HIGH, "🔥", "high"),
    (Priority.MEDIUM, "⚡", "medium"),
    (Priority.LOW, "📝", "low"),
)

PRIORITY_EMOJI: dict[Priority, str] = {p: emoji for p, emoji, _word in PRIORITY_MARKERS}


def parse_schedule(token: str) -> datetime | None:
    """Parse the text captured by SCHEDULE_RE.

    Returns None when the token is not a real calendar date (``2024-02-30``)
    or time (``25:00``).
    """
    parts = token.split()
    try:
        if len(parts) == 2:
            return datetime.strptime(" ".join(parts), SCHEDULE_DATETIME_FORMAT)
        return datetime.strptime(parts[0], SCHEDULE_DATE_FORMAT)
    except ValueError:
        return None


def schedule_time(token: str) -> str | None:
    """Return the ``HH:MM`` part of a schedule token, if it has one."""
    parts = token.split()
    return parts[1] if len(parts) == 2 else None


def format_schedule(when: datetime) -> str:
    """Format a schedule token body. Midnight is written as a bare date."""
    if when.hour == 0 and when.minute == 0:
        return when.strftime(SCHEDULE_DATE_FORMAT)
    return when.strftime(SCHEDULE_DATETIME_FORMAT)


def detect_priority(text: str) -> Priority | None:
    """Loose priority heuristic: emoji, or the bare word anywhere in the text.

    "High school reunion" is high priority under this rule; existing documents
    rely on it, so it is kept.
    """
    lowered = text.lower()
    for priority, emoji, word in PRIORITY_MARKERS:
        if emoji in text or word in lowered:
            return priority
    return None


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]
