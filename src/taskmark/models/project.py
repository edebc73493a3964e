"""Domain models for projects, timer sessions, and derived statistics."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


@dataclass(frozen=True)
class Project:
    """A named task document."""

    id: str
    name: str
    content: str
    color: str
    created_at: datetime
    description: str = ""
    updated_at: datetime | None = None
    share_token: str | None = None


@dataclass(frozen=True)
class SharedProject:
    """A project opened through its share token."""

    project: Project
    token: str
    view_count: int


class SessionKind(StrEnum):
    """Pomodoro session types."""

    WORK = "work"
    BREAK = "break"
    LONG_BREAK = "long_break"


@dataclass(frozen=True)
class TimerSession:
    """A pomodoro session."""

    id: str
    kind: SessionKind
    duration: int
    start_time: datetime
    completed: bool = True
    end_time: datetime | None = None
    task_id: str | None = None


@dataclass(frozen=True)
class TaskStats:
    """Task counters for one document."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    scheduled: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    low_priority: int = 0


@dataclass(frozen=True)
class DailyStats:
    """Work sessions finished on one day."""

    day: date
    completed: int


@dataclass(frozen=True)
class ScheduledEvent:
    """A calendar entry derived from a scheduled task line."""

    id: str
    line_index: int
    title: str
    when: datetime
    color: str
    time: str | None = None
