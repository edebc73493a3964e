"""Task and focus-time statistics."""

from datetime import date, datetime, timedelta

from taskmark.core.markup.parser import tasks
from taskmark.models.node import Priority
from taskmark.models.project import DailyStats, SessionKind, TaskStats, TimerSession


def analyze_content(document: str, *, now: datetime) -> TaskStats:
    """Count tasks by completion, schedule and priority.

    Args:
        document: Task document text.
        now: Reference time; incomplete tasks scheduled before it are overdue.
    """
    nodes = tasks(document)
    completed = sum(1 for n in nodes if n.completed)
    by_priority = {p: sum(1 for n in nodes if n.priority is p) for p in Priority}
    return TaskStats(
        total=len(nodes),
        completed=completed,
        pending=len(nodes) - completed,
        overdue=sum(1 for n in nodes if n.is_overdue(now)),
        scheduled=sum(1 for n in nodes if n.schedule is not None),
        high_priority=by_priority[Priority.HIGH],
        medium_priority=by_priority[Priority.MEDIUM],
        low_priority=by_priority[Priority.LOW],
    )


def count_completed(document: str) -> int:
    """Completed tasks in a document, as shown in the status bar."""
    return sum(1 for n in tasks(document) if n.completed)


def count_lines(document: str) -> int:
    return len(document.split("\n"))


def completion_rate(stats: TaskStats) -> float:
    """Percentage of completed tasks; 0 for a document without tasks."""
    if stats.total == 0:
        return 0.0
    return stats.completed / stats.total * 100


def _work_days(sessions: list[TimerSession]) -> list[date]:
    return [
        s.start_time.date() for s in sessions if s.kind is SessionKind.WORK and s.completed
    ]


def focus_minutes(sessions: list[TimerSession]) -> int:
    """Total minutes spent in completed work sessions."""
    return sum(
        s.duration // 60 for s in sessions if s.kind is SessionKind.WORK and s.completed
    )


def weekly_stats(sessions: list[TimerSession], *, today: date) -> list[DailyStats]:
    """Work sessions per day for the last seven days, oldest first."""
    days = _work_days(sessions)
    window = [today - timedelta(days=i) for i in range(6, -1, -1)]
    return [DailyStats(day=d, completed=days.count(d)) for d in window]


def streak(sessions: list[TimerSession], *, today: date) -> int:
    """Consecutive days, ending today, with at least one work session."""
    days = set(_work_days(sessions))
    count = 0
    current = today
    while current in days:
        count += 1
        current -= timedelta(days=1)
    return count


def productivity_score(stats: TaskStats, focus: int, streak_days: int) -> int:
    """Blend completion rate, focus minutes and streak into one number."""
    return round((completion_rate(stats) + focus / 10 + streak_days * 5) / 3)
