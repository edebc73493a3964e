"""Pomodoro session sequencing."""

import uuid
from datetime import datetime, timedelta

from taskmark.models.project import SessionKind, TimerSession

SESSION_DURATIONS: dict[SessionKind, int] = {
    SessionKind.WORK: 25 * 60,
    SessionKind.BREAK: 5 * 60,
    SessionKind.LONG_BREAK: 15 * 60,
}

# Every Nth finished work session is followed by a long break.
LONG_BREAK_EVERY = 4


def next_session_kind(finished: SessionKind, completed_work_sessions: int) -> SessionKind:
    """Pick the session that follows a finished one.

    Args:
        finished: Kind of the session that just ended.
        completed_work_sessions: Work sessions finished so far, including this one.
    """
    if finished is not SessionKind.WORK:
        return SessionKind.WORK
    if completed_work_sessions > 0 and completed_work_sessions % LONG_BREAK_EVERY == 0:
        return SessionKind.LONG_BREAK
    return SessionKind.BREAK


def completed_session(
    kind: SessionKind,
    *,
    end_time: datetime,
    task_id: str | None = None,
) -> TimerSession:
    """Build a finished session of the standard length ending at ``end_time``."""
    duration = SESSION_DURATIONS[kind]
    return TimerSession(
        id=uuid.uuid4().hex,
        kind=kind,
        duration=duration,
        start_time=end_time - timedelta(seconds=duration),
        completed=True,
        end_time=end_time,
        task_id=task_id,
    )
