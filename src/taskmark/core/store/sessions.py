"""Pomodoro session storage on SQLite."""

import sqlite3
from datetime import date, datetime, time, timedelta

from loguru import logger

from taskmark.core.store.timestamps import from_ms, from_ms_or_none, to_ms
from taskmark.models.project import SessionKind, TimerSession


def _row_to_session(row: tuple) -> TimerSession:
    return TimerSession(
        id=row[0],
        kind=SessionKind(row[1]),
        duration=row[2],
        completed=bool(row[3]),
        start_time=from_ms(row[4]),
        end_time=from_ms_or_none(row[5]),
        task_id=row[6],
    )


class SessionStore:
    """Record and query timer sessions."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def record(self, session: TimerSession) -> None:
        self.conn.execute(
            """INSERT OR REPLACE INTO timer_sessions
               (id, kind, duration, completed, start_time, end_time, task_id)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                session.id,
                str(session.kind),
                session.duration,
                int(session.completed),
                to_ms(session.start_time),
                to_ms(session.end_time) if session.end_time else None,
                session.task_id,
            ),
        )
        self.conn.commit()
        logger.debug("Recorded {} session {}", session.kind, session.id)

    def list_sessions(self, *, limit: int | None = 50) -> list[TimerSession]:
        """Most recent sessions first; ``limit=None`` returns all of them."""
        sql = (
            "SELECT id, kind, duration, completed, start_time, end_time, task_id "
            "FROM timer_sessions ORDER BY start_time DESC"
        )
        if limit is None:
            rows = self.conn.execute(sql).fetchall()
        else:
            rows = self.conn.execute(f"{sql} LIMIT ?", (limit,)).fetchall()
        return [_row_to_session(r) for r in rows]

    def count_work_sessions_on(self, day: date) -> int:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        row = self.conn.execute(
            "SELECT COUNT(*) FROM timer_sessions "
            "WHERE kind = ? AND completed = 1 AND start_time >= ? AND start_time < ?",
            (str(SessionKind.WORK), to_ms(start), to_ms(end)),
        ).fetchone()
        return int(row[0])
