"""Millisecond timestamps for SQLite columns."""

from datetime import datetime


def to_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def from_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000)


def from_ms_or_none(value: int | None) -> datetime | None:
    """Like ``from_ms`` for nullable columns."""
    return from_ms(value) if value is not None else None
