"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from taskmark.core.database.schema import migrate_schema
from taskmark.core.store.projects import ProjectStore
from taskmark.core.store.sessions import SessionStore

SAMPLE_DOCUMENT = """\
# Launch

## Planning
- [ ] Write brief 🔥 @2024-03-15 14:30
  -- [x] Collect notes
- Book venue @2024-03-20
- [x] Send invites ⚡
---
* footnote

Remember the budget 📝"""


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """In-memory database with the full schema."""
    db = sqlite3.connect(":memory:")
    migrate_schema(db)
    yield db
    db.close()


@pytest.fixture
def store(conn: sqlite3.Connection) -> ProjectStore:
    return ProjectStore(conn)


@pytest.fixture
def sessions(conn: sqlite3.Connection) -> SessionStore:
    return SessionStore(conn)


@pytest.fixture
def sample_document() -> str:
    return SAMPLE_DOCUMENT
