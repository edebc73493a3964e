"""Project storage on SQLite.

Projects are named task documents. The store persists whole documents; it never
looks inside them. Editing a document means computing the new text with the
markup mutator and handing it to ``save_content``.
"""

import secrets
import sqlite3
import uuid
from datetime import datetime

from loguru import logger

from taskmark.config import DEFAULT_PROJECT_NAME, PROJECT_COLORS
from taskmark.core.store.timestamps import from_ms, from_ms_or_none, to_ms
from taskmark.core.views.projects import default_project_content, new_project_content
from taskmark.models.project import Project, SharedProject

DEFAULT_PROJECT_ID = "default"

_PROJECT_COLUMNS = (
    "id, name, description, color, content, created_at, updated_at, share_token"
)


def _row_to_project(row: tuple) -> Project:
    return Project(
        id=row[0],
        name=row[1],
        description=row[2],
        color=row[3],
        content=row[4],
        created_at=from_ms(row[5]),
        updated_at=from_ms_or_none(row[6]),
        share_token=row[7],
    )


class ProjectStore:
    """CRUD and sharing for projects."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_projects(self) -> list[Project]:
        rows = self.conn.execute(
            f"SELECT {_PROJECT_COLUMNS} FROM projects ORDER BY created_at, rowid"
        ).fetchall()
        return [_row_to_project(r) for r in rows]

    def get(self, project_id: str) -> Project | None:
        row = self.conn.execute(
            f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE id = ?", (project_id,)
        ).fetchone()
        return _row_to_project(row) if row else None

    def resolve(self, name_or_id: str) -> Project | None:
        """Find a project by id, or by name (oldest first on duplicates)."""
        row = self.conn.execute(
            f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE id = ? OR name = ? "
            "ORDER BY id = ? DESC, created_at, rowid LIMIT 1",
            (name_or_id, name_or_id, name_or_id),
        ).fetchone()
        return _row_to_project(row) if row else None

    def create(
        self,
        name: str,
        *,
        description: str = "",
        color: str = PROJECT_COLORS[0],
        content: str | None = None,
        project_id: str | None = None,
    ) -> Project:
        """Create a project, seeding it with the starter document."""
        name = name.strip()
        if not name:
            msg = "Project name must not be empty"
            raise ValueError(msg)
        project = Project(
            id=project_id or uuid.uuid4().hex,
            name=name,
            description=description,
            color=color,
            content=content if content is not None else new_project_content(name, description),
            created_at=datetime.now(),
        )
        self.conn.execute(
            f"INSERT INTO projects ({_PROJECT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                project.id, project.name, project.description, project.color,
                project.content, to_ms(project.created_at), None, None,
            ),
        )
        self.conn.commit()
        logger.info("Created project {!r} ({})", project.name, project.id)
        return project

    def ensure_default(self) -> Project:
        """Return the first project, creating the welcome project if there is none."""
        projects = self.list_projects()
        if projects:
            return projects[0]
        return self.create(
            DEFAULT_PROJECT_NAME,
            description="Default project for all tasks",
            content=default_project_content(),
            project_id=DEFAULT_PROJECT_ID,
        )

    def update(
        self,
        project_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        color: str | None = None,
    ) -> Project:
        """Update display metadata. Raises KeyError for unknown projects."""
        project = self.get(project_id)
        if project is None:
            raise KeyError(project_id)
        self.conn.execute(
            "UPDATE projects SET name = ?, description = ?, color = ?, updated_at = ? "
            "WHERE id = ?",
            (
                name.strip() if name else project.name,
                description if description is not None else project.description,
                color or project.color,
                to_ms(datetime.now()),
                project_id,
            ),
        )
        self.conn.commit()
        updated = self.get(project_id)
        if updated is None:
            raise KeyError(project_id)
        return updated

    def save_content(self, project_id: str, content: str) -> bool:
        """Replace a project's document.

        Returns False without writing when the content is unchanged, so a
        delayed save of stale text cannot bump ``updated_at``. Raises KeyError
        for unknown projects.
        """
        row = self.conn.execute(
            "SELECT content FROM projects WHERE id = ?", (project_id,)
        ).fetchone()
        if row is None:
            raise KeyError(project_id)
        if row[0] == content:
            logger.debug("Project {} unchanged, not saving", project_id)
            return False
        self.conn.execute(
            "UPDATE projects SET content = ?, updated_at = ? WHERE id = ?",
            (content, to_ms(datetime.now()), project_id),
        )
        self.conn.commit()
        logger.debug("Saved project {} ({} chars)", project_id, len(content))
        return True

    def delete(self, project_id: str) -> bool:
        """Delete a project and its share links. Returns False if it did not exist."""
        self.conn.execute("DELETE FROM shared_links WHERE project_id = ?", (project_id,))
        cursor = self.conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        self.conn.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted project {}", project_id)
        return deleted

    def share(self, project_id: str) -> str:
        """Return the project's share token, creating one on first use."""
        project = self.get(project_id)
        if project is None:
            raise KeyError(project_id)
        if project.share_token:
            return project.share_token

        token = secrets.token_hex(32)
        try:
            self.conn.execute(
                "INSERT INTO shared_links (token, project_id, view_count, created_at) "
                "VALUES (?, ?, 0, ?)",
                (token, project_id, to_ms(datetime.now())),
            )
            self.conn.execute(
                "UPDATE projects SET share_token = ? WHERE id = ?", (token, project_id)
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            logger.exception("Failed to share project {}", project_id)
            raise
        logger.info("Shared project {}", project_id)
        return token

    def open_shared(self, token: str) -> SharedProject | None:
        """Load a shared project by token and count the view."""
        row = self.conn.execute(
            "SELECT project_id, view_count FROM shared_links WHERE token = ?", (token,)
        ).fetchone()
        if row is None:
            return None
        project = self.get(row[0])
        if project is None:
            logger.warning("Share link {} points at missing project {}", token[:8], row[0])
            return None
        view_count = row[1] + 1
        self.conn.execute(
            "UPDATE shared_links SET view_count = ? WHERE token = ?", (view_count, token)
        )
        self.conn.commit()
        return SharedProject(project=project, token=token, view_count=view_count)
