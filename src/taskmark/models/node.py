"""Domain models for parsed task markup."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class NodeKind(StrEnum):
    """Semantic kind of a parsed line."""

    HEADER = "header"
    TASK = "task"
    TEXT = "text"


class Priority(StrEnum):
    """Cosmetic task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Node:
    """A single parsed line of a task document.

    Nodes are derived from the raw text and never edited in place; the only
    link back to the text is ``line_index``.
    """

    kind: NodeKind
    line_index: int
    level: int
    title: str
    raw: str = ""
    completed: bool = False
    checkbox: bool = False
    priority: Priority | None = None
    schedule: datetime | None = None
    color: str | None = None

    @property
    def node_id(self) -> str:
        return f"{self.kind}-{self.line_index}"

    @property
    def is_task(self) -> bool:
        return self.kind is NodeKind.TASK

    def is_overdue(self, now: datetime) -> bool:
        """True for an incomplete task scheduled before ``now``."""
        return (
            self.kind is NodeKind.TASK
            and not self.completed
            and self.schedule is not None
            and self.schedule < now
        )
