"""Per-project summaries and document templates."""

import re

from taskmark.core.markup.parser import tasks

_DEFAULT_CONTENT = """\
# My Tasks

Welcome to taskmark! Here's how to get started:

- Create your first task
  -- Add subtasks with double dashes
- [ ] Use checkboxes for trackable items
- [x] Mark completed tasks like this
- Schedule meetings @2024-01-20 14:00
- Set priorities 🔥 High, ⚡ Medium, 📝 Low

## Today's Goals
- Get familiar with the interface
- Plan your week
- Set up your projects

## Notes
This is your default project. You can create more projects with `taskmark new-project`!"""


def default_project_content() -> str:
    """Welcome document for the first project."""
    return _DEFAULT_CONTENT


def new_project_content(name: str, description: str = "") -> str:
    """Starter document for a newly created project."""
    intro = f"{description}\n\n" if description else ""
    return (
        f"# {name}\n\n"
        f"{intro}Start adding your tasks here:\n\n"
        f"- First task for {name}\n"
        f"  -- Break it down into subtasks\n"
        f"- Plan project milestones\n"
        f"- Set deadlines and priorities\n\n"
        f"## Notes\n"
        f"Add any project-specific notes here..."
    )


def task_count(document: str) -> int:
    return len(tasks(document))


def completed_count(document: str) -> int:
    return sum(1 for n in tasks(document) if n.completed)


def export_filename(name: str) -> str:
    """Markdown filename for a project: whitespace and slash runs become dashes, lowercased."""
    return re.sub(r"[\s/\\]+", "-", name.strip()).lower() + ".md"
