"""Generate task lists with a remote text generator and merge them into projects."""

from typing import Any

from loguru import logger

from taskmark.core.markup.mutator import append_block
from taskmark.core.markup.parser import parse
from taskmark.core.store.projects import ProjectStore
from taskmark.models.node import NodeKind
from taskmark.protocols import GeneratorProtocol

SYSTEM_PROMPT = """\
You are a productivity assistant that creates detailed, actionable task lists. \
Follow these formatting rules:

1. Start with a relevant headline using # (e.g., "# Project Planning Tasks")
2. Create main tasks using "- " prefix
3. Add sub-tasks using "-- " prefix (double dash)
4. Use checkboxes "- [ ]" for trackable items
5. Add priorities: 🔥 High, ⚡ Medium, 📝 Low
6. Include schedules using @YYYY-MM-DD format when relevant
7. Add descriptions for complex tasks using "Description: ..." on the next line
8. Group related tasks under ## subheadings when appropriate

Example format:
# Project Setup Tasks

## Planning Phase
- [ ] Define project scope 🔥 High @2024-01-15
  Description: Clearly outline what the project will and won't include
  -- Research similar projects
  -- Identify key stakeholders
- [ ] Create project roadmap ⚡ Medium
  -- Break down into phases
  -- Set milestones

## Development Phase
- Set up development environment 📝 Low
  -- Install required software
  -- Set up version control

Keep tasks specific, actionable, and well-organized. Limit to 8-12 main tasks maximum."""


def generate_tasks(api: GeneratorProtocol, prompt: str) -> dict[str, Any]:
    """Ask the generator for a task list.

    The reply is returned verbatim (stripped); it is not checked against the
    markup grammar.
    """
    if not prompt.strip():
        return {"success": False, "error": "No prompt provided."}

    try:
        content = api.complete(prompt.strip(), system=SYSTEM_PROMPT)
    except RuntimeError as e:
        logger.warning("Task generation failed: {}", e)
        return {"success": False, "error": str(e)}

    content = content.strip()
    if not content:
        return {"success": False, "error": "Empty response from AI service"}
    return {"success": True, "content": content}


def generate_into_project(
    store: ProjectStore,
    api: GeneratorProtocol,
    *,
    project_id: str,
    prompt: str,
) -> dict[str, Any]:
    """Generate tasks and append them to a project's document.

    Args:
        store: Project store.
        api: Text generator.
        project_id: Project to append to.
        prompt: What to plan.
    """
    project = store.get(project_id)
    if project is None:
        return {"success": False, "error": f"Project '{project_id}' not found."}

    result = generate_tasks(api, prompt)
    if not result["success"]:
        return result

    block: str = result["content"]
    store.save_content(project.id, append_block(project.content, block))

    added = parse(block)
    task_total = sum(1 for n in added if n.kind is NodeKind.TASK)
    logger.info("Added {} generated tasks to project {!r}", task_total, project.name)
    return {
        "success": True,
        "project_id": project.id,
        "added_lines": len(block.split("\n")),
        "added_tasks": task_total,
        "content": block,
    }
