"""
fetch tool.

Retrieves one task or project by composite ID (``task:<id>`` or
``project:<id>``) and returns it as a JSON document of
``{id, title, text, url, metadata}``. Errors are returned as ``isError``
results rather than raised.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from todoist_mcp.exceptions import InvalidIdError
from todoist_mcp.tools.formatting import get_error_output, get_json_output
from todoist_mcp.tools.inputs import FetchInput
from todoist_mcp.tools.mapping import (
    MappedProject,
    MappedTask,
    build_todoist_url,
    map_project,
    map_task,
)

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient

logger = logging.getLogger(__name__)


def parse_composite_id(value: str) -> tuple[str, str]:
    """
    Split ``kind:id`` on its first colon.

    Raises:
        InvalidIdError: If the kind is not ``task`` or ``project``, or the ID is empty
    """
    kind, _, object_id = value.partition(":")
    if kind not in ("task", "project") or not object_id:
        raise InvalidIdError(value)
    return kind, object_id


def task_document(task: MappedTask) -> dict[str, Any]:
    text = task.content
    if task.description:
        text += f"\n\nDescription: {task.description}"
    if task.due_date:
        text += f"\nDue: {task.due_date}"
    if task.labels:
        text += f"\nLabels: {', '.join(task.labels)}"

    return {
        "id": f"task:{task.id}",
        "title": task.content,
        "text": text,
        "url": build_todoist_url("task", task.id),
        "metadata": {
            "priority": task.priority,
            "projectId": task.project_id,
            "sectionId": task.section_id,
            "parentId": task.parent_id,
            "recurring": task.recurring,
            "duration": task.duration,
            "responsibleUid": task.responsible_uid,
            "assignedByUid": task.assigned_by_uid,
        },
    }


def project_document(project: MappedProject) -> dict[str, Any]:
    text = project.name
    if project.is_shared:
        text += "\n\nShared project"
    if project.is_favorite:
        text += "\nFavorite: Yes"

    return {
        "id": f"project:{project.id}",
        "title": project.name,
        "text": text,
        "url": build_todoist_url("project", project.id),
        "metadata": {
            "color": project.color,
            "isFavorite": project.is_favorite,
            "isShared": project.is_shared,
            "parentId": project.parent_id,
            "inboxProject": project.inbox_project,
            "viewStyle": project.view_style,
        },
    }


async def fetch(params: FetchInput, client: "TodoistClient") -> CallToolResult:
    """Fetch the full contents of a task or project."""
    try:
        kind, object_id = parse_composite_id(params.id)
        if kind == "task":
            document = task_document(map_task(await client.get_task(object_id)))
        else:
            document = project_document(map_project(await client.get_project(object_id)))
        return get_json_output(json.dumps(document, separators=(",", ":"), ensure_ascii=False))
    except Exception as e:
        logger.exception("Error in fetch: %s", e)
        return get_error_output(str(e) or "An unknown error occurred")
