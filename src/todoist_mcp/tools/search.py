"""
search tool.

Searches tasks and projects at once and returns a JSON document of
``{"results": [{"id", "title", "url"}, ...]}``, tasks first. Errors are
returned as ``isError`` results rather than raised.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from mcp.types import CallToolResult

from todoist_mcp.constants import ApiLimits
from todoist_mcp.tools.formatting import get_error_output, get_json_output
from todoist_mcp.tools.inputs import SearchInput
from todoist_mcp.tools.mapping import build_todoist_url

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient

logger = logging.getLogger(__name__)


async def search(params: SearchInput, client: "TodoistClient") -> CallToolResult:
    """
    Search tasks by filter and projects by name.

    Tasks come from the ``search:`` filter; projects are matched locally by
    a case-insensitive substring of their name. The search is not paginated,
    so both calls request their largest page.
    """
    try:
        task_page, project_page = await asyncio.gather(
            client.get_tasks_by_filter(f"search: {params.query}", limit=ApiLimits.TASKS_MAX),
            client.get_projects(limit=ApiLimits.PROJECTS_MAX),
        )

        needle = params.query.lower()
        results = [
            {
                "id": f"task:{task.id}",
                "title": task.content,
                "url": build_todoist_url("task", task.id),
            }
            for task in task_page.results
        ]
        results.extend(
            {
                "id": f"project:{project.id}",
                "title": project.name,
                "url": build_todoist_url("project", project.id),
            }
            for project in project_page.results
            if needle in project.name.lower()
        )

        return get_json_output(json.dumps({"results": results}, separators=(",", ":"), ensure_ascii=False))
    except Exception as e:
        logger.exception("Error in search: %s", e)
        return get_error_output(str(e) or "An unknown error occurred")
