"""
Todoist MCP Tools Package.

This package provides the query-construction and result-shaping layer
behind the MCP tools:
    - Label expression builder (labels)
    - Responsible-user resolver (users)
    - Filter-query assembler (filters)
    - Result mapper (mapping)
    - Response summarizer (formatting)
    - Tool implementations (find_tasks, find_tasks_by_date,
      find_completed_tasks, find_activity, search, fetch)
"""

from todoist_mcp.tools.inputs import (
    FindTasksInput,
    FindTasksByDateInput,
    FindCompletedTasksInput,
    FindActivityInput,
    SearchInput,
    FetchInput,
)
from todoist_mcp.tools.find_tasks import find_tasks
from todoist_mcp.tools.find_tasks_by_date import find_tasks_by_date
from todoist_mcp.tools.find_completed_tasks import find_completed_tasks
from todoist_mcp.tools.find_activity import find_activity
from todoist_mcp.tools.search import search
from todoist_mcp.tools.fetch import fetch

__all__ = [
    "FindTasksInput",
    "FindTasksByDateInput",
    "FindCompletedTasksInput",
    "FindActivityInput",
    "SearchInput",
    "FetchInput",
    "find_tasks",
    "find_tasks_by_date",
    "find_completed_tasks",
    "find_activity",
    "search",
    "fetch",
]
