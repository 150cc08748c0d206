#!/usr/bin/env python3
"""
Todoist MCP Server.

This server provides query tools for Todoist, built on the Todoist
REST API v1.

Features:
    - Task search by text, project, section, parent task, assignee and labels
    - Task search by due date window, with overdue handling
    - Completed task history in the user's own time zone
    - Activity log browsing
    - Combined task/project search and fetch for document-style clients

Environment Variables:
    TODOIST_API_TOKEN      Todoist API token (optional for HTTP transports,
                           which may send X-Todoist-Token or
                           Authorization: Bearer per request)
    TODOIST_TRANSPORT      stdio (default), sse or streamable-http
    TODOIST_HOST / TODOIST_PORT
    TODOIST_LOG_LEVEL
"""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Annotated, Any, AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP, Context
from mcp.types import CallToolResult
from pydantic import Field

from todoist_mcp.client import TodoistClient
from todoist_mcp.constants import ToolNames
from todoist_mcp.exceptions import TodoistConfigurationError
from todoist_mcp.settings import get_settings
from todoist_mcp.tools.formatting import get_error_output
from todoist_mcp.tools import (
    FetchInput,
    FindActivityInput,
    FindCompletedTasksInput,
    FindTasksByDateInput,
    FindTasksInput,
    SearchInput,
    fetch,
    find_activity,
    find_completed_tasks,
    find_tasks,
    find_tasks_by_date,
    search,
)

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_BEARER = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(mcp: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """
    Manage the Todoist client lifecycle.

    A shared client is created when a token is configured. Without one the
    server still starts, and each request must carry its own token.
    """
    logger.info("Initializing Todoist MCP Server...")

    client: Optional[TodoistClient] = None
    if get_settings().get_api_token():
        client = TodoistClient.from_settings()
        await client.connect()
        logger.info("Todoist client connected")
    else:
        logger.warning("No TODOIST_API_TOKEN configured; expecting per-request tokens")

    try:
        yield {"client": client}
    finally:
        if client is not None:
            await client.disconnect()
            logger.info("Todoist client disconnected")


# Initialize FastMCP server
mcp = FastMCP(
    "todoist_mcp",
    lifespan=lifespan,
)


def extract_request_token(headers: Any) -> Optional[str]:
    """
    Todoist token sent with an HTTP request.

    ``X-Todoist-Token`` wins over ``Authorization: Bearer``.
    """
    custom = headers.get("x-todoist-token")
    if custom and custom.strip():
        return custom.strip()
    match = _BEARER.match(headers.get("authorization") or "")
    if match:
        return match.group(1).strip() or None
    return None


@asynccontextmanager
async def get_client(ctx: Context) -> AsyncIterator[TodoistClient]:
    """
    Get a Todoist client for the current request.

    Requests carrying their own token get a dedicated client, closed when
    the request is done; all others share the lifespan client.
    """
    request = getattr(ctx.request_context, "request", None)
    token = extract_request_token(request.headers) if request is not None else None

    if token:
        async with TodoistClient.from_settings(api_token=token) as client:
            yield client
        return

    client = ctx.request_context.lifespan_context.get("client")
    if client is None:
        raise TodoistConfigurationError(
            "Unauthorized: Please provide a Todoist API token via TODOIST_API_TOKEN, "
            "the X-Todoist-Token header or Authorization: Bearer <token>"
        )
    yield client


# =============================================================================
# Task Tools
# =============================================================================


@mcp.tool(
    name=ToolNames.FIND_TASKS,
    annotations={
        "title": "Find Tasks",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def todoist_find_tasks(params: FindTasksInput, ctx: Context) -> CallToolResult:
    """
    Find tasks by text search, or by project/section/parent container/responsible user.

    At least one filter must be provided.

    Args:
        params: Search parameters including:
            - search_text (str): Text to search for in task content and description
            - project_id / section_id / parent_id (str): Container to list
            - responsible_user (str): Assignee ID, name or email
            - responsible_user_filtering (str): 'assigned', 'unassignedOrMe' or 'all'
            - labels (list): Label names
            - labels_operator (str): 'and' or 'or'
            - limit (int): Maximum results (default 10)
            - cursor (str): Cursor from a previous call

    Returns:
        Summary of matching tasks with structured content.

    Examples:
        - Text search: search_text="invoice"
        - Project listing: project_id="6cfCcrrCFg2xP94Q"
        - Labelled tasks: labels=["work", "urgent"], labels_operator="and"
    """
    try:
        async with get_client(ctx) as client:
            return await find_tasks(params, client)
    except Exception as e:
        logger.exception("Error in %s: %s", ToolNames.FIND_TASKS, e)
        raise


@mcp.tool(
    name=ToolNames.FIND_TASKS_BY_DATE,
    annotations={
        "title": "Find Tasks by Date",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def todoist_find_tasks_by_date(params: FindTasksByDateInput, ctx: Context) -> CallToolResult:
    """
    Get tasks by date range.

    Use start_date 'today' to get today's tasks including overdue items,
    or provide a specific date/date range.

    Args:
        params: Query parameters including:
            - start_date (str): YYYY-MM-DD or 'today'
            - overdue_option (str): 'overdue-only', 'include-overdue' or 'exclude-overdue'
            - days_count (int): Window length in days (default 1)
            - responsible_user / responsible_user_filtering: Assignee filtering
            - labels / labels_operator: Label filtering
            - limit (int), cursor (str): Paging

    Returns:
        Summary of tasks due in the window with structured content.
    """
    try:
        async with get_client(ctx) as client:
            return await find_tasks_by_date(params, client)
    except Exception as e:
        logger.exception("Error in %s: %s", ToolNames.FIND_TASKS_BY_DATE, e)
        raise


@mcp.tool(
    name=ToolNames.FIND_COMPLETED_TASKS,
    annotations={
        "title": "Find Completed Tasks",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def todoist_find_completed_tasks(
    params: FindCompletedTasksInput, ctx: Context
) -> CallToolResult:
    """
    Get completed tasks within a date range.

    Dates are calendar days in the user's Todoist time zone.

    Args:
        params: Query parameters including:
            - get_by (str): 'completion' (default) or 'due'
            - since / until (str): YYYY-MM-DD, both inclusive
            - project_id / section_id / parent_id (str): Container filters
            - responsible_user (str): Assignee ID, name or email
            - labels / labels_operator: Label filtering
            - limit (int), cursor (str): Paging

    Returns:
        Summary of completed tasks with structured content.
    """
    try:
        async with get_client(ctx) as client:
            return await find_completed_tasks(params, client)
    except Exception as e:
        logger.exception("Error in %s: %s", ToolNames.FIND_COMPLETED_TASKS, e)
        raise


# =============================================================================
# Activity Tools
# =============================================================================


@mcp.tool(
    name=ToolNames.FIND_ACTIVITY,
    annotations={
        "title": "Find Activity",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def todoist_find_activity(params: FindActivityInput, ctx: Context) -> CallToolResult:
    """
    Retrieve recent activity logs to monitor and audit changes in Todoist.

    Shows events from all users by default (use initiator_id to filter by
    a specific user). Date-based filtering is not supported by the Todoist API.

    Args:
        params: Filter parameters including:
            - object_type (str): 'task', 'project' or 'comment'
            - object_id (str): Specific object
            - event_type (str): e.g. 'added', 'completed', 'deleted'
            - project_id (str): Parent project
            - task_id (str): Parent task (for subtask events)
            - initiator_id (str): User who caused the event
            - limit (int), cursor (str): Paging

    Returns:
        Summary of activity events with structured content.
    """
    try:
        async with get_client(ctx) as client:
            return await find_activity(params, client)
    except Exception as e:
        logger.exception("Error in %s: %s", ToolNames.FIND_ACTIVITY, e)
        raise


# =============================================================================
# Search / Fetch Tools
# =============================================================================


@mcp.tool(
    name=ToolNames.SEARCH,
    annotations={
        "title": "Search",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def todoist_search(
    query: Annotated[
        str,
        Field(min_length=1, description="The search query string to find tasks and projects."),
    ],
    ctx: Context,
) -> CallToolResult:
    """
    Search across tasks and projects in Todoist.

    Returns a JSON document listing relevant results with IDs, titles, and URLs.
    """
    try:
        async with get_client(ctx) as client:
            return await search(SearchInput(query=query), client)
    except Exception as e:
        logger.exception("Error in %s: %s", ToolNames.SEARCH, e)
        return get_error_output(str(e))


@mcp.tool(
    name=ToolNames.FETCH,
    annotations={
        "title": "Fetch",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def todoist_fetch(
    id: Annotated[
        str,
        Field(
            min_length=1,
            description='A unique identifier in the format "task:{id}" or "project:{id}".',
        ),
    ],
    ctx: Context,
) -> CallToolResult:
    """
    Fetch the full contents of a task or project by its ID.

    The ID should be in the format "task:{id}" or "project:{id}".
    """
    try:
        async with get_client(ctx) as client:
            return await fetch(FetchInput(id=id), client)
    except Exception as e:
        logger.exception("Error in %s: %s", ToolNames.FETCH, e)
        return get_error_output(str(e))


# =============================================================================
# Main Entry Point
# =============================================================================


def main():
    """Main entry point for the Todoist MCP server."""
    settings = get_settings()
    mcp.settings.host = settings.host
    mcp.settings.port = settings.port
    logger.info("Starting Todoist MCP server (%s transport)", settings.transport)
    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    main()
