"""
Todoist API Client.

This module provides the TodoistClient class, a thin async wrapper over the
read endpoints of the Todoist REST API v1 used by the MCP tools.

Responses are validated into the pydantic models of ``todoist_mcp.models``;
HTTP failures are translated into the ``TodoistAPIError`` family.

Usage:
    async with TodoistClient(api_token="...") as client:
        user = await client.get_user()
        page = await client.get_tasks_by_filter("today", limit=10)
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote
from types import TracebackType
from typing import Any, Optional, TypeVar

import httpx

from todoist_mcp.constants import DEFAULT_BASE_URL, FILTER_LANG
from todoist_mcp.exceptions import (
    TodoistAPIError,
    TodoistAuthenticationError,
    TodoistConfigurationError,
    TodoistNotFoundError,
    TodoistRateLimitError,
)
from todoist_mcp.models import (
    ActivityEvent,
    Collaborator,
    Page,
    Project,
    Task,
    User,
    parse_project,
)
from todoist_mcp.settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="TodoistClient")


def _path_segment(value: str) -> str:
    """Percent-encode an ID for use as a single URL path segment."""
    segment = quote(value, safe="")
    # "." and ".." would be collapsed as dot-segments
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return segment


class TodoistClient:
    """
    Async client for the Todoist REST API v1.

    Only the read operations needed by the query tools are implemented.
    Nothing retries: every error is raised to the caller.
    """

    def __init__(
        self,
        api_token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_token:
            raise TodoistConfigurationError("A Todoist API token is required")

        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        api_token: Optional[str] = None,
    ) -> "TodoistClient":
        """
        Create a client from application settings.

        Args:
            settings: Settings to use (defaults to the cached settings)
            api_token: Token overriding the configured one, e.g. from a request header

        Returns:
            An unconnected TodoistClient

        Raises:
            TodoistConfigurationError: If no API token is available
        """
        settings = settings or get_settings()
        token = api_token or settings.get_api_token()
        if not token:
            raise TodoistConfigurationError(
                "No Todoist API token configured. Set TODOIST_API_TOKEN "
                "or send an X-Todoist-Token header."
            )
        return cls(token, base_url=settings.base_url, timeout=settings.timeout)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> None:
        """Open the underlying HTTP connection pool."""
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_token}",
                "Accept": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.debug("Todoist client connected to %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.debug("Todoist client disconnected")

    @property
    def is_connected(self) -> bool:
        return self._http is not None

    async def __aenter__(self: T) -> T:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        if self._http is None:
            raise TodoistConfigurationError(
                "Client not connected. Use 'await client.connect()' or async context manager."
            )

        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug("%s %s %s", method, path, query)

        try:
            response = await self._http.request(method, path, params=query)
        except httpx.TimeoutException as e:
            raise TodoistAPIError(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            raise TodoistAPIError(f"Request to {path} failed: {e}") from e

        if response.is_success:
            if not response.content:
                return None
            return response.json()

        raise self._error_from_response(response)

    @staticmethod
    def _error_from_response(response: httpx.Response) -> TodoistAPIError:
        """Translate an error response into the matching exception."""
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error"):
            message = str(body["error"])
            error_tag = body.get("error_tag")
            error_code = body.get("error_code")
        else:
            message = response.text.strip() or response.reason_phrase or f"HTTP {status}"
            error_tag = None
            error_code = None

        if status in (401, 403):
            error_cls: type[TodoistAPIError] = TodoistAuthenticationError
        elif status == 404:
            error_cls = TodoistNotFoundError
        elif status == 429:
            error_cls = TodoistRateLimitError
        else:
            error_cls = TodoistAPIError

        logger.warning("Todoist API error %s on %s: %s", status, response.request.url.path, message)
        return error_cls(
            message,
            http_status=status,
            error_tag=error_tag,
            error_code=error_code,
            response_data=body,
        )

    # =========================================================================
    # User
    # =========================================================================

    async def get_user(self) -> User:
        """Get the authenticated user."""
        data = await self._request("GET", "/user")
        return User.model_validate(data)

    # =========================================================================
    # Tasks
    # =========================================================================

    async def get_tasks(
        self,
        *,
        project_id: Optional[str] = None,
        section_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[Task]:
        """
        List active tasks, optionally inside one container.

        Args:
            project_id: Only tasks of this project
            section_id: Only tasks of this section
            parent_id: Only subtasks of this task
            limit: Page size
            cursor: Cursor from a previous page

        Returns:
            Page of tasks
        """
        data = await self._request(
            "GET",
            "/tasks",
            {
                "project_id": project_id,
                "section_id": section_id,
                "parent_id": parent_id,
                "limit": limit,
                "cursor": cursor,
            },
        )
        return self._task_page(data, "results")

    async def get_tasks_by_filter(
        self,
        query: str,
        *,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        lang: str = FILTER_LANG,
    ) -> Page[Task]:
        """
        List active tasks matching a Todoist filter query.

        Structured upstream errors are rewritten into readable messages: an
        unparsable query becomes ``Invalid filter query: <query>`` and any
        other tagged error keeps its message with the tag and code appended.

        Args:
            query: Filter query, e.g. ``search: milk & @errands``
            limit: Page size
            cursor: Cursor from a previous page
            lang: Language the query is written in

        Returns:
            Page of tasks
        """
        try:
            data = await self._request(
                "GET",
                "/tasks/filter",
                {"query": query, "lang": lang, "limit": limit, "cursor": cursor},
            )
        except TodoistAPIError as e:
            if not e.is_structured:
                raise
            if e.error_tag == "INVALID_SEARCH_QUERY":
                message = f"Invalid filter query: {query}"
            else:
                message = f"{e.message} (tag: {e.error_tag}, code: {e.error_code})"
            raise type(e)(
                message,
                http_status=e.http_status,
                error_tag=e.error_tag,
                error_code=e.error_code,
                response_data=e.response_data,
            ) from e
        return self._task_page(data, "results")

    async def get_task(self, task_id: str) -> Task:
        """Get a single active task by ID."""
        data = await self._request("GET", f"/tasks/{_path_segment(task_id)}")
        return Task.model_validate(data)

    async def get_completed_tasks_by_completion_date(
        self,
        *,
        since: str,
        until: str,
        project_id: Optional[str] = None,
        section_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        filter_query: Optional[str] = None,
        filter_lang: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[Task]:
        """
        List tasks completed within a UTC time window.

        Args:
            since: Window start, ``YYYY-MM-DDTHH:MM:SS.000Z``
            until: Window end, ``YYYY-MM-DDTHH:MM:SS.000Z``
            project_id: Only tasks of this project
            section_id: Only tasks of this section
            parent_id: Only subtasks of this task
            filter_query: Additional filter query
            filter_lang: Language of ``filter_query``
            limit: Page size
            cursor: Cursor from a previous page

        Returns:
            Page of completed tasks
        """
        data = await self._request(
            "GET",
            "/tasks/completed/by_completion_date",
            {
                "since": since,
                "until": until,
                "project_id": project_id,
                "section_id": section_id,
                "parent_id": parent_id,
                "filter_query": filter_query,
                "filter_lang": filter_lang,
                "limit": limit,
                "cursor": cursor,
            },
        )
        return self._task_page(data, "items")

    async def get_completed_tasks_by_due_date(
        self,
        *,
        since: str,
        until: str,
        project_id: Optional[str] = None,
        section_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        filter_query: Optional[str] = None,
        filter_lang: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[Task]:
        """List completed tasks whose due date falls within a UTC time window."""
        data = await self._request(
            "GET",
            "/tasks/completed/by_due_date",
            {
                "since": since,
                "until": until,
                "project_id": project_id,
                "section_id": section_id,
                "parent_id": parent_id,
                "filter_query": filter_query,
                "filter_lang": filter_lang,
                "limit": limit,
                "cursor": cursor,
            },
        )
        return self._task_page(data, "items")

    @staticmethod
    def _task_page(data: Any, key: str) -> Page[Task]:
        data = data or {}
        return Page(
            results=[Task.model_validate(t) for t in data.get(key, [])],
            next_cursor=data.get("next_cursor"),
        )

    # =========================================================================
    # Projects
    # =========================================================================

    async def get_projects(
        self,
        *,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[Project]:
        """List active projects."""
        data = await self._request("GET", "/projects", {"limit": limit, "cursor": cursor}) or {}
        return Page(
            results=[parse_project(p) for p in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )

    async def get_project(self, project_id: str) -> Project:
        """Get a single project by ID."""
        data = await self._request("GET", f"/projects/{_path_segment(project_id)}")
        return parse_project(data)

    async def get_project_collaborators(
        self,
        project_id: str,
        *,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[Collaborator]:
        """List the collaborators of a shared project."""
        data = await self._request(
            "GET",
            f"/projects/{_path_segment(project_id)}/collaborators",
            {"limit": limit, "cursor": cursor},
        ) or {}
        return Page(
            results=[Collaborator.model_validate(c) for c in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )

    async def get_all_collaborators(self, project_ids: list[str]) -> list[Collaborator]:
        """
        Collect the collaborators of several projects concurrently.

        Each project's pages are followed until exhausted. Users appearing
        in more than one project are returned once, first occurrence wins.
        """

        async def collect(project_id: str) -> list[Collaborator]:
            collaborators: list[Collaborator] = []
            cursor: Optional[str] = None
            while True:
                page = await self.get_project_collaborators(project_id, cursor=cursor)
                collaborators.extend(page.results)
                if not page.next_cursor:
                    return collaborators
                cursor = page.next_cursor

        per_project = await asyncio.gather(*(collect(pid) for pid in project_ids))

        unique: dict[str, Collaborator] = {}
        for collaborators in per_project:
            for collaborator in collaborators:
                unique.setdefault(collaborator.id, collaborator)
        return list(unique.values())

    # =========================================================================
    # Activity
    # =========================================================================

    async def get_activity_logs(
        self,
        *,
        object_type: Optional[str] = None,
        object_id: Optional[str] = None,
        event_type: Optional[str] = None,
        parent_project_id: Optional[str] = None,
        parent_item_id: Optional[str] = None,
        initiator_id: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[ActivityEvent]:
        """
        List activity log events, most recent first.

        Args:
            object_type: ``task``, ``project`` or ``comment``
            object_id: Only events of this object
            event_type: Only events of this type (e.g. ``completed``)
            parent_project_id: Only events inside this project
            parent_item_id: Only events of subtasks of this task
            initiator_id: Only events caused by this user
            limit: Page size
            cursor: Cursor from a previous page

        Returns:
            Page of activity events
        """
        data = await self._request(
            "GET",
            "/activities",
            {
                "object_type": object_type,
                "object_id": object_id,
                "event_type": event_type,
                "parent_project_id": parent_project_id,
                "parent_item_id": parent_item_id,
                "initiator_id": initiator_id,
                "limit": limit,
                "cursor": cursor,
            },
        ) or {}
        return Page(
            results=[ActivityEvent.model_validate(e) for e in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )
