"""
Tests for the Todoist HTTP client.

Requests are served by ``httpx.MockTransport``, so no network is used.
"""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from todoist_mcp.client import TodoistClient
from todoist_mcp.exceptions import (
    TodoistAPIError,
    TodoistAuthenticationError,
    TodoistConfigurationError,
    TodoistNotFoundError,
    TodoistRateLimitError,
)
from todoist_mcp.models import PersonalProject, WorkspaceProject
from todoist_mcp.settings import Settings


pytestmark = [pytest.mark.unit, pytest.mark.client]

BASE_URL = "https://api.todoist.test/api/v1"


class RecordingHandler:
    """MockTransport handler replaying canned responses and recording requests."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def json_response(status: int, body: Any) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=body)


@pytest.fixture
async def make_client():
    """Build a connected client around a handler."""
    clients: list[TodoistClient] = []

    async def factory(respond) -> tuple[TodoistClient, RecordingHandler]:
        handler = RecordingHandler(respond)
        client = TodoistClient(
            "secret-token",
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
        )
        await client.connect()
        clients.append(client)
        return client, handler

    yield factory

    for client in clients:
        await client.disconnect()


class TestLifecycle:
    """Tests for construction and connection handling."""

    def test_token_required(self):
        with pytest.raises(TodoistConfigurationError):
            TodoistClient("")

    def test_from_settings_without_token(self):
        with pytest.raises(TodoistConfigurationError):
            TodoistClient.from_settings(Settings(api_token=None))

    def test_from_settings_override(self):
        client = TodoistClient.from_settings(Settings(api_token=None), api_token="header-token")
        assert not client.is_connected

    async def test_request_before_connect(self):
        client = TodoistClient("secret-token", base_url=BASE_URL)
        with pytest.raises(TodoistConfigurationError, match="not connected"):
            await client.get_user()

    async def test_context_manager(self):
        handler = RecordingHandler(json_response(200, {"id": "1", "email": "a@b.c"}))
        async with TodoistClient(
            "secret-token", base_url=BASE_URL, transport=httpx.MockTransport(handler)
        ) as client:
            assert client.is_connected
            await client.get_user()
        assert not client.is_connected


class TestRequests:
    """Tests for request construction and response parsing."""

    async def test_bearer_token(self, make_client):
        client, handler = await make_client(json_response(200, {"id": "1", "email": "a@b.c"}))

        user = await client.get_user()

        assert handler.last.headers["Authorization"] == "Bearer secret-token"
        assert handler.last.url.path == "/api/v1/user"
        assert user.timezone == "UTC"

    async def test_none_params_dropped(self, make_client):
        client, handler = await make_client(json_response(200, {"results": [], "next_cursor": None}))

        await client.get_tasks(project_id="p1", limit=10)

        assert dict(handler.last.url.params) == {"project_id": "p1", "limit": "10"}

    async def test_filter_query_params(self, make_client):
        client, handler = await make_client(
            json_response(
                200,
                {
                    "results": [{"id": 123, "content": "Buy milk", "project_id": "p1", "priority": 4}],
                    "next_cursor": "next",
                },
            )
        )

        page = await client.get_tasks_by_filter("search: milk & (@errands)", limit=5)

        assert handler.last.url.path == "/api/v1/tasks/filter"
        assert dict(handler.last.url.params) == {
            "query": "search: milk & (@errands)",
            "lang": "en",
            "limit": "5",
        }
        assert page.results[0].id == "123"
        assert page.next_cursor == "next"

    async def test_completed_tasks_use_items_key(self, make_client):
        client, handler = await make_client(
            json_response(200, {"items": [{"id": "1", "content": "Done", "project_id": "p1"}]})
        )

        page = await client.get_completed_tasks_by_due_date(
            since="2025-08-01T00:00:00.000Z", until="2025-08-01T23:59:59.000Z"
        )

        assert handler.last.url.path == "/api/v1/tasks/completed/by_due_date"
        assert len(page.results) == 1
        assert page.next_cursor is None

    async def test_project_variants(self, make_client):
        client, _ = await make_client(
            json_response(
                200,
                {
                    "results": [
                        {"id": "p1", "name": "Inbox", "inbox_project": True},
                        {"id": "p2", "name": "Team", "workspace_id": "w1", "access_level": "admin"},
                    ]
                },
            )
        )

        page = await client.get_projects(limit=200)

        assert isinstance(page.results[0], PersonalProject)
        assert isinstance(page.results[1], WorkspaceProject)

    async def test_collaborators_paged_and_deduplicated(self, make_client):
        pages = {
            ("a", None): {"results": [{"id": "u1", "name": "Ann"}], "next_cursor": "a2"},
            ("a", "a2"): {"results": [{"id": "u2", "name": "Bob"}], "next_cursor": None},
            ("b", None): {"results": [{"id": "u1", "name": "Ann"}], "next_cursor": None},
        }

        def respond(request: httpx.Request) -> httpx.Response:
            project_id = request.url.path.split("/")[-2]
            return httpx.Response(200, json=pages[(project_id, request.url.params.get("cursor"))])

        client, handler = await make_client(respond)

        collaborators = await client.get_all_collaborators(["a", "b"])

        assert [c.id for c in collaborators] == ["u1", "u2"]
        assert len(handler.requests) == 3


class TestPathEncoding:
    """Tests for IDs placed in URL paths."""

    @pytest.mark.parametrize("task_id, raw_path", [
        ("8485093748", b"/api/v1/tasks/8485093748"),
        ("../projects/abc?x=1", b"/api/v1/tasks/..%2Fprojects%2Fabc%3Fx%3D1"),
        ("1#frag", b"/api/v1/tasks/1%23frag"),
        ("..", b"/api/v1/tasks/%2E%2E"),
    ])
    async def test_task_id_stays_one_segment(self, make_client, task_id, raw_path):
        client, handler = await make_client(
            json_response(200, {"id": task_id, "content": "x", "project_id": "p1"})
        )

        await client.get_task(task_id)

        assert handler.last.url.raw_path == raw_path

    async def test_project_ids_are_encoded(self, make_client):
        client, handler = await make_client(json_response(200, {"results": []}))

        await client.get_project_collaborators("a/b")

        assert handler.last.url.raw_path == b"/api/v1/projects/a%2Fb/collaborators"


class TestErrors:
    """Tests for error translation."""

    @pytest.mark.parametrize("status, error_cls", [
        (401, TodoistAuthenticationError),
        (403, TodoistAuthenticationError),
        (404, TodoistNotFoundError),
        (429, TodoistRateLimitError),
        (500, TodoistAPIError),
    ])
    async def test_status_mapping(self, make_client, status, error_cls):
        client, _ = await make_client(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(error_cls) as exc_info:
            await client.get_task("1")

        assert exc_info.value.http_status == status
        assert exc_info.value.message == "nope"

    async def test_structured_error(self, make_client):
        client, _ = await make_client(
            json_response(400, {"error": "Bad request", "error_tag": "BAD", "error_code": 42})
        )

        with pytest.raises(TodoistAPIError) as exc_info:
            await client.get_projects()

        assert exc_info.value.is_structured
        assert exc_info.value.error_tag == "BAD"
        assert exc_info.value.error_code == 42

    async def test_invalid_filter_query(self, make_client):
        client, _ = await make_client(
            json_response(
                400,
                {"error": "Invalid argument", "error_tag": "INVALID_SEARCH_QUERY", "error_code": 478},
            )
        )

        with pytest.raises(TodoistAPIError) as exc_info:
            await client.get_tasks_by_filter("due: whenever")

        assert str(exc_info.value) == "Invalid filter query: due: whenever"
        assert exc_info.value.error_tag == "INVALID_SEARCH_QUERY"

    async def test_other_structured_filter_error(self, make_client):
        client, _ = await make_client(
            json_response(403, {"error": "Forbidden", "error_tag": "AUTH_INVALID_TOKEN", "error_code": 401})
        )

        with pytest.raises(TodoistAuthenticationError) as exc_info:
            await client.get_tasks_by_filter("today")

        assert str(exc_info.value) == "Forbidden (tag: AUTH_INVALID_TOKEN, code: 401)"

    async def test_unstructured_filter_error_unchanged(self, make_client):
        client, _ = await make_client(lambda request: httpx.Response(502, text="Bad gateway"))

        with pytest.raises(TodoistAPIError) as exc_info:
            await client.get_tasks_by_filter("today")

        assert str(exc_info.value) == "Bad gateway"

    async def test_transport_failure(self, make_client):
        def respond(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = await make_client(respond)

        with pytest.raises(TodoistAPIError, match="failed"):
            await client.get_user()

    async def test_timeout(self, make_client):
        def respond(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client, _ = await make_client(respond)

        with pytest.raises(TodoistAPIError, match="timed out"):
            await client.get_user()
