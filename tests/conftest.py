"""
Pytest Configuration and Fixtures for Todoist MCP Tests.

This module provides fixtures, mock factories, and shared utilities for
testing the Todoist MCP tools.

Architecture:
    - MockTodoistClient: Async stand-in for TodoistClient
    - Factories: Generate raw API models (tasks, projects, events, users)
    - Fixtures: Provide configured mocks and sample data
    - Markers: Custom pytest markers for test categorization
"""

from __future__ import annotations

import json
from datetime import date, timedelta
from typing import Any, Optional

import pytest
from mcp.types import CallToolResult

from todoist_mcp.exceptions import TodoistNotFoundError
from todoist_mcp.models import (
    ActivityEvent,
    Collaborator,
    Due,
    Duration,
    Page,
    PersonalProject,
    Project,
    Task,
    TimezoneInfo,
    User,
    WorkspaceProject,
)


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "tasks: Task search tests")
    config.addinivalue_line("markers", "activity: Activity log tests")
    config.addinivalue_line("markers", "search: Search and fetch tests")
    config.addinivalue_line("markers", "client: HTTP client tests")
    config.addinivalue_line("markers", "errors: Error handling tests")


# =============================================================================
# Date Utilities
# =============================================================================


def today_str() -> str:
    """Today's date as YYYY-MM-DD."""
    return date.today().isoformat()


def days_from_today(n: int) -> str:
    """YYYY-MM-DD of the date n days from today (negative for the past)."""
    return (date.today() + timedelta(days=n)).isoformat()


# =============================================================================
# Result Helpers
# =============================================================================


def extract_text(result: CallToolResult) -> str:
    """Text of the single content item of a tool result."""
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    return result.content[0].text


def extract_json(result: CallToolResult) -> Any:
    """Parse the JSON document carried by a tool result."""
    return json.loads(extract_text(result))


# =============================================================================
# ID Generators
# =============================================================================


class IDGenerator:
    """Sequential ID generator for test objects."""

    _counter: int = 0

    @classmethod
    def reset(cls) -> None:
        """Reset counter (call in fixtures)."""
        cls._counter = 0

    @classmethod
    def next_id(cls) -> str:
        """Generate next unique numeric-looking ID."""
        cls._counter += 1
        return str(8485093700 + cls._counter)


# =============================================================================
# Factories
# =============================================================================


class TaskFactory:
    """Factory for creating raw Task objects."""

    @staticmethod
    def create(
        id: str | None = None,
        content: str = "Test Task",
        description: str = "",
        project_id: str = "6cfCcrrCFg2xP94Q",
        section_id: str | None = None,
        parent_id: str | None = None,
        labels: list[str] | None = None,
        priority: int = 1,
        due_date: str | None = None,
        due_string: str | None = None,
        is_recurring: bool = False,
        duration: int | None = None,
        duration_unit: str = "minute",
        responsible_uid: str | None = None,
        assigned_by_uid: str | None = None,
        **kwargs,
    ) -> Task:
        """Create a Task with sensible defaults."""
        return Task(
            id=id or IDGenerator.next_id(),
            content=content,
            description=description,
            project_id=project_id,
            section_id=section_id,
            parent_id=parent_id,
            labels=labels or [],
            priority=priority,
            due=Due(date=due_date, string=due_string, is_recurring=is_recurring) if due_date else None,
            duration=Duration(amount=duration, unit=duration_unit) if duration is not None else None,
            responsible_uid=responsible_uid,
            assigned_by_uid=assigned_by_uid,
            **kwargs,
        )

    @staticmethod
    def create_due_today(**kwargs) -> Task:
        return TaskFactory.create(due_date=today_str(), **kwargs)

    @staticmethod
    def create_overdue(days: int = 3, **kwargs) -> Task:
        return TaskFactory.create(due_date=days_from_today(-days), **kwargs)

    @staticmethod
    def create_batch(count: int, **kwargs) -> list[Task]:
        return [TaskFactory.create(content=f"Task {i + 1}", **kwargs) for i in range(count)]


class ProjectFactory:
    """Factory for creating raw project objects."""

    @staticmethod
    def create(
        id: str | None = None,
        name: str = "Test Project",
        color: str = "charcoal",
        is_favorite: bool = False,
        is_shared: bool = False,
        view_style: str = "list",
        parent_id: str | None = None,
        inbox_project: bool = False,
    ) -> PersonalProject:
        """Create a personal project."""
        return PersonalProject(
            id=id or IDGenerator.next_id(),
            name=name,
            color=color,
            is_favorite=is_favorite,
            is_shared=is_shared,
            view_style=view_style,
            parent_id=parent_id,
            inbox_project=inbox_project,
        )

    @staticmethod
    def create_workspace(
        id: str | None = None,
        name: str = "Team Project",
        is_shared: bool = True,
        **kwargs,
    ) -> WorkspaceProject:
        """Create a workspace project."""
        return WorkspaceProject(
            id=id or IDGenerator.next_id(),
            name=name,
            is_shared=is_shared,
            workspace_id="ws-1",
            access_level="member",
            **kwargs,
        )


class ActivityEventFactory:
    """Factory for creating raw ActivityEvent objects."""

    @staticmethod
    def create(
        object_type: str = "task",
        object_id: str | None = None,
        event_type: str = "added",
        event_date: str = "2025-10-23T14:30:00Z",
        parent_project_id: str | None = "6cfCcrrCFg2xP94Q",
        parent_item_id: str | None = None,
        initiator_id: str | None = "user-123",
        extra_data: dict[str, Any] | None = None,
        id: str | None = None,
    ) -> ActivityEvent:
        """Create an activity event with sensible defaults."""
        return ActivityEvent(
            id=id or IDGenerator.next_id(),
            object_type=object_type,
            object_id=object_id or IDGenerator.next_id(),
            event_type=event_type,
            event_date=event_date,
            parent_project_id=parent_project_id,
            parent_item_id=parent_item_id,
            initiator_id=initiator_id,
            extra_data=extra_data,
        )


class UserFactory:
    """Factory for creating User objects."""

    @staticmethod
    def create(
        id: str = "test-user-id",
        email: str = "test@example.com",
        full_name: str = "Test User",
        timezone: str = "UTC",
        hours: int = 0,
    ) -> User:
        """Create a User with sensible defaults."""
        return User(
            id=id,
            email=email,
            full_name=full_name,
            tz_info=TimezoneInfo(timezone=timezone, hours=hours),
        )


class CollaboratorFactory:
    """Factory for creating Collaborator objects."""

    @staticmethod
    def create(id: str, name: str, email: str) -> Collaborator:
        return Collaborator(id=id, name=name, email=email)


# =============================================================================
# Mock Client
# =============================================================================


class MockTodoistClient:
    """
    Mock for TodoistClient.

    Each listing method serves a configurable list of results plus an
    optional next cursor. All calls are recorded for verification, and any
    method can be told to fail.
    """

    def __init__(self):
        """Initialize mock with empty data stores."""
        self.user: User = UserFactory.create()
        self.tasks: list[Task] = []
        self.filter_tasks: list[Task] = []
        self.completed_tasks: list[Task] = []
        self.projects: list[Project] = []
        self.collaborators: dict[str, list[Collaborator]] = {}
        self.events: list[ActivityEvent] = []

        # Next cursor per listing method
        self.next_cursors: dict[str, Optional[str]] = {}

        # Track method calls for verification
        self.call_history: list[tuple[str, tuple, dict]] = []

        # Configurable behaviors
        self.should_fail: dict[str, Exception | None] = {}

    def _record_call(self, method: str, args: tuple, kwargs: dict) -> None:
        """Record method call for verification."""
        self.call_history.append((method, args, kwargs))

    def _check_failure(self, method: str) -> None:
        """Check if method should raise an exception."""
        if method in self.should_fail and self.should_fail[method]:
            raise self.should_fail[method]

    def _serve(self, method: str, results: list, args: tuple, kwargs: dict) -> Page:
        self._record_call(method, args, kwargs)
        self._check_failure(method)
        return Page(results=list(results), next_cursor=self.next_cursors.get(method))

    # -------------------------------------------------------------------------
    # User
    # -------------------------------------------------------------------------

    async def get_user(self) -> User:
        self._record_call("get_user", (), {})
        self._check_failure("get_user")
        return self.user

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def get_tasks(self, **kwargs) -> Page[Task]:
        return self._serve("get_tasks", self.tasks, (), kwargs)

    async def get_tasks_by_filter(self, query: str, **kwargs) -> Page[Task]:
        return self._serve("get_tasks_by_filter", self.filter_tasks, (query,), kwargs)

    async def get_task(self, task_id: str) -> Task:
        self._record_call("get_task", (task_id,), {})
        self._check_failure("get_task")
        for task in [*self.tasks, *self.filter_tasks, *self.completed_tasks]:
            if task.id == task_id:
                return task
        raise TodoistNotFoundError("Task not found", http_status=404)

    async def get_completed_tasks_by_completion_date(self, **kwargs) -> Page[Task]:
        return self._serve(
            "get_completed_tasks_by_completion_date", self.completed_tasks, (), kwargs
        )

    async def get_completed_tasks_by_due_date(self, **kwargs) -> Page[Task]:
        return self._serve("get_completed_tasks_by_due_date", self.completed_tasks, (), kwargs)

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def get_projects(self, **kwargs) -> Page[Project]:
        return self._serve("get_projects", self.projects, (), kwargs)

    async def get_project(self, project_id: str) -> Project:
        self._record_call("get_project", (project_id,), {})
        self._check_failure("get_project")
        for project in self.projects:
            if project.id == project_id:
                return project
        raise TodoistNotFoundError("Project not found", http_status=404)

    async def get_project_collaborators(self, project_id: str, **kwargs) -> Page[Collaborator]:
        return self._serve(
            "get_project_collaborators",
            self.collaborators.get(project_id, []),
            (project_id,),
            kwargs,
        )

    async def get_all_collaborators(self, project_ids: list[str]) -> list[Collaborator]:
        self._record_call("get_all_collaborators", (project_ids,), {})
        self._check_failure("get_all_collaborators")
        unique: dict[str, Collaborator] = {}
        for project_id in project_ids:
            for collaborator in self.collaborators.get(project_id, []):
                unique.setdefault(collaborator.id, collaborator)
        return list(unique.values())

    # -------------------------------------------------------------------------
    # Activity
    # -------------------------------------------------------------------------

    async def get_activity_logs(self, **kwargs) -> Page[ActivityEvent]:
        return self._serve("get_activity_logs", self.events, (), kwargs)

    # -------------------------------------------------------------------------
    # Setup & Verification Helpers
    # -------------------------------------------------------------------------

    def add_shared_project(self, project_id: str, collaborators: list[Collaborator]) -> None:
        """Register a shared project and its collaborators."""
        self.projects.append(ProjectFactory.create(id=project_id, name="Shared", is_shared=True))
        self.collaborators[project_id] = collaborators

    def clear_call_history(self) -> None:
        """Clear recorded method calls."""
        self.call_history.clear()

    def get_calls(self, method_name: str) -> list[tuple[tuple, dict]]:
        """Get all calls to a specific method."""
        return [(args, kwargs) for name, args, kwargs in self.call_history if name == method_name]

    def last_call(self, method_name: str) -> tuple[tuple, dict]:
        """Get the most recent call to a specific method."""
        calls = self.get_calls(method_name)
        assert calls, f"Expected {method_name} to have been called"
        return calls[-1]

    def assert_called(self, method_name: str, times: int | None = None) -> None:
        """Assert a method was called (optionally a specific number of times)."""
        calls = self.get_calls(method_name)
        if times is not None:
            assert len(calls) == times, f"Expected {method_name} to be called {times} times, got {len(calls)}"
        else:
            assert len(calls) > 0, f"Expected {method_name} to be called at least once"

    def assert_not_called(self, method_name: str) -> None:
        """Assert a method was not called."""
        calls = self.get_calls(method_name)
        assert len(calls) == 0, f"Expected {method_name} not to be called, but was called {len(calls)} times"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def id_generator():
    """Reset and provide ID generator."""
    IDGenerator.reset()
    return IDGenerator


@pytest.fixture
def mock_client() -> MockTodoistClient:
    """Create a fresh mock client instance."""
    return MockTodoistClient()


@pytest.fixture
def team_client(mock_client: MockTodoistClient) -> MockTodoistClient:
    """Mock client whose user shares a project with two collaborators."""
    mock_client.add_shared_project(
        "shared-1",
        [
            CollaboratorFactory.create("user-456", "John Doe", "john@example.com"),
            CollaboratorFactory.create("user-789", "Jane Smith", "jane@example.com"),
        ],
    )
    return mock_client


@pytest.fixture
def task_factory() -> type[TaskFactory]:
    """Provide TaskFactory class."""
    return TaskFactory


@pytest.fixture
def project_factory() -> type[ProjectFactory]:
    """Provide ProjectFactory class."""
    return ProjectFactory


@pytest.fixture
def event_factory() -> type[ActivityEventFactory]:
    """Provide ActivityEventFactory class."""
    return ActivityEventFactory
