"""
Todoist API Data Models.

This package provides Pydantic models for the raw objects returned by the
Todoist REST API v1. Tools never expose these directly; they are reduced
to compact shapes by ``todoist_mcp.tools.mapping``.

Models:
    - Task: Task with due and duration metadata
    - PersonalProject / WorkspaceProject: The two project variants
    - ActivityEvent: Activity log entry
    - User: Authenticated user profile
    - Collaborator: User sharing a project
    - Page: One page of a cursor-paginated listing
"""

from todoist_mcp.models.task import Task, Due, Duration
from todoist_mcp.models.project import (
    Project,
    PersonalProject,
    WorkspaceProject,
    parse_project,
)
from todoist_mcp.models.activity import ActivityEvent
from todoist_mcp.models.user import User, Collaborator, TimezoneInfo
from todoist_mcp.models.page import Page

__all__ = [
    "Task",
    "Due",
    "Duration",
    "Project",
    "PersonalProject",
    "WorkspaceProject",
    "parse_project",
    "ActivityEvent",
    "User",
    "Collaborator",
    "TimezoneInfo",
    "Page",
]
