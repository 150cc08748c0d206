"""
Constants for the Todoist MCP server.

Tool names, API paging limits and the small enumerations shared between
the tool inputs, the query assembler and the response builders.
"""

from __future__ import annotations

from enum import Enum, IntEnum

DEFAULT_BASE_URL = "https://api.todoist.com/api/v1"
APP_BASE_URL = "https://app.todoist.com/app"

# Filter language used when sending filter queries upstream
FILTER_LANG = "en"


class ToolNames:
    """Names under which tools are registered (and referenced in hints)."""

    FIND_TASKS = "find-tasks"
    FIND_TASKS_BY_DATE = "find-tasks-by-date"
    FIND_COMPLETED_TASKS = "find-completed-tasks"
    FIND_ACTIVITY = "find-activity"
    SEARCH = "search"
    FETCH = "fetch"

    # Tools served by companion servers, referenced in next-step hints
    ADD_TASKS = "add-tasks"
    UPDATE_TASKS = "update-tasks"
    COMPLETE_TASKS = "complete-tasks"
    USER_INFO = "user-info"


class ApiLimits:
    """Page size defaults and maxima accepted by the tools."""

    TASKS_DEFAULT = 10
    TASKS_MAX = 100
    COMPLETED_TASKS_DEFAULT = 50
    COMPLETED_TASKS_MAX = 200
    ACTIVITY_DEFAULT = 20
    ACTIVITY_MAX = 100
    PROJECTS_MAX = 200


class DisplayLimits:
    """Character budgets for preview lines."""

    TASK_CONTENT = 80
    EVENT_CONTENT = 50


class LabelsOperator(str, Enum):
    """Boolean operator used to combine several labels."""

    AND = "and"
    OR = "or"


class ResponsibleUserFiltering(str, Enum):
    """How to filter tasks by assignee when no specific user is given."""

    ASSIGNED = "assigned"
    UNASSIGNED_OR_ME = "unassignedOrMe"
    ALL = "all"


class OverdueOption(str, Enum):
    """How overdue tasks are treated by the date-range search."""

    OVERDUE_ONLY = "overdue-only"
    INCLUDE_OVERDUE = "include-overdue"
    EXCLUDE_OVERDUE = "exclude-overdue"


class CompletedTasksGetBy(str, Enum):
    """Which date a completed-task search is anchored on."""

    COMPLETION = "completion"
    DUE = "due"


class ObjectType(str, Enum):
    """Activity log object types."""

    TASK = "task"
    PROJECT = "project"
    COMMENT = "comment"


class EventType(str, Enum):
    """Activity log event types."""

    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    COMPLETED = "completed"
    UNCOMPLETED = "uncompleted"
    ARCHIVED = "archived"
    UNARCHIVED = "unarchived"
    SHARED = "shared"
    LEFT = "left"


class TaskPriority(IntEnum):
    """
    Todoist API priority values.

    The API uses 4 for the most urgent priority, which users see as "P1".
    """

    P4 = 1
    P3 = 2
    P2 = 3
    P1 = 4
