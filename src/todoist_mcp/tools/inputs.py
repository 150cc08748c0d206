"""
Pydantic Input Models for Todoist MCP Tools.

This module defines the input validation models used by the MCP tools.
Each model includes field constraints and descriptions that are surfaced
to the calling agent as the tool's argument schema.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict, field_validator

from todoist_mcp.constants import (
    ApiLimits,
    CompletedTasksGetBy,
    EventType,
    LabelsOperator,
    ObjectType,
    OverdueOption,
    ResponsibleUserFiltering,
)
from todoist_mcp.tools.mapping import remove_null_fields

_CURSOR_DESCRIPTION = (
    "The cursor to get the next page of results (cursor is obtained from the "
    "previous call to this tool, with the same parameters)."
)


class BaseMCPInput(BaseModel):
    """Base input model with common configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )

    def applied_filters(self) -> dict:
        """Echo of the supplied arguments, for structured output."""
        return remove_null_fields(self.model_dump(mode="json", exclude_none=True))


class LabelsFilterInput(BaseMCPInput):
    """Label filtering arguments shared by the task search tools."""

    labels: Optional[List[str]] = Field(
        default=None,
        description="Labels to filter tasks by (e.g., ['work', 'urgent']).",
        max_length=50,
    )
    labels_operator: LabelsOperator = Field(
        default=LabelsOperator.OR,
        description=(
            "How to combine several labels: 'and' requires every label, "
            "'or' (default) requires any of them."
        ),
    )


def _validate_iso_date(value: Optional[str]) -> Optional[str]:
    if value is None or value == "today":
        return value
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}': expected YYYY-MM-DD") from e
    return value


# =============================================================================
# Task Search Input Models
# =============================================================================


class FindTasksInput(LabelsFilterInput):
    """Input for finding tasks by text, container, assignee or labels."""

    search_text: Optional[str] = Field(
        default=None,
        description="The text to search for in tasks.",
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Find tasks in this project.",
    )
    section_id: Optional[str] = Field(
        default=None,
        description="Find tasks in this section.",
    )
    parent_id: Optional[str] = Field(
        default=None,
        description="Find subtasks of this parent task.",
    )
    responsible_user: Optional[str] = Field(
        default=None,
        description="Find tasks assigned to this user. Can be a user ID, name, or email address.",
    )
    responsible_user_filtering: Optional[ResponsibleUserFiltering] = Field(
        default=None,
        description=(
            "How to filter by responsible user when responsible_user is not provided. "
            "'assigned' = only tasks assigned to others; 'unassignedOrMe' = only "
            "unassigned tasks or tasks assigned to me; 'all' = all tasks regardless "
            "of assignment. Default is 'unassignedOrMe'."
        ),
    )
    limit: int = Field(
        default=ApiLimits.TASKS_DEFAULT,
        description="The maximum number of tasks to return.",
        ge=1,
        le=ApiLimits.TASKS_MAX,
    )
    cursor: Optional[str] = Field(default=None, description=_CURSOR_DESCRIPTION)


class FindTasksByDateInput(LabelsFilterInput):
    """Input for finding tasks due within a date range."""

    start_date: Optional[str] = Field(
        default=None,
        description="The start date to get the tasks for. Format: YYYY-MM-DD or 'today'.",
        pattern=r"^(\d{4}-\d{2}-\d{2}|today)$",
    )
    overdue_option: Optional[OverdueOption] = Field(
        default=None,
        description=(
            "How to handle overdue tasks. 'overdue-only' to get only overdue tasks, "
            "'include-overdue' to include overdue tasks along with tasks for the "
            "specified date(s), and 'exclude-overdue' to exclude overdue tasks. "
            "Default is 'include-overdue'."
        ),
    )
    days_count: int = Field(
        default=1,
        description=(
            "The number of days to get the tasks for, starting from the start date. "
            "Default is 1 which means only tasks for the start date."
        ),
        ge=1,
        le=30,
    )
    responsible_user: Optional[str] = Field(
        default=None,
        description="Only tasks assigned to this user. Can be a user ID, name, or email address.",
    )
    responsible_user_filtering: Optional[ResponsibleUserFiltering] = Field(
        default=None,
        description=(
            "How to filter by responsible user. 'assigned' = only tasks assigned to "
            "others; 'unassignedOrMe' = only unassigned tasks or tasks assigned to me; "
            "'all' = all tasks regardless of assignment. Default is 'unassignedOrMe'."
        ),
    )
    limit: int = Field(
        default=ApiLimits.TASKS_DEFAULT,
        description="The maximum number of tasks to return.",
        ge=1,
        le=ApiLimits.TASKS_MAX,
    )
    cursor: Optional[str] = Field(default=None, description=_CURSOR_DESCRIPTION)

    @field_validator("start_date")
    @classmethod
    def validate_start_date(cls, v: Optional[str]) -> Optional[str]:
        return _validate_iso_date(v)


class FindCompletedTasksInput(LabelsFilterInput):
    """Input for finding completed tasks within a date range."""

    get_by: CompletedTasksGetBy = Field(
        default=CompletedTasksGetBy.COMPLETION,
        description=(
            "'completion' (default) to find tasks completed within the range, "
            "'due' to find completed tasks that were due within the range."
        ),
    )
    since: str = Field(
        ...,
        description="Start of the range (inclusive) in the user's time zone. Format: YYYY-MM-DD.",
        pattern=r"^\d{4}-\d{2}-\d{2}$",
    )
    until: str = Field(
        ...,
        description="End of the range (inclusive) in the user's time zone. Format: YYYY-MM-DD.",
        pattern=r"^\d{4}-\d{2}-\d{2}$",
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Only completed tasks of this project.",
    )
    section_id: Optional[str] = Field(
        default=None,
        description="Only completed tasks of this section.",
    )
    parent_id: Optional[str] = Field(
        default=None,
        description="Only completed subtasks of this parent task.",
    )
    responsible_user: Optional[str] = Field(
        default=None,
        description="Only tasks assigned to this user. Can be a user ID, name, or email address.",
    )
    limit: int = Field(
        default=ApiLimits.COMPLETED_TASKS_DEFAULT,
        description="The maximum number of tasks to return.",
        ge=1,
        le=ApiLimits.COMPLETED_TASKS_MAX,
    )
    cursor: Optional[str] = Field(default=None, description=_CURSOR_DESCRIPTION)

    @field_validator("since", "until")
    @classmethod
    def validate_dates(cls, v: str) -> str:
        return _validate_iso_date(v)  # type: ignore[return-value]


# =============================================================================
# Activity Input Models
# =============================================================================


class FindActivityInput(BaseMCPInput):
    """Input for browsing the activity log."""

    object_type: Optional[ObjectType] = Field(
        default=None,
        description="Type of object to filter by.",
    )
    object_id: Optional[str] = Field(
        default=None,
        description="Filter by specific object ID (task, project, or comment).",
    )
    event_type: Optional[EventType] = Field(
        default=None,
        description="Type of event to filter by.",
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Filter events by parent project ID.",
    )
    task_id: Optional[str] = Field(
        default=None,
        description="Filter events by parent task ID (for subtask events).",
    )
    initiator_id: Optional[str] = Field(
        default=None,
        description="Filter by the user ID who initiated the event.",
    )
    limit: int = Field(
        default=ApiLimits.ACTIVITY_DEFAULT,
        description="Maximum number of activity events to return.",
        ge=1,
        le=ApiLimits.ACTIVITY_MAX,
    )
    cursor: Optional[str] = Field(
        default=None,
        description="Pagination cursor for retrieving the next page of results.",
    )


# =============================================================================
# Search / Fetch Input Models
# =============================================================================


class SearchInput(BaseMCPInput):
    """Input for the combined task and project search."""

    query: str = Field(
        ...,
        description="The search query string to find tasks and projects.",
        min_length=1,
    )


class FetchInput(BaseMCPInput):
    """Input for fetching a task or project by composite ID."""

    id: str = Field(
        ...,
        description='A unique identifier for the document in the format "task:{id}" or "project:{id}".',
        min_length=1,
    )
