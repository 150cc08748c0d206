"""
Result mapper.

Reduces raw Todoist API models to the compact shapes handed to agents.
Mapped models serialize with camelCase keys.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from todoist_mcp.constants import APP_BASE_URL
from todoist_mcp.models import (
    ActivityEvent,
    Duration,
    PersonalProject,
    Project,
    Task,
)

MINUTES_PER_DAY = 24 * 60


class MappedModel(BaseModel):
    """Base for agent-facing models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, keeping nulls."""
        return self.model_dump(mode="json", by_alias=True)


class MappedTask(MappedModel):
    """A task as presented to agents."""

    id: str
    content: str
    description: str = ""
    due_date: Optional[str] = None
    # The human recurrence phrase, or False for one-off tasks
    recurring: Union[Literal[False], str] = False
    priority: int = 1
    project_id: Optional[str] = None
    section_id: Optional[str] = None
    parent_id: Optional[str] = None
    labels: list[str] = Field(default_factory=list)
    duration: Optional[str] = None
    responsible_uid: Optional[str] = None
    assigned_by_uid: Optional[str] = None


class MappedProject(MappedModel):
    """A project as presented to agents."""

    id: str
    name: str
    color: str
    is_favorite: bool = False
    is_shared: bool = False
    parent_id: Optional[str] = None
    inbox_project: bool = False
    view_style: str = "list"


class MappedActivityEvent(MappedModel):
    """An activity log entry as presented to agents."""

    id: Optional[str] = None
    object_type: str
    object_id: str
    event_type: str
    event_date: str
    parent_project_id: Optional[str] = None
    parent_item_id: Optional[str] = None
    initiator_id: Optional[str] = None
    extra_data: Optional[dict[str, Any]] = None


# =============================================================================
# Durations
# =============================================================================


def format_duration(minutes: int) -> str:
    """
    Compact duration string.

    Examples:
        >>> format_duration(0)
        '0m'
        >>> format_duration(90)
        '1h30m'
        >>> format_duration(120)
        '2h'
    """
    hours, rest = divmod(max(minutes, 0), 60)
    if hours == 0:
        return f"{rest}m"
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h{rest}m"


def duration_to_minutes(duration: Duration) -> int:
    if duration.unit == "day":
        return duration.amount * MINUTES_PER_DAY
    return duration.amount


# =============================================================================
# Mappers
# =============================================================================


def map_task(task: Task) -> MappedTask:
    """Map a raw task."""
    due = task.due
    recurring: Union[Literal[False], str] = False
    if due is not None and due.is_recurring and due.string:
        recurring = due.string

    return MappedTask(
        id=task.id,
        content=task.content,
        description=task.description or "",
        due_date=due.date if due else None,
        recurring=recurring,
        priority=task.priority,
        project_id=task.project_id,
        section_id=task.section_id,
        parent_id=task.parent_id,
        labels=list(task.labels),
        duration=format_duration(duration_to_minutes(task.duration)) if task.duration else None,
        responsible_uid=task.responsible_uid,
        assigned_by_uid=task.assigned_by_uid,
    )


def map_project(project: Project) -> MappedProject:
    """Map a raw project; nesting and inbox only exist on personal projects."""
    personal = isinstance(project, PersonalProject)
    return MappedProject(
        id=project.id,
        name=project.name,
        color=project.color,
        is_favorite=project.is_favorite,
        is_shared=project.is_shared,
        parent_id=project.parent_id if personal else None,
        inbox_project=project.inbox_project if personal else False,
        view_style=project.view_style,
    )


def map_activity_event(event: ActivityEvent) -> MappedActivityEvent:
    """Map a raw activity log entry."""
    return MappedActivityEvent(
        id=event.id,
        object_type=event.object_type,
        object_id=event.object_id,
        event_type=event.event_type,
        event_date=event.event_date,
        parent_project_id=event.parent_project_id,
        parent_item_id=event.parent_item_id,
        initiator_id=event.initiator_id,
        extra_data=event.extra_data,
    )


# =============================================================================
# Helpers
# =============================================================================


def build_todoist_url(kind: Literal["task", "project"], object_id: str) -> str:
    """Web app URL of a task or project."""
    return f"{APP_BASE_URL}/{kind}/{object_id}"


def remove_null_fields(obj: Any) -> Any:
    """
    Recursively drop nulls, empty dicts and empty lists.

    Falsy scalars such as ``0``, ``False`` and ``""`` are kept.
    """
    if isinstance(obj, list):
        return [remove_null_fields(item) for item in obj]
    if isinstance(obj, dict):
        cleaned: dict[str, Any] = {}
        for key, value in obj.items():
            if value is None:
                continue
            value = remove_null_fields(value)
            if isinstance(value, (list, dict)) and not value:
                continue
            cleaned[key] = value
        return cleaned
    return obj
