"""
find-activity tool.

Browses the Todoist activity log: who added, changed, completed or
deleted which task, project or comment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from mcp.types import CallToolResult

from todoist_mcp.constants import ToolNames
from todoist_mcp.tools.formatting import (
    get_tool_output,
    list_payload,
    preview_activity_events,
    summarize_list,
)
from todoist_mcp.tools.inputs import FindActivityInput
from todoist_mcp.tools.mapping import MappedActivityEvent, map_activity_event

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient


async def find_activity(params: FindActivityInput, client: "TodoistClient") -> CallToolResult:
    """
    Execute an activity log query.

    Only the filters that were supplied are sent; ``project_id`` and
    ``task_id`` select events by their parent project and parent task.
    """
    page = await client.get_activity_logs(
        object_type=params.object_type.value if params.object_type else None,
        object_id=params.object_id,
        event_type=params.event_type.value if params.event_type else None,
        parent_project_id=params.project_id,
        parent_item_id=params.task_id,
        initiator_id=params.initiator_id,
        limit=params.limit,
        cursor=params.cursor,
    )
    events = [map_activity_event(event) for event in page.results]

    text = _generate_text(events, params, next_cursor=page.next_cursor)
    return get_tool_output(
        text,
        list_payload("events", events, page.next_cursor, params.applied_filters()),
    )


def _generate_text(
    events: Sequence[MappedActivityEvent],
    params: FindActivityInput,
    *,
    next_cursor: Optional[str],
) -> str:
    event_type = params.event_type.value if params.event_type else None
    object_type = params.object_type.value if params.object_type else None

    subject_parts: list[str] = []
    if event_type:
        subject_parts.append(event_type)
    if object_type:
        subject_parts.append(f"{object_type}s")
    subject = f"Activity: {' '.join(subject_parts)}" if subject_parts else "Activity events"

    filter_hints: list[str] = []
    if params.object_id:
        filter_hints.append(f"object ID: {params.object_id}")
    if params.project_id:
        filter_hints.append(f"project: {params.project_id}")
    if params.task_id:
        filter_hints.append(f"task: {params.task_id}")
    if params.initiator_id:
        filter_hints.append(f"initiator: {params.initiator_id}")

    zero_reason_hints: list[str] = []
    if not events:
        zero_reason_hints.append("No activity events match the specified filters")
        zero_reason_hints.append("Note: Activity logs only show recent events")
        if event_type:
            zero_reason_hints.append(f"Try removing the event_type filter ({event_type})")
        if object_type:
            zero_reason_hints.append(f"Try removing the object_type filter ({object_type})")
        if params.object_id or params.project_id or params.task_id:
            zero_reason_hints.append("Verify the object ID is correct")

    next_steps: list[str] = []
    if events:
        # "item" is the legacy object type of tasks
        if any(e.object_type in ("task", "item") for e in events):
            next_steps.append(f"Use {ToolNames.FIND_TASKS} to view current task details")
        if any(e.event_type == "completed" for e in events):
            next_steps.append("Review completed tasks to track productivity")
        if params.initiator_id:
            next_steps.append(f"Use {ToolNames.USER_INFO} to get details about the user")
        if len(events) >= params.limit and not next_cursor:
            next_steps.append("Add more specific filters to narrow down results")

    return summarize_list(
        subject=subject,
        count=len(events),
        limit=params.limit,
        next_cursor=next_cursor,
        filter_hints=filter_hints,
        preview_lines=preview_activity_events(events, min(len(events), params.limit)),
        zero_reason_hints=zero_reason_hints,
        next_steps=next_steps,
    )
