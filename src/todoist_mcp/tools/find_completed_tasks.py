"""
find-completed-tasks tool.

Lists tasks completed (or due) within a range of days. The range is given
in the user's own calendar days and converted to UTC instants using the
time zone of their Todoist profile.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mcp.types import CallToolResult

from todoist_mcp.constants import FILTER_LANG, CompletedTasksGetBy
from todoist_mcp.models import User
from todoist_mcp.tools.filters import FilterQueryBuilder
from todoist_mcp.tools.formatting import (
    generate_task_next_steps,
    get_tool_output,
    list_payload,
    preview_tasks,
    summarize_list,
)
from todoist_mcp.tools.inputs import FindCompletedTasksInput
from todoist_mcp.tools.labels import describe_labels, generate_labels_filter
from todoist_mcp.tools.mapping import MappedTask, map_task
from todoist_mcp.tools.users import resolve_responsible_user

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient

logger = logging.getLogger(__name__)

START_OF_DAY = time(0, 0, 0)
END_OF_DAY = time(23, 59, 59)


def get_user_timezone(user: User) -> tzinfo:
    """
    Time zone of a Todoist user.

    Unknown zone names fall back to the fixed UTC offset of the profile.
    """
    name = user.timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        tz_info = user.tz_info
        offset = timedelta(hours=tz_info.hours, minutes=tz_info.minutes) if tz_info else timedelta(0)
        logger.warning("Unknown time zone %r, using fixed offset %s", name, offset)
        return timezone(offset)


def to_utc_timestamp(day: str, at: time, tz: tzinfo) -> str:
    """
    Convert a local calendar day and time to a UTC timestamp.

    Examples:
        >>> to_utc_timestamp("2025-10-11", START_OF_DAY, ZoneInfo("Europe/Madrid"))
        '2025-10-10T22:00:00.000Z'
    """
    local = datetime.combine(date.fromisoformat(day), at, tzinfo=tz)
    return local.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


async def find_completed_tasks(
    params: FindCompletedTasksInput,
    client: "TodoistClient",
) -> CallToolResult:
    """
    Execute a completed-task search.

    Args:
        params: Validated tool arguments
        client: Todoist API client

    Returns:
        Summary text plus structured ``tasks`` payload

    Raises:
        UserNotFoundError: If ``responsible_user`` matches nobody
    """
    user = await client.get_user()
    tz = get_user_timezone(user)

    resolved = await resolve_responsible_user(client, params.responsible_user)

    filter_query = (
        FilterQueryBuilder()
        .add(generate_labels_filter(params.labels, params.labels_operator))
        .add(f"assigned to: {resolved.email}" if resolved else "")
        .build()
    )

    fetch = (
        client.get_completed_tasks_by_due_date
        if params.get_by == CompletedTasksGetBy.DUE
        else client.get_completed_tasks_by_completion_date
    )
    page = await fetch(
        since=to_utc_timestamp(params.since, START_OF_DAY, tz),
        until=to_utc_timestamp(params.until, END_OF_DAY, tz),
        project_id=params.project_id,
        section_id=params.section_id,
        parent_id=params.parent_id,
        filter_query=filter_query or None,
        filter_lang=FILTER_LANG if filter_query else None,
        limit=params.limit,
        cursor=params.cursor,
    )
    tasks = [map_task(task) for task in page.results]

    text = _generate_text(
        tasks,
        params,
        next_cursor=page.next_cursor,
        assignee_email=resolved.email if resolved else None,
    )
    return get_tool_output(
        text,
        list_payload("tasks", tasks, page.next_cursor, params.applied_filters()),
    )


def _generate_text(
    tasks: Sequence[MappedTask],
    params: FindCompletedTasksInput,
    *,
    next_cursor: Optional[str],
    assignee_email: Optional[str],
) -> str:
    by_due = params.get_by == CompletedTasksGetBy.DUE
    subject = "Completed tasks (by due date)" if by_due else "Completed tasks (by completion date)"

    filter_hints = [f"{'due' if by_due else 'completed'} {params.since} to {params.until}"]
    if params.project_id:
        filter_hints.append(f"in project {params.project_id}")
    if params.section_id:
        filter_hints.append(f"in section {params.section_id}")
    if params.parent_id:
        filter_hints.append(f"subtasks of {params.parent_id}")
    label_text = describe_labels(params.labels, params.labels_operator)
    if label_text:
        filter_hints.append(f"labels: {label_text}")
    if assignee_email:
        filter_hints.append(f"assigned to {assignee_email}")

    zero_reason_hints: list[str] = []
    if not tasks:
        zero_reason_hints.append(
            "No tasks were due in this range" if by_due else "No tasks completed in this range"
        )
        zero_reason_hints.append("Try expanding the date range")
        if params.project_id or params.section_id or params.parent_id or label_text:
            zero_reason_hints.append("Try removing project, section or label filters")
        if not by_due:
            zero_reason_hints.append("Try get_by='due' to search by due date instead")

    return summarize_list(
        subject=subject,
        count=len(tasks),
        limit=params.limit,
        next_cursor=next_cursor,
        filter_hints=filter_hints,
        preview_lines=preview_tasks(tasks, min(len(tasks), params.limit)),
        zero_reason_hints=zero_reason_hints,
        next_steps=generate_task_next_steps("completed", tasks),
    )
