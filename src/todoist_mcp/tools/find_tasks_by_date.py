"""
find-tasks-by-date tool.

Finds active tasks due on a day or within a window of days, optionally
with overdue tasks, narrowed by labels and assignee. All filtering runs
upstream through a single filter query.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from mcp.types import CallToolResult

from todoist_mcp.constants import OverdueOption
from todoist_mcp.tools.filters import (
    FilterQueryBuilder,
    build_date_range_filter,
    build_responsible_user_query_filter,
    get_end_date,
)
from todoist_mcp.tools.formatting import (
    generate_task_next_steps,
    get_tool_output,
    has_overdue_tasks,
    has_today_tasks,
    list_payload,
    preview_tasks,
    summarize_list,
)
from todoist_mcp.tools.inputs import FindTasksByDateInput
from todoist_mcp.tools.labels import describe_labels, generate_labels_filter
from todoist_mcp.tools.mapping import MappedTask, map_task
from todoist_mcp.tools.users import resolve_responsible_user

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient

logger = logging.getLogger(__name__)


async def find_tasks_by_date(params: FindTasksByDateInput, client: "TodoistClient") -> CallToolResult:
    """
    Execute a date-range task search.

    Raises:
        TodoistValidationError: If neither ``start_date`` nor overdue-only mode is given
        UserNotFoundError: If ``responsible_user`` matches nobody
    """
    date_filter = build_date_range_filter(
        params.start_date,
        params.days_count,
        params.overdue_option,
    )

    resolved = await resolve_responsible_user(client, params.responsible_user)

    query = (
        FilterQueryBuilder()
        .add(date_filter)
        .add(generate_labels_filter(params.labels, params.labels_operator))
        .add(
            build_responsible_user_query_filter(
                resolved.email if resolved else None,
                params.responsible_user_filtering,
            )
        )
        .build()
    )
    logger.debug("find-tasks-by-date query: %s", query)

    page = await client.get_tasks_by_filter(query, limit=params.limit, cursor=params.cursor)
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
    params: FindTasksByDateInput,
    *,
    next_cursor: Optional[str],
    assignee_email: Optional[str],
) -> str:
    overdue_only = params.overdue_option == OverdueOption.OVERDUE_ONLY
    exclude_overdue = params.overdue_option == OverdueOption.EXCLUDE_OVERDUE
    is_today = params.start_date == "today"

    filter_hints: list[str] = []
    if overdue_only:
        filter_hints.append("overdue tasks only")
    elif is_today:
        overdue_text = "" if exclude_overdue else " + overdue tasks"
        more_days = f" + {params.days_count - 1} more days" if params.days_count > 1 else ""
        filter_hints.append(f"today{overdue_text}{more_days}")
    elif params.start_date:
        date_range = (
            f" to {get_end_date(params.start_date, params.days_count)}"
            if params.days_count > 1
            else ""
        )
        filter_hints.append(f"{params.start_date}{date_range}")

    label_text = describe_labels(params.labels, params.labels_operator)
    if label_text:
        filter_hints.append(f"labels: {label_text}")
    if assignee_email:
        filter_hints.append(f"assigned to {assignee_email}")

    if overdue_only:
        subject = "Overdue tasks"
    elif is_today:
        subject = "Today's tasks" if exclude_overdue else "Today's tasks + overdue"
    elif params.start_date:
        subject = f"Tasks for {params.start_date}"
    else:
        subject = "Tasks"

    zero_reason_hints: list[str] = []
    if not tasks:
        if overdue_only:
            zero_reason_hints.append("Great job! No overdue tasks")
        elif is_today:
            overdue_note = "" if exclude_overdue else " or overdue"
            zero_reason_hints.append(f"Great job! No tasks for today{overdue_note}")
        else:
            zero_reason_hints.append("Expand date range with larger 'days_count'")
            zero_reason_hints.append("Check today's tasks with start_date='today'")

    next_steps = generate_task_next_steps(
        "listed",
        tasks,
        has_today=is_today or has_today_tasks(tasks),
        has_overdue=overdue_only or is_today or has_overdue_tasks(tasks),
    )

    return summarize_list(
        subject=subject,
        count=len(tasks),
        limit=params.limit,
        next_cursor=next_cursor,
        filter_hints=filter_hints,
        preview_lines=preview_tasks(tasks, min(len(tasks), params.limit)),
        zero_reason_hints=zero_reason_hints,
        next_steps=next_steps,
    )
