"""
find-tasks tool.

Finds active tasks by free text, container (project, section or parent
task), assignee or labels. Container searches list the container directly
and filter the page in memory; everything else becomes a filter query.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from mcp.types import CallToolResult

from todoist_mcp.constants import ResponsibleUserFiltering, ToolNames
from todoist_mcp.tools.filters import (
    ContainerQuery,
    filter_tasks_by_labels,
    filter_tasks_by_responsible_user,
    filter_tasks_by_text,
    plan_task_query,
    validate_task_filters,
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
from todoist_mcp.tools.inputs import FindTasksInput
from todoist_mcp.tools.labels import describe_labels
from todoist_mcp.tools.mapping import MappedTask, map_task
from todoist_mcp.tools.users import resolve_responsible_user

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient

logger = logging.getLogger(__name__)


async def find_tasks(params: FindTasksInput, client: "TodoistClient") -> CallToolResult:
    """
    Execute a task search.

    Args:
        params: Validated tool arguments
        client: Todoist API client

    Returns:
        Summary text plus structured ``tasks`` payload

    Raises:
        MissingFilterError: If no filter was given (before any API call)
        UserNotFoundError: If ``responsible_user`` matches nobody
    """
    validate_task_filters(
        search_text=params.search_text,
        project_id=params.project_id,
        section_id=params.section_id,
        parent_id=params.parent_id,
        responsible_user=params.responsible_user,
        labels=params.labels,
    )

    resolved = await resolve_responsible_user(client, params.responsible_user)

    plan = plan_task_query(
        search_text=params.search_text,
        project_id=params.project_id,
        section_id=params.section_id,
        parent_id=params.parent_id,
        labels=params.labels,
        labels_operator=params.labels_operator,
        resolved_user=resolved,
        responsible_user_filtering=params.responsible_user_filtering,
    )
    logger.debug("find-tasks plan: %s", plan)

    if isinstance(plan, ContainerQuery):
        mode = params.responsible_user_filtering or ResponsibleUserFiltering.UNASSIGNED_OR_ME
        current_user_id: Optional[str] = None
        if resolved is None and mode == ResponsibleUserFiltering.UNASSIGNED_OR_ME:
            current_user_id = (await client.get_user()).id

        page = await client.get_tasks(
            project_id=plan.project_id,
            section_id=plan.section_id,
            parent_id=plan.parent_id,
            limit=params.limit,
            cursor=params.cursor,
        )
        tasks = [map_task(task) for task in page.results]
        tasks = filter_tasks_by_text(tasks, params.search_text)
        tasks = filter_tasks_by_responsible_user(
            tasks,
            resolved_assignee_id=resolved.user_id if resolved else None,
            current_user_id=current_user_id,
            mode=mode,
        )
        tasks = filter_tasks_by_labels(tasks, params.labels, params.labels_operator)
    else:
        page = await client.get_tasks_by_filter(plan.query, limit=params.limit, cursor=params.cursor)
        tasks = [map_task(task) for task in page.results]

    text = _generate_text(
        tasks,
        params,
        next_cursor=page.next_cursor,
        is_container_search=isinstance(plan, ContainerQuery),
        assignee_email=resolved.email if resolved else None,
    )
    return get_tool_output(
        text,
        list_payload("tasks", tasks, page.next_cursor, params.applied_filters()),
    )


def _container_zero_reason_hints(params: FindTasksInput) -> list[str]:
    if params.project_id:
        if params.search_text:
            return ["No tasks in project match search"]
        return ["Project has no tasks yet", f"Use {ToolNames.ADD_TASKS} to create tasks"]
    if params.section_id:
        if params.search_text:
            return ["No tasks in section match search"]
        return ["Section is empty", "Tasks may be in other sections of the project"]
    if params.parent_id:
        if params.search_text:
            return ["No subtasks match search"]
        return ["No subtasks created yet", f"Use {ToolNames.ADD_TASKS} with parent_id to add subtasks"]
    return []


def _generate_text(
    tasks: Sequence[MappedTask],
    params: FindTasksInput,
    *,
    next_cursor: Optional[str],
    is_container_search: bool,
    assignee_email: Optional[str],
) -> str:
    email = assignee_email or params.responsible_user
    label_text = describe_labels(params.labels, params.labels_operator)
    filter_hints: list[str] = []
    zero_reason_hints: list[str] = []

    if is_container_search:
        if params.project_id:
            subject = "Tasks in project"
            filter_hints.append(f"in project {params.project_id}")
        elif params.section_id:
            subject = "Tasks in section"
            filter_hints.append(f"in section {params.section_id}")
        else:
            subject = "Subtasks"
            filter_hints.append(f"subtasks of {params.parent_id}")

        if params.search_text:
            subject += f' matching "{params.search_text}"'
            filter_hints.append(f'containing "{params.search_text}"')
        if params.responsible_user:
            subject += f" assigned to {email}"
            filter_hints.append(f"assigned to {email}")
        if label_text:
            filter_hints.append(f"labels: {label_text}")

        if not tasks:
            zero_reason_hints.extend(_container_zero_reason_hints(params))
    else:
        subject_parts: list[str] = []
        if params.search_text:
            subject_parts.append(f'"{params.search_text}"')
        if params.responsible_user:
            subject_parts.append(f"assigned to {email}")
        if label_text:
            subject_parts.append(f"with labels: {label_text}")

        if params.search_text:
            subject = f"Search results for {' '.join(subject_parts)}"
            filter_hints.append(f'matching "{params.search_text}"')
        elif params.responsible_user and not label_text:
            subject = f"Tasks assigned to {email}"
        elif label_text and not params.responsible_user:
            subject = f"Tasks with labels: {label_text}"
        else:
            subject = f"Tasks {' '.join(subject_parts)}"

        if params.responsible_user:
            filter_hints.append(f"assigned to {email}")
        if label_text:
            filter_hints.append(f"labels: {label_text}")

        if not tasks:
            if params.responsible_user:
                zero_reason_hints.append(f"No tasks assigned to {email}")
                zero_reason_hints.append("Check if the user name is correct")
                zero_reason_hints.append(f"Check completed tasks with {ToolNames.FIND_COMPLETED_TASKS}")
            if params.search_text:
                zero_reason_hints.append("Try broader search terms")
                zero_reason_hints.append("Verify spelling and try partial words")
                if not params.responsible_user:
                    zero_reason_hints.append(
                        f"Check completed tasks with {ToolNames.FIND_COMPLETED_TASKS}"
                    )

    next_steps = generate_task_next_steps(
        "listed",
        tasks,
        has_today=has_today_tasks(tasks),
        has_overdue=has_overdue_tasks(tasks),
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
