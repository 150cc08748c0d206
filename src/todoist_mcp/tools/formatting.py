"""
Response summarizer.

Builds the plain-text summaries returned by the list tools, and the
``CallToolResult`` envelopes that carry them. Summaries follow one layout:

    <subject>: <count> (limit <limit>)[, more available].
    Filter: <hint>; <hint>.
    Preview:
        <line>
    No results. <hint>; <hint>.
    Possible suggested next steps:
    - <step>

Sections without content are left out.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from mcp.types import CallToolResult, TextContent

from todoist_mcp.constants import DisplayLimits, TaskPriority, ToolNames
from todoist_mcp.tools.mapping import MappedActivityEvent, MappedTask

PREVIEW_INDENT = "    "


# =============================================================================
# Small Helpers
# =============================================================================


def truncate(text: str, max_length: int) -> str:
    """Cut text longer than ``max_length``, ending it with ``...``."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def get_date_string(value: Optional[date] = None) -> str:
    """``YYYY-MM-DD`` of a date, or of today."""
    value = value or date.today()
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def format_priority(priority: int) -> str:
    """Display form of an API priority: 4 is shown as P1, 1 as P4."""
    try:
        return TaskPriority(priority).name
    except ValueError:
        return ""


def has_today_tasks(tasks: Iterable[MappedTask], today: Optional[str] = None) -> bool:
    today = today or get_date_string()
    return any(task.due_date and task.due_date[:10] == today for task in tasks)


def has_overdue_tasks(tasks: Iterable[MappedTask], today: Optional[str] = None) -> bool:
    today = today or get_date_string()
    return any(task.due_date and task.due_date[:10] < today for task in tasks)


# =============================================================================
# Summaries
# =============================================================================


def summarize_list(
    *,
    subject: str,
    count: int,
    limit: int,
    next_cursor: Optional[str] = None,
    filter_hints: Optional[Sequence[str]] = None,
    preview_lines: str = "",
    zero_reason_hints: Optional[Sequence[str]] = None,
    next_steps: Optional[Sequence[str]] = None,
) -> str:
    """
    Assemble a list summary.

    Args:
        subject: What was listed, e.g. ``Tasks in project``
        count: Number of results in this page
        limit: Requested page size
        next_cursor: Cursor of the next page, if any
        filter_hints: Active filters, in display form
        preview_lines: Pre-rendered preview block
        zero_reason_hints: Diagnostics shown only when nothing was found
        next_steps: Suggested follow-up actions

    Returns:
        The summary text
    """
    more = ", more available" if next_cursor else ""
    lines = [f"{subject}: {count} (limit {limit}){more}."]

    if filter_hints:
        lines.append(f"Filter: {'; '.join(filter_hints)}.")

    if preview_lines:
        lines.append("Preview:")
        lines.append(preview_lines)

    if count == 0 and zero_reason_hints:
        lines.append(f"No results. {'; '.join(zero_reason_hints)}.")

    steps = list(next_steps or [])
    if next_cursor:
        steps.append(f"Pass cursor '{next_cursor}' to fetch more results.")
    if steps:
        lines.append("Possible suggested next steps:")
        lines.extend(f"- {step}" for step in steps)

    return "\n".join(lines)


def format_task_preview(task: MappedTask) -> str:
    """One preview line: content, due date, priority and ID."""
    parts = [truncate(task.content, DisplayLimits.TASK_CONTENT)]
    if task.due_date:
        parts.append(f"due {task.due_date}")
    priority = format_priority(task.priority)
    if priority:
        parts.append(priority)
    parts.append(f"id={task.id}")
    return PREVIEW_INDENT + " • ".join(parts)


def preview_tasks(tasks: Sequence[MappedTask], limit: int = 5) -> str:
    """Preview block for up to ``limit`` tasks."""
    lines = [format_task_preview(task) for task in tasks[:limit]]
    if len(tasks) > limit:
        lines.append(f"{PREVIEW_INDENT}...and {len(tasks) - limit} more")
    return "\n".join(lines)


def format_event_date(iso_date: str) -> str:
    """Render an ISO timestamp as e.g. ``Oct 23, 14:30``, always in UTC."""
    try:
        parsed = datetime.fromisoformat(iso_date.replace("Z", "+00:00"))
    except ValueError:
        return iso_date
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    parsed = parsed.astimezone(timezone.utc)
    return f"{parsed:%b} {parsed.day}, {parsed:%H:%M}"


def _event_content(event: MappedActivityEvent) -> Optional[str]:
    extra = event.extra_data or {}
    for key in ("content", "name", "last_content"):
        value = extra.get(key)
        if value and isinstance(value, str):
            return value
    return None


def format_activity_event_preview(event: MappedActivityEvent) -> str:
    """One preview line for an activity event."""
    line = f"{PREVIEW_INDENT}[{format_event_date(event.event_date)}] {event.event_type} {event.object_type}"

    content = _event_content(event)
    if content:
        line += f' • "{truncate(content, DisplayLimits.EVENT_CONTENT)}"'
    if event.object_id:
        line += f" • id={event.object_id}"
    line += f" • by={event.initiator_id}" if event.initiator_id else " • system"
    if event.parent_project_id:
        line += f" • project={event.parent_project_id}"
    return line


def preview_activity_events(events: Sequence[MappedActivityEvent], limit: int = 10) -> str:
    """Preview block for up to ``limit`` activity events."""
    lines = [format_activity_event_preview(event) for event in events[:limit]]
    if len(events) > limit:
        remaining = len(events) - limit
        lines.append(f"{PREVIEW_INDENT}... and {remaining} more event{'' if remaining == 1 else 's'}")
    return "\n".join(lines)


def generate_task_next_steps(
    action: str,
    tasks: Sequence[MappedTask],
    *,
    has_today: bool = False,
    has_overdue: bool = False,
) -> list[str]:
    """
    Suggest follow-up tools for a list of tasks.

    Args:
        action: What happened to the tasks (``listed`` or ``completed``)
        tasks: The tasks shown to the agent
        has_today: Whether the list covers tasks due today
        has_overdue: Whether the list covers overdue tasks

    Returns:
        Next-step suggestions, most relevant first
    """
    steps: list[str] = []
    if tasks and (has_overdue or has_today):
        steps.append(f"Use {ToolNames.UPDATE_TASKS} to modify priorities or due dates")
    if tasks and action != "completed":
        steps.append(f"Use {ToolNames.COMPLETE_TASKS} to mark tasks as done")
    if not has_today and not has_overdue:
        steps.append(f"Use {ToolNames.FIND_TASKS_BY_DATE} to see today's and overdue tasks")
    return steps


# =============================================================================
# Tool Envelopes
# =============================================================================


def get_tool_output(text: str, structured_content: dict[str, Any]) -> CallToolResult:
    """Successful result with a text summary and structured content."""
    return CallToolResult(
        content=[TextContent(type="text", text=text)],
        structuredContent=structured_content,
    )


def get_json_output(text: str) -> CallToolResult:
    """Successful result carrying only a JSON document as text."""
    return CallToolResult(content=[TextContent(type="text", text=text)])


def get_error_output(message: str) -> CallToolResult:
    """Error result with a plain-text message."""
    return CallToolResult(
        content=[TextContent(type="text", text=message)],
        isError=True,
    )


def list_payload(
    key: str,
    items: Sequence[Any],
    next_cursor: Optional[str],
    applied_filters: dict[str, Any],
) -> dict[str, Any]:
    """Structured content shared by the list tools."""
    return {
        key: [item.to_dict() for item in items],
        "nextCursor": next_cursor,
        "totalCount": len(items),
        "hasMore": bool(next_cursor),
        "appliedFilters": applied_filters,
    }
