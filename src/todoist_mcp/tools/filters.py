"""
Filter-query assembler.

Builds Todoist filter-language queries from tool arguments, or decides
that a request is better served by listing a container (project, section
or parent task) directly and filtering the page in memory.

Queries are assembled from standalone fragments joined with `` & ``.
Empty fragments are skipped, so a query never starts or ends with an
operator, and identical arguments always produce identical queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, TypeVar, Union

from todoist_mcp.constants import LabelsOperator, OverdueOption, ResponsibleUserFiltering
from todoist_mcp.exceptions import MissingFilterError, TodoistValidationError
from todoist_mcp.tools.labels import generate_labels_filter
from todoist_mcp.tools.mapping import MappedTask
from todoist_mcp.tools.users import ResolvedUser

TASK_FILTER_FIELDS = [
    "search_text",
    "project_id",
    "section_id",
    "parent_id",
    "responsible_user",
    "labels",
]

M = TypeVar("M", bound=MappedTask)


# =============================================================================
# Query Composition
# =============================================================================


def append_to_query(query: str, fragment: str) -> str:
    """Append a fragment, inserting `` & `` only between non-empty parts."""
    if not fragment:
        return query
    if not query:
        return fragment
    return f"{query} & {fragment}"


class FilterQueryBuilder:
    """
    Ordered builder for filter queries.

    Usage:
        query = (
            FilterQueryBuilder()
            .add("search: milk")
            .add(generate_labels_filter(labels))
            .build()
        )
    """

    def __init__(self) -> None:
        self._fragments: list[str] = []

    def add(self, fragment: Optional[str]) -> "FilterQueryBuilder":
        if fragment:
            self._fragments.append(fragment)
        return self

    def build(self) -> str:
        query = ""
        for fragment in self._fragments:
            query = append_to_query(query, fragment)
        return query


def build_responsible_user_query_filter(
    assignee_email: Optional[str] = None,
    mode: Optional[ResponsibleUserFiltering] = None,
) -> str:
    """
    Filter fragment restricting tasks by assignee.

    A resolved assignee takes precedence over the filtering mode.

    Args:
        assignee_email: Email of a specifically requested user
        mode: Filtering mode, defaults to ``unassignedOrMe``

    Returns:
        ``assigned to: <email>``, ``!assigned to: others``,
        ``assigned to: others``, or an empty string for ``all``
    """
    if assignee_email:
        return f"assigned to: {assignee_email}"

    mode = ResponsibleUserFiltering(mode or ResponsibleUserFiltering.UNASSIGNED_OR_ME)
    if mode == ResponsibleUserFiltering.UNASSIGNED_OR_ME:
        return "!assigned to: others"
    if mode == ResponsibleUserFiltering.ASSIGNED:
        return "assigned to: others"
    return ""


def get_end_date(start_date: str, days_count: int) -> str:
    """Exclusive end of a window of ``days_count`` days starting on ``start_date``."""
    return (date.fromisoformat(start_date) + timedelta(days=days_count)).isoformat()


def build_date_range_filter(
    start_date: Optional[str],
    days_count: int = 1,
    overdue_option: Optional[OverdueOption] = None,
) -> str:
    """
    Filter fragment selecting tasks due in a date window.

    Args:
        start_date: ``YYYY-MM-DD`` or ``today``
        days_count: Window length in days (only used with explicit dates)
        overdue_option: How overdue tasks are treated

    Returns:
        The date fragment

    Raises:
        TodoistValidationError: If there is neither a start date nor overdue-only mode
    """
    if overdue_option == OverdueOption.OVERDUE_ONLY:
        return "overdue"
    if not start_date:
        raise TodoistValidationError(
            "Either start_date must be provided or overdue_option must be set to overdue-only"
        )
    if start_date == "today":
        if overdue_option == OverdueOption.EXCLUDE_OVERDUE:
            return "today"
        return "(today | overdue)"

    # Explicit dates never include overdue tasks
    end_date = get_end_date(start_date, days_count)
    return f"(due after: {start_date} | due: {start_date}) & due before: {end_date}"


# =============================================================================
# Task Query Planning
# =============================================================================


@dataclass(frozen=True)
class ContainerQuery:
    """List a container directly, then filter the page in memory."""

    project_id: Optional[str] = None
    section_id: Optional[str] = None
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class FilterQuery:
    """Delegate all filtering to the filter endpoint."""

    query: str


TaskQueryPlan = Union[ContainerQuery, FilterQuery]


def validate_task_filters(
    *,
    search_text: Optional[str] = None,
    project_id: Optional[str] = None,
    section_id: Optional[str] = None,
    parent_id: Optional[str] = None,
    responsible_user: Optional[str] = None,
    labels: Optional[Sequence[str]] = None,
) -> None:
    """
    Require at least one discriminating filter.

    Raises:
        MissingFilterError: If no filter was given
    """
    if not any((search_text, project_id, section_id, parent_id, responsible_user, labels)):
        raise MissingFilterError(TASK_FILTER_FIELDS)


def plan_task_query(
    *,
    search_text: Optional[str] = None,
    project_id: Optional[str] = None,
    section_id: Optional[str] = None,
    parent_id: Optional[str] = None,
    labels: Optional[Sequence[str]] = None,
    labels_operator: LabelsOperator = LabelsOperator.OR,
    resolved_user: Optional[ResolvedUser] = None,
    responsible_user_filtering: Optional[ResponsibleUserFiltering] = None,
) -> TaskQueryPlan:
    """
    Decide how a task search is executed.

    Any container ID selects direct listing. Otherwise a filter query is
    built from the search text, labels and assignee, in that order. When a
    resolved user is the only criterion the query is just
    ``assigned to: <email>``.

    Returns:
        A ContainerQuery or a FilterQuery
    """
    if project_id or section_id or parent_id:
        return ContainerQuery(
            project_id=project_id,
            section_id=section_id,
            parent_id=parent_id,
        )

    if resolved_user and not search_text and not labels:
        return FilterQuery(query=f"assigned to: {resolved_user.email}")

    query = (
        FilterQueryBuilder()
        .add(f"search: {search_text}" if search_text else "")
        .add(generate_labels_filter(labels, labels_operator))
        .add(
            build_responsible_user_query_filter(
                resolved_user.email if resolved_user else None,
                responsible_user_filtering,
            )
        )
        .build()
    )
    return FilterQuery(query=query)


# =============================================================================
# In-Memory Filters (container mode)
# =============================================================================


def filter_tasks_by_text(tasks: Iterable[M], search_text: Optional[str]) -> list[M]:
    """Keep tasks whose content or description contains the text (case-insensitive)."""
    if not search_text:
        return list(tasks)
    needle = search_text.lower()
    return [
        task
        for task in tasks
        if needle in task.content.lower() or needle in (task.description or "").lower()
    ]


def filter_tasks_by_labels(
    tasks: Iterable[M],
    labels: Optional[Sequence[str]],
    operator: LabelsOperator = LabelsOperator.OR,
) -> list[M]:
    """Keep tasks carrying all (``and``) or any (``or``) of the labels."""
    if not labels:
        return list(tasks)
    wanted = {label[1:] if label.startswith("@") else label for label in labels}
    if LabelsOperator(operator) == LabelsOperator.AND:
        return [task for task in tasks if wanted.issubset(task.labels)]
    return [task for task in tasks if wanted.intersection(task.labels)]


def filter_tasks_by_responsible_user(
    tasks: Iterable[M],
    *,
    resolved_assignee_id: Optional[str],
    current_user_id: Optional[str],
    mode: Optional[ResponsibleUserFiltering] = None,
) -> list[M]:
    """
    Keep tasks matching the assignee criteria.

    A resolved assignee keeps only their tasks. Without one, the
    ``unassignedOrMe`` mode keeps unassigned tasks and the caller's own;
    other modes keep everything.
    """
    if resolved_assignee_id:
        return [task for task in tasks if task.responsible_uid == resolved_assignee_id]

    mode = ResponsibleUserFiltering(mode or ResponsibleUserFiltering.UNASSIGNED_OR_ME)
    if mode == ResponsibleUserFiltering.UNASSIGNED_OR_ME:
        return [
            task
            for task in tasks
            if not task.responsible_uid or task.responsible_uid == current_user_id
        ]
    return list(tasks)
