"""
Responsible-user resolver.

Maps a free-form person identifier (user ID, name or email) to a Todoist
user among the caller and the collaborators of the caller's shared
projects.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from todoist_mcp.constants import ApiLimits
from todoist_mcp.exceptions import UserNotFoundError
from todoist_mcp.models import Collaborator, Project

if TYPE_CHECKING:
    from todoist_mcp.client import TodoistClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedUser:
    """A person identified well enough to filter tasks by."""

    user_id: str
    email: str


def match_user(candidates: Sequence[Collaborator], identifier: str) -> Optional[Collaborator]:
    """
    Find the candidate an identifier refers to.

    Matching order: exact ID, exact email (case-insensitive), exact name
    (case-insensitive), then a partial name or email match. A partial match
    only counts when it is unique.

    Args:
        candidates: Users to search
        identifier: User ID, name or email address

    Returns:
        The matching candidate, or None
    """
    needle = identifier.strip()
    if not needle:
        return None
    lowered = needle.lower()

    for candidate in candidates:
        if candidate.id == needle:
            return candidate
    for candidate in candidates:
        if candidate.email and candidate.email.lower() == lowered:
            return candidate
    for candidate in candidates:
        if candidate.name and candidate.name.lower() == lowered:
            return candidate

    partial = [
        candidate
        for candidate in candidates
        if lowered in candidate.name.lower() or lowered in candidate.email.lower()
    ]
    if len(partial) == 1:
        return partial[0]
    if partial:
        logger.info("Identifier %r is ambiguous (%d partial matches)", identifier, len(partial))
    return None


async def _list_all_projects(client: "TodoistClient") -> list[Project]:
    projects: list[Project] = []
    cursor: Optional[str] = None
    while True:
        page = await client.get_projects(limit=ApiLimits.PROJECTS_MAX, cursor=cursor)
        projects.extend(page.results)
        if not page.next_cursor:
            return projects
        cursor = page.next_cursor


async def get_known_users(client: "TodoistClient") -> list[Collaborator]:
    """The caller followed by every collaborator of their shared projects."""
    user, projects = await asyncio.gather(client.get_user(), _list_all_projects(client))

    shared_ids = [project.id for project in projects if project.is_shared]
    collaborators = await client.get_all_collaborators(shared_ids) if shared_ids else []

    known = [Collaborator(id=user.id, name=user.full_name, email=user.email)]
    known.extend(c for c in collaborators if c.id != user.id)
    return known


async def resolve_user_name_to_id(
    client: "TodoistClient",
    identifier: str,
) -> Optional[ResolvedUser]:
    """
    Resolve a user ID, name or email to a known user.

    Returns:
        The resolved user, or None when nobody matches
    """
    if not identifier or not identifier.strip():
        return None
    match = match_user(await get_known_users(client), identifier)
    if match is None:
        return None
    return ResolvedUser(user_id=match.id, email=match.email)


async def resolve_responsible_user(
    client: "TodoistClient",
    identifier: Optional[str],
) -> Optional[ResolvedUser]:
    """
    Resolve the ``responsible_user`` argument of a tool.

    Args:
        client: Todoist API client
        identifier: User ID, name or email; None means no user filtering

    Returns:
        The resolved user, or None when no identifier was given

    Raises:
        UserNotFoundError: If an identifier was given but matches nobody
    """
    if not identifier:
        return None

    resolved = await resolve_user_name_to_id(client, identifier)
    if resolved is None:
        raise UserNotFoundError(identifier)

    logger.debug("Resolved responsible user %r to %s", identifier, resolved.user_id)
    return resolved
