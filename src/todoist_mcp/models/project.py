"""
Raw Todoist project models.

Todoist serves two kinds of project: personal projects owned by a user,
and workspace projects owned by a team workspace. They share most fields
but only personal projects can be nested or be the inbox, so they are kept
as two separate models and told apart by their shape.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class PersonalProject(BaseModel):
    """A project owned by an individual user."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    color: str = "charcoal"
    is_favorite: bool = False
    is_shared: bool = False
    view_style: str = "list"
    parent_id: Optional[str] = None
    inbox_project: bool = False


class WorkspaceProject(BaseModel):
    """A project owned by a team workspace."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    color: str = "charcoal"
    is_favorite: bool = False
    is_shared: bool = False
    view_style: str = "list"
    workspace_id: Optional[str] = None
    folder_id: Optional[str] = None
    access_level: Optional[str] = None


Project = Union[PersonalProject, WorkspaceProject]


def is_workspace_project_data(data: dict[str, Any]) -> bool:
    """Shape guard: workspace projects carry a workspace or access level."""
    if "inbox_project" in data:
        return False
    return data.get("workspace_id") is not None or "access_level" in data


def parse_project(data: dict[str, Any]) -> Project:
    """Build the right project variant from a raw API payload."""
    if is_workspace_project_data(data):
        return WorkspaceProject.model_validate(data)
    return PersonalProject.model_validate(data)
