"""
Raw Todoist task model.

Mirrors the task object returned by the Todoist REST API v1. Only the
fields the tools read are declared; everything else is ignored.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Due(BaseModel):
    """Due date metadata of a task."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    date: str
    string: Optional[str] = None
    is_recurring: bool = False
    timezone: Optional[str] = None
    lang: Optional[str] = None


class Duration(BaseModel):
    """Planned duration of a task."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    amount: int = Field(ge=0)
    unit: Literal["minute", "day"] = "minute"


class Task(BaseModel):
    """A Todoist task as returned by the API."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    content: str
    description: Optional[str] = None
    project_id: str
    section_id: Optional[str] = None
    parent_id: Optional[str] = None
    labels: list[str] = Field(default_factory=list)
    priority: int = Field(default=1, ge=1, le=4)
    due: Optional[Due] = None
    duration: Optional[Duration] = None
    responsible_uid: Optional[str] = None
    assigned_by_uid: Optional[str] = None
    checked: bool = False
    completed_at: Optional[str] = None
    added_at: Optional[str] = None
