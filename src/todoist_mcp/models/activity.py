"""
Raw Todoist activity log model.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityEvent(BaseModel):
    """A single entry of the Todoist activity log."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: Optional[str] = None
    object_type: str
    object_id: str
    event_type: str
    event_date: str
    parent_project_id: Optional[str] = None
    parent_item_id: Optional[str] = None
    # None means the event was generated by the system
    initiator_id: Optional[str] = None
    extra_data: Optional[dict[str, Any]] = Field(default=None)
