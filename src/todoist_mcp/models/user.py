"""
Raw Todoist user and collaborator models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class TimezoneInfo(BaseModel):
    """Time zone settings of a Todoist user."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    timezone: str = "UTC"
    gmt_string: Optional[str] = None
    hours: int = 0
    minutes: int = 0
    is_dst: int = 0


class User(BaseModel):
    """The authenticated Todoist user."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    email: str
    full_name: str = ""
    tz_info: Optional[TimezoneInfo] = None

    @property
    def timezone(self) -> str:
        """IANA time zone name, falling back to UTC."""
        if self.tz_info and self.tz_info.timezone:
            return self.tz_info.timezone
        return "UTC"


class Collaborator(BaseModel):
    """A user who shares at least one project with the current user."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str = ""
    email: str = ""
