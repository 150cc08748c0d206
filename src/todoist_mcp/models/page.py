"""
Cursor-paginated result page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """
    One page of results from a paginated Todoist endpoint.

    The cursor is opaque: it is only ever passed back to the API unchanged.
    """

    results: list[T] = field(default_factory=list)
    next_cursor: Optional[str] = None
