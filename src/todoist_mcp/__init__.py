"""
Todoist MCP Server - query and search tools for Todoist.

This package provides a Model Context Protocol (MCP) server exposing
Todoist tasks, projects and activity to LLM agents. Tool arguments are
turned into Todoist filter queries or direct listings, and the results
are reduced to compact summaries with pagination and next-step hints.

Architecture:
    MCP Tools Layer (server)
         │
         ▼
    Tool implementations (tools.find_*, tools.search, tools.fetch)
         │
    ┌────┴──────────────┐
    ▼                   ▼
  Query assembly      Result shaping
  (labels, users,     (mapping,
   filters)            formatting)
         │
         ▼
    Todoist API Client (httpx, REST API v1)
"""

__version__ = "0.1.0"
__author__ = "Todoist MCP Contributors"

from todoist_mcp.exceptions import (
    TodoistError,
    TodoistAuthenticationError,
    TodoistAPIError,
    TodoistValidationError,
    TodoistRateLimitError,
    TodoistNotFoundError,
)

__all__ = [
    "__version__",
    "TodoistError",
    "TodoistAuthenticationError",
    "TodoistAPIError",
    "TodoistValidationError",
    "TodoistRateLimitError",
    "TodoistNotFoundError",
]
