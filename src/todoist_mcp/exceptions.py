"""
Exception hierarchy for the Todoist MCP server.

All errors raised by this package derive from TodoistError so callers can
catch a single type. The hierarchy mirrors the kinds of failure a tool call
can hit:

    TodoistError
    ├── TodoistConfigurationError   (no API token, bad settings)
    ├── TodoistValidationError      (bad tool arguments, before any I/O)
    │   ├── MissingFilterError
    │   └── InvalidIdError
    ├── UserNotFoundError           (responsible user has no match)
    └── TodoistAPIError             (HTTP / upstream failures)
        ├── TodoistAuthenticationError
        ├── TodoistNotFoundError
        └── TodoistRateLimitError
"""

from __future__ import annotations

from typing import Any


class TodoistError(Exception):
    """Base exception for all Todoist MCP errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class TodoistConfigurationError(TodoistError):
    """Raised when the server is missing required configuration."""


# =============================================================================
# Validation Errors
# =============================================================================


class TodoistValidationError(TodoistError):
    """Raised when tool arguments are rejected before calling the API."""


class MissingFilterError(TodoistValidationError):
    """Raised when a search tool is called without any discriminating filter."""

    def __init__(self, accepted_fields: list[str]) -> None:
        self.accepted_fields = accepted_fields
        if len(accepted_fields) > 1:
            fields = ", ".join(accepted_fields[:-1]) + f", or {accepted_fields[-1]}"
        else:
            fields = "".join(accepted_fields)
        super().__init__(
            f"At least one filter must be provided: {fields}",
            {"accepted_fields": accepted_fields},
        )


class InvalidIdError(TodoistValidationError):
    """Raised when a composite ``kind:id`` identifier cannot be parsed."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            'Invalid ID format. Expected "task:{id}" or "project:{id}". '
            'Example: "task:8485093748" or "project:6cfCcrrCFg2xP94Q"',
            {"value": value},
        )


# =============================================================================
# Resolution Errors
# =============================================================================


class UserNotFoundError(TodoistError):
    """Raised when a responsible user cannot be matched to a collaborator."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(
            f'Could not find user: "{identifier}". '
            "Make sure the user is a collaborator on a shared project.",
            {"identifier": identifier},
        )


# =============================================================================
# API Errors
# =============================================================================


class TodoistAPIError(TodoistError):
    """
    Raised when the Todoist API returns an error.

    Structured Todoist errors carry an HTTP status, a human message,
    a machine-readable tag (e.g. ``INVALID_SEARCH_QUERY``) and a numeric code.
    """

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        error_tag: str | None = None,
        error_code: int | None = None,
        response_data: Any = None,
    ) -> None:
        super().__init__(
            message,
            {
                "http_status": http_status,
                "error_tag": error_tag,
                "error_code": error_code,
            },
        )
        self.http_status = http_status
        self.error_tag = error_tag
        self.error_code = error_code
        self.response_data = response_data

    @property
    def is_structured(self) -> bool:
        """Whether the error carries Todoist's structured tag and code."""
        return self.error_tag is not None and self.error_code is not None


class TodoistAuthenticationError(TodoistAPIError):
    """Raised when the API token is missing, invalid or lacks access."""


class TodoistNotFoundError(TodoistAPIError):
    """Raised when a requested resource does not exist."""


class TodoistRateLimitError(TodoistAPIError):
    """Raised when the Todoist API rate limit is exceeded."""
