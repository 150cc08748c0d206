"""
Tests for server wiring: request tokens and client selection.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from todoist_mcp.client import TodoistClient
from todoist_mcp.exceptions import TodoistConfigurationError
from todoist_mcp.server import extract_request_token, get_client


pytestmark = [pytest.mark.unit]


def make_context(headers=None, client=None):
    request = SimpleNamespace(headers=headers) if headers is not None else None
    return SimpleNamespace(
        request_context=SimpleNamespace(
            request=request,
            lifespan_context={"client": client},
        )
    )


class TestExtractRequestToken:
    """Tests for extract_request_token."""

    def test_custom_header(self):
        assert extract_request_token({"x-todoist-token": " abc "}) == "abc"

    def test_custom_header_wins(self):
        headers = {"x-todoist-token": "custom", "authorization": "Bearer bearer"}
        assert extract_request_token(headers) == "custom"

    def test_bearer(self):
        assert extract_request_token({"authorization": "bearer xyz"}) == "xyz"

    @pytest.mark.parametrize("headers", [
        {},
        {"x-todoist-token": "   "},
        {"authorization": "Basic dXNlcjpwYXNz"},
    ])
    def test_no_token(self, headers):
        assert extract_request_token(headers) is None


class TestGetClient:
    """Tests for per-request client selection."""

    async def test_shared_client(self, mock_client):
        async with get_client(make_context(client=mock_client)) as client:
            assert client is mock_client

    async def test_request_token_gets_own_client(self, mock_client):
        ctx = make_context(headers={"x-todoist-token": "per-request"}, client=mock_client)

        async with get_client(ctx) as client:
            assert isinstance(client, TodoistClient)
            assert client.is_connected

        assert not client.is_connected

    async def test_no_token_anywhere(self):
        with pytest.raises(TodoistConfigurationError, match="Unauthorized"):
            async with get_client(make_context(headers={})):
                pass
