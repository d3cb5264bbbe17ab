"""Shared fixtures for the amoCRM client tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import httpx
import pytest

from amocrm.core.models import ClientConfig, Token


def _make_response(status_code: int = 200, json=None, content: bytes | None = None) -> httpx.Response:
    """Build a real httpx response for a mocked client to return."""
    request = httpx.Request("GET", "https://example.amocrm.ru")
    if json is not None:
        return httpx.Response(status_code, json=json, request=request)
    return httpx.Response(status_code, content=content or b"", request=request)


@pytest.fixture
def config():
    """Client configuration bound to the 'example' account."""
    return ClientConfig(
        client_id="client-id",
        client_secret="client-secret",
        redirect_url="https://example.com/callback",
        domain="example",
    )


@pytest.fixture
def mock_http_client():
    """Create a mock HTTP client."""
    return Mock(spec=httpx.Client)


@pytest.fixture
def token():
    """A valid, unexpired token."""
    return Token(
        access_token="access-1",
        refresh_token="refresh-1",
        token_type="Bearer",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )


@pytest.fixture
def grant_response():
    """Token endpoint response body."""
    return {
        "token_type": "Bearer",
        "expires_in": 86400,
        "access_token": "access-new",
        "refresh_token": "refresh-new",
    }


@pytest.fixture
def make_response():
    """Factory for real httpx responses."""
    return _make_response
