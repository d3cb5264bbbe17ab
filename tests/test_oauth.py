"""Tests for the OAuth token manager."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import httpx
import pytest

from amocrm.api.oauth import TokenManager
from amocrm.core.models import AuthError, StorageError, Token, ValidationError
from amocrm.core.storage import MemoryTokenStorage, TokenStorage


@pytest.fixture
def storage():
    return MemoryTokenStorage()


@pytest.fixture
def manager(config, mock_http_client, storage):
    return TokenManager(config, mock_http_client, storage)


# ===== Token installation =====

def test_ensure_valid_without_token(manager):
    """Test that ensure_valid fails when no token is installed."""
    with pytest.raises(AuthError, match="invalid token"):
        manager.ensure_valid()


def test_set_token_and_ensure_valid(manager, token):
    manager.set_token(token)
    assert manager.ensure_valid() is token
    assert manager.token is token


def test_set_token_rejects_incomplete_token(manager):
    with pytest.raises(ValidationError):
        manager.set_token(Token(access_token="a", refresh_token=""))
    assert manager.token is None


def test_set_token_rejects_none(manager):
    with pytest.raises(ValidationError):
        manager.set_token(None)


def test_clear(manager, token):
    manager.set_token(token)
    manager.clear()
    with pytest.raises(AuthError):
        manager.ensure_valid()


def test_needs_refresh(manager, token):
    assert manager.needs_refresh is False

    manager.set_token(token)
    assert manager.needs_refresh is False

    token.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
    assert manager.needs_refresh is True


def test_ensure_valid_does_not_refresh_expired_token(manager, mock_http_client, token):
    """Test an expired token is returned as-is; refreshing is the caller's call."""
    token.expires_at = datetime.now(timezone.utc) - timedelta(hours=1)
    manager.set_token(token)

    assert manager.ensure_valid() is token
    mock_http_client.request.assert_not_called()


# ===== Loading =====

def test_load_token_returns_none_when_nothing_stored(manager):
    assert manager.load_token() is None


def test_load_token_from_storage(manager, storage, token):
    storage.save(token)
    assert manager.load_token() is token


def test_load_token_without_storage(config, mock_http_client):
    manager = TokenManager(config, mock_http_client)
    assert manager.load_token() is None


def test_load_token_propagates_storage_error(config, mock_http_client):
    storage = Mock(spec=TokenStorage)
    storage.load.side_effect = StorageError("disk on fire")
    manager = TokenManager(config, mock_http_client, storage)

    with pytest.raises(StorageError):
        manager.load_token()


# ===== Authorization code exchange =====

def test_exchange_authorization_code(manager, mock_http_client, make_response, grant_response):
    """Test the authorization_code grant request and parsing."""
    mock_http_client.request.return_value = make_response(200, json=grant_response)

    token = manager.exchange_authorization_code("auth-code")

    assert token.access_token == "access-new"
    assert token.refresh_token == "refresh-new"
    assert token.expires_at > datetime.now(timezone.utc)

    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["method"] == "POST"
    assert call_kwargs["url"] == "https://example.amocrm.ru/oauth2/access_token"
    assert call_kwargs["json"] == {
        "client_id": "client-id",
        "client_secret": "client-secret",
        "grant_type": "authorization_code",
        "code": "auth-code",
        "redirect_uri": "https://example.com/callback",
    }
    assert "headers" not in call_kwargs


def test_exchange_does_not_install_token(manager, mock_http_client, make_response, grant_response):
    mock_http_client.request.return_value = make_response(200, json=grant_response)

    manager.exchange_authorization_code("auth-code")

    assert manager.token is None


def test_exchange_persists_token(manager, storage, mock_http_client, make_response, grant_response):
    """Test the new token is saved immediately after a successful exchange."""
    mock_http_client.request.return_value = make_response(200, json=grant_response)

    token = manager.exchange_authorization_code("auth-code")

    assert storage.load() == token


def test_exchange_empty_code(manager, mock_http_client):
    """Test an empty code fails without a network call."""
    with pytest.raises(AuthError, match="empty authorization code"):
        manager.exchange_authorization_code("")

    mock_http_client.request.assert_not_called()


def test_exchange_http_error(manager, storage, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        400, json={"hint": "Authorization code has expired"}
    )

    with pytest.raises(AuthError) as exc_info:
        manager.exchange_authorization_code("stale-code")

    assert exc_info.value.error_code == "exchange_failed"
    assert exc_info.value.details["status_code"] == 400
    assert "expired" in exc_info.value.details["body"]
    assert storage.load() is None


def test_exchange_network_error_is_wrapped(manager, mock_http_client):
    cause = httpx.ConnectError("Connection refused")
    mock_http_client.request.side_effect = cause

    with pytest.raises(AuthError) as exc_info:
        manager.exchange_authorization_code("auth-code")

    assert exc_info.value.__cause__ is cause


def test_exchange_malformed_json(manager, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, content=b"<html>")

    with pytest.raises(AuthError) as exc_info:
        manager.exchange_authorization_code("auth-code")

    assert exc_info.value.error_code == "invalid_response"
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_exchange_missing_fields(manager, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={"access_token": "a"})

    with pytest.raises(AuthError) as exc_info:
        manager.exchange_authorization_code("auth-code")

    assert exc_info.value.details["response_keys"] == ["access_token"]


def test_exchange_closes_response(manager, mock_http_client):
    response = Mock()
    response.status_code = 500
    response.text = "Server Error"
    mock_http_client.request.return_value = response

    with pytest.raises(AuthError):
        manager.exchange_authorization_code("auth-code")

    response.close.assert_called_once()


def test_exchange_uses_bare_host_before_domain(mock_http_client, make_response, grant_response):
    from amocrm.core.models import ClientConfig

    config = ClientConfig("id", "secret", "https://example.com/cb")
    manager = TokenManager(config, mock_http_client)
    mock_http_client.request.return_value = make_response(200, json=grant_response)

    manager.exchange_authorization_code("auth-code")

    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://amocrm.ru/oauth2/access_token"


# ===== Refresh =====

def test_refresh_uses_installed_refresh_token(manager, storage, mock_http_client, make_response, grant_response, token):
    manager.set_token(token)
    mock_http_client.request.return_value = make_response(200, json=grant_response)

    new_token = manager.refresh()

    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["json"]["grant_type"] == "refresh_token"
    assert call_kwargs["json"]["refresh_token"] == "refresh-1"
    assert manager.token is new_token
    assert new_token.access_token == "access-new"
    assert storage.load() == new_token


def test_refresh_with_explicit_token(manager, mock_http_client, make_response, grant_response):
    mock_http_client.request.return_value = make_response(200, json=grant_response)

    manager.refresh("explicit-refresh")

    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["json"]["refresh_token"] == "explicit-refresh"


def test_refresh_without_token(manager, mock_http_client):
    with pytest.raises(AuthError):
        manager.refresh()

    mock_http_client.request.assert_not_called()


def test_refresh_failure_keeps_old_token(manager, mock_http_client, make_response, token):
    manager.set_token(token)
    mock_http_client.request.return_value = make_response(401, json={"title": "Unauthorized"})

    with pytest.raises(AuthError):
        manager.refresh()

    assert manager.token is token
