"""
OAuth 2.0 token management for amoCRM.

Handles the authorization_code and refresh_token grants and keeps the
single current token of a client instance. Refreshing is always an
explicit call; requests never refresh a token on their own.
"""

import logging
from typing import Any

import httpx

from ..core.endpoints import OAUTH_TOKEN
from ..core.models import AuthError, ClientConfig, Token, ValidationError
from ..core.storage import TokenStorage

logger = logging.getLogger(__name__)

AUTHORIZATION_CODE_GRANT = "authorization_code"
REFRESH_TOKEN_GRANT = "refresh_token"


class TokenManager:
    """
    Owns the current token and performs token exchanges.

    Usage:
        manager = TokenManager(config, http_client, storage=FileTokenStorage())

        token = manager.load_token()
        if token is None:
            token = manager.exchange_authorization_code(code)
        manager.set_token(token)

        # Later, when manager.needs_refresh
        manager.refresh()
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.Client,
        storage: TokenStorage | None = None,
    ):
        self.config = config
        self.http_client = http_client
        self.storage = storage
        self._token: Token | None = None

    @property
    def token(self) -> Token | None:
        return self._token

    @property
    def needs_refresh(self) -> bool:
        """True when a token is installed and its access token has expired."""
        return self._token is not None and self._token.expired

    def set_token(self, token: Token) -> None:
        """
        Install a token to sign API requests.

        Raises:
            ValidationError: If the token lacks access or refresh fields
        """
        if token is None:
            raise ValidationError("token is required")
        token.validate()
        self._token = token
        logger.info("Token installed")

    def clear(self) -> None:
        """Forget the installed token. Storage is left untouched."""
        self._token = None

    def load_token(self) -> Token | None:
        """
        Load a token from the configured storage.

        Returns:
            The stored token, or None if none was persisted or no storage is set

        Raises:
            StorageError: If the storage backend fails
        """
        if self.storage is None:
            return None
        return self.storage.load()

    def ensure_valid(self) -> Token:
        """
        Return the installed token.

        Raises:
            AuthError: If no token is installed
        """
        if self._token is None:
            raise AuthError("invalid token", error_code="no_token")
        return self._token

    def exchange_authorization_code(self, code: str) -> Token:
        """
        Exchange an authorization code for a set of tokens.

        The new token is persisted but not installed.

        Args:
            code: Authorization code from the consent redirect

        Returns:
            The new Token

        Raises:
            AuthError: If the code is empty or the exchange fails
        """
        if not code:
            raise AuthError("empty authorization code", error_code="empty_code")

        return self._grant(AUTHORIZATION_CODE_GRANT, {"code": code})

    def refresh(self, refresh_token: str | None = None) -> Token:
        """
        Exchange a refresh token for a new set of tokens and install it.

        Args:
            refresh_token: Token to exchange (default: the installed one)

        Returns:
            The new Token

        Raises:
            AuthError: If there is no refresh token or the exchange fails
        """
        if refresh_token is None:
            refresh_token = self.ensure_valid().refresh_token
        if not refresh_token:
            raise AuthError("empty refresh token", error_code="empty_refresh_token")

        token = self._grant(REFRESH_TOKEN_GRANT, {"refresh_token": refresh_token})
        self.set_token(token)
        return token

    def _grant(self, grant_type: str, fields: dict[str, str]) -> Token:
        url = self.config.base_url + OAUTH_TOKEN.path
        payload = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "grant_type": grant_type,
            "redirect_uri": self.config.redirect_url,
            **fields,
        }

        logger.debug(f"POST {url} ({grant_type})")
        try:
            response = self.http_client.request(method="POST", url=url, json=payload)
        except httpx.RequestError as e:
            raise AuthError(
                f"Token exchange failed: {e}",
                error_code="transport_error",
            ) from e

        try:
            if not 200 <= response.status_code < 300:
                raise AuthError(
                    f"Token exchange failed: {response.status_code}",
                    error_code="exchange_failed",
                    details={"status_code": response.status_code, "body": response.text[:500]},
                )

            try:
                data = response.json()
            except ValueError as e:
                raise AuthError(
                    "Token exchange returned malformed JSON",
                    error_code="invalid_response",
                    details={"body": response.text[:500]},
                ) from e
        finally:
            response.close()

        token = self._parse_token_response(data)

        if self.storage is not None:
            self.storage.save(token)

        logger.info(f"Obtained new token via {grant_type} grant")
        return token

    def _parse_token_response(self, data: Any) -> Token:
        """
        Parse the token endpoint response.

        Raises:
            AuthError: If required fields are missing
        """
        try:
            token = Token.from_grant_response(data)
            token.validate()
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            keys = list(data.keys()) if isinstance(data, dict) else []
            raise AuthError(
                f"Invalid token response: {e}",
                error_code="invalid_response",
                details={"response_keys": keys},
            ) from e
        return token
