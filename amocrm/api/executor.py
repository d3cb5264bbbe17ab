"""
Request execution for amoCRM API calls.

Every repository goes through RequestExecutor.request(): it resolves the
endpoint against the account base URL, signs the request with the current
bearer token, serializes the body and decodes the JSON response.
"""

import dataclasses
import logging
from typing import Any, Mapping

import httpx

from ..core.endpoints import Endpoint
from ..core.models import ClientConfig, DecodeError, TransportError, ValidationError
from .oauth import TokenManager

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "PATCH", "DELETE"})


def encode_body(body: Any) -> Any:
    """
    Convert records into JSON-ready values.

    Records (anything with to_dict()) become dicts; lists stay bare lists,
    which is how the API expects bulk create/update payloads.
    """
    if isinstance(body, (list, tuple)):
        return [encode_body(item) for item in body]
    if hasattr(body, "to_dict"):
        return body.to_dict()
    if dataclasses.is_dataclass(body) and not isinstance(body, type):
        return dataclasses.asdict(body)
    return body


class RequestExecutor:
    """
    Builds, sends and decodes API requests.

    Features:
    - Endpoint resolution against https://{domain}.{api_host}
    - Bearer authentication from the TokenManager
    - JSON body encoding and response decoding
    - HTTP status mapping to TransportError / DecodeError

    There is no retry: every call is attempted exactly once.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.Client,
        token_manager: TokenManager,
    ):
        self.config = config
        self.http_client = http_client
        self.token_manager = token_manager

    def _build_url(self, endpoint: Endpoint) -> str:
        """
        Build full URL from the account base URL and endpoint path.

        Args:
            endpoint: Resolved endpoint (e.g., lead_endpoint(42))

        Returns:
            Full URL
        """
        return self.config.base_url + endpoint.path

    def do(
        self,
        endpoint: Endpoint,
        method: str,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """
        Send a request and return the raw response.

        The caller owns the response and must pass it to read(), which
        closes it.

        Args:
            endpoint: Endpoint to call
            method: HTTP method (GET, POST, PATCH, DELETE)
            query: Query parameters
            headers: Extra request headers
            body: Value to send as JSON (None for no body)
            authenticated: Whether to attach the bearer token

        Returns:
            The HTTP response

        Raises:
            ValidationError: On an unsupported HTTP method
            AuthError: If authenticated and no token is installed
            TransportError: On network failure or a non-2xx response
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValidationError(f"unsupported HTTP method: {method}")

        request_headers = {"Accept": "application/json"}
        if authenticated:
            token = self.token_manager.ensure_valid()
            request_headers["Authorization"] = f"Bearer {token.access_token}"
        if headers:
            request_headers.update(headers)

        url = self._build_url(endpoint)
        kwargs: dict[str, Any] = {
            "method": method,
            "url": url,
            "headers": request_headers,
            "params": dict(query) if query else None,
        }
        if body is not None:
            kwargs["json"] = encode_body(body)

        logger.debug(f"{method} {url}")
        try:
            response = self.http_client.request(**kwargs)
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {method} {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            try:
                text = response.text
            finally:
                response.close()
            raise TransportError(
                f"API request failed: {response.status_code} {text}",
                status_code=response.status_code,
                body=text,
            )

        return response

    def read(self, response: httpx.Response) -> Any:
        """
        Decode a JSON response body and close the response.

        Returns:
            The decoded value, or None for an empty body

        Raises:
            DecodeError: If the body is non-empty and not valid JSON
        """
        try:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise DecodeError(f"Malformed JSON response: {e}", body=response.text) from e
        finally:
            response.close()

    def request(
        self,
        endpoint: Endpoint,
        method: str,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a request and decode its response. See do() and read()."""
        response = self.do(endpoint, method, query, headers, body, authenticated)
        return self.read(response)
