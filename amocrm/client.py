"""
amoCRM API client.

Wires configuration, token management, request execution and the
resource repositories together behind one object.
"""

import logging
import secrets
from urllib.parse import urlencode

import httpx

from .api.executor import RequestExecutor
from .api.oauth import TokenManager
from .core.models import AuthError, AuthMode, AuthorizeRequest, ClientConfig, Token, ValidationError
from .core.storage import TokenStorage
from .repositories import Accounts, Calls, Contacts, EventsV2, Leads, Pipelines

logger = logging.getLogger(__name__)


def random_state() -> str:
    """Generate a random 32-character hex state for the authorize URL."""
    return secrets.token_hex(16)


class AmoCRM:
    """
    amoCRM API client.

    Usage:
        client = AmoCRM(client_id, client_secret, redirect_url,
                        storage=FileTokenStorage())

        # Send the user to the consent page
        url = client.authorize_url(random_state(), AuthMode.POST_MESSAGE)

        # After the redirect, bind the account and authorize
        client.set_domain("example")
        client.load_token_or_authorize(code)

        leads = client.leads().list(page=1)
        client.close()

    A client instance is not thread-safe; synchronize externally when
    sharing it.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        storage: TokenStorage | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
        api_host: str | None = None,
        domain: str = "",
    ):
        """
        Initialize the client.

        Args:
            client_id: Integration ID
            client_secret: Integration secret key
            redirect_url: Redirect URI registered for the integration
            storage: Token storage (None disables persistence)
            http_client: Optional httpx client (created if None)
            timeout_seconds: Request timeout for a client created here
            api_host: API host override (default: amocrm.ru)
            domain: Account subdomain, if already known
        """
        config = ClientConfig(
            client_id=client_id,
            client_secret=client_secret,
            redirect_url=redirect_url,
            domain=domain,
        )
        if api_host:
            config.set_api_host(api_host)
        self._init(config, storage, http_client, timeout_seconds)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        storage: TokenStorage | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
    ) -> "AmoCRM":
        """Create a client around an existing ClientConfig."""
        client = cls.__new__(cls)
        client._init(config, storage, http_client, timeout_seconds)
        return client

    def _init(self, config, storage, http_client, timeout_seconds):
        self.config = config

        # Track if we own the HTTP client (for cleanup)
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=timeout_seconds)
        self.http_client = http_client

        self.token_manager = TokenManager(config, http_client, storage)
        self.api = RequestExecutor(config, http_client, self.token_manager)

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._owns_client and self.http_client:
            self.http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ===== CONFIGURATION =====

    def set_domain(self, domain: str) -> None:
        """
        Bind the client to an account subdomain.

        Raises:
            ValidationError: If domain is not a valid host label
        """
        self.config.set_domain(domain)

    def set_api_host(self, api_host: str) -> None:
        """Use a custom API host (e.g., "kommo.com")."""
        self.config.set_api_host(api_host)

    # ===== AUTHORIZATION =====

    def authorize_url(self, state: str, mode: AuthMode | str) -> str:
        """
        Build the URL of the page asking the user for permissions.

        Args:
            state: Opaque value echoed back on redirect (see random_state())
            mode: AuthMode.POST_MESSAGE or AuthMode.POPUP

        Returns:
            https://{api_host}/oauth?mode=...&state=...&client_id=...

        Raises:
            ValidationError: If state is empty or mode is unknown
        """
        request = AuthorizeRequest(state=state, mode=mode)
        query = urlencode({
            "mode": request.mode.value,
            "state": request.state,
            "client_id": self.config.client_id,
        })
        return f"https://{self.config.api_host}/oauth?{query}"

    def token_by_code(self, code: str) -> Token:
        """
        Exchange an authorization code for a token without installing it.

        Raises:
            AuthError: If the exchange fails
        """
        return self.token_manager.exchange_authorization_code(code)

    def set_token(self, token: Token) -> None:
        """
        Install a token to sign API requests.

        Raises:
            ValidationError: If the token lacks access or refresh fields
        """
        self.token_manager.set_token(token)

    def load_token_or_authorize(self, code: str) -> None:
        """
        Install the stored token, or exchange the code if none is stored.

        Raises:
            StorageError: If loading the stored token fails
            AuthError: If the stored token is invalid or the exchange fails
        """
        token = self.token_manager.load_token()
        if token is None:
            logger.info("No stored token, exchanging authorization code")
            self.token_manager.set_token(self.token_by_code(code))
        else:
            self._install_stored_token(token)

    def new_token_and_authorize(self, code: str) -> None:
        """
        Exchange the code and install the result, ignoring any stored token.

        Raises:
            AuthError: If the exchange fails
        """
        self.token_manager.set_token(self.token_by_code(code))

    def load_token_and_authorize(self) -> None:
        """
        Install the stored token. Never calls the network.

        Raises:
            StorageError: If loading fails
            AuthError: If no token is stored or the stored token is invalid
        """
        token = self.token_manager.load_token()
        if token is None:
            raise AuthError("invalid token", error_code="no_stored_token")
        self._install_stored_token(token)

    def _install_stored_token(self, token: Token) -> None:
        try:
            self.token_manager.set_token(token)
        except ValidationError as e:
            raise AuthError("invalid token", error_code="invalid_stored_token") from e

    def refresh_token(self) -> Token:
        """
        Exchange the installed refresh token for a new token and install it.

        Requests never refresh on their own; check `needs_refresh` and
        call this explicitly.
        """
        return self.token_manager.refresh()

    @property
    def needs_refresh(self) -> bool:
        return self.token_manager.needs_refresh

    # ===== REPOSITORIES =====

    def accounts(self) -> Accounts:
        return Accounts(self.api)

    def leads(self) -> Leads:
        return Leads(self.api)

    def pipelines(self) -> Pipelines:
        return Pipelines(self.api)

    def contacts(self) -> Contacts:
        return Contacts(self.api)

    def calls(self) -> Calls:
        return Calls(self.api)

    def events_v2(self) -> EventsV2:
        return EventsV2(self.api)
