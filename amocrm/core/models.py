"""Core data models for the amoCRM client."""

import os
import re
from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


DEFAULT_API_HOST = "amocrm.ru"

# A single DNS label: letters/digits, inner hyphens, 1..63 chars.
_DOMAIN_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")


class AmoCRMError(Exception):
    """Base class for every error raised by the client."""
    pass


class ValidationError(AmoCRMError):
    """Raised when caller input is malformed. Detected before any I/O."""
    pass


class AuthError(AmoCRMError):
    """Raised when authorization or token exchange fails."""

    def __init__(self, message: str, error_code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class TransportError(AmoCRMError):
    """Raised on a non-2xx response or a failed HTTP round trip."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(AmoCRMError):
    """Raised when a non-empty response body is not valid JSON."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class NotFoundError(AmoCRMError):
    """Raised when a single-record lookup decodes to a record without an id."""
    pass


class StorageError(AmoCRMError):
    """Raised when the token store fails to load or save."""
    pass


class ConfigError(AmoCRMError):
    """Raised when there is an error loading or saving configuration."""
    pass


class AuthMode(Enum):
    """Display mode of the amoCRM consent page."""
    POST_MESSAGE = "post_message"
    POPUP = "popup"


@dataclass
class AuthorizeRequest:
    """Parameters of the authorization page URL."""
    state: str
    mode: AuthMode

    def __post_init__(self):
        if not self.state:
            raise ValidationError("empty state")
        try:
            self.mode = AuthMode(self.mode)
        except ValueError:
            raise ValidationError(f"unexpected mode: {self.mode!r}")


@dataclass
class Token:
    """OAuth token material. Replaced wholesale on every exchange."""
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_at: datetime | None = None

    def __post_init__(self):
        # Naive timestamps are taken as UTC
        if self.expires_at is not None and self.expires_at.tzinfo is None:
            self.expires_at = self.expires_at.replace(tzinfo=timezone.utc)

    def validate(self) -> None:
        """
        Check that both token fields are present.

        Raises:
            ValidationError: If access_token or refresh_token is empty
        """
        if not self.access_token:
            raise ValidationError("token is missing access_token")
        if not self.refresh_token:
            raise ValidationError("token is missing refresh_token")

    def is_expired(self, leeway: timedelta = timedelta(0)) -> bool:
        """Whether the access token is past its expiry (minus leeway)."""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at - leeway

    @property
    def expired(self) -> bool:
        return self.is_expired()

    def to_dict(self) -> dict[str, Any]:
        """Convert Token to a JSON-ready dictionary."""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        """Create Token from a dictionary produced by to_dict()."""
        expires_at = data.get("expires_at")
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        )

    @classmethod
    def from_grant_response(cls, data: dict[str, Any], now: datetime | None = None) -> "Token":
        """
        Create Token from the vendor's token endpoint response.

        Args:
            data: Decoded response with access_token, refresh_token, expires_in
            now: Reference time for computing expires_at (default: current UTC time)

        Returns:
            The new Token
        """
        now = now or datetime.now(timezone.utc)
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_at=now + timedelta(seconds=int(data.get("expires_in", 86400))),
        )


def validate_domain(domain: str) -> str:
    """
    Validate an account subdomain.

    Args:
        domain: Subdomain label (e.g., "example" for example.amocrm.ru)

    Returns:
        The domain unchanged

    Raises:
        ValidationError: If domain is non-empty and not a valid host label
    """
    if domain and not _DOMAIN_RE.match(domain):
        raise ValidationError(f"invalid domain: {domain!r}")
    return domain


def validate_api_host(api_host: str) -> str:
    """
    Validate an API host such as "amocrm.ru" or "kommo.com".

    Raises:
        ValidationError: If api_host is empty or not a dotted host name
    """
    if not api_host:
        raise ValidationError("empty api host")
    if not all(_DOMAIN_RE.match(label) for label in api_host.split(".")):
        raise ValidationError(f"invalid api host: {api_host!r}")
    return api_host


@dataclass
class ClientConfig:
    """
    Client settings.

    client_id, client_secret and redirect_url are fixed once set;
    api_host and domain are validated on every assignment.
    """
    client_id: str
    client_secret: str
    redirect_url: str
    api_host: str = DEFAULT_API_HOST
    domain: str = ""

    _IMMUTABLE = ("client_id", "client_secret", "redirect_url")
    _VALIDATORS = {"domain": validate_domain, "api_host": validate_api_host}

    def __setattr__(self, name, value):
        if name in self._IMMUTABLE and name in self.__dict__:
            raise ValidationError(f"{name} cannot be changed after construction")
        if name in self._VALIDATORS:
            value = self._VALIDATORS[name](value)
        super().__setattr__(name, value)

    def set_domain(self, domain: str) -> None:
        self.domain = domain

    def set_api_host(self, api_host: str) -> None:
        self.api_host = api_host

    @property
    def base_url(self) -> str:
        """Account-specific base URL, or the bare host before a domain is bound."""
        if self.domain:
            return f"https://{self.domain}.{self.api_host}"
        return f"https://{self.api_host}"

    def to_dict(self) -> dict[str, Any]:
        """Convert ClientConfig to a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        """Create ClientConfig from a dictionary."""
        return cls(
            client_id=data["client_id"],
            client_secret=data["client_secret"],
            redirect_url=data["redirect_url"],
            api_host=data.get("api_host") or DEFAULT_API_HOST,
            domain=data.get("domain", ""),
        )

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Create ClientConfig from AMOCRM_* environment variables.

        Raises:
            ConfigError: If a required variable is not set
        """
        missing = [
            name for name in ("AMOCRM_CLIENT_ID", "AMOCRM_CLIENT_SECRET", "AMOCRM_REDIRECT_URL")
            if not os.environ.get(name)
        ]
        if missing:
            raise ConfigError(f"Missing environment variables: {', '.join(missing)}")

        return cls(
            client_id=os.environ["AMOCRM_CLIENT_ID"],
            client_secret=os.environ["AMOCRM_CLIENT_SECRET"],
            redirect_url=os.environ["AMOCRM_REDIRECT_URL"],
            api_host=os.environ.get("AMOCRM_API_HOST") or DEFAULT_API_HOST,
            domain=os.environ.get("AMOCRM_DOMAIN", ""),
        )
