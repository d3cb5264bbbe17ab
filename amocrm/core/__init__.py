"""Core components for the amoCRM client."""

from .models import (
    AmoCRMError,
    ValidationError,
    AuthError,
    TransportError,
    DecodeError,
    NotFoundError,
    StorageError,
    ConfigError,
    AuthMode,
    AuthorizeRequest,
    Token,
    ClientConfig,
)
from .endpoints import API_VERSION, Endpoint, lead_endpoint, contact_endpoint
from .config_store import (
    get_base_dir,
    config_path,
    save_json,
    load_json,
    save_client_config,
    load_client_config,
)
from .storage import TokenStorage, MemoryTokenStorage, FileTokenStorage

__all__ = [
    "AmoCRMError",
    "ValidationError",
    "AuthError",
    "TransportError",
    "DecodeError",
    "NotFoundError",
    "StorageError",
    "ConfigError",
    "AuthMode",
    "AuthorizeRequest",
    "Token",
    "ClientConfig",
    "API_VERSION",
    "Endpoint",
    "lead_endpoint",
    "contact_endpoint",
    "get_base_dir",
    "config_path",
    "save_json",
    "load_json",
    "save_client_config",
    "load_client_config",
    "TokenStorage",
    "MemoryTokenStorage",
    "FileTokenStorage",
]
