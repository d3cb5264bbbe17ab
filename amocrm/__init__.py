"""
amoCRM API client.

Provides OAuth 2.0 authorization, token lifecycle management and
repositories for leads, pipelines, contacts, calls, events and accounts.
"""

from .client import AmoCRM, random_state
from .core import (
    AmoCRMError,
    ValidationError,
    AuthError,
    TransportError,
    DecodeError,
    NotFoundError,
    StorageError,
    ConfigError,
    AuthMode,
    Token,
    ClientConfig,
    TokenStorage,
    MemoryTokenStorage,
    FileTokenStorage,
)

__all__ = [
    "AmoCRM",
    "random_state",
    "AmoCRMError",
    "ValidationError",
    "AuthError",
    "TransportError",
    "DecodeError",
    "NotFoundError",
    "StorageError",
    "ConfigError",
    "AuthMode",
    "Token",
    "ClientConfig",
    "TokenStorage",
    "MemoryTokenStorage",
    "FileTokenStorage",
]
