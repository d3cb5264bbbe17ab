"""Token storage backends."""

import logging
from abc import ABC, abstractmethod

from .config_store import config_path, load_json, save_json
from .models import ConfigError, StorageError, Token

logger = logging.getLogger(__name__)

TOKEN_FILE_NAME = "token"


class TokenStorage(ABC):
    """
    Abstract interface for persisting OAuth token material.

    The client never assumes a concrete backend; any object implementing
    load() and save() can be passed in.
    """

    @abstractmethod
    def load(self) -> Token | None:
        """
        Load the persisted token.

        Returns:
            The stored Token, or None if nothing has been persisted yet

        Raises:
            StorageError: If the backend fails
        """
        pass

    @abstractmethod
    def save(self, token: Token) -> None:
        """
        Persist a token, replacing any previous one.

        Raises:
            StorageError: If the backend fails
        """
        pass


class MemoryTokenStorage(TokenStorage):
    """Keeps the token in process memory. Useful for tests and scripts."""

    def __init__(self, token: Token | None = None):
        self.token = token

    def load(self) -> Token | None:
        return self.token

    def save(self, token: Token) -> None:
        self.token = token


class FileTokenStorage(TokenStorage):
    """
    Stores the token as JSON in the configuration directory.

    The file lives at $AMOCRM_HOME/<name>.json (default ~/.amocrm/token.json).
    """

    def __init__(self, name: str = TOKEN_FILE_NAME):
        self.name = name

    @property
    def path(self):
        return config_path(self.name)

    def load(self) -> Token | None:
        try:
            data = load_json(self.name, missing_ok=True)
        except ConfigError as e:
            raise StorageError(f"Failed to load token: {e}") from e
        if data is None:
            return None

        try:
            return Token.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Stored token is malformed: {e}") from e

    def save(self, token: Token) -> None:
        try:
            path = save_json(self.name, token.to_dict())
        except ConfigError as e:
            raise StorageError(f"Failed to save token: {e}") from e
        logger.info(f"Token saved to {path}")

    def clear(self) -> None:
        """Delete the stored token file if present."""
        self.path.unlink(missing_ok=True)
