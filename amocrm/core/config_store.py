"""
Settings directory for the client.

Everything persisted lives as <name>.json in one directory:
$AMOCRM_HOME when set, ~/.amocrm otherwise. Files may hold the client
secret or tokens, so they are written readable by the owner only.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import ClientConfig, ConfigError, ValidationError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "AMOCRM_HOME"
DEFAULT_HOME_DIR = ".amocrm"
CLIENT_CONFIG_NAME = "client"


def get_base_dir(create: bool = False) -> Path:
    """
    Resolve the settings directory.

    Args:
        create: Create the directory when it is missing

    Returns:
        Path to the settings directory
    """
    env_home = os.environ.get(HOME_ENV_VAR)
    base_dir = Path(env_home) if env_home else Path.home() / DEFAULT_HOME_DIR
    if create:
        base_dir.mkdir(parents=True, exist_ok=True)
    return base_dir


def config_path(name: str) -> Path:
    """Path of the <name>.json settings file. Nothing is created."""
    return get_base_dir() / f"{name}.json"


def save_json(name: str, data: dict[str, Any]) -> Path:
    """
    Write data to <name>.json, replacing the previous file in one step.

    The content goes to a temporary sibling first and is then moved over
    the target, so readers never see a partially written file.

    Raises:
        ConfigError: If the directory or the file cannot be written
    """
    path = config_path(name)
    tmp_path = path.with_name(f".{path.name}.tmp")

    try:
        get_base_dir(create=True)
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Failed to save JSON to {path}: {e}") from e

    logger.debug(f"Saved {path}")
    return path


def load_json(name: str, missing_ok: bool = False) -> dict[str, Any] | None:
    """
    Read the JSON object stored in <name>.json.

    Args:
        name: File name without extension
        missing_ok: Return None instead of failing when the file is absent

    Raises:
        ConfigError: If the file is absent (unless missing_ok), unreadable,
            or does not hold a JSON object
    """
    path = config_path(name)

    try:
        text = path.read_text()
    except FileNotFoundError:
        if missing_ok:
            return None
        raise ConfigError(f"Configuration file not found: {path}") from None
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}")

    logger.debug(f"Loaded {path}")
    return data


def save_client_config(config: ClientConfig) -> Path:
    return save_json(CLIENT_CONFIG_NAME, config.to_dict())


def load_client_config() -> ClientConfig:
    """
    Load the saved ClientConfig.

    Raises:
        ConfigError: If nothing is saved or the saved settings are invalid
    """
    data = load_json(CLIENT_CONFIG_NAME)
    try:
        return ClientConfig.from_dict(data)
    except (KeyError, TypeError, ValidationError) as e:
        raise ConfigError(f"Failed to parse client configuration: {e}") from e
