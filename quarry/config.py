"""Named database instance configurations.

A configuration is registered under an instance name, either directly with
``configure()`` or in bulk from a YAML/JSON file with ``load_config_file()``:

    default:
      type: PDO
      connection:
        dsn: sqlite:///app.sqlite3
      table_prefix: app_
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError
from .settings import get_settings

logger = logging.getLogger("quarry")


class DatabaseConfig(BaseModel):
    """Configuration of one database instance."""

    model_config = {"extra": "ignore"}

    type: str
    """Driver selector, e.g. ``MySQLi`` or ``PDO``."""
    connection: dict[str, Any] = Field(default_factory=dict)
    """Driver-specific connection parameters (hostname/database/username/password or dsn/username/password/persistent)."""
    table_prefix: str = ""
    """Prepended to every table name at quoting time."""
    charset: Optional[str] = None
    """Connection character set, applied right after connecting."""
    caching: bool = False
    """Advisory flag, kept for consumers such as column-metadata caches."""
    identifier: Optional[str] = None
    """Overrides the driver's identifier quote character."""


def make_config(name: str, config: DatabaseConfig | dict[str, Any]) -> DatabaseConfig:
    """Validate a mapping into a DatabaseConfig, raising ConfigurationError on problems."""
    if isinstance(config, DatabaseConfig):
        return config
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration for `{name}` must be a mapping, got {type(config).__name__}")
    if not config.get("type"):
        raise ConfigurationError(f"Database type not defined in `{name}` configuration")
    data = dict(config)
    if data.get("table_prefix") is None:
        data["table_prefix"] = ""
    try:
        return DatabaseConfig(**data)
    except ValidationError as error:
        raise ConfigurationError(f"Invalid `{name}` configuration: {error}") from error


_configs: dict[str, DatabaseConfig] = {}
_lock = threading.Lock()
_file_loaded = False


def configure(name: str, config: DatabaseConfig | dict[str, Any]) -> DatabaseConfig:
    """Register (or replace) the configuration for an instance name."""
    validated = make_config(name, config)
    with _lock:
        _configs[name] = validated
    return validated


def load_config_file(path: str | Path) -> list[str]:
    """Register every instance found in a YAML or JSON file; return their names."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as error:
        raise ConfigurationError(f"Cannot read database configuration file {path}: {error}") from error
    try:
        if path.suffix.lower() == ".json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as error:
        raise ConfigurationError(f"Cannot parse database configuration file {path}: {error}") from error
    if not isinstance(document, dict):
        raise ConfigurationError(f"Database configuration file {path} must contain a mapping of instances")
    logger.info("Loading database configuration from %s", path)
    names = []
    for name, config in document.items():
        configure(str(name), config)
        names.append(str(name))
    return names


def get_config(name: str) -> DatabaseConfig:
    """Return the configuration registered for name.

    The file named by ``QUARRY_CONFIG_FILE`` is loaded the first time an
    unknown name is requested.
    """
    global _file_loaded
    with _lock:
        config = _configs.get(name)
    if config is not None:
        return config
    config_file = get_settings().config_file
    if config_file and not _file_loaded:
        _file_loaded = True
        load_config_file(config_file)
        return get_config(name)
    raise ConfigurationError(f"No database configured with name=`{name}`")


def clear_configs() -> None:
    """Forget every registered configuration."""
    global _file_loaded
    with _lock:
        _configs.clear()
        _file_loaded = False
