"""Database drivers, selected by the ``type`` of an instance configuration."""

from typing import TYPE_CHECKING

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..database import Database

_DRIVER_CLASSES: dict[str, type["Database"]] = {}


def register_driver(type_name: str, driver_class: type["Database"]) -> None:
    """Make driver_class available for configurations with ``type: type_name``."""
    _DRIVER_CLASSES[type_name.lower()] = driver_class


def get_driver_class(type_name: str) -> type["Database"]:
    """Return the driver class registered for a configuration type (case-insensitive)."""
    try:
        return _DRIVER_CLASSES[type_name.lower()]
    except KeyError as error:
        raise ConfigurationError(f"Unsupported database type: {type_name}") from error


from .mysqli import MySQLiDriver  # noqa: E402
from .pdo import PDODriver  # noqa: E402

register_driver("mysqli", MySQLiDriver)
register_driver("mysql", MySQLiDriver)
register_driver("pdo", PDODriver)

__all__ = ["MySQLiDriver", "PDODriver", "get_driver_class", "register_driver"]
