"""Turn fetched rows (column name -> value) into the shape requested by the caller."""

import dataclasses
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any, Callable, Optional, Sequence

from pydantic import BaseModel

RowMapper = Callable[[dict[str, Any]], Any]


def make_row_mapper(as_object: Any = False, object_params: Optional[Sequence[Any] | Mapping[str, Any]] = None) -> RowMapper:
    """Return a callable converting a row dict according to as_object.

    Args:
        as_object: ``False`` for plain dicts, ``True`` for generic records
            (``SimpleNamespace``), a class to hydrate, or any callable
            receiving the row dict.
        object_params: Constructor arguments (sequence or mapping) used for
            each row when hydrating a class that is neither a pydantic model
            nor a dataclass.
    """
    if as_object is False or as_object is None:
        return dict
    if as_object is True:
        return lambda row: SimpleNamespace(**row)
    if isinstance(as_object, type):
        return _class_mapper(as_object, object_params)
    if callable(as_object):
        return as_object
    # an instance stands for its class
    return _class_mapper(type(as_object), object_params)


def _class_mapper(cls: type, object_params) -> RowMapper:
    if issubclass(cls, BaseModel):
        return cls.model_validate
    if dataclasses.is_dataclass(cls) and not object_params:
        return lambda row: cls(**row)

    def mapper(row: dict[str, Any]) -> Any:
        if isinstance(object_params, Mapping):
            instance = cls(**object_params)
        elif object_params:
            instance = cls(*object_params)
        else:
            instance = cls()
        for name, value in row.items():
            setattr(instance, name, value)
        return instance

    return mapper


def get_field(row: Any, name: str, default: Any = None) -> Any:
    """Read a column from a row of any shape."""
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def require_field(row: Any, name: str) -> Any:
    """Read a column from a row of any shape, raising KeyError when it is missing."""
    if isinstance(row, Mapping):
        return row[name]
    try:
        return getattr(row, name)
    except AttributeError as error:
        raise KeyError(name) from error
