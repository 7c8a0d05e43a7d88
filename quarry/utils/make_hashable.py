"""Convert bound parameters (including Pydantic models) to hashable, comparable form for cache keys."""

import datetime
import decimal
import enum

from pydantic import BaseModel

from ..types import Deferred


def make_hashable(thing: object):
    """Return a hashable representation of thing, stable across processes (e.g. for ``repr()`` in a cache key)."""
    # late-bound values
    if isinstance(thing, Deferred):
        thing = thing.resolve()
    # enums
    if isinstance(thing, enum.Enum):
        return (thing.name, thing.value)
    # pre-transform Pydantic model instances
    if isinstance(thing, BaseModel):
        thing = thing.model_dump()
    # dicts; keys may mix positions and names
    if isinstance(thing, dict):
        return tuple(
            (make_hashable(key), make_hashable(value))
            for key, value
            in sorted(thing.items(), key=lambda item: str(item[0]))
        )
    # collections
    if isinstance(thing, (list, tuple)):
        return tuple(make_hashable(value) for value in thing)
    if isinstance(thing, (set, frozenset)):
        return tuple(sorted((make_hashable(value) for value in thing), key=repr))
    # scalar types
    if isinstance(thing, (int, float, str, bytes, type(None), decimal.Decimal,
                          datetime.date, datetime.time, datetime.timedelta)):
        return thing
    # other
    raise ValueError(f"Cannot hash `{thing}`, {type(thing)}")
