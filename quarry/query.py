"""Raw SQL queries: bound parameters, result shape, result caching and execution.

    query = Query(QueryType.SELECT, "SELECT * FROM users WHERE id = :id")
    query.set_param(":id", 5).cached(60).as_object(User)
    for user in query.execute():
        ...

Builders (``quarry.builder``) subclass Query and compile their clauses into
``sql`` before execution.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from .cache import get_cache
from .exceptions import ParameterError
from .result import CachedResult
from .settings import get_settings
from .types import Deferred, ParamType, QueryType, resolve_value
from .utils.make_hashable import make_hashable

logger = logging.getLogger("quarry")


class Query(BaseModel):
    """One SQL statement, its parameters and how to run it."""

    model_config = {"arbitrary_types_allowed": True}

    query_type: QueryType
    """SELECT, INSERT, UPDATE or DELETE; decides the value returned by execute()."""
    sql: Optional[str] = None
    """SQL text (compiled by builders)."""
    parameters: dict[Any, Any] = Field(default_factory=dict)
    """1-based position or name -> (value, ParamType)."""
    as_object_value: Any = False
    """Row shape (stored to avoid shadowing the as_object() method)."""
    object_params: Any = None
    """Constructor arguments for hydrated rows."""
    lifetime: Optional[int] = None
    """Cache lifetime in seconds; None disables the result cache."""
    force_execute: bool = False
    """Execute even on a cache hit (and refresh the cache)."""

    def __init__(self, query_type: QueryType, sql: Optional[str] = None, **data: Any):
        super().__init__(query_type=query_type, sql=sql, **data)

    def __str__(self) -> str:
        """Return the SQL compiled for the default instance, or the error text when that fails."""
        from .database import Database
        try:
            return self.compile(Database.instance())
        except Exception as error:  # pylint: disable=broad-exception-caught
            return f"{type(error).__name__}: {error}"

    # result shape and caching

    def cached(self, lifetime: Optional[int] = None, force: bool = False) -> Query:
        """Enable the result cache for this query.

        Args:
            lifetime: Seconds to keep results; defaults to ``settings.cache_life``.
                0 deletes the cached entry and executes.
            force: Execute even when a cached result exists.
        """
        if lifetime is None:
            lifetime = get_settings().cache_life
        self.lifetime = lifetime
        self.force_execute = force
        return self

    def as_assoc(self) -> Query:
        """Return rows as dicts."""
        self.as_object_value = False
        self.object_params = None
        return self

    def as_object(self, cls: Any = True, params: Optional[Sequence[Any] | Mapping[str, Any]] = None) -> Query:
        """Return rows as objects: generic records (``True``), instances of cls, or cls(row)."""
        self.as_object_value = cls
        if params:
            self.object_params = params
        return self

    # parameters

    @staticmethod
    def _check_key(key: int | str) -> None:
        if isinstance(key, int) and key < 1:
            raise ParameterError("Invalid parameter number: Columns/Parameters are 1-based")

    def set_param(self, key: int | str, value: Any, param_type: ParamType = ParamType.AUTO) -> Query:
        """Set the value of a parameter (``?`` position from 1, or ``:name``)."""
        self._check_key(key)
        self.parameters[key] = (value, param_type)
        return self

    def bind_param(self, key: int | str, value: Any, param_type: ParamType = ParamType.AUTO) -> Query:
        """Bind a parameter; a callable value is called when the query is executed."""
        self._check_key(key)
        if callable(value):
            value = Deferred(value)
        self.parameters[key] = (value, param_type)
        return self

    def add_parameters(self, params: Mapping[int | str, Any] | Sequence[Any]) -> Query:
        """Add multiple parameters; new ones win over existing ones.

        Values are ``(value, ParamType)`` pairs or plain values. A list is bound
        to positions 1, 2, ...; a mapping using position 0 has every position
        moved up by one.
        """
        if isinstance(params, Mapping):
            items = dict(params)
        else:
            items = dict(enumerate(params, start=1))
        for key, entry in items.items():
            if not (isinstance(entry, tuple) and len(entry) == 2 and isinstance(entry[1], ParamType)):
                items[key] = (entry, ParamType.AUTO)
        merged = {**self.parameters, **items}
        if 0 in merged:
            merged = {(key + 1 if isinstance(key, int) else key): entry for key, entry in merged.items()}
        self.parameters = merged
        return self

    # compile and execute

    def compile(self, db: Any = None) -> str:
        """Return the SQL text; parameters are bound at execution."""
        return self.sql or ""

    @staticmethod
    def _resolve_parameters(parameters: dict) -> dict:
        """Call deferred suppliers once, so the cache key and the binding see the same values."""
        resolved = {}
        for key, entry in parameters.items():
            if isinstance(entry, tuple) and len(entry) == 2 and isinstance(entry[1], ParamType):
                value, param_type = entry
            else:
                value, param_type = entry, ParamType.AUTO
            resolved[key] = (resolve_value(value), param_type)
        return resolved

    def _cache_key(self, db: Any, sql: str, parameters: dict) -> str:
        # keyed on the values as the driver binds them
        bound = {
            key: param_type.coerce(value)
            for key, (value, param_type) in self._resolve_parameters(parameters).items()
        }
        return f'Database.query("{db}", "{sql}", "{make_hashable(bound)!r}")'

    def execute(self, db: Any = None, as_object: Any = None, object_params: Any = None):
        """Execute the query.

        Args:
            db: Database instance, instance name, or None for the default instance.
            as_object: Row shape overriding the query's own.
            object_params: Constructor arguments overriding the query's own.

        Returns:
            A Result for SELECT, an InsertResult for INSERT, the affected row
            count otherwise.
        """
        from .database import Database
        db = Database.resolve(db)
        if as_object is None:
            as_object = self.as_object_value
        if object_params is None:
            object_params = self.object_params

        sql = self.compile(db)
        parameters = self._resolve_parameters(self.parameters)

        cache_key = None
        if self.lifetime is not None and self.query_type == QueryType.SELECT:
            cache_key = self._cache_key(db, sql, parameters)
            # reading also drops an entry older than the lifetime
            rows = get_cache().get(cache_key, self.lifetime)
            if rows is not None and not self.force_execute:
                logger.debug("Result cache hit: %s", sql)
                return CachedResult(rows, sql, parameters, as_object, object_params)
            logger.debug("Result cache miss: %s", sql)

        result = db.query(self.query_type, sql, parameters, as_object, object_params)

        if cache_key is not None and self.lifetime > 0:
            logger.debug("Result cache store (%ss): %s", self.lifetime, sql)
            get_cache().set(cache_key, result.as_array(), self.lifetime)
        return result
