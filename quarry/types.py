"""Statement kinds, bind parameter types and execution outcomes."""

import enum
from typing import Any, Callable, NamedTuple


class QueryType(enum.IntEnum):
    """Kind of SQL statement; decides the shape returned by execution."""

    SELECT = 1
    INSERT = 2
    UPDATE = 3
    DELETE = 4


class ParamType(enum.Enum):
    """Type hint attached to a bound parameter value.

    ``AUTO`` infers the type from the Python value at bind time.
    """

    AUTO = "auto"
    STR = "str"
    INT = "int"
    BOOL = "bool"
    NULL = "null"
    LOB = "lob"

    @classmethod
    def infer(cls, value: Any) -> "ParamType":
        """Return the type matching a Python value."""
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            return cls.INT
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.LOB
        return cls.STR

    def resolve(self, value: Any) -> "ParamType":
        """Return the concrete type for value (``AUTO`` is inferred)."""
        if self is ParamType.AUTO:
            return ParamType.infer(value)
        return self

    def coerce(self, value: Any) -> Any:
        """Convert value the way the native driver binds this type."""
        kind = self.resolve(value)
        if value is None or kind is ParamType.NULL:
            return None
        if kind is ParamType.INT:
            return int(value)
        if kind is ParamType.BOOL:
            return bool(value)
        if kind is ParamType.LOB:
            if isinstance(value, str):
                return value.encode()
            return bytes(value)
        if isinstance(value, (str, bytes, float)):
            return value
        return str(value)


class Deferred(NamedTuple):
    """A bound value whose supplier is called when the statement is executed."""

    supplier: Callable[[], Any]

    def resolve(self) -> Any:
        return self.supplier()


def resolve_value(value: Any) -> Any:
    """Return value, calling its supplier first when it is Deferred."""
    if isinstance(value, Deferred):
        return value.resolve()
    return value


class InsertResult(NamedTuple):
    """Outcome of an INSERT: the generated key and the number of rows created."""

    insert_id: Any
    affected_rows: int
