"""Convert ``?`` / ``:name`` placeholders to the paramstyle of a DB-API module.

Queries are written with positional ``?`` markers (bound to 1-based keys) or
named ``:name`` markers. DB-API modules expect one of the PEP 249 paramstyles,
so the SQL text is rewritten and the bound values are laid out accordingly.
Placeholders inside quoted literals and identifiers are left untouched.
"""

import re
from typing import Any, NamedTuple, Optional

from ..exceptions import ParameterError
from ..types import ParamType, resolve_value

_PLACEHOLDERS = r"""
    | `(?:[^`]|``)*`            # backtick identifier
    | ::                        # PostgreSQL cast
    | :(?P<name>\w+)            # named placeholder
    | (?P<positional>\?)        # positional placeholder
"""

# standard SQL strings: a backslash is an ordinary character
_TOKENS = re.compile(
    r"""
      '(?:[^']|'')*'           # string literal
    | "(?:[^"]|"")*"           # double-quoted identifier
    """ + _PLACEHOLDERS,
    re.VERBOSE | re.DOTALL,
)

# MySQL strings: a backslash escapes the next character
_MYSQL_TOKENS = re.compile(
    r"""
      '(?:[^'\\]|\\.|'')*'      # string literal
    | "(?:[^"\\]|\\.|"")*"      # double-quoted string
    """ + _PLACEHOLDERS,
    re.VERBOSE | re.DOTALL,
)


def _tokens(backslash_escapes: bool) -> re.Pattern:
    return _MYSQL_TOKENS if backslash_escapes else _TOKENS


PARAMSTYLES = ("qmark", "named", "format", "pyformat")


class BoundStatement(NamedTuple):
    """SQL rewritten for a paramstyle with the values to pass to ``cursor.execute``."""

    sql: str
    args: Optional[list[Any] | dict[str, Any]]
    types: list[ParamType]


def find_placeholders(sql: str, backslash_escapes: bool = False) -> list[str | int]:
    r"""Return placeholders in order: names (with colon) and 1-based positions.

    With backslash_escapes (MySQL), a backslash inside a literal escapes the
    next character; otherwise it is an ordinary character.

    Examples:
    >>> find_placeholders("SELECT * FROM t WHERE a = ? AND b = :b AND c = '?'")
    [1, ':b']
    >>> find_placeholders(r"SELECT 'C:\', ?, 'x'")
    [1]
    >>> find_placeholders(r"SELECT 'it\'s ?', ?", backslash_escapes=True)
    [1]
    """
    found: list[str | int] = []
    position = 0
    for match in _tokens(backslash_escapes).finditer(sql):
        if match.group("positional"):
            position += 1
            found.append(position)
        elif match.group("name"):
            found.append(":" + match.group("name"))
    return found


def _lookup(parameters: dict, key: str | int) -> tuple[Any, ParamType]:
    if key in parameters:
        entry = parameters[key]
    elif isinstance(key, str) and key[1:] in parameters:
        entry = parameters[key[1:]]
    else:
        raise ParameterError(f"No value bound for parameter {key}")
    if isinstance(entry, tuple) and len(entry) == 2 and isinstance(entry[1], ParamType):
        value, param_type = entry
    else:
        value, param_type = entry, ParamType.AUTO
    value = resolve_value(value)
    return param_type.coerce(value), param_type.resolve(value)


def bind_parameters(
    sql: str,
    parameters: Optional[dict],
    paramstyle: str,
    backslash_escapes: bool = False,
) -> BoundStatement:
    """Rewrite sql for paramstyle and collect the bound values.

    Args:
        sql: Statement using ``?`` and/or ``:name`` placeholders.
        parameters: Mapping of 1-based position or name to ``(value, ParamType)``.
        paramstyle: One of qmark, named, format, pyformat.
        backslash_escapes: Whether the engine treats a backslash in a string
            literal as an escape (MySQL).

    Raises:
        ParameterError: A placeholder has no value, or named and positional
            placeholders are mixed for a style that cannot express both.
    """
    if paramstyle not in PARAMSTYLES:
        raise ValueError(f"Unsupported paramstyle: {paramstyle}")
    if not parameters:
        return BoundStatement(sql, None, [])

    placeholders = find_placeholders(sql, backslash_escapes)
    has_named = any(isinstance(p, str) for p in placeholders)
    has_positional = any(isinstance(p, int) for p in placeholders)
    use_mapping = has_named and paramstyle in ("named", "pyformat")
    if use_mapping and has_positional:
        raise ParameterError("Invalid parameter number: mixed named and positional parameters")

    if paramstyle in ("format", "pyformat"):
        # the native module %-formats the whole statement
        sql = sql.replace("%", "%%")

    args_list: list[Any] = []
    args_dict: dict[str, Any] = {}
    types: list[ParamType] = []
    position = 0

    def replace(match: re.Match) -> str:
        nonlocal position
        name = match.group("name")
        if match.group("positional"):
            position += 1
            key: str | int = position
        elif name:
            key = ":" + name
        else:
            return match.group(0)
        value, param_type = _lookup(parameters, key)
        if use_mapping:
            if name not in args_dict:
                types.append(param_type)
            args_dict[name] = value
            return f":{name}" if paramstyle == "named" else f"%({name})s"
        args_list.append(value)
        types.append(param_type)
        return "?" if paramstyle in ("qmark", "named") else "%s"

    sql = _tokens(backslash_escapes).sub(replace, sql)
    return BoundStatement(sql, args_dict if use_mapping else args_list, types)
