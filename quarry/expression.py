"""Raw, unescaped SQL fragments for embedding in builders.

    # SELECT CONCAT(first_name, last_name) AS full_name
    select((expr("CONCAT(first_name, last_name)"), "full_name"))

    # parameters are quoted through the database when compiled
    expr("users.age > :age", {":age": 18})
"""

from __future__ import annotations

import re
from typing import Any, Callable

from pydantic import BaseModel, Field

from .types import Deferred, resolve_value


class Expression(BaseModel):
    """SQL text that is never escaped; only its declared parameters get quoted."""

    model_config = {"arbitrary_types_allowed": True}

    value: str
    """Raw SQL text."""
    params: dict[str, Any] = Field(default_factory=dict)
    """Parameter name (as it appears in the text) to unquoted value."""

    def __init__(self, value: str, params: dict[str, Any] | None = None, **data: Any):
        super().__init__(value=value, params=dict(params or {}), **data)

    def param(self, name: str, value: Any) -> Expression:
        """Set the value of a parameter."""
        self.params[name] = value
        return self

    def bind(self, name: str, supplier: Callable[[], Any]) -> Expression:
        """Bind a parameter to a supplier called at compile time."""
        self.params[name] = Deferred(supplier)
        return self

    def parameters(self, params: dict[str, Any]) -> Expression:
        """Add multiple parameter values; the given ones win over existing ones."""
        self.params = {**self.params, **params}
        return self

    def compile(self, db: Any = None) -> str:
        """Return the SQL text with every parameter replaced by its quoted value.

        Args:
            db: Database instance, instance name, or None for the default instance.
        """
        from .database import Database
        db = Database.resolve(db)
        text = self.value
        if not self.params:
            return text
        quoted = {
            str(name): db.quote(resolve_value(value))
            for name, value in self.params.items()
        }
        # single pass, longest names first (":id" must not eat ":identifier")
        pattern = "|".join(re.escape(name) for name in sorted(quoted, key=len, reverse=True))
        return re.sub(pattern, lambda match: quoted[match.group(0)], text)

    def __str__(self) -> str:
        return self.value
