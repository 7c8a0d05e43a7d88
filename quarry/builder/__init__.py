"""Fluent builders for SELECT, INSERT, UPDATE and DELETE statements."""

from .base import Condition, GroupClose, GroupOpen, Predicate, QueryBuilder
from .where import Where
from .join import Join
from .select import Select
from .insert import Insert
from .update import Update
from .delete import Delete

__all__ = [
    "Condition",
    "Delete",
    "GroupClose",
    "GroupOpen",
    "Insert",
    "Join",
    "Predicate",
    "QueryBuilder",
    "Select",
    "Update",
    "Where",
]
