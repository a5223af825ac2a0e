"""Core SQL utilities package."""

from .fragments import Join, JoinType, StatementFragments
from .identifier import escape_field, remove_table_name
from .values import DatedValue, format_value, is_missing

__all__ = [
    "DatedValue",
    "Join",
    "JoinType",
    "StatementFragments",
    "escape_field",
    "format_value",
    "is_missing",
    "remove_table_name",
]
