"""
MySQL-specific SQL dialect implementation.
"""

from .base import DatabaseEngine, SQLDialect


class MySQLDialect(SQLDialect):
    """MySQL: backtick identifiers and backslash-escaped quotes."""

    engine = DatabaseEngine.MYSQL
    field_left_escape = "`"
    field_right_escape = "`"
    quote_escape = "\\'"
