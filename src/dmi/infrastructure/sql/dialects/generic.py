"""
Dialects for the remaining engines: Oracle, Informix, H2 and SQLite.
"""

from datetime import date, datetime
from typing import Optional, Union

from .base import (
    DatabaseEngine,
    Precision,
    SQLDialect,
    append_time,
    datetime_parts,
    default_precision,
)


class OracleDialect(SQLDialect):
    """Oracle limits rows with ROWNUM in the WHERE clause."""

    engine = DatabaseEngine.ORACLE
    true_literal = "1"
    false_literal = "0"

    def apply_top_where(self, top: int) -> Optional[str]:
        return f"(ROWNUM <= {top})"

    def apply_top_suffix(self, top: int) -> str:
        return ""


class InformixDialect(SQLDialect):
    """Informix wraps date/time literals in DATETIME (...)."""

    engine = DatabaseEngine.INFORMIX
    quote_escape = "\\'"

    def format_datetime(
        self,
        value: Union[date, datetime],
        precision: Optional[Precision] = None,
        escape: bool = True,
    ) -> str:
        precision = precision or default_precision(value)
        year, month, day, hour, minute, second = datetime_parts(value, precision)
        text = year
        if precision <= Precision.MONTH:
            text += f"-{month}"
        if precision <= Precision.DAY:
            text += f"-{day}"
        text = append_time(text, hour, minute, second)
        return f"DATETIME ({text})" if escape else text

    def apply_top_suffix(self, top: int) -> str:
        return ""


class H2Dialect(SQLDialect):
    engine = DatabaseEngine.H2


class SQLiteDialect(SQLDialect):
    engine = DatabaseEngine.SQLITE
    true_literal = "1"
    false_literal = "0"
