"""
SQL Server and Microsoft Access dialects.

Both escape identifiers with square brackets and double embedded single
quotes in string literals. Access additionally wraps dates in '#'.
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


class SQLServerDialect(SQLDialect):
    """SQL Server (7, 2000, 2005 and later)."""

    engine = DatabaseEngine.SQLSERVER
    field_left_escape = "["
    field_right_escape = "]"
    true_literal = "1"
    false_literal = "0"

    def apply_top_prefix(self, top: int) -> str:
        return f"TOP {top} "

    def apply_top_suffix(self, top: int) -> str:
        return ""


class AccessDialect(SQLServerDialect):
    """Microsoft Access via ODBC."""

    engine = DatabaseEngine.ACCESS

    def format_datetime(
        self,
        value: Union[date, datetime],
        precision: Optional[Precision] = None,
        escape: bool = True,
    ) -> str:
        """Access dates are month-day-year; coarse precisions still print a full date."""
        precision = precision or default_precision(value)
        year, month, day, hour, minute, second = datetime_parts(value, precision)
        text = append_time(f"{month}-{day}-{year}", hour, minute, second)
        return f"#{text}#" if escape else text

    def apply_top_prefix(self, top: int) -> str:
        return ""
