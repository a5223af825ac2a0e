"""
Base SQL dialect shared by all database engines.

A dialect only knows how to spell things for its engine: identifier escape
characters, string literal escaping, date/time literals, row limiting and the
statement terminator. Statement structure lives in the operations package.
"""

from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Optional, Tuple, Union


class DatabaseEngine(str, Enum):
    """Database engines supported for statement rendering."""

    ACCESS = "Access"
    INFORMIX = "Informix"
    MYSQL = "MySQL"
    ORACLE = "Oracle"
    POSTGRESQL = "PostgreSQL"
    SQLSERVER = "SQLServer"
    H2 = "H2"
    SQLITE = "SQLite"

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["DatabaseEngine"]:
        """
        Resolve an engine from a configuration name, ignoring case.

        Versioned SQL Server names ("SQL_Server", "SQLServer7",
        "SQLServer2000", "SQLServer2005") all resolve to SQLSERVER.

        Returns:
            The matching engine, or None if the name is not recognized
        """
        if not name:
            return None
        key = name.strip().lower()
        if key in _ENGINE_ALIASES:
            return _ENGINE_ALIASES[key]
        for engine in cls:
            if engine.value.lower() == key:
                return engine
        return None


_ENGINE_ALIASES = {
    "sql_server": DatabaseEngine.SQLSERVER,
    "sqlserver7": DatabaseEngine.SQLSERVER,
    "sqlserver2000": DatabaseEngine.SQLSERVER,
    "sqlserver2005": DatabaseEngine.SQLSERVER,
    "mssql": DatabaseEngine.SQLSERVER,
    "postgres": DatabaseEngine.POSTGRESQL,
}


class Precision(IntEnum):
    """Date/time precision; smaller values carry more detail."""

    SECOND = 10
    MINUTE = 20
    HOUR = 30
    DAY = 40
    MONTH = 50
    YEAR = 60


def default_precision(value: Union[date, datetime]) -> Precision:
    """Dates format to the day, datetimes to the second."""
    if isinstance(value, datetime):
        return Precision.SECOND
    return Precision.DAY


def datetime_parts(
    value: Union[date, datetime], precision: Precision
) -> Tuple[str, str, str, Optional[str], Optional[str], Optional[str]]:
    """Split a date/time into zero-padded parts, None beyond the precision."""
    year = f"{value.year:04d}"
    month = f"{value.month:02d}"
    day = f"{value.day:02d}"
    hour = minute = second = None
    if isinstance(value, datetime):
        if precision <= Precision.HOUR:
            hour = f"{value.hour:02d}"
        if precision <= Precision.MINUTE:
            minute = f"{value.minute:02d}"
        if precision <= Precision.SECOND:
            second = f"{value.second:02d}"
    return year, month, day, hour, minute, second


def append_time(
    text: str, hour: Optional[str], minute: Optional[str], second: Optional[str]
) -> str:
    if hour is not None:
        text += f" {hour}"
    if minute is not None:
        text += f":{minute}"
    if second is not None:
        text += f":{second}"
    return text


class SQLDialect:
    """Generic dialect: no identifier escaping, ANSI quotes, LIMIT for top."""

    engine: DatabaseEngine
    field_left_escape = ""
    field_right_escape = ""
    quote_escape = "''"
    statement_end = ""
    true_literal = "TRUE"
    false_literal = "FALSE"

    @property
    def name(self) -> str:
        return self.engine.value

    def escape_string(self, value: str) -> str:
        """Quote a string literal, escaping embedded single quotes."""
        return "'" + value.replace("'", self.quote_escape) + "'"

    def format_boolean(self, value: bool) -> str:
        return self.true_literal if value else self.false_literal

    def format_datetime(
        self,
        value: Union[date, datetime],
        precision: Optional[Precision] = None,
        escape: bool = True,
    ) -> str:
        """
        Format a date/time literal.

        Args:
            value: Date or datetime to format
            precision: How much of the value to include (default from the type)
            escape: Wrap the literal in the engine's quote characters

        Returns:
            Literal text, e.g. "'2024-03-05 10:30:00'"
        """
        precision = precision or default_precision(value)
        year, month, day, hour, minute, second = datetime_parts(value, precision)
        text = year
        if precision <= Precision.MONTH:
            text += f"-{month}"
        if precision <= Precision.DAY:
            text += f"-{day}"
        text = append_time(text, hour, minute, second)
        return f"'{text}'" if escape else text

    def apply_top_prefix(self, top: int) -> str:
        """Text placed right after SELECT to limit rows (empty if unsupported)."""
        return ""

    def apply_top_where(self, top: int) -> Optional[str]:
        """Predicate appended to WHERE to limit rows, if the engine needs one."""
        return None

    def apply_top_suffix(self, top: int) -> str:
        """Text appended to the end of a SELECT to limit rows."""
        return f" LIMIT {top}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
