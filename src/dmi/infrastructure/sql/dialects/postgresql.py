"""
PostgreSQL-specific SQL dialect implementation.
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


class PostgreSQLDialect(SQLDialect):
    """PostgreSQL SQL dialect implementation."""

    engine = DatabaseEngine.POSTGRESQL

    def format_datetime(
        self,
        value: Union[date, datetime],
        precision: Optional[Precision] = None,
        escape: bool = True,
    ) -> str:
        """
        Format a date/time literal.

        PostgreSQL date/times must have at least year-month-day, so coarser
        precisions still render the full date.
        """
        precision = precision or default_precision(value)
        year, month, day, hour, minute, second = datetime_parts(value, precision)
        text = append_time(f"{year}-{month}-{day}", hour, minute, second)
        return f"'{text}'" if escape else text
