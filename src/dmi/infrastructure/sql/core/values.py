"""
SQL literal formatting for statement values.

Values are stored raw in the statement fragments and turned into SQL literal
text at render time, so the same statement can be rendered for any dialect.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..dialects.base import Precision, SQLDialect

# Legacy integer sentinels for "no value"
MISSING_INT = -(2**31)
MISSING_LONG = -(2**63)

NULL_LITERAL = "NULL"


class DatedValue:
    """A date/time value paired with the precision it should be rendered at."""

    __slots__ = ("value", "precision")

    def __init__(self, value: date, precision: "Precision"):
        self.value = value
        self.precision = precision

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, DatedValue)
            and other.value == self.value
            and other.precision == self.precision
        )

    def __repr__(self) -> str:
        return f"DatedValue({self.value!r}, {self.precision.name})"


def is_missing(value: Any) -> bool:
    """
    Determine whether a value should be written as NULL.

    None, empty strings, NaN and the legacy integer sentinels are missing.

    Examples:
        >>> is_missing("")
        True
        >>> is_missing(float("nan"))
        True
        >>> is_missing(0)
        False
    """
    if value is None:
        return True
    if isinstance(value, str):
        return len(value) == 0
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, int):
        return value in (MISSING_INT, MISSING_LONG)
    return False


def format_value(
    value: Any, dialect: "SQLDialect", precision: Optional["Precision"] = None
) -> str:
    """
    Render a raw value as SQL literal text.

    Args:
        value: Python value, a DatedValue, or a nested SELECT statement
        dialect: Dialect supplying quoting and date formats
        precision: Precision for date/time values (defaults by type)

    Returns:
        SQL literal text
    """
    # Nested select, imported lazily to avoid a cycle with the operations package
    from ..operations.select import SelectStatement

    if value is None:
        return NULL_LITERAL
    if isinstance(value, SelectStatement):
        return f"({value.to_statement_text()})"
    if isinstance(value, DatedValue):
        return dialect.format_datetime(value.value, value.precision)
    if isinstance(value, bool):
        return dialect.format_boolean(value)
    if isinstance(value, float):
        return NULL_LITERAL if math.isnan(value) else repr(value)
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return dialect.format_datetime(value, precision)
    if isinstance(value, str):
        return dialect.escape_string(value)
    return dialect.escape_string(str(value))
