"""
SQL INSERT statement builder.

Renders ``INSERT INTO table (f0, f1) VALUES (v0, v1)`` from the statement
fragments. Field names are stripped of any table qualifier and escaped for
the target engine; values are rendered as SQL literals by the dialect.
"""

from typing import List

from dmi.utils.logging import get_logger

from ..core.identifier import escape_field, remove_table_name
from ..core.values import format_value
from .statement import Statement

logger = get_logger(__name__)


class InsertStatement(Statement):
    """
    High-level builder for INSERT statements.

    Example:
        >>> stmt = InsertStatement("SQLServer")
        >>> stmt.add_table("users")
        >>> stmt.add_field("users.name")
        >>> stmt.add_value("O'Neil")
        >>> stmt.to_statement_text()
        "INSERT INTO users ([name]) VALUES ('O''Neil')"

    A statement missing its table, fields or values renders as an empty
    string and logs a warning rather than producing broken SQL.
    """

    verb = "INSERT"

    def rendered_values(self) -> List[str]:
        return [format_value(v, self.dialect) for v in self.fragments.values]

    def to_statement_text(self) -> str:
        fragments = self.fragments
        if not fragments.tables:
            logger.warning("dmi.insert.no_table", reason="No table specified to use in creation of SQL")
            return ""
        if not fragments.fields:
            logger.warning("dmi.insert.no_fields", table=fragments.tables[0])
            return ""
        if not fragments.values:
            logger.warning("dmi.insert.no_values", table=fragments.tables[0])
            return ""

        columns = ", ".join(
            escape_field(remove_table_name(f), self.dialect) for f in fragments.fields
        )
        values = ", ".join(self.rendered_values())
        return f"INSERT INTO {fragments.tables[0]} ({columns}) VALUES ({values})"
