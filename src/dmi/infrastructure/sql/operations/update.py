"""SQL UPDATE statement builder."""

from typing import Any

from dmi.utils.logging import get_logger

from ..core.identifier import escape_field
from ..core.values import format_value
from .statement import Statement

logger = get_logger(__name__)


class UpdateStatement(Statement):
    """
    UPDATE builder: ``UPDATE t SET f0 = v0, f1 = v1 WHERE w0 AND w1``.

    Field and value counts must match. Without where clauses the statement
    only renders when ``try_build_where`` is set, in which case the where
    clause is built from the same field/value pairs. Anything that cannot
    be rendered yields ``""`` and a warning.
    """

    verb = "UPDATE"

    def __init__(self, *args: Any, try_build_where: bool = False, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.try_build_where = try_build_where

    def _pairs(self, separator: str) -> str:
        return separator.join(
            f"{escape_field(f, self.dialect)} = {format_value(v, self.dialect)}"
            for f, v in zip(self.fragments.fields, self.fragments.values)
        )

    def to_statement_text(self) -> str:
        fragments = self.fragments
        if not fragments.tables:
            logger.warning("dmi.update.no_table", reason="No table specified to use in creation of SQL")
            return ""
        if len(fragments.fields) != len(fragments.values):
            logger.warning(
                "dmi.update.field_value_mismatch",
                table=fragments.tables[0],
                fields=len(fragments.fields),
                values=len(fragments.values),
            )
            return ""

        text = f"UPDATE {fragments.tables[0]} SET " + self._pairs(", ")

        if fragments.where_clauses:
            return text + " WHERE " + self._join_where()
        if fragments.fields and self.try_build_where:
            return text + " WHERE " + self._pairs(" AND ")

        logger.warning("dmi.update.no_where", table=fragments.tables[0])
        return ""
