"""DELETE statement rendering."""

from typing import Any, Iterable, Optional, Union

from dmi.config import get_settings
from dmi.exceptions import MalformedStatementError
from dmi.utils.logging import get_logger

from ..dialects import DatabaseEngine, SQLDialect
from .statement import Statement

logger = get_logger(__name__)


class DeleteStatement(Statement):
    """
    DELETE builder.

    Renders ``"DELETE "``, then ``" FROM <first table>"`` when a table was
    added, then ``" WHERE w0 AND w1 ..."`` when where clauses were added.
    Only the first table is used.

    Examples:
        >>> stmt = DeleteStatement("PostgreSQL")
        >>> stmt.add_table("users")
        >>> stmt.add_where("id=5")
        >>> stmt.add_where("active=1")
        >>> stmt.to_statement_text()
        'DELETE  FROM users WHERE id=5 AND active=1'

    A statement with no table renders ``"DELETE "``. When created strict
    (``strict=True``, or settings ``strict_delete``) it raises
    MalformedStatementError instead.
    """

    verb = "DELETE"

    def __init__(self, *args: Any, strict: Optional[bool] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.strict = get_settings().strict_delete if strict is None else strict

    @classmethod
    def for_table(
        cls,
        dialect: Union[str, DatabaseEngine, SQLDialect, None],
        table: str,
        where_clauses: Iterable[str] = (),
    ) -> "DeleteStatement":
        """
        Create a strict delete statement with its table already set.

        Raises:
            MalformedStatementError: If table is empty
        """
        if not table:
            raise MalformedStatementError("A DELETE statement requires a table")
        statement = cls(dialect, strict=True)
        statement.add_table(table)
        statement.add_where_clauses(list(where_clauses))
        return statement

    def to_statement_text(self) -> str:
        tables = self.fragments.tables
        if not tables and self.strict:
            raise MalformedStatementError(
                "Cannot render a DELETE statement without a table",
                statement="DELETE ",
            )

        text = "DELETE "
        if tables:
            text += " FROM " + tables[0]
            if len(tables) > 1:
                logger.debug("dmi.delete.extra_tables_ignored", tables=tables[1:])
        if self.fragments.where_clauses:
            text += " WHERE " + self._join_where()
        return text
