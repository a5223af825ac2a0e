"""
Base SQL statement builder.

A Statement owns one StatementFragments instance. Callers append tables,
fields, values and where clauses, then either render the statement to SQL
text (``to_statement_text()``) or, once a stored procedure is bound, execute
it through the procedure (``execute_stored_procedure()``).
"""

from typing import Any, List, Optional, Union

from dmi.config import get_settings
from dmi.exceptions import InvalidOperationError

from ..core.fragments import JoinType, StatementFragments
from ..core.values import DatedValue, is_missing
from ..dialects import DatabaseEngine, Precision, SQLDialect, get_dialect
from ..procedures import StoredProcedure


class Statement:
    """Common fragment handling and stored procedure routing for all verbs."""

    verb = "STATEMENT"

    def __init__(
        self,
        dialect: Union[str, DatabaseEngine, SQLDialect, None] = None,
        fragments: Optional[StatementFragments] = None,
    ):
        """
        Initialize the statement.

        Args:
            dialect: Target dialect or engine name used when rendering;
                defaults to the configured database_engine
            fragments: Fragment lists to build on; a fresh set when omitted
        """
        if dialect is None:
            dialect = get_settings().database_engine
        self.dialect = get_dialect(dialect)
        self.fragments = fragments if fragments is not None else StatementFragments()
        self._procedure: Optional[StoredProcedure] = None

    # ------------------------------------------------------------------ fragments

    def add_table(self, table: str) -> None:
        self.fragments.add_table(table)

    def add_field(self, field: str) -> None:
        self.fragments.add_field(field)

    def remove_field(self, field: str) -> None:
        self.fragments.remove_field(field)

    def add_where(self, where_clause: str) -> None:
        """
        Add a WHERE predicate.

        In stored procedure mode the predicate is mapped onto the procedure
        parameter it names instead of being stored for rendering.
        """
        if self._procedure is not None:
            self._procedure.set_value_from_where_clause(where_clause)
        else:
            self.fragments.add_where_clause(where_clause)

    add_where_clause = add_where

    def add_where_clauses(self, where_clauses: List[str]) -> None:
        for where_clause in where_clauses:
            if where_clause:
                self.add_where(where_clause)

    def add_order_by(self, clause: str) -> None:
        self.fragments.add_order_by(clause)

    def add_order_by_clauses(self, clauses: List[str]) -> None:
        for clause in clauses:
            self.add_order_by(clause)

    def add_inner_join(self, table: str, on: str) -> None:
        self.fragments.add_join(table, on, JoinType.INNER)

    def add_left_join(self, table: str, on: str) -> None:
        self.fragments.add_join(table, on, JoinType.LEFT)

    def add_right_join(self, table: str, on: str) -> None:
        self.fragments.add_join(table, on, JoinType.RIGHT)

    def add_value(self, value: Any, precision: Optional[Precision] = None) -> None:
        """
        Add a value for the next field.

        Args:
            value: Python value; None is written as NULL
            precision: Rendering precision for date/time values
        """
        if self._procedure is not None:
            if self._is_nested_select(value):
                raise InvalidOperationError(
                    "Stored procedures do not support nested select in write statement."
                )
            self._procedure.add_value(value)
            return
        if precision is not None:
            value = DatedValue(value, precision)
        self.fragments.add_value(value)

    def add_null_value(self) -> None:
        self.add_value(None)

    def add_value_or_null(self, value: Any, precision: Optional[Precision] = None) -> None:
        """Add NULL for missing values (see is_missing), otherwise the value."""
        if is_missing(value):
            self.add_null_value()
        else:
            self.add_value(value, precision)

    @staticmethod
    def _is_nested_select(value: Any) -> bool:
        from .select import SelectStatement

        return isinstance(value, SelectStatement)

    # ---------------------------------------------------------- stored procedure

    def mark_as_stored_procedure(self, procedure: Optional[StoredProcedure]) -> None:
        """Bind a stored procedure in place of text rendering; None unbinds."""
        self._procedure = procedure

    def is_stored_procedure(self) -> bool:
        return self._procedure is not None

    @property
    def stored_procedure(self) -> Optional[StoredProcedure]:
        return self._procedure

    def execute_stored_procedure(self) -> Any:
        """
        Execute the bound stored procedure.

        Returns:
            Whatever the call handle returns (rows for a DB-API handle)

        Raises:
            InvalidOperationError: If no stored procedure is bound
        """
        if self._procedure is None:
            raise InvalidOperationError(
                f"Cannot use execute_stored_procedure() to execute a "
                f"{type(self).__name__} that is not a stored procedure."
            )
        return self._procedure.execute()

    def get_return_value(self) -> Any:
        if self._procedure is None:
            raise InvalidOperationError(
                f"{type(self).__name__} is not a stored procedure and has no return value."
            )
        return self._procedure.get_return_value()

    def create_stored_procedure_string(self) -> str:
        """The 'exec ...' form of the bound procedure, for logging; empty if unbound."""
        if self._procedure is None:
            return ""
        return self._procedure.exec_string()

    # ------------------------------------------------------------------ rendering

    def to_statement_text(self) -> str:
        raise NotImplementedError

    def _join_where(self, separator: str = " AND ") -> str:
        return separator.join(self.fragments.where_clauses)

    def __str__(self) -> str:
        if self._procedure is not None:
            return str(self._procedure)
        return self.to_statement_text()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self.dialect.name!r}, tables={self.fragments.tables!r})"
