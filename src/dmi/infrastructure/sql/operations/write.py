"""
Combined insert/update statement used by the write-mode workflow.

A WriteStatement is built once (table, fields, values, optional where
clauses) and can then be rendered either as an INSERT or as an UPDATE over
the same fragments.
"""

from typing import Optional

from .delete import DeleteStatement
from .insert import InsertStatement
from .statement import Statement
from .update import UpdateStatement


class WriteStatement(Statement):
    """Fragments shared by an insert view and an update view."""

    verb = "WRITE"

    def insert_statement(self) -> InsertStatement:
        return InsertStatement(self.dialect, fragments=self.fragments)

    def update_statement(self, try_build_where: bool = False) -> UpdateStatement:
        return UpdateStatement(
            self.dialect, fragments=self.fragments, try_build_where=try_build_where
        )

    def delete_statement(self) -> Optional[DeleteStatement]:
        """
        Delete of the rows this write targets, for DELETE_INSERT.

        Returns None when there are no where clauses, since an unrestricted
        delete would empty the table.
        """
        if not self.fragments.tables or not self.fragments.where_clauses:
            return None
        return DeleteStatement.for_table(
            self.dialect, self.fragments.tables[0], self.fragments.where_clauses
        )

    def to_insert_string(self) -> str:
        return self.insert_statement().to_statement_text()

    def to_update_string(self, try_build_where: bool = False) -> str:
        return self.update_statement(try_build_where).to_statement_text()

    def to_statement_text(self) -> str:
        """Render as an UPDATE when where clauses exist, otherwise an INSERT."""
        if self.fragments.where_clauses:
            return self.to_update_string()
        return self.to_insert_string()
