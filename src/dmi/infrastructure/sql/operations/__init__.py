"""Statement builders, one class per SQL verb."""

from .delete import DeleteStatement
from .insert import InsertStatement
from .select import SelectStatement, count_sql_text, count_statement_text
from .statement import Statement
from .update import UpdateStatement
from .write import WriteStatement

__all__ = [
    "DeleteStatement",
    "InsertStatement",
    "SelectStatement",
    "Statement",
    "UpdateStatement",
    "WriteStatement",
    "count_sql_text",
    "count_statement_text",
]
