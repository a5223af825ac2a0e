"""
SQL module for statement building and rendering.

Statements are assembled from ordered fragments and rendered into literal
SQL text for the configured database engine, or executed through a bound
stored procedure.
"""

from .dialects import DatabaseEngine, Precision, SQLDialect, get_dialect
from .operations import (
    DeleteStatement,
    InsertStatement,
    SelectStatement,
    Statement,
    UpdateStatement,
    WriteStatement,
)
from .procedures import (
    DBAPIProcedureCall,
    ParameterType,
    ProcedureParameter,
    StoredProcedure,
    StoredProcedureData,
)

__all__ = [
    "DBAPIProcedureCall",
    "DatabaseEngine",
    "DeleteStatement",
    "InsertStatement",
    "ParameterType",
    "Precision",
    "ProcedureParameter",
    "SQLDialect",
    "SelectStatement",
    "Statement",
    "StoredProcedure",
    "StoredProcedureData",
    "UpdateStatement",
    "WriteStatement",
    "get_dialect",
]
