"""
SQL identifier handling utilities.

Provides escaping of field names for the target engine and removal of table
qualifiers from field names.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..dialects.base import SQLDialect


def escape_field(field: str, dialect: "SQLDialect") -> str:
    """
    Escape a field name for the dialect's engine.

    Each dot-separated part ("Schema.Table.Column") is escaped separately.
    Function calls and already-escaped names are returned unchanged.

    Args:
        field: Field name, optionally qualified
        dialect: Target dialect

    Returns:
        Escaped field name

    Examples:
        >>> escape_field("users.name", SQLServerDialect())
        '[users].[name]'
        >>> escape_field("COUNT(*)", SQLServerDialect())
        'COUNT(*)'
        >>> escape_field("name", PostgreSQLDialect())
        'name'
    """
    left = dialect.field_left_escape
    right = dialect.field_right_escape
    if not left:
        return field
    if "(" in field or left in field:
        # Function or already escaped, too complicated to split here
        return field

    return ".".join(f"{left}{part}{right}" for part in field.split("."))


def remove_table_name(field: str) -> str:
    """
    Strip a leading table qualifier from a field name.

    Examples:
        >>> remove_table_name("users.name")
        'name'
        >>> remove_table_name("name")
        'name'
    """
    return field.split(".", 1)[1] if "." in field else field
