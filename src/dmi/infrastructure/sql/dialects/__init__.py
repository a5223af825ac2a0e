"""SQL dialects, one per database engine family."""

from typing import Dict, Type, Union

from .base import DatabaseEngine, Precision, SQLDialect
from .generic import H2Dialect, InformixDialect, OracleDialect, SQLiteDialect
from .mysql import MySQLDialect
from .postgresql import PostgreSQLDialect
from .sqlserver import AccessDialect, SQLServerDialect

_DIALECTS: Dict[DatabaseEngine, Type[SQLDialect]] = {
    DatabaseEngine.ACCESS: AccessDialect,
    DatabaseEngine.INFORMIX: InformixDialect,
    DatabaseEngine.MYSQL: MySQLDialect,
    DatabaseEngine.ORACLE: OracleDialect,
    DatabaseEngine.POSTGRESQL: PostgreSQLDialect,
    DatabaseEngine.SQLSERVER: SQLServerDialect,
    DatabaseEngine.H2: H2Dialect,
    DatabaseEngine.SQLITE: SQLiteDialect,
}


def get_dialect(engine: Union[str, DatabaseEngine, SQLDialect]) -> SQLDialect:
    """
    Resolve a dialect instance.

    Args:
        engine: Engine name (e.g. "SQLServer2000"), DatabaseEngine member,
            or an existing dialect which is returned unchanged

    Returns:
        Dialect instance for the engine

    Raises:
        ValueError: If the engine name is not recognized
    """
    if isinstance(engine, SQLDialect):
        return engine
    resolved = (
        engine if isinstance(engine, DatabaseEngine) else DatabaseEngine.from_name(engine)
    )
    if resolved is None:
        raise ValueError(f"Unknown database engine: {engine!r}")
    return _DIALECTS[resolved]()


__all__ = [
    "AccessDialect",
    "DatabaseEngine",
    "H2Dialect",
    "InformixDialect",
    "MySQLDialect",
    "OracleDialect",
    "PostgreSQLDialect",
    "Precision",
    "SQLDialect",
    "SQLServerDialect",
    "SQLiteDialect",
    "get_dialect",
]
