"""
DMI session: executes rendered statements over a SQLAlchemy connection.

The session adds the guards and diagnostics around statement execution:
read-only and closed-session checks, optional upper-casing of SQL, SQL
dumping through structlog, routing of stored procedure statements, and
replay of the last statement run.

Transactions are left to the caller. Pass a connection opened with
``isolation_level="AUTOCOMMIT"`` when each write should be committed as it
runs, which is also what INSERT_UPDATE fallbacks on PostgreSQL need (a
failed INSERT aborts an open transaction).
"""

from enum import Enum
from functools import partial
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

import pandas as pd
from sqlalchemy.engine import Connection, CursorResult

from dmi.config import Settings, get_settings
from dmi.config.procedure_loader import load_procedure_catalog
from dmi.exceptions import (
    InvalidOperationError,
    NotConnectedError,
    ReadOnlyDatabaseError,
    UnsupportedWriteModeError,
)
from dmi.infrastructure.sql.dialects import DatabaseEngine, SQLDialect, get_dialect
from dmi.infrastructure.sql.operations import (
    DeleteStatement,
    SelectStatement,
    Statement,
    WriteStatement,
    count_sql_text,
    count_statement_text,
)
from dmi.infrastructure.sql.procedures import (
    DBAPIProcedureCall,
    StoredProcedure,
    StoredProcedureData,
)
from dmi.io.writer.models import WriteOutcome, WriteResult
from dmi.io.writer.operations import reconcile
from dmi.io.writer.write_mode import WriteModeType
from dmi.utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class DataStore(Protocol):
    """Anything that can hand out the database connection it reads from."""

    def get_connection(self) -> Any: ...


class StatementKind(str, Enum):
    """Kind of the last statement run, used to replay it."""

    SELECT = "select"
    COUNT = "count"
    DELETE = "delete"
    WRITE = "write"
    EXECUTE = "execute"


StatementOrSQL = Union[Statement, str]


class DMI:
    """
    Database session over a SQLAlchemy connection.

    Args:
        connection: Open SQLAlchemy Connection
        dialect: Engine name, DatabaseEngine or dialect instance; defaults
            to the configured database_engine
        settings: Settings to take session flags from; defaults to
            get_settings()
        procedures: Stored procedure catalog; defaults to the YAML catalog
            named by settings.procedures_config
    """

    def __init__(
        self,
        connection: Connection,
        dialect: Union[str, DatabaseEngine, SQLDialect, None] = None,
        settings: Optional[Settings] = None,
        procedures: Optional[Dict[str, StoredProcedureData]] = None,
    ):
        self._settings = settings or get_settings()
        self._connection = connection
        self.dialect = get_dialect(dialect or self._settings.database_engine)

        self.editable = self._settings.editable
        self.capitalize = self._settings.capitalize
        self.dump_sql_on_error = self._settings.dump_sql_on_error
        self.dump_sql_on_execution = self._settings.dump_sql_on_execution

        self.procedures = (
            procedures
            if procedures is not None
            else load_procedure_catalog(self._settings.procedures_config)
        )

        self._connected = True
        self._dirty = False
        self._last_statement: Optional[StatementOrSQL] = None
        self._last_kind: Optional[StatementKind] = None
        self._logger = logger.bind(engine=self.dialect.name)

        self._logger.info(
            "dmi.session.opened",
            editable=self.editable,
            procedures=len(self.procedures),
        )

    # ------------------------------------------------------------------ state

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def dirty(self) -> bool:
        """True once a write through this session has changed the database."""
        return self._dirty

    @property
    def last_statement(self) -> Optional[StatementOrSQL]:
        return self._last_statement

    @property
    def last_statement_kind(self) -> Optional[StatementKind]:
        return self._last_kind

    def get_connection(self) -> Connection:
        return self._connection

    def close(self) -> None:
        """Close the underlying connection; the session cannot be used afterwards."""
        if not self._connected:
            return
        self._connection.close()
        self._connected = False
        self._logger.info("dmi.session.closed")

    def __enter__(self) -> "DMI":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----------------------------------------------------------------- guards

    def _check_connected(self, operation: str) -> None:
        if not self._connected:
            raise NotConnectedError(f"Database not connected, cannot call {operation}()")

    def _check_editable(self, operation: str) -> None:
        if not self.editable:
            raise ReadOnlyDatabaseError(
                f"Database is in read-only mode, cannot call {operation}()"
            )

    def _remember(self, statement: StatementOrSQL, kind: StatementKind) -> None:
        self._last_statement = statement
        self._last_kind = kind

    # -------------------------------------------------------------- execution

    def _render(self, statement: StatementOrSQL) -> str:
        return statement if isinstance(statement, str) else statement.to_statement_text()

    def _execute(self, sql: str) -> CursorResult:
        if self.capitalize:
            sql = sql.upper()
        if self.dump_sql_on_execution:
            self._logger.info("dmi.sql.execute", sql=sql)
        try:
            # Literal SQL: no bind parameter parsing, no driver-side % formatting
            return self._connection.exec_driver_sql(
                sql, execution_options={"no_parameters": True}
            )
        except Exception as e:
            if self.dump_sql_on_error:
                self._logger.error(
                    "dmi.sql.failed",
                    sql=sql,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            raise

    def _execute_update(self, sql: str) -> int:
        return self._execute(sql).rowcount

    def _query(self, statement: StatementOrSQL) -> Tuple[List[str], List[Sequence[Any]]]:
        if isinstance(statement, SelectStatement) and statement.is_stored_procedure():
            rows = statement.execute_stored_procedure_query()
            return [], rows
        self._remember(statement, StatementKind.SELECT)
        result = self._execute(self._render(statement))
        return list(result.keys()), list(result.fetchall())

    # ----------------------------------------------------------------- reads

    def dmi_select(self, statement: StatementOrSQL) -> List[Sequence[Any]]:
        """
        Run a SELECT and return all rows.

        Stored procedure statements run through their bound procedure.
        """
        self._check_connected("dmi_select")
        _, rows = self._query(statement)
        return rows

    def dmi_select_frame(self, statement: StatementOrSQL) -> pd.DataFrame:
        """Run a SELECT and return the rows as a DataFrame."""
        self._check_connected("dmi_select_frame")
        columns, rows = self._query(statement)
        if columns:
            return pd.DataFrame([tuple(row) for row in rows], columns=columns)
        return pd.DataFrame([tuple(row) for row in rows])

    def dmi_count(self, statement: StatementOrSQL) -> int:
        """
        Count the rows a SELECT would return.

        The projection and ORDER BY are replaced by ``SELECT COUNT(*)``; SQL
        text already starting with ``SELECT COUNT`` runs unchanged.
        """
        self._check_connected("dmi_count")
        if isinstance(statement, Statement) and statement.is_stored_procedure():
            rows = statement.execute_stored_procedure()
            if not rows or not rows[0]:
                return 0
            return int(rows[0][0])

        self._remember(statement, StatementKind.COUNT)
        if isinstance(statement, SelectStatement):
            sql = count_statement_text(statement)
        else:
            sql = count_sql_text(self._render(statement))
        self._logger.debug("dmi.count", sql=sql)
        return int(self._execute(sql).scalar_one())

    # ---------------------------------------------------------------- writes

    def _procedure_rowcount(self, statement: Statement) -> int:
        statement.execute_stored_procedure()
        value = statement.get_return_value()
        return value if isinstance(value, int) else 0

    def dmi_delete(self, statement: StatementOrSQL) -> int:
        """Run a DELETE and return the number of rows removed."""
        self._check_connected("dmi_delete")
        self._check_editable("dmi_delete")
        if isinstance(statement, Statement) and statement.is_stored_procedure():
            return self._procedure_rowcount(statement)

        self._remember(statement, StatementKind.DELETE)
        rows = self._execute_update(self._render(statement))
        if rows > 0:
            self._dirty = True
        return rows

    def dmi_execute(self, sql: str) -> int:
        """Run any SQL text and return the affected row count."""
        self._check_connected("dmi_execute")
        self._check_editable("dmi_execute")
        self._remember(sql, StatementKind.EXECUTE)
        rows = self._execute_update(sql)
        if rows > 0:
            self._dirty = True
        return rows

    def _resolve_mode(self, mode: Union[WriteModeType, str, int]) -> WriteModeType:
        if isinstance(mode, WriteModeType):
            return mode
        resolved = (
            WriteModeType.from_code(mode)
            if isinstance(mode, int)
            else WriteModeType.value_of_ignore_case(mode)
        )
        if resolved is None:
            raise UnsupportedWriteModeError(f"Unknown write mode: {mode!r}")
        return resolved

    def dmi_write(
        self,
        statement: WriteStatement,
        mode: Union[WriteModeType, str, int],
    ) -> WriteResult:
        """
        Write a record using a write-mode policy.

        Only the statements the mode needs are rendered, and a fallback
        statement only once the primary step has failed over to it.
        UPDATE_INSERT builds its where clause from the field values when
        none was given.

        Returns:
            WriteResult describing which path was taken

        Raises:
            UnsupportedWriteModeError: If the mode is unknown or the
                statement lacks a piece the mode needs
        """
        self._check_connected("dmi_write")
        self._check_editable("dmi_write")
        mode = self._resolve_mode(mode)

        if statement.is_stored_procedure():
            rows = self._procedure_rowcount(statement)
            self._dirty = True
            return WriteResult(
                WriteOutcome.PRIMARY,
                mode,
                rows,
                [statement.create_stored_procedure_string()],
            )

        self._remember(statement, StatementKind.WRITE)

        needs_insert = mode is not WriteModeType.UPDATE
        needs_update = mode in (
            WriteModeType.UPDATE,
            WriteModeType.INSERT_UPDATE,
            WriteModeType.UPDATE_INSERT,
        )
        insert = statement.to_insert_string if needs_insert else None
        update = (
            partial(
                statement.to_update_string,
                try_build_where=mode is WriteModeType.UPDATE_INSERT,
            )
            if needs_update
            else None
        )
        delete = None
        if mode is WriteModeType.DELETE_INSERT:
            delete_statement = statement.delete_statement()
            if delete_statement is None:
                raise UnsupportedWriteModeError(
                    f"Write mode {mode} requires where clauses to build the DELETE"
                )
            delete = delete_statement.to_statement_text()

        result = reconcile(
            mode, self._execute_update, insert=insert, update=update, delete=delete
        )
        if result.success:
            self._dirty = True
        self._logger.info(
            "dmi.write.completed",
            mode=str(mode),
            outcome=result.outcome.value,
            rows=result.rows_affected,
        )
        return result

    # ---------------------------------------------------------------- replay

    def dmi_run_last_sql(self) -> Any:
        """
        Run the last statement again.

        Writes are replayed as UPDATE_INSERT.

        Raises:
            InvalidOperationError: If no statement has been run yet
        """
        statement, kind = self._last_statement, self._last_kind
        if statement is None or kind is None:
            raise InvalidOperationError("No statement has been run on this session")

        self._logger.debug("dmi.replay", kind=kind.value)
        if kind is StatementKind.SELECT:
            return self.dmi_select(statement)
        if kind is StatementKind.COUNT:
            return self.dmi_count(statement)
        if kind is StatementKind.DELETE:
            return self.dmi_delete(statement)
        if kind is StatementKind.WRITE:
            return self.dmi_write(statement, WriteModeType.UPDATE_INSERT)
        return self.dmi_execute(self._render(statement))

    # ------------------------------------------------------ stored procedures

    def bind_stored_procedure(self, statement: Statement, name: str) -> bool:
        """
        Bind a catalog procedure to a statement.

        Returns:
            False if the catalog has no procedure with that name
        """
        data = self.procedures.get(name)
        if data is None:
            self._logger.debug("dmi.procedure.not_found", procedure=name)
            return False
        handle = DBAPIProcedureCall(self._connection.connection, data)
        statement.mark_as_stored_procedure(StoredProcedure(data, handle))
        return True

    # ------------------------------------------------------------- factories

    def select_statement(self) -> SelectStatement:
        return SelectStatement(self.dialect)

    def delete_statement(self) -> DeleteStatement:
        return DeleteStatement(self.dialect)

    def write_statement(self) -> WriteStatement:
        return WriteStatement(self.dialect)

    def __repr__(self) -> str:
        return f"DMI(engine={self.dialect.name!r}, connected={self._connected})"
