import re
from typing import Callable, List, Optional, Union

from psycopg2 import errorcodes

from dmi.exceptions import UnsupportedWriteModeError
from dmi.io.writer.models import WriteOutcome, WriteResult
from dmi.io.writer.write_mode import WriteModeType
from dmi.utils.logging import get_logger

logger = get_logger(__name__)

# Rendered SQL, or a callable that renders it when the step actually runs
SQLSource = Union[str, Callable[[], str], None]

# MySQL ER_DUP_ENTRY, SQL Server unique constraint / unique index
_DUPLICATE_ERROR_CODES = {1062, 2627, 2601}
_INTEGRITY_CLASS = "23"
_DUPLICATE_MESSAGES = (
    "duplicate key",
    "duplicate entry",
    "unique constraint",
    "primary key must be unique",
)
# ODBC drivers embed the native error number in the message, e.g. "... (2627)"
_NATIVE_CODE_IN_MESSAGE = re.compile(r"\((\d{3,5})\)")


def _driver_error(exc: BaseException) -> BaseException:
    # SQLAlchemy wraps the DB-API exception in .orig
    return getattr(exc, "orig", None) or exc


def _sqlstate(orig: BaseException) -> Optional[str]:
    return (
        getattr(orig, "pgcode", None)
        or getattr(orig, "sqlstate", None)
        or (orig.args[0] if orig.args and isinstance(orig.args[0], str) else None)
    )


def _native_code(orig: BaseException) -> Optional[int]:
    code = getattr(orig, "errno", None)
    if code is not None:
        return code
    for arg in orig.args[:2]:
        if isinstance(arg, int):
            return arg
    # The native number is the last one, after any key values quoted earlier
    matches = _NATIVE_CODE_IN_MESSAGE.findall(str(orig))
    return int(matches[-1]) if matches else None


def is_duplicate_key_error(exc: BaseException) -> bool:
    """
    Decide whether an INSERT failed because the row already exists.

    Only key conflicts count. NOT NULL, foreign key and CHECK violations are
    integrity errors too, but falling back to UPDATE cannot fix them.

    Checks, in order: the SQLSTATE reported by the driver (``pgcode`` for
    psycopg2, ``sqlstate`` or ``args[0]`` for ODBC drivers); vendor error
    numbers (MySQL 1062, SQL Server 2627/2601, the latter also required
    alongside the generic SQLSTATE 23000); the Access ODBC pair
    ``S1000``/0; and finally the key-conflict messages of drivers that
    report no code (SQLite).

    Args:
        exc: Exception raised while executing the INSERT, either the DB-API
            error or the SQLAlchemy error wrapping it

    Returns:
        True when falling back to UPDATE is appropriate
    """
    orig = _driver_error(exc)
    sqlstate = _sqlstate(orig)
    if sqlstate == errorcodes.UNIQUE_VIOLATION:
        return True

    code = _native_code(orig)
    if sqlstate == errorcodes.INTEGRITY_CONSTRAINT_VIOLATION:
        # Generic integrity state (SQL Server, MySQL): the native code decides
        return code in _DUPLICATE_ERROR_CODES
    if sqlstate and len(sqlstate) == 5 and sqlstate.startswith(_INTEGRITY_CLASS):
        # NOT NULL, foreign key, CHECK and the other class 23 states
        return False
    if code in _DUPLICATE_ERROR_CODES:
        return True

    # Access reports key violations as a general error with native code 0
    if sqlstate == "S1000" and code == 0:
        return True

    msg = str(orig).lower()
    return any(fragment in msg for fragment in _DUPLICATE_MESSAGES)


def _require(mode: WriteModeType, verb: str, sql: SQLSource) -> str:
    if callable(sql):
        sql = sql()
    if not sql:
        raise UnsupportedWriteModeError(
            f"Write mode {mode} requires a non-empty {verb} statement"
        )
    return sql


def reconcile(
    mode: WriteModeType,
    execute: Callable[[str], int],
    *,
    insert: SQLSource = None,
    update: SQLSource = None,
    delete: SQLSource = None,
    is_conflict: Callable[[BaseException], bool] = is_duplicate_key_error,
) -> WriteResult:
    """
    Run a write-mode policy as explicit primary and fallback steps.

    Args:
        mode: Policy to apply
        execute: Runs one SQL statement and returns the affected row count
        insert: INSERT text, or a callable rendering it
        update: UPDATE text, or a callable rendering it
        delete: DELETE text or callable (DELETE_INSERT only)
        is_conflict: Classifies an INSERT failure as "row already exists"

    Returns:
        WriteResult tagged PRIMARY, FALLBACK or FAILED. Database errors are
        carried in ``error`` rather than raised.

    Raises:
        UnsupportedWriteModeError: If a statement the mode needs is missing.
            A fallback statement is only rendered and checked once the
            primary step has led to it.
    """
    statements: List[str] = []

    def run(sql: str) -> int:
        statements.append(sql)
        return execute(sql)

    def failed(exc: BaseException, rows: int = 0) -> WriteResult:
        logger.warning(
            "dmi.write.failed",
            mode=str(mode),
            statement=statements[-1] if statements else None,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return WriteResult(WriteOutcome.FAILED, mode, rows, statements, exc)

    if mode is WriteModeType.INSERT:
        sql = _require(mode, "INSERT", insert)
        try:
            rows = run(sql)
        except Exception as e:
            return failed(e)
        return WriteResult(WriteOutcome.PRIMARY, mode, rows, statements)

    if mode is WriteModeType.UPDATE:
        sql = _require(mode, "UPDATE", update)
        try:
            rows = run(sql)
        except Exception as e:
            return failed(e)
        return WriteResult(WriteOutcome.PRIMARY, mode, rows, statements)

    if mode is WriteModeType.DELETE_INSERT:
        delete_sql = _require(mode, "DELETE", delete)
        insert_sql = _require(mode, "INSERT", insert)
        try:
            rows = run(delete_sql)
            rows += run(insert_sql)
        except Exception as e:
            return failed(e)
        return WriteResult(WriteOutcome.PRIMARY, mode, rows, statements)

    if mode is WriteModeType.INSERT_UPDATE:
        insert_sql = _require(mode, "INSERT", insert)
        try:
            rows = run(insert_sql)
            return WriteResult(WriteOutcome.PRIMARY, mode, rows, statements)
        except Exception as e:
            if not is_conflict(e):
                return failed(e)
            logger.info("dmi.write.insert_conflict", mode=str(mode), error=str(e))
        update_sql = _require(mode, "UPDATE", update)
        try:
            rows = run(update_sql)
        except Exception as e:
            return failed(e)
        return WriteResult(WriteOutcome.FALLBACK, mode, rows, statements)

    if mode is WriteModeType.UPDATE_INSERT:
        update_sql = _require(mode, "UPDATE", update)
        try:
            rows = run(update_sql)
        except Exception as e:
            return failed(e)
        if rows != 0:
            return WriteResult(WriteOutcome.PRIMARY, mode, rows, statements)
        logger.info("dmi.write.update_missed", mode=str(mode))
        insert_sql = _require(mode, "INSERT", insert)
        try:
            rows = run(insert_sql)
        except Exception as e:
            return failed(e)
        return WriteResult(WriteOutcome.FALLBACK, mode, rows, statements)

    raise UnsupportedWriteModeError(f"Unsupported write mode: {mode!r}")


__all__ = ["is_duplicate_key_error", "reconcile"]
