"""
Stored procedure binding.

A statement can execute through a precompiled stored procedure instead of
rendered SQL text. The procedure signature is described by
StoredProcedureData; the actual call goes through a CallHandle, which for a
live database is a DBAPIProcedureCall wrapping ``cursor.callproc``.

Values added to a statement in stored procedure mode fill the procedure
parameters positionally, and where clauses such as ``id = 5`` are mapped to
the parameter with the same name (``@id``).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Protocol, runtime_checkable

from dmi.exceptions import MalformedStatementError
from dmi.utils.logging import get_logger

logger = get_logger(__name__)


class ParameterType(str, Enum):
    """SQL types a procedure parameter or return value can have."""

    VARCHAR = "VARCHAR"
    BIT = "BIT"
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    REAL = "REAL"
    DOUBLE = "DOUBLE"
    FLOAT = "FLOAT"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"

    def convert(self, text: str) -> Any:
        """
        Convert the value side of a where clause to this parameter type.

        Raises:
            ValueError: If the text cannot be parsed as this type
        """
        text = text.strip()
        if self in (ParameterType.VARCHAR, ParameterType.DATE, ParameterType.TIMESTAMP):
            if len(text) >= 2 and text.startswith("'") and text.endswith("'"):
                text = text[1:-1]
        if self is ParameterType.VARCHAR:
            return text
        if self is ParameterType.BIT:
            return text.lower() in ("1", "true")
        if self in (ParameterType.SMALLINT, ParameterType.INTEGER, ParameterType.BIGINT):
            return int(text)
        if self in (ParameterType.REAL, ParameterType.DOUBLE, ParameterType.FLOAT):
            return float(text)
        if self is ParameterType.DATE:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)


@dataclass(frozen=True)
class ProcedureParameter:
    name: str
    type: ParameterType
    nullable: bool = True


def _normalize_parameter_name(name: str) -> str:
    return name.lstrip("@").lower()


@dataclass
class StoredProcedureData:
    """Signature of a stored procedure: name, parameters and return type."""

    name: str
    parameters: List[ProcedureParameter] = field(default_factory=list)
    return_type: Optional[ParameterType] = None
    return_name: Optional[str] = None

    @property
    def has_return_value(self) -> bool:
        return self.return_type is not None

    @property
    def num_parameters(self) -> int:
        return len(self.parameters)

    def parameter_index(self, name: str) -> Optional[int]:
        """Index of the named parameter; '@' prefix optional, case ignored."""
        wanted = _normalize_parameter_name(name)
        for index, parameter in enumerate(self.parameters):
            if _normalize_parameter_name(parameter.name) == wanted:
                return index
        return None

    def call_string(self) -> str:
        """
        Build the ODBC escape call syntax for the procedure.

        Examples:
            >>> StoredProcedureData("usp_users", [p1, p2], ParameterType.INTEGER).call_string()
            '{? = call usp_users (?, ?) }'
        """
        prefix = "? = " if self.has_return_value else ""
        placeholders = ", ".join("?" for _ in self.parameters)
        return f"{{{prefix}call {self.name} ({placeholders}) }}"


@runtime_checkable
class CallHandle(Protocol):
    """Executes a bound stored procedure against the database."""

    def set_parameter(self, index: int, value: Any) -> None: ...

    def execute(self) -> Any: ...

    def get_return_value(self) -> Any: ...


class DBAPIProcedureCall:
    """CallHandle over a DB-API 2.0 connection using ``cursor.callproc``."""

    def __init__(self, dbapi_connection: Any, data: StoredProcedureData):
        self.connection = dbapi_connection
        self.data = data
        self.parameters: List[Any] = [None] * data.num_parameters
        self.rows: List[Any] = []
        self.rowcount = -1
        self._return_value: Any = None

    def set_parameter(self, index: int, value: Any) -> None:
        self.parameters[index] = value

    def execute(self) -> List[Any]:
        """Run the procedure; driver errors propagate unchanged."""
        cursor = self.connection.cursor()
        try:
            cursor.callproc(self.data.name, list(self.parameters))
            self.rows = list(cursor.fetchall()) if cursor.description else []
            self.rowcount = cursor.rowcount
        finally:
            cursor.close()

        if self.data.has_return_value and self.rows:
            self._return_value = self.rows[0][0]
        return self.rows

    def get_return_value(self) -> Any:
        return self._return_value


def _display_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, (str, date)):
        return f"'{value}'"
    return str(value)


class StoredProcedure:
    """A procedure signature bound to a call handle, filled parameter by parameter."""

    def __init__(self, data: StoredProcedureData, handle: CallHandle):
        self.data = data
        self.handle = handle
        self._display: List[str] = ["?"] * data.num_parameters
        self._next_index = 0

    def set_value(self, index: int, value: Any) -> None:
        if index >= self.data.num_parameters:
            raise MalformedStatementError(
                f"Procedure '{self.data.name}' has {self.data.num_parameters} "
                f"parameters, cannot set parameter {index + 1}"
            )
        self.handle.set_parameter(index, value)
        self._display[index] = _display_value(value)

    def add_value(self, value: Any) -> None:
        """Set the next positional parameter."""
        self.set_value(self._next_index, value)
        self._next_index += 1

    def set_value_from_where_clause(self, where: str) -> None:
        """
        Map a where clause onto the procedure parameter it names.

        Clauses are split into column and value on '=', ' LIKE ' or
        ' IS NULL'. A table qualifier on the column is ignored.

        Raises:
            MalformedStatementError: If the clause cannot be split, or names
                no parameter of the procedure, or the value cannot be
                converted to the parameter type
        """
        where = where.strip()
        upper = where.upper()
        is_null = False
        separator = "="
        pos = where.find(separator)
        if pos == -1:
            separator = " LIKE "
            pos = upper.find(separator)
            if pos == -1:
                separator = " IS NULL"
                pos = upper.find(separator)
                if pos == -1:
                    raise MalformedStatementError(
                        f"Cannot determine column or value from where clause: '{where}'",
                        statement=where,
                    )
                is_null = True

        column = where[:pos].strip().rsplit(".", 1)[-1]
        index = self.data.parameter_index(column)
        if index is None:
            known = ", ".join(p.name for p in self.data.parameters)
            raise MalformedStatementError(
                f"Couldn't find parameter '{column}' specified in where clause "
                f"'{where}'. Known parameters are: '{known}'",
                statement=where,
            )

        if is_null:
            self.set_value(index, None)
            return

        text = where[pos + len(separator):]
        parameter = self.data.parameters[index]
        try:
            value = parameter.type.convert(text)
        except ValueError as e:
            raise MalformedStatementError(
                f"Value '{text.strip()}' is not a valid {parameter.type.value} "
                f"for parameter '{parameter.name}'",
                statement=where,
            ) from e
        self.set_value(index, value)

    def execute(self) -> Any:
        logger.debug("dmi.procedure.execute", procedure=self.exec_string())
        return self.handle.execute()

    def get_return_value(self) -> Any:
        return self.handle.get_return_value()

    def exec_string(self) -> str:
        """The procedure call as it could be pasted into a query tool."""
        return f"exec {self.data.name} " + ", ".join(self._display)

    def __str__(self) -> str:
        prefix = f"{self.data.return_type.value} " if self.data.return_type else ""
        return f"{prefix}{self.data.name}(" + ", ".join(self._display) + ")"
