"""
Tests for the DMI session against an in-memory SQLite database.
"""

from unittest.mock import MagicMock

import pandas as pd
import pytest
from sqlalchemy.exc import OperationalError

from dmi.config.settings import Settings
from dmi.exceptions import (
    InvalidOperationError,
    NotConnectedError,
    ReadOnlyDatabaseError,
    UnsupportedWriteModeError,
)
from dmi.infrastructure.sql.operations import DeleteStatement, SelectStatement
from dmi.infrastructure.sql.procedures import (
    ParameterType,
    ProcedureParameter,
    StoredProcedure,
    StoredProcedureData,
)
from dmi.io.writer.core import DMI, DataStore, StatementKind
from dmi.io.writer.models import WriteOutcome
from dmi.io.writer.write_mode import WriteModeType


def _user_write(session: DMI, user_id: int, name: str, where: bool = False):
    stmt = session.write_statement()
    stmt.add_table("users")
    stmt.add_field("id")
    stmt.add_field("name")
    stmt.add_value(user_id)
    stmt.add_value(name)
    if where:
        stmt.add_where(f"id = {user_id}")
    return stmt


def _names(session: DMI):
    return [tuple(r) for r in session.dmi_select("SELECT id, name FROM users ORDER BY id")]


@pytest.mark.unit
class TestDMISession:
    """Tests for reads, guards and diagnostics."""

    def test_is_data_store(self, dmi_session, sqlite_connection):
        assert isinstance(dmi_session, DataStore)
        assert dmi_session.get_connection() is sqlite_connection
        assert dmi_session.dialect.name == "SQLite"

    def test_select_statement(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        stmt = dmi_session.select_statement()
        stmt.add_field("name")
        stmt.add_table("users")
        stmt.add_where("id = 1")
        assert [tuple(r) for r in dmi_session.dmi_select(stmt)] == [("Ann",)]
        assert dmi_session.last_statement is stmt
        assert dmi_session.last_statement_kind is StatementKind.SELECT

    def test_literal_text_is_not_parsed_for_parameters(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'a:b 100%')")
        assert _names(dmi_session) == [(1, "a:b 100%")]

    def test_select_frame(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        frame = dmi_session.dmi_select_frame("SELECT id, name FROM users")
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ["id", "name"]
        assert frame.iloc[0]["name"] == "Ann"

    def test_count(self, dmi_session):
        for i in range(3):
            dmi_session.dmi_execute(f"INSERT INTO users (id, name) VALUES ({i}, 'u{i}')")
        stmt = SelectStatement("SQLite")
        stmt.add_field("name")
        stmt.add_table("users")
        stmt.add_order_by("name")
        assert dmi_session.dmi_count(stmt) == 3
        assert dmi_session.dmi_count("SELECT name FROM users WHERE id > 0 ORDER BY name") == 2

    def test_delete(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name, active) VALUES (1, 'a', 0)")
        dmi_session.dmi_execute("INSERT INTO users (id, name, active) VALUES (2, 'b', 1)")
        stmt = DeleteStatement.for_table("SQLite", "users", ["active = 0"])
        assert dmi_session.dmi_delete(stmt) == 1
        assert dmi_session.dirty is True
        assert _names(dmi_session) == [(2, "b")]

    def test_read_only_guards_writes(self, dmi_session):
        dmi_session.editable = False
        with pytest.raises(ReadOnlyDatabaseError):
            dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann"), WriteModeType.INSERT)
        with pytest.raises(ReadOnlyDatabaseError):
            dmi_session.dmi_delete("DELETE FROM users")
        with pytest.raises(ReadOnlyDatabaseError):
            dmi_session.dmi_execute("DELETE FROM users")
        assert dmi_session.dmi_select("SELECT * FROM users") == []

    def test_read_only_from_settings(self, sqlite_connection):
        session = DMI(
            sqlite_connection,
            settings=Settings(database_engine="SQLite", editable=False),
            procedures={},
        )
        assert session.editable is False

    def test_closed_session_raises(self, dmi_session):
        dmi_session.close()
        assert dmi_session.connected is False
        with pytest.raises(NotConnectedError):
            dmi_session.dmi_select("SELECT 1")
        with pytest.raises(NotConnectedError):
            dmi_session.dmi_count("SELECT id FROM users")

    def test_capitalize(self, dmi_session):
        dmi_session.capitalize = True
        dmi_session.dmi_execute("insert into users (id, name) values (9, 'low')")
        assert _names(dmi_session) == [(9, "LOW")]

    def test_dump_sql_on_error_logs_and_reraises(self, dmi_session):
        dmi_session.dump_sql_on_error = True
        dmi_session._logger = MagicMock()
        with pytest.raises(OperationalError):
            dmi_session.dmi_select("SELECT * FROM missing_table")
        dmi_session._logger.error.assert_called_once()
        assert dmi_session._logger.error.call_args.kwargs["sql"] == "SELECT * FROM missing_table"

    def test_dump_sql_on_execution(self, dmi_session):
        dmi_session.dump_sql_on_execution = True
        dmi_session._logger = MagicMock()
        dmi_session.dmi_select("SELECT 1")
        dmi_session._logger.info.assert_any_call("dmi.sql.execute", sql="SELECT 1")


@pytest.mark.unit
class TestDMIWrite:
    """Tests for dmi_write with each write mode."""

    def test_insert(self, dmi_session):
        result = dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann"), WriteModeType.INSERT)
        assert result.outcome is WriteOutcome.PRIMARY
        assert result.rows_affected == 1
        assert dmi_session.dirty is True
        assert _names(dmi_session) == [(1, "Ann")]

    def test_insert_update_falls_back_on_duplicate(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        result = dmi_session.dmi_write(
            _user_write(dmi_session, 1, "Bob", where=True), WriteModeType.INSERT_UPDATE
        )
        assert result.outcome is WriteOutcome.FALLBACK
        assert _names(dmi_session) == [(1, "Bob")]

    def test_update_insert(self, dmi_session):
        first = dmi_session.dmi_write(_user_write(dmi_session, 2, "Cy"), WriteModeType.UPDATE_INSERT)
        assert first.outcome is WriteOutcome.FALLBACK
        second = dmi_session.dmi_write(_user_write(dmi_session, 2, "Cy"), WriteModeType.UPDATE_INSERT)
        assert second.outcome is WriteOutcome.PRIMARY
        assert _names(dmi_session) == [(2, "Cy")]

    def test_delete_insert(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        result = dmi_session.dmi_write(
            _user_write(dmi_session, 1, "Dee", where=True), WriteModeType.DELETE_INSERT
        )
        assert result.outcome is WriteOutcome.PRIMARY
        assert result.rows_affected == 2
        assert _names(dmi_session) == [(1, "Dee")]

    def test_delete_insert_needs_where(self, dmi_session):
        with pytest.raises(UnsupportedWriteModeError):
            dmi_session.dmi_write(_user_write(dmi_session, 1, "Dee"), WriteModeType.DELETE_INSERT)

    def test_mode_by_name_and_code(self, dmi_session):
        result = dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann"), "insert")
        assert result.mode is WriteModeType.INSERT
        result = dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann", where=True), 9)
        assert result.mode is WriteModeType.UPDATE

    def test_unknown_mode(self, dmi_session):
        with pytest.raises(UnsupportedWriteModeError):
            dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann"), "Upsert")

    def test_failed_insert_is_reported(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        result = dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann"), WriteModeType.INSERT)
        assert result.outcome is WriteOutcome.FAILED
        assert result.error is not None

    def test_insert_update_not_null_violation_is_not_a_conflict(self, dmi_session):
        dmi_session.dmi_execute(
            "CREATE TABLE accounts (id INTEGER PRIMARY KEY, name TEXT NOT NULL)"
        )
        stmt = dmi_session.write_statement()
        stmt.add_table("accounts")
        stmt.add_field("id")
        stmt.add_field("name")
        stmt.add_value(1)
        stmt.add_value(None)
        stmt.add_where("id = 1")

        result = dmi_session.dmi_write(stmt, WriteModeType.INSERT_UPDATE)

        assert result.outcome is WriteOutcome.FAILED
        assert result.success is False
        assert result.statements == ["INSERT INTO accounts (id, name) VALUES (1, NULL)"]
        assert dmi_session.dirty is False

    def test_insert_update_without_where_inserts_new_row(self, dmi_session):
        result = dmi_session.dmi_write(_user_write(dmi_session, 1, "a"), WriteModeType.INSERT_UPDATE)
        assert result.outcome is WriteOutcome.PRIMARY
        assert result.statements == ["INSERT INTO users (id, name) VALUES (1, 'a')"]
        assert _names(dmi_session) == [(1, "a")]

    def test_insert_update_without_where_unsupported_on_conflict(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        with pytest.raises(UnsupportedWriteModeError):
            dmi_session.dmi_write(_user_write(dmi_session, 1, "Bob"), WriteModeType.INSERT_UPDATE)
        assert _names(dmi_session) == [(1, "Ann")]


@pytest.mark.unit
class TestReplayAndProcedures:
    """Tests for last-statement replay and stored procedure routing."""

    def test_replay_without_statement(self, dmi_session):
        with pytest.raises(InvalidOperationError):
            dmi_session.dmi_run_last_sql()

    def test_replay_select(self, dmi_session):
        dmi_session.dmi_execute("INSERT INTO users (id, name) VALUES (1, 'Ann')")
        first = [tuple(r) for r in dmi_session.dmi_select("SELECT id FROM users")]
        assert [tuple(r) for r in dmi_session.dmi_run_last_sql()] == first

    def test_replay_write_as_update_insert(self, dmi_session):
        dmi_session.dmi_write(_user_write(dmi_session, 1, "Ann"), WriteModeType.INSERT)
        result = dmi_session.dmi_run_last_sql()
        assert result.mode is WriteModeType.UPDATE_INSERT
        assert result.outcome is WriteOutcome.PRIMARY
        assert _names(dmi_session) == [(1, "Ann")]

    def test_bind_unknown_procedure(self, dmi_session):
        stmt = dmi_session.select_statement()
        assert dmi_session.bind_stored_procedure(stmt, "usp_missing") is False
        assert stmt.is_stored_procedure() is False

    def test_bind_catalog_procedure(self, sqlite_connection):
        data = StoredProcedureData("usp_users", [ProcedureParameter("@id", ParameterType.INTEGER)])
        session = DMI(
            sqlite_connection,
            settings=Settings(database_engine="SQLite"),
            procedures={"usp_users": data},
        )
        stmt = session.delete_statement()
        assert session.bind_stored_procedure(stmt, "usp_users") is True
        assert stmt.is_stored_procedure() is True
        assert stmt.stored_procedure.data is data

    def test_count_through_procedure_with_no_rows(self, dmi_session):
        data = StoredProcedureData("usp_count_users", [], ParameterType.INTEGER)
        handle = MagicMock()
        handle.execute.return_value = []
        stmt = SelectStatement("SQLite")
        stmt.mark_as_stored_procedure(StoredProcedure(data, handle))
        assert dmi_session.dmi_count(stmt) == 0

    def test_count_through_procedure(self, dmi_session):
        data = StoredProcedureData("usp_count_users", [], ParameterType.INTEGER)
        handle = MagicMock()
        handle.execute.return_value = [(7,)]
        stmt = SelectStatement("SQLite")
        stmt.mark_as_stored_procedure(StoredProcedure(data, handle))
        assert dmi_session.dmi_count(stmt) == 7

    def test_delete_routes_through_procedure(self, dmi_session):
        data = StoredProcedureData(
            "usp_delete", [ProcedureParameter("@id", ParameterType.INTEGER)], ParameterType.INTEGER
        )
        handle = MagicMock()
        handle.get_return_value.return_value = 4
        stmt = DeleteStatement("SQLite")
        stmt.mark_as_stored_procedure(StoredProcedure(data, handle))
        stmt.add_where("id = 1")
        assert dmi_session.dmi_delete(stmt) == 4
        handle.execute.assert_called_once()
