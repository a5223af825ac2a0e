"""Pytest configuration and shared fixtures for the DMI test suite.

A project .env, when present, is loaded first so that tests see the same
DMI_* configuration as a local run; explicit environment variables win.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_DMI_ENV_FILE = Path(__file__).parent.parent / ".env"
if _DMI_ENV_FILE.exists():
    load_dotenv(_DMI_ENV_FILE, override=False)

from typing import Generator

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection

from dmi.config.settings import Settings, get_settings
from dmi.io.writer.core import DMI


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch) -> Generator[None, None, None]:
    """Isolate every test from cached settings and session-level DMI_* flags."""
    for name in (
        "DMI_DATABASE_ENGINE",
        "DMI_EDITABLE",
        "DMI_CAPITALIZE",
        "DMI_STRICT_DELETE",
        "DMI_PROCEDURES_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_connection() -> Generator[Connection, None, None]:
    """In-memory SQLite connection with a ``users`` table."""
    engine = create_engine("sqlite://")
    conn = engine.connect()
    conn.execute(
        text(
            "CREATE TABLE users ("
            "id INTEGER PRIMARY KEY, "
            "name TEXT, "
            "active INTEGER DEFAULT 1)"
        )
    )
    try:
        yield conn
    finally:
        conn.close()
        engine.dispose()


@pytest.fixture
def dmi_session(sqlite_connection) -> DMI:
    """Editable DMI session over the SQLite connection with no procedure catalog."""
    settings = Settings(database_engine="SQLite")
    return DMI(sqlite_connection, settings=settings, procedures={})
