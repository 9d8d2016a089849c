"""
Shared pytest fixtures for record-spine tests.

This module provides:
- Registry and settings cleanup for test isolation
- Dialect fixtures
- An in-memory SQLite connection with a ``users`` table
- A recording connection for asserting on the exact SQL a model sends
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generator

import pytest

from recordspine.adapters import SqliteConnection, clear_connections, register_connection
from recordspine.dialect import ANSIDialect, MySQLDialect
from recordspine.settings import reset_settings

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    email TEXT,
    age INTEGER,
    active INTEGER DEFAULT 1,
    joined TEXT
);
"""


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark database-backed tests as integration, everything else as unit."""
    for item in items:
        test_path = Path(item.fspath).name
        if test_path in {"test_adapters.py", "test_model.py"}:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_connection_registry() -> Generator[None, None, None]:
    """Clear named connections before and after each test."""
    clear_connections()
    yield
    clear_connections()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Re-read settings per test so env overrides never leak."""
    for var in ("RECORDSPINE_DEFAULT_DIALECT", "RECORDSPINE_LOG_LEVEL", "RECORDSPINE_LOG_SQL"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# Dialects
# =============================================================================


@pytest.fixture
def ansi() -> ANSIDialect:
    return ANSIDialect()


@pytest.fixture
def mysql() -> MySQLDialect:
    return MySQLDialect()


# =============================================================================
# Connections
# =============================================================================


@pytest.fixture
def sqlite_conn() -> Generator[SqliteConnection, None, None]:
    """In-memory SQLite with a ``users`` table, registered as ``default``."""
    conn = SqliteConnection()
    conn.executescript(USERS_DDL)
    register_connection("default", conn)
    yield conn
    conn.close()


class RecordingConnection:
    """Connection double that records every statement it receives.

    ``rows`` is what fetch/fetch_all return; ``next_id`` is returned for
    INSERTs and ``rowcount`` for everything else.
    """

    def __init__(self, rows: list[dict[str, Any]] | None = None, next_id: Any = 1, rowcount: int = 1):
        self.rows = rows or []
        self.next_id = next_id
        self.rowcount = rowcount
        self.calls: list[tuple[str, str, list[Any]]] = []

    def execute(self, sql: str, params: Any = ()) -> Any:
        self.calls.append(("execute", sql, list(params)))
        return self.next_id if sql.startswith("INSERT") else self.rowcount

    def fetch(self, sql: str, params: Any = ()) -> dict[str, Any] | None:
        self.calls.append(("fetch", sql, list(params)))
        return self.rows[0] if self.rows else None

    def fetch_all(self, sql: str, params: Any = ()) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", sql, list(params)))
        return list(self.rows)


class FailingConnection(RecordingConnection):
    """Connection double whose every call raises."""

    def execute(self, sql: str, params: Any = ()) -> Any:
        self.calls.append(("execute", sql, list(params)))
        raise RuntimeError("database is gone")


@pytest.fixture
def recorder() -> RecordingConnection:
    """Recording connection registered as ``default``."""
    conn = RecordingConnection()
    register_connection("default", conn)
    return conn


@pytest.fixture
def failing() -> FailingConnection:
    conn = FailingConnection()
    register_connection("default", conn)
    return conn
