"""Tests for the connection adapters and the named connection registry."""

from __future__ import annotations

import sqlite3

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from recordspine.adapters import (
    SAConnectionBridge,
    SqliteConnection,
    get_connection,
    register_connection,
    registered_connections,
    rewrite_placeholders,
    unregister_connection,
)
from recordspine.errors import ConnectionNotFoundError
from recordspine.protocols import Connection
from recordspine.sql.query import Insert, Select, Update

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    age INTEGER
)
"""


class TestSqliteConnection:
    def test_satisfies_protocol(self, sqlite_conn: SqliteConnection) -> None:
        assert isinstance(sqlite_conn, Connection)

    def test_insert_returns_last_id(self, sqlite_conn: SqliteConnection) -> None:
        first = Insert().table("users").values({"name": "Alex"}).execute(sqlite_conn)
        second = Insert().table("users").values({"name": "Lucie"}).execute(sqlite_conn)
        assert (first, second) == (1, 2)

    def test_update_returns_rowcount(self, sqlite_conn: SqliteConnection) -> None:
        Insert().table("users").values({"name": "Alex", "age": 30}).execute(sqlite_conn)
        Insert().table("users").values({"name": "Lucie", "age": 30}).execute(sqlite_conn)
        count = Update().table("users").values({"age": 31}).where("age", "=", 30).execute(sqlite_conn)
        assert count == 2

    def test_fetch_returns_dicts(self, sqlite_conn: SqliteConnection) -> None:
        Insert().table("users").values({"name": "Alex"}).execute(sqlite_conn)
        row = Select().select("name").from_("users").fetch_row(sqlite_conn)
        assert row == {"name": "Alex"}

    def test_fetch_missing(self, sqlite_conn: SqliteConnection) -> None:
        assert Select().from_("users").where("id", "=", 99).fetch_row(sqlite_conn) is None

    def test_failed_write_rolls_back(self, sqlite_conn: SqliteConnection) -> None:
        Insert().table("users").values({"id": 1, "name": "Alex"}).execute(sqlite_conn)
        with pytest.raises(sqlite3.IntegrityError):
            Insert().table("users").values({"id": 1, "name": "Lucie"}).execute(sqlite_conn)
        assert not sqlite_conn.raw.in_transaction
        assert sqlite_conn.fetch_all('SELECT "name" FROM "users"') == [{"name": "Alex"}]


class TestRewritePlaceholders:
    def test_numbered(self) -> None:
        sql, names = rewrite_placeholders('SELECT * FROM "t" WHERE "a" = ? AND "b" = ?')
        assert sql == 'SELECT * FROM "t" WHERE "a" = :p0 AND "b" = :p1'
        assert names == ["p0", "p1"]

    def test_quoted_question_marks_untouched(self) -> None:
        sql, names = rewrite_placeholders("SELECT '?' AS q, \"we?rd\" FROM t WHERE a = ?")
        assert sql == "SELECT '?' AS q, \"we?rd\" FROM t WHERE a = :p0"
        assert names == ["p0"]


class TestSAConnectionBridge:
    @pytest.fixture
    def bridge(self):
        engine = create_engine("sqlite://")
        with engine.begin() as conn:
            bridge = SAConnectionBridge(conn)
            bridge.execute(USERS_DDL)
            yield bridge
        engine.dispose()

    def test_satisfies_protocol(self, bridge: SAConnectionBridge) -> None:
        assert isinstance(bridge, Connection)

    def test_round_trip(self, bridge: SAConnectionBridge) -> None:
        new_id = Insert().table("users").values({"name": "Alex", "age": 30}).execute(bridge)
        assert new_id == 1
        rows = Select().from_("users").where("age", ">", 18).fetch_rows(bridge)
        assert [r["name"] for r in rows] == ["Alex"]

    def test_placeholder_mismatch(self, bridge: SAConnectionBridge) -> None:
        with pytest.raises(ValueError, match="placeholder"):
            bridge.fetch_all('SELECT * FROM "users" WHERE "id" = ?', [])

    def test_session_target(self) -> None:
        engine = create_engine("sqlite://")
        with Session(engine) as session:
            bridge = SAConnectionBridge(session)
            bridge.execute(USERS_DDL)
            bridge.execute('INSERT INTO "users" ("name") VALUES (?)', ["Lucie"])
            assert bridge.fetch('SELECT "name" FROM "users"') == {"name": "Lucie"}
            assert bridge.target is session
        engine.dispose()


class TestRegistry:
    def test_missing(self) -> None:
        with pytest.raises(ConnectionNotFoundError) as exc_info:
            get_connection("reporting")
        assert exc_info.value.name == "reporting"
        assert exc_info.value.context == {"connection": "reporting"}

    def test_register_and_lookup(self) -> None:
        conn = SqliteConnection()
        register_connection("reporting", conn)
        assert get_connection("reporting") is conn
        assert "reporting" in registered_connections()

    def test_unregister(self) -> None:
        register_connection("reporting", SqliteConnection())
        unregister_connection("reporting")
        with pytest.raises(ConnectionNotFoundError):
            get_connection("reporting")
