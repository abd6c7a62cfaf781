"""Contract tests for DB-API cursor compliance."""

from __future__ import annotations

import sqlite3

import pytest

from row_nest.core.cursor import RowCursor, column_names, row_values
from row_nest.core.exceptions import ScanError


class TestSqliteCursorProtocol:
    def test_implements_cursor_protocol(self, sqlite_conn: sqlite3.Connection) -> None:
        cursor = sqlite_conn.execute("SELECT 1 AS val")
        assert isinstance(cursor, RowCursor)

    def test_column_names(self, sqlite_conn: sqlite3.Connection) -> None:
        cursor = sqlite_conn.execute("SELECT 1 AS id, 'x' AS child_name")
        assert column_names(cursor) == ["id", "child_name"]

    def test_no_result_set(self, sqlite_conn: sqlite3.Connection) -> None:
        cursor = sqlite_conn.execute("CREATE TABLE t (id INTEGER)")
        assert column_names(cursor) == []

    def test_tuple_rows(self, sqlite_conn: sqlite3.Connection) -> None:
        cursor = sqlite_conn.execute("SELECT 1 AS id, 'a' AS name")
        assert row_values(cursor.fetchone(), ["id", "name"]) == (1, "a")

    def test_sqlite_row_factory(self, sqlite_conn: sqlite3.Connection) -> None:
        sqlite_conn.row_factory = sqlite3.Row
        cursor = sqlite_conn.execute("SELECT 1 AS id, 'a' AS name")
        assert row_values(cursor.fetchone(), ["id", "name"]) == (1, "a")

    def test_dict_rows(self) -> None:
        assert row_values({"b": 2, "a": 1}, ["a", "b"]) == [1, 2]

    def test_exhaustion(self, sqlite_conn: sqlite3.Connection) -> None:
        cursor = sqlite_conn.execute("SELECT 1 WHERE 0")
        assert cursor.fetchone() is None

    def test_length_mismatch(self) -> None:
        with pytest.raises(ScanError, match="expected 3 columns"):
            row_values((1, 2), ["a", "b", "c"])
