"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Sequence
from typing import Any

import pytest

from row_nest.core.config import MapperConfig
from row_nest.core.enums import UnknownColumnPolicy
from row_nest.mapping.registry import TypeRegistry


class FakeCursor:
    """In-memory DB-API cursor over fixed columns and rows."""

    def __init__(self, columns: Sequence[str], rows: Sequence[Any]) -> None:
        self.description = [(col, None, None, None, None, None, None) for col in columns]
        self._rows = list(rows)
        self.fetched = 0

    def fetchone(self) -> Any:
        if self.fetched >= len(self._rows):
            return None
        row = self._rows[self.fetched]
        self.fetched += 1
        return row


@pytest.fixture
def registry() -> TypeRegistry:
    """Fresh type registry, isolated from the process default."""
    return TypeRegistry()


@pytest.fixture
def strict_registry() -> TypeRegistry:
    """Registry rejecting unknown columns and invalid tag names."""
    return TypeRegistry(
        MapperConfig(unknown_columns=UnknownColumnPolicy.STRICT, strict_tags=True)
    )


@pytest.fixture
def make_cursor():
    """Helper to build a fake cursor.

    Usage:
        cursor = make_cursor(["id", "name"], [(1, "John")])
    """

    def _make(columns: Sequence[str], rows: Sequence[Any]) -> FakeCursor:
        return FakeCursor(columns, rows)

    return _make


@pytest.fixture
def sqlite_conn() -> Iterator[sqlite3.Connection]:
    """SQLite in-memory connection."""
    conn = sqlite3.connect(":memory:")
    try:
        yield conn
    finally:
        conn.close()
