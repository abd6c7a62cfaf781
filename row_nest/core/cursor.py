"""Row cursor protocol.

The engine never opens connections or executes SQL. It consumes an
already-executed DB-API 2.0 cursor: the column names come from
``cursor.description`` and rows are pulled one at a time with
``fetchone()``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from row_nest.core.exceptions import ScanError


@runtime_checkable
class RowCursor(Protocol):
    """Minimal DB-API cursor surface consumed by the scanners."""

    @property
    def description(self) -> Sequence[Sequence[Any]] | None:
        """Column descriptions; the first item of each entry is the column name."""
        ...

    def fetchone(self) -> Any:
        """Fetch the next row, or None when the result set is exhausted."""
        ...


def column_names(cursor: RowCursor) -> list[str]:
    """Return the ordered result column names of an executed cursor."""
    if cursor.description is None:
        return []
    return [desc[0] for desc in cursor.description]


def row_values(row: Any, columns: Sequence[str]) -> Sequence[Any]:
    """Return the values of *row* in *columns* order.

    Handles both tuple-like rows (plain tuples, ``sqlite3.Row``) and
    dict-like rows (psycopg ``dict_row``, MySQL dict cursors).
    """
    if isinstance(row, Mapping):
        try:
            return [row[col] for col in columns]
        except KeyError as e:
            raise ScanError(str(e.args[0]), "column missing from row") from e
    values = tuple(row)
    if len(values) != len(columns):
        raise ScanError(
            None, f"row has {len(values)} values, expected {len(columns)} columns"
        )
    return values
