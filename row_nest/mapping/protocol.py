"""Dict-row mapper protocol.

Some engines hand result sets over as column-name dicts instead of an
executed cursor. A mapper turns each dict into a nested structural
instance, resolving ``<field>_<column>`` keys the same way the cursor
scanners do.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class Mapper(Protocol[T]):
    """Maps column-name dicts onto instances of one structural type."""

    def map_one(self, row: dict[str, Any]) -> T:
        """Build one instance, collapsing absent optional relations."""
        ...

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Build one instance per row, in row order."""
        ...
