"""Column path resolution.

Resolves a result column name to the field route that stores it. A column
that is not a known column of the type is split at a ``_``: if the prefix
names a nested structural field, the remainder is resolved against that
field's type. Separators are tried left to right and the first split that
resolves wins, so the split point is decided by the type's shape, not by
counting separators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from row_nest.mapping.descriptor import FieldDescriptor, Step, TypeDescriptor

if TYPE_CHECKING:
    from row_nest.mapping.registry import TypeRegistry

SEPARATOR = "_"


@dataclass(frozen=True)
class Resolution:
    """A column resolved against a root type."""

    column: str
    field: FieldDescriptor  # leaf descriptor, relative to its owning type
    steps: tuple[Step, ...]  # full route from the root type

    @property
    def path(self) -> tuple[int, ...]:
        return tuple(step.index for step in self.steps)

    @property
    def intermediate_paths(self) -> list[tuple[Step, ...]]:
        """Prefixes of the route ending at an optional nested structure."""
        return [self.steps[: i + 1] for i in range(len(self.steps) - 1) if self.steps[i].optional]


def _resolve_steps(
    column: str,
    descriptor: TypeDescriptor,
    registry: TypeRegistry,
) -> tuple[FieldDescriptor, tuple[Step, ...]] | None:
    field = descriptor.get(column)
    if field is not None:
        return field, field.steps

    # Try each separator left to right; the first prefix naming a nested
    # structure whose remainder resolves wins.
    cut = column.find(SEPARATOR)
    while cut != -1:
        root, rest = column[:cut], column[cut + 1 :]
        cut = column.find(SEPARATOR, cut + 1)
        field = descriptor.get(root)
        if field is None or not registry.is_structural(field.direct_type):
            continue
        nested = _resolve_steps(rest, registry.get(field.direct_type), registry)
        if nested is not None:
            leaf, steps = nested
            return leaf, field.steps + steps
    return None


def resolve(
    column: str,
    descriptor: TypeDescriptor,
    registry: TypeRegistry,
) -> Resolution | None:
    """Resolve *column* against *descriptor*.

    Returns:
        The Resolution, or None if the column maps to no field.
    """
    resolved = _resolve_steps(column, descriptor, registry)
    if resolved is None:
        return None
    leaf, steps = resolved
    return Resolution(column=column, field=leaf, steps=steps)
