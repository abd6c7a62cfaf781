"""Scan plan compilation.

A ScanPlan is compiled once per query from its result column names and
reused for every row of that query. It holds one targeter per column, in
column order, and the collapse set: the routes to optional nested
structures the targeters may allocate, deepest first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from row_nest.core.config import MapperConfig
from row_nest.core.enums import UnknownColumnPolicy
from row_nest.core.exceptions import ResolutionError, ScanError
from row_nest.mapping.collapse import new_zero
from row_nest.mapping.resolver import Resolution, resolve

if TYPE_CHECKING:
    from row_nest.mapping.descriptor import Step, TypeDescriptor
    from row_nest.mapping.registry import TypeRegistry

logger = logging.getLogger(__name__)


class Slot:
    """An assignable location for one column on a live instance."""

    __slots__ = ("owner", "attribute", "column", "adapter")

    def __init__(
        self,
        owner: Any,
        attribute: str | None,
        column: str,
        adapter: TypeAdapter[Any] | None = None,
    ) -> None:
        self.owner = owner
        self.attribute = attribute
        self.column = column
        self.adapter = adapter

    @property
    def discards(self) -> bool:
        return self.attribute is None

    def assign(self, value: Any) -> None:
        """Store *value*, converting it to the field's declared type."""
        if self.attribute is None:
            return
        if self.adapter is not None:
            try:
                value = self.adapter.validate_python(value)
            except ValidationError as e:
                raise ScanError(self.column, str(e)) from e
        object.__setattr__(self.owner, self.attribute, value)


Targeter = Callable[[Any], Slot]


@dataclass(frozen=True)
class ScanPlan:
    """Compiled per-query column targeters plus the collapse set."""

    target_class: type
    columns: tuple[str, ...]
    targeters: tuple[Targeter, ...]
    collapse_paths: tuple[tuple[Step, ...], ...] = field(default_factory=tuple)
    resolutions: tuple[Resolution | None, ...] = field(default_factory=tuple)

    def targets(self, instance: Any) -> list[Slot]:
        """Produce the slots of every column on *instance*, allocating as needed."""
        return [targeter(instance) for targeter in self.targeters]

    @property
    def unresolved(self) -> list[str]:
        """Columns bound to a discard target."""
        return [col for col, res in zip(self.columns, self.resolutions) if res is None]


def _discard_targeter(column: str) -> Targeter:
    def target(instance: Any) -> Slot:
        return Slot(None, None, column)

    return target


def _direct_targeter(column: str, attribute: str, adapter: TypeAdapter[Any] | None) -> Targeter:
    def target(instance: Any) -> Slot:
        return Slot(instance, attribute, column, adapter)

    return target


def _nested_targeter(
    column: str,
    steps: tuple[Step, ...],
    adapter: TypeAdapter[Any] | None,
    registry: TypeRegistry,
) -> Targeter:
    route = steps[:-1]
    attribute = steps[-1].attribute

    def target(instance: Any) -> Slot:
        owner = instance
        for step in route:
            value = getattr(owner, step.attribute, None)
            if value is None:
                value = new_zero(step.direct_type, registry)
                object.__setattr__(owner, step.attribute, value)
            owner = value
        return Slot(owner, attribute, column, adapter)

    return target


def compile_plan(
    descriptor: TypeDescriptor,
    columns: Sequence[str],
    registry: TypeRegistry,
    *,
    config: MapperConfig | None = None,
) -> ScanPlan:
    """Compile a ScanPlan for *columns* against *descriptor*.

    Unknown-column policy and value coercion come from *config*, or the
    registry's config when omitted.

    Raises:
        ResolutionError: In strict mode, for the first column that maps to
            no field.
    """
    config = config if config is not None else registry.config
    type_name = descriptor.target_class.__name__
    cache: dict[str, Resolution | None] = {}
    targeters: list[Targeter] = []
    resolutions: list[Resolution | None] = []
    collapse_by_path: dict[tuple[int, ...], tuple[Step, ...]] = {}

    for column in columns:
        if column not in cache:
            resolution = resolve(column, descriptor, registry)
            # A bare relation column cannot hold a scalar value.
            if resolution is not None and registry.is_structural(resolution.field.direct_type):
                resolution = None
            cache[column] = resolution
        resolution = cache[column]
        resolutions.append(resolution)

        if resolution is None:
            if config.unknown_columns is UnknownColumnPolicy.STRICT:
                raise ResolutionError(column, type_name)
            logger.debug("Discarding unknown column %r for %s", column, type_name)
            targeters.append(_discard_targeter(column))
            continue

        adapter = None
        if config.coerce:
            declared = resolution.field.declared_type
            try:
                adapter = registry.converter(declared)
            except TypeError as e:
                raise ScanError(column, f"cannot convert to {declared!r}: {e}") from e
        steps = resolution.steps
        if len(steps) == 1:
            targeters.append(_direct_targeter(column, steps[0].attribute, adapter))
        else:
            targeters.append(_nested_targeter(column, steps, adapter, registry))
            for path in resolution.intermediate_paths:
                collapse_by_path.setdefault(tuple(step.index for step in path), path)

    # Deepest first, so descendants are resolved before their ancestors.
    collapse_paths = sorted(collapse_by_path.values(), key=len, reverse=True)

    logger.debug(
        "Compiled scan plan for %s: %d columns, %d collapsible relations",
        type_name,
        len(targeters),
        len(collapse_paths),
    )
    return ScanPlan(
        target_class=descriptor.target_class,
        columns=tuple(columns),
        targeters=tuple(targeters),
        collapse_paths=tuple(collapse_paths),
        resolutions=tuple(resolutions),
    )
