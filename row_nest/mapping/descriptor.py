"""Type descriptors.

A TypeDescriptor maps every column name a structural type answers to onto
the route of fields that reaches it. Descriptors are built once per type
from the type's accessor table and are immutable afterwards.

Nested structural fields are validated eagerly while building, so a
broken nested type fails before any query runs. Their columns are either
promoted into the parent (``promote`` tag option, or an untagged embedded
field) or left to be resolved on demand as ``<field>_<column>``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from row_nest.core.exceptions import (
    BuildError,
    DuplicateColumnError,
    InvalidColumnNameError,
)
from row_nest.mapping.accessors import unwrap_optional
from row_nest.mapping.tags import EXCLUDE, PROMOTE, is_valid_column_name, parse_tag

if TYPE_CHECKING:
    from collections.abc import Mapping

    from row_nest.mapping.registry import TypeRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    """One hop of a field path: a declared field of the owning type."""

    index: int
    attribute: str
    declared_type: Any
    direct_type: Any
    optional: bool


@dataclass(frozen=True)
class FieldDescriptor:
    """Mapping metadata for one column of a structural type."""

    column: str
    steps: tuple[Step, ...]
    promote: bool = False
    tagged: bool = False

    @property
    def path(self) -> tuple[int, ...]:
        """Field indices from the owning type's root."""
        return tuple(step.index for step in self.steps)

    @property
    def declared_type(self) -> Any:
        return self.steps[-1].declared_type

    @property
    def direct_type(self) -> Any:
        return self.steps[-1].direct_type


@dataclass(frozen=True)
class TypeDescriptor:
    """Column name to field map for one structural type."""

    target_class: type
    by_column_name: Mapping[str, FieldDescriptor]

    def get(self, column: str) -> FieldDescriptor | None:
        return self.by_column_name.get(column)

    @property
    def columns(self) -> list[str]:
        """Directly known column names, in declaration order."""
        return list(self.by_column_name)

    def __len__(self) -> int:
        return len(self.by_column_name)


@dataclass
class BuildContext:
    """Types currently being described in one call chain.

    ``edges[i]`` records whether the link from ``chain[i]`` to
    ``chain[i + 1]`` goes through an optional field.
    """

    chain: list[type] = field(default_factory=list)
    edges: list[bool] = field(default_factory=list)

    def visiting(self, cls: type) -> bool:
        return cls in self.chain

    def cycle_is_optional(self, cls: type, optional: bool) -> bool:
        """Whether closing a cycle back to *cls* passes an optional link."""
        start = self.chain.index(cls)
        return optional or any(self.edges[start:])


def new_descriptor(
    cls: type,
    registry: TypeRegistry,
    context: BuildContext | None = None,
) -> TypeDescriptor:
    """Build the TypeDescriptor for *cls*.

    Nested structural types are described through *registry*, which caches
    them; types already on the current call chain are not re-entered.

    Raises:
        BuildError: On duplicate or invalid column names, unresolvable
            annotations, or recursive types that could never be allocated.
    """
    context = context or BuildContext()
    table = registry.table_for(cls)
    type_name = cls.__name__
    by_column_name: dict[str, FieldDescriptor] = {}

    def add(column: str, descriptor: FieldDescriptor, origin: str | None = None) -> None:
        if column in by_column_name:
            raise DuplicateColumnError(type_name, column, origin)
        by_column_name[column] = descriptor

    context.chain.append(cls)
    try:
        for accessor in table.fields:
            direct_type, optional = unwrap_optional(accessor.annotation)
            structural = registry.is_structural(direct_type)

            if accessor.embedded:
                # Private embedded structures may still expose public fields.
                if not accessor.exported and not structural:
                    continue
            elif not accessor.exported:
                continue

            tag = accessor.tag or ""
            if tag == EXCLUDE:
                continue
            name, options = parse_tag(tag)
            if not is_valid_column_name(name):
                if name:
                    if registry.config.strict_tags:
                        raise InvalidColumnNameError(type_name, name)
                    logger.warning(
                        "Ignoring invalid column name %r on %s.%s",
                        name,
                        type_name,
                        accessor.name,
                    )
                name = ""

            tagged = name != ""
            column = name or accessor.name
            promote = (options.contains(PROMOTE) or (accessor.embedded and not tagged)) and (
                structural
            )

            step = Step(
                index=accessor.index,
                attribute=accessor.name,
                declared_type=accessor.annotation,
                direct_type=direct_type,
                optional=optional,
            )
            own = FieldDescriptor(column=column, steps=(step,), promote=promote, tagged=tagged)

            if structural:
                if context.visiting(direct_type):
                    if promote:
                        raise BuildError(
                            type_name,
                            f"cannot promote recursive type {direct_type.__name__} "
                            f"in field '{accessor.name}'",
                        )
                    if not context.cycle_is_optional(direct_type, optional):
                        raise BuildError(
                            type_name,
                            f"field '{accessor.name}' recursively contains "
                            f"{direct_type.__name__} without an optional link",
                        )
                else:
                    context.edges.append(optional)
                    try:
                        nested = registry.describe(direct_type, context)
                    finally:
                        context.edges.pop()
                    if promote:
                        for key, sub in nested.by_column_name.items():
                            promoted_column = f"{column}_{key}" if tagged else key
                            add(
                                promoted_column,
                                replace(
                                    sub,
                                    column=promoted_column,
                                    steps=(step, *sub.steps),
                                ),
                                origin=accessor.name,
                            )

            if not promote:
                add(column, own)
    finally:
        context.chain.pop()

    return TypeDescriptor(target_class=cls, by_column_name=MappingProxyType(by_column_name))
