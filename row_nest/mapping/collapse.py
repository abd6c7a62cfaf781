"""Zero values and the post-scan collapse of absent relations.

An outer join against a missing related row still yields the related
columns, coalesced to their type defaults. After a row is scanned, every
optional nested structure the scan touched is reset to ``None`` when all
of its fields are still zero-valued.

Note that a related row whose fields genuinely all equal their defaults is
indistinguishable from a missing one and collapses too.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Any, get_args, get_origin

from row_nest.mapping.accessors import unwrap_optional

if TYPE_CHECKING:
    from row_nest.mapping.descriptor import Step
    from row_nest.mapping.registry import TypeRegistry

_SCALAR_ZEROS: dict[Any, Any] = {
    int: 0,
    float: 0.0,
    complex: 0j,
    str: "",
    bytes: b"",
    bool: False,
    Decimal: Decimal(0),
}

_CONTAINER_TYPES = (list, dict, set, frozenset, tuple)


def zero_value(annotation: Any, registry: TypeRegistry) -> Any:
    """Return the zero value of a declared field type."""
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    _, optional = unwrap_optional(annotation)
    if optional:
        return None
    if annotation in _SCALAR_ZEROS:
        return _SCALAR_ZEROS[annotation]
    container = get_origin(annotation) or annotation
    if container in _CONTAINER_TYPES:
        return container()
    if registry.is_structural(annotation):
        return new_zero(annotation, registry)
    return None


def new_zero(cls: type, registry: TypeRegistry) -> Any:
    """Allocate an instance of a structural type with every field zero-valued."""
    table = registry.table_for(cls)
    return table.allocate(
        {accessor.name: zero_value(accessor.annotation, registry) for accessor in table.fields}
    )


def is_zero(value: Any, registry: TypeRegistry) -> bool:
    """Whether a structural value holds only zero values.

    A value exposing an ``is_zero()`` method decides for itself.
    """
    is_zero_hook = getattr(value, "is_zero", None)
    if callable(is_zero_hook):
        return bool(is_zero_hook())

    for accessor in registry.table_for(type(value)).fields:
        field_value = getattr(value, accessor.name, None)
        if field_value is None:
            continue
        if registry.is_structural(type(field_value)):
            if not is_zero(field_value, registry):
                return False
        elif field_value != zero_value(accessor.annotation, registry):
            return False
    return True


def collapse_absent(
    instance: Any,
    paths: Sequence[tuple[Step, ...]],
    registry: TypeRegistry,
) -> None:
    """Reset touched optional structures that scanned as all-zero to None.

    *paths* must be ordered deepest first, so a relation is examined after
    every relation nested inside it has been resolved.
    """
    for path in paths:
        owner = instance
        for step in path[:-1]:
            owner = getattr(owner, step.attribute)
            if owner is None:
                break
        else:
            leaf = path[-1]
            value = getattr(owner, leaf.attribute, None)
            if value is not None and is_zero(value, registry):
                object.__setattr__(owner, leaf.attribute, None)
