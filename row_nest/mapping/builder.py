"""Accessor table registration DSL.

Provides a fluent builder for declaring the fields of a plain class that
cannot be introspected automatically.
"""

from __future__ import annotations

import inspect
import typing
from typing import Any

from row_nest.core.exceptions import BuildError
from row_nest.mapping.accessors import AccessorTable, FieldAccessor


def _get_init_fields(cls: type) -> list[tuple[str, Any]]:
    """Extract (name, annotation) pairs from a plain class ``__init__``."""
    try:
        sig = inspect.signature(cls.__init__)  # type: ignore[misc]
    except (ValueError, TypeError):
        return []
    try:
        hints = typing.get_type_hints(cls.__init__)  # type: ignore[misc]
    except (NameError, TypeError, AttributeError) as e:
        raise BuildError(cls.__name__, f"unresolvable __init__ annotations: {e}") from e
    return [
        (name, hints.get(name, Any))
        for name, param in sig.parameters.items()
        if name != "self"
        and param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def structure(target_class: type) -> StructureBuilder:
    """Entry point for the registration DSL.

    Args:
        target_class: The plain class whose fields are being declared.

    Returns:
        A builder for chaining field declarations.

    Example:
        table = (
            structure(Invoice)
            .field("id", int)
            .field("customer", Customer | None, tag="customer")
            .embed("audit", Audit)
            .build()
        )
        registry.register(table)
    """
    return StructureBuilder(target_class)


class StructureBuilder:
    """Fluent builder for hand-written accessor tables."""

    def __init__(self, target_class: type) -> None:
        self._target_class = target_class
        self._fields: list[tuple[str, Any, str | None, bool]] = []  # name, type, tag, embedded
        self._auto_fields_enabled = False

    def auto_fields(self) -> StructureBuilder:
        """Declare every annotated ``__init__`` parameter as a field."""
        self._auto_fields_enabled = True
        return self

    def field(self, name: str, annotation: Any, tag: str | None = None) -> StructureBuilder:
        """Declare a single field."""
        self._fields.append((name, annotation, tag, False))
        return self

    def embed(self, name: str, annotation: Any, tag: str | None = None) -> StructureBuilder:
        """Declare an embedded structural field (promoted unless tagged)."""
        self._fields.append((name, annotation, tag, True))
        return self

    def build(self) -> AccessorTable:
        """Compile the declarations into an AccessorTable."""
        declared = list(self._fields)
        if self._auto_fields_enabled:
            explicit = {name for name, *_ in declared}
            auto = [
                (name, annotation, None, False)
                for name, annotation in _get_init_fields(self._target_class)
                if name not in explicit
            ]
            declared = auto + declared

        if not declared:
            raise BuildError(self._target_class.__name__, "no fields declared")

        seen: set[str] = set()
        fields = []
        for index, (name, annotation, tag, embedded) in enumerate(declared):
            if name in seen:
                raise BuildError(
                    self._target_class.__name__, f"field '{name}' declared more than once"
                )
            seen.add(name)
            fields.append(
                FieldAccessor(
                    name=name, index=index, annotation=annotation, tag=tag, embedded=embedded
                )
            )

        return AccessorTable(
            target_class=self._target_class, fields=tuple(fields), kind="registered"
        )
