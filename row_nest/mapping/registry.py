"""Type registry - builds and caches type descriptors.

Descriptors are created lazily the first time a type is scanned and kept
for the lifetime of the registry. The registry is append-only: concurrent
first uses of a type may each build a descriptor, but only the first one
published is retained and every caller receives that one.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Any

from pydantic import ConfigDict, TypeAdapter

from row_nest.core.config import MapperConfig
from row_nest.core.exceptions import BuildError
from row_nest.mapping.accessors import (
    AccessorTable,
    accessor_table,
    is_class,
    is_introspectable,
)
from row_nest.mapping.descriptor import BuildContext, TypeDescriptor, new_descriptor

logger = logging.getLogger(__name__)

_ARBITRARY_TYPES = ConfigDict(arbitrary_types_allowed=True)


@lru_cache(maxsize=512)
def _type_adapter(annotation: Any) -> TypeAdapter[Any]:
    return TypeAdapter(annotation, config=_ARBITRARY_TYPES)


class TypeRegistry:
    """Process-wide cache of type descriptors and accessor tables.

    Args:
        config: Descriptor building and default scanning configuration.
    """

    def __init__(self, config: MapperConfig | None = None) -> None:
        self.config = config if config is not None else MapperConfig()
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._tables: dict[type, AccessorTable] = {}
        self._registered: set[type] = set()
        self._lock = threading.Lock()

    def register(self, table: AccessorTable) -> None:
        """Register a hand-written accessor table for a plain class.

        Raises:
            BuildError: If the class is already registered or described.
        """
        cls = table.target_class
        with self._lock:
            if cls in self._registered or cls in self._descriptors:
                raise BuildError(cls.__name__, "already registered")
            self._tables[cls] = table
            self._registered.add(cls)

    def is_structural(self, tp: Any) -> bool:
        """Whether *tp* is a structural aggregate for this registry."""
        return is_class(tp) and (tp in self._registered or is_introspectable(tp))

    def table_for(self, cls: type) -> AccessorTable:
        """Return the accessor table of a structural type."""
        table = self._tables.get(cls)
        if table is None:
            table = accessor_table(cls)
            with self._lock:
                table = self._tables.setdefault(cls, table)
        return table

    def get(self, cls: type) -> TypeDescriptor:
        """Return the descriptor for *cls*, building it on first use.

        Raises:
            BuildError: If *cls* is not structural or fails validation.
        """
        return self.describe(cls, BuildContext())

    def describe(self, cls: type, context: BuildContext) -> TypeDescriptor:
        """Return the descriptor for *cls* within an ongoing build."""
        descriptor = self._descriptors.get(cls)
        if descriptor is not None:
            return descriptor
        if not self.is_structural(cls):
            name = getattr(cls, "__name__", repr(cls))
            raise BuildError(name, "expected a dataclass, Pydantic model or registered class")

        descriptor = new_descriptor(cls, self, context)
        with self._lock:
            published = self._descriptors.setdefault(cls, descriptor)
        if published is descriptor:
            logger.debug(
                "Described %s with %d columns", cls.__name__, len(descriptor.by_column_name)
            )
        return published

    def has(self, cls: type) -> bool:
        """Check if a descriptor for *cls* has been built."""
        return cls in self._descriptors

    def converter(self, annotation: Any) -> TypeAdapter[Any]:
        """Return the cached value adapter for a leaf annotation.

        Leaves must not be structural types themselves; those carry their
        own config and are never coerced. Unhashable annotations, such as
        ``Annotated`` metadata holding a dict, get an uncached adapter.
        """
        try:
            hash(annotation)
        except TypeError:
            return TypeAdapter(annotation, config=_ARBITRARY_TYPES)
        return _type_adapter(annotation)

    @property
    def types(self) -> list[type]:
        """Described types, sorted by qualified name."""
        return sorted(self._descriptors, key=lambda cls: cls.__qualname__)

    def __len__(self) -> int:
        """Number of described types."""
        return len(self._descriptors)


_default_registry = TypeRegistry()


def default_registry() -> TypeRegistry:
    """Return the process default registry."""
    return _default_registry
