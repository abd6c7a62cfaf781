"""Row scanning.

RowScanner drives an executed cursor: it compiles one ScanPlan from the
cursor's columns, then for each fetched row binds every value to its
target field and collapses absent optional relations.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Generic, TypeVar, get_args, get_origin

from row_nest.core.config import MapperConfig
from row_nest.core.cursor import RowCursor, column_names, row_values
from row_nest.core.exceptions import ScanError, ShapeError
from row_nest.mapping.accessors import unwrap_optional
from row_nest.mapping.collapse import collapse_absent, new_zero
from row_nest.mapping.descriptor import TypeDescriptor
from row_nest.mapping.plan import ScanPlan, compile_plan
from row_nest.mapping.registry import TypeRegistry, default_registry

T = TypeVar("T")

_SEQUENCE_TYPES = (list, Sequence)


def _fetch(cursor: RowCursor) -> Any:
    """Fetch the next row, chaining driver faults into ScanError."""
    try:
        return cursor.fetchone()
    except Exception as e:
        raise ScanError(None, f"fetch failed: {e}") from e


def scan_values(
    plan: ScanPlan,
    instance: Any,
    values: Sequence[Any],
    registry: TypeRegistry,
) -> Any:
    """Bind one row of *values* onto *instance* following *plan*."""
    slots = plan.targets(instance)
    for slot, value in zip(slots, values):
        slot.assign(value)
    collapse_absent(instance, plan.collapse_paths, registry)
    return instance


class RowScanner(Generic[T]):
    """Scans the rows of an executed cursor into instances of a structural type.

    The scan plan is compiled from the cursor's columns on construction, so
    unknown columns fail here in strict mode, before any row is fetched.

    Args:
        cursor: An executed DB-API cursor.
        target_class: The structural type to scan rows into.
        registry: Type registry; defaults to the process registry.
        config: Scanning configuration; defaults to the registry's.
    """

    def __init__(
        self,
        cursor: RowCursor,
        target_class: type[T],
        *,
        registry: TypeRegistry | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry()
        if not self._registry.is_structural(target_class):
            raise ShapeError(f"scanner given {target_class!r}, wanted a structural type")
        self._cursor = cursor
        self._target_class = target_class
        self._descriptor = self._registry.get(target_class)
        self._plan = compile_plan(
            self._descriptor, column_names(cursor), self._registry, config=config
        )

    @property
    def plan(self) -> ScanPlan:
        return self._plan

    @property
    def descriptor(self) -> TypeDescriptor:
        return self._descriptor

    def scan_row(self, row: Any, dest: T | None = None) -> T:
        """Scan an already fetched *row*, into *dest* or a new instance."""
        if dest is None:
            instance = new_zero(self._target_class, self._registry)
        elif isinstance(dest, self._target_class):
            instance = dest
        else:
            raise ShapeError(
                f"scan given {type(dest).__name__}, wanted {self._target_class.__name__}"
            )
        values = row_values(row, self._plan.columns)
        scan_values(self._plan, instance, values, self._registry)
        return instance  # type: ignore[no-any-return]

    def scan(self, dest: T | None = None) -> T | None:
        """Fetch and scan the next row. Returns None once the cursor is exhausted."""
        row = _fetch(self._cursor)
        if row is None:
            return None
        return self.scan_row(row, dest)

    def __iter__(self) -> Iterator[T]:
        while True:
            instance = self.scan()
            if instance is None:
                return
            yield instance


def build_descriptor(cls: type, registry: TypeRegistry | None = None) -> TypeDescriptor:
    """Build (or fetch the cached) TypeDescriptor for *cls*."""
    registry = registry if registry is not None else default_registry()
    return registry.get(cls)


def resolve_and_scan(
    descriptor: TypeDescriptor,
    columns: Sequence[str],
    cursor: RowCursor,
    *,
    registry: TypeRegistry | None = None,
    config: MapperConfig | None = None,
) -> Any:
    """Resolve *columns* against *descriptor* and scan the cursor's next row.

    Returns:
        A new instance of the descriptor's type, or None if no row remains.
    """
    registry = registry if registry is not None else default_registry()
    plan = compile_plan(descriptor, columns, registry, config=config)
    row = _fetch(cursor)
    if row is None:
        return None
    instance = new_zero(descriptor.target_class, registry)
    return scan_values(plan, instance, row_values(row, plan.columns), registry)


def _destination(target: Any, registry: TypeRegistry) -> tuple[type, bool]:
    """Validate a select destination.

    Returns:
        Tuple of (structural element type, whether every row is wanted).
    """
    if get_origin(target) in _SEQUENCE_TYPES:
        args = get_args(target)
        if len(args) != 1:
            raise ShapeError(f"select given {target!r}, wanted a list of one structural type")
        element = args[0]
        if unwrap_optional(element)[1]:
            raise ShapeError(f"select given {target!r}, wanted a list of non-optional structures")
        if not registry.is_structural(element):
            raise ShapeError(f"select given {target!r}, wanted a list of structures")
        return element, True
    if registry.is_structural(target):
        return target, False
    raise ShapeError(f"select given {target!r}, wanted a structural type or a list of one")


def select(
    cursor: RowCursor,
    target: Any,
    *,
    registry: TypeRegistry | None = None,
    config: MapperConfig | None = None,
) -> Any:
    """Scan an executed cursor into *target*.

    Args:
        cursor: An executed DB-API cursor.
        target: ``list[T]`` to scan every row, or ``T`` to scan the first
            row only (None if there is none).

    Raises:
        ShapeError: If *target* is neither shape; checked before any row is read.
    """
    registry = registry if registry is not None else default_registry()
    element, many = _destination(target, registry)
    scanner = RowScanner(cursor, element, registry=registry, config=config)
    if many:
        return list(scanner)
    return scanner.scan()


def get(
    cursor: RowCursor,
    target_class: type[T],
    *,
    registry: TypeRegistry | None = None,
    config: MapperConfig | None = None,
) -> T | None:
    """Scan the first row of an executed cursor into a new *target_class*.

    Returns:
        The instance, or None if the result set is empty.
    """
    return RowScanner(cursor, target_class, registry=registry, config=config).scan()


def scan_into(
    cursor: RowCursor,
    dest: Any,
    *,
    registry: TypeRegistry | None = None,
    config: MapperConfig | None = None,
) -> bool:
    """Scan the cursor's next row into the existing instance *dest*.

    Returns:
        True if a row was scanned, False if the cursor was exhausted.
    """
    registry = registry if registry is not None else default_registry()
    if not registry.is_structural(type(dest)):
        raise ShapeError(f"scan_into given {type(dest).__name__}, wanted a structural instance")
    scanner = RowScanner(cursor, type(dest), registry=registry, config=config)
    return scanner.scan(dest) is not None
