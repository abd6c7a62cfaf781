"""Dict-row mapper for nested structural types.

Adapts the scan engine to engines that return rows as column-name dicts.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from row_nest.core.config import MapperConfig
from row_nest.core.exceptions import ShapeError
from row_nest.mapping.collapse import new_zero
from row_nest.mapping.plan import ScanPlan, compile_plan
from row_nest.mapping.registry import TypeRegistry, default_registry
from row_nest.mapping.scanner import scan_values

T = TypeVar("T")


class StructMapper(Generic[T]):
    """Row-dict to nested structure mapper.

    One scan plan is compiled per distinct column ordering and reused for
    every row sharing it.

    Args:
        target_class: The structural type to construct from row data.
        aliases: Optional column-name to column-name mapping applied before
            resolution.
        registry: Type registry; defaults to the process registry.
        config: Scanning configuration; defaults to the registry's.
    """

    def __init__(
        self,
        target_class: type[T],
        aliases: dict[str, str] | None = None,
        *,
        registry: TypeRegistry | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry()
        if not self._registry.is_structural(target_class):
            raise ShapeError(f"mapper given {target_class!r}, wanted a structural type")
        self._target_class = target_class
        self._aliases = aliases
        self._config = config
        self._descriptor = self._registry.get(target_class)
        self._plans: dict[tuple[str, ...], ScanPlan] = {}

    def _apply_aliases(self, columns: tuple[str, ...]) -> tuple[str, ...]:
        """Apply column aliases to the row's column names."""
        if not self._aliases:
            return columns
        return tuple(self._aliases.get(col, col) for col in columns)

    def _plan_for(self, columns: tuple[str, ...]) -> ScanPlan:
        plan = self._plans.get(columns)
        if plan is None:
            plan = compile_plan(
                self._descriptor,
                self._apply_aliases(columns),
                self._registry,
                config=self._config,
            )
            self._plans[columns] = plan
        return plan

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row to a target_class instance."""
        plan = self._plan_for(tuple(row))
        instance = new_zero(self._target_class, self._registry)
        scan_values(plan, instance, list(row.values()), self._registry)
        return instance  # type: ignore[no-any-return]

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one."""
        return [self.map_one(row) for row in rows]
