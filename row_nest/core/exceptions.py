"""RowNest exception hierarchy.

Every failure raised by the mapping engine is a RowNest-specific
exception. Underlying errors (validation, driver faults) are chained,
never exposed bare.
"""

from __future__ import annotations


class RowNestError(Exception):
    """Base exception for all RowNest errors."""


# --- Mapping ---


class MappingError(RowNestError):
    """Base for mapping errors."""


class BuildError(MappingError):
    """Raised when a type descriptor cannot be built for a structural type."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail
        super().__init__(f"Cannot describe {type_name}: {detail}")


class DuplicateColumnError(BuildError):
    """Raised when two fields of one type resolve to the same column name."""

    def __init__(self, type_name: str, column: str, origin: str | None = None) -> None:
        self.column = column
        self.origin = origin
        detail = f"duplicate column name '{column}'"
        if origin is not None:
            detail += f" in embedded field '{origin}'"
        super().__init__(type_name, detail)


class InvalidColumnNameError(BuildError):
    """Raised in strict tag mode for a syntactically invalid column name."""

    def __init__(self, type_name: str, column: str) -> None:
        self.column = column
        super().__init__(type_name, f"invalid column name '{column}'")


class ResolutionError(MappingError):
    """Raised when a result column cannot be resolved against a type."""

    def __init__(self, column: str, type_name: str) -> None:
        self.column = column
        self.type_name = type_name
        super().__init__(f"Column '{column}' does not resolve to a field of {type_name}")


class ScanError(MappingError):
    """Raised when a row value cannot be stored into its target field."""

    def __init__(self, column: str | None, detail: str) -> None:
        self.column = column
        self.detail = detail
        if column is None:
            super().__init__(f"Failed to scan row: {detail}")
        else:
            super().__init__(f"Failed to scan column '{column}': {detail}")


class ShapeError(MappingError):
    """Raised when a scan destination is not a structural instance or list of them."""
