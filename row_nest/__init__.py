"""RowNest - scan flat SQL rows into nested structures."""

from __future__ import annotations

from row_nest.core.config import MapperConfig
from row_nest.core.cursor import RowCursor
from row_nest.core.enums import UnknownColumnPolicy
from row_nest.core.exceptions import (
    BuildError,
    DuplicateColumnError,
    InvalidColumnNameError,
    MappingError,
    ResolutionError,
    RowNestError,
    ScanError,
    ShapeError,
)
from row_nest.mapping.builder import structure
from row_nest.mapping.model import StructMapper
from row_nest.mapping.registry import TypeRegistry, default_registry
from row_nest.mapping.scanner import (
    RowScanner,
    build_descriptor,
    get,
    resolve_and_scan,
    scan_into,
    select,
)
from row_nest.mapping.tags import column, model_column

__all__ = [
    # Config
    "MapperConfig",
    "UnknownColumnPolicy",
    # Registry
    "TypeRegistry",
    "default_registry",
    "build_descriptor",
    "structure",
    # Tags
    "column",
    "model_column",
    # Scanning
    "RowCursor",
    "RowScanner",
    "resolve_and_scan",
    "select",
    "get",
    "scan_into",
    "StructMapper",
    # Exceptions
    "RowNestError",
    "MappingError",
    "BuildError",
    "DuplicateColumnError",
    "InvalidColumnNameError",
    "ResolutionError",
    "ScanError",
    "ShapeError",
]
