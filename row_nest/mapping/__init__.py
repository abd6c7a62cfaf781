"""Mapping layer - describe structural types and scan rows into them."""

from __future__ import annotations

from row_nest.mapping.accessors import AccessorTable, FieldAccessor, accessor_table
from row_nest.mapping.builder import StructureBuilder, structure
from row_nest.mapping.collapse import collapse_absent, is_zero, new_zero, zero_value
from row_nest.mapping.descriptor import FieldDescriptor, Step, TypeDescriptor
from row_nest.mapping.model import StructMapper
from row_nest.mapping.protocol import Mapper
from row_nest.mapping.plan import ScanPlan, Slot, compile_plan
from row_nest.mapping.registry import TypeRegistry, default_registry
from row_nest.mapping.resolver import Resolution, resolve
from row_nest.mapping.scanner import (
    RowScanner,
    build_descriptor,
    get,
    resolve_and_scan,
    scan_into,
    select,
)
from row_nest.mapping.tags import column, model_column, parse_tag

__all__ = [
    # Accessor tables
    "AccessorTable",
    "FieldAccessor",
    "accessor_table",
    "StructureBuilder",
    "structure",
    # Tags
    "column",
    "model_column",
    "parse_tag",
    # Descriptors
    "TypeRegistry",
    "default_registry",
    "TypeDescriptor",
    "FieldDescriptor",
    "Step",
    "build_descriptor",
    # Resolution and plans
    "Resolution",
    "resolve",
    "ScanPlan",
    "Slot",
    "compile_plan",
    # Scanning
    "RowScanner",
    "resolve_and_scan",
    "select",
    "get",
    "scan_into",
    "Mapper",
    "StructMapper",
    # Zero values
    "collapse_absent",
    "is_zero",
    "new_zero",
    "zero_value",
]
