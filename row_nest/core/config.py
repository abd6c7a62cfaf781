"""Mapping configuration.

MapperConfig is a Pydantic model shared by the type registry (descriptor
building) and the row scanners (plan compilation and value binding).
"""

from __future__ import annotations

from pydantic import BaseModel

from row_nest.core.enums import UnknownColumnPolicy


class MapperConfig(BaseModel):
    """Configuration for descriptor building and row scanning."""

    unknown_columns: UnknownColumnPolicy = UnknownColumnPolicy.IGNORE
    coerce: bool = True
    strict_tags: bool = False
