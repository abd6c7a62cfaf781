"""Mapping policy enumerations."""

from __future__ import annotations

from enum import Enum


class UnknownColumnPolicy(Enum):
    """What to do with a result column that maps to no field."""

    IGNORE = "ignore"
    STRICT = "strict"
