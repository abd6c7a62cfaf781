"""Field tag micro-syntax.

A tag is ``name[,option]*`` stored under the ``row_nest`` metadata key:

    ""                 column named after the field
    "-"                field excluded from mapping
    "child"            explicit column name
    "timestamps,promote"  flatten the nested type as ``timestamps_<col>``
    ",promote"         flatten the nested type without a prefix
"""

from __future__ import annotations

import dataclasses
from typing import Any

from pydantic import Field

TAG_KEY = "row_nest"
EMBEDDED_KEY = "row_nest_embedded"

EXCLUDE = "-"
PROMOTE = "promote"

# Backslash and quote characters are reserved; every other punctuation
# character listed here may appear in a column name.
_ALLOWED_PUNCTUATION = frozenset("!#$%&()*+-./:;<=>?@[]^_{|}~ ")


class TagOptions(str):
    """Comma-separated options following the column name in a tag."""

    def contains(self, option_name: str) -> bool:
        """Report whether *option_name* is one of the listed options."""
        if not self:
            return False
        return option_name in self.split(",")


def parse_tag(tag: str) -> tuple[str, TagOptions]:
    """Split a tag into its column name and options."""
    name, _, options = tag.partition(",")
    return name, TagOptions(options)


def is_valid_column_name(name: str) -> bool:
    """Return True if *name* may be used as an explicit column name."""
    if not name:
        return False
    for char in name:
        if char in _ALLOWED_PUNCTUATION:
            continue
        if not char.isalpha() and not char.isdigit():
            return False
    return True


def column(tag: str = "", *, embedded: bool = False, **kwargs: Any) -> Any:
    """Declare a dataclass field carrying a row_nest tag.

    Accepts the usual ``dataclasses.field`` keyword arguments (``default``,
    ``default_factory``, ...).

    Example:
        @dataclass
        class Person:
            id: int
            child: Person | None = column("child", default=None)
            audit: Audit = column(embedded=True, default_factory=Audit)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_KEY] = tag
    if embedded:
        metadata[EMBEDDED_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def model_column(tag: str = "", *, embedded: bool = False, **kwargs: Any) -> Any:
    """Declare a Pydantic model field carrying a row_nest tag."""
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[TAG_KEY] = tag
    if embedded:
        extra[EMBEDDED_KEY] = True
    return Field(json_schema_extra=extra, **kwargs)
