"""Field accessor tables.

An accessor table is the only view of a structural type the descriptor
builder works with: the declared fields in order, their annotations and
tags, plus a way to allocate an instance from field values. Tables are
produced by introspecting dataclasses and Pydantic models, or by hand
through the registration builder for plain classes.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel

from row_nest.core.exceptions import BuildError
from row_nest.mapping.tags import EMBEDDED_KEY, TAG_KEY

_NONE_TYPE = type(None)


@dataclass(frozen=True)
class FieldAccessor:
    """One declared field of a structural type."""

    name: str
    index: int
    annotation: Any
    tag: str | None = None
    embedded: bool = False

    @property
    def exported(self) -> bool:
        """Whether the field has an externally visible accessor."""
        return not self.name.startswith("_")


@dataclass(frozen=True)
class AccessorTable:
    """Declared fields of one structural type, plus its allocation strategy."""

    target_class: type
    fields: tuple[FieldAccessor, ...]
    kind: str  # "dataclass", "pydantic" or "registered"

    def allocate(self, values: dict[str, Any]) -> Any:
        """Create an instance holding *values* without running validation."""
        if self.kind == "pydantic":
            return self.target_class.model_construct(**values)  # type: ignore[attr-defined]
        instance = self.target_class.__new__(self.target_class)
        for name, value in values.items():
            object.__setattr__(instance, name, value)
        return instance


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Follow at most one level of ``X | None``.

    Returns:
        Tuple of (direct type, whether the annotation was optional).
    """
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        if _NONE_TYPE in args:
            rest = [arg for arg in args if arg is not _NONE_TYPE]
            if len(rest) == 1:
                return rest[0], True
    return annotation, False


def is_class(tp: Any) -> bool:
    """Whether *tp* is a plain class rather than a parametrized generic."""
    return isinstance(tp, type) and get_origin(tp) is None


def is_pydantic_model(cls: Any) -> bool:
    """Check if *cls* is a Pydantic BaseModel subclass."""
    return is_class(cls) and issubclass(cls, BaseModel)


def is_introspectable(cls: Any) -> bool:
    """Whether an accessor table can be derived from *cls* automatically."""
    return is_class(cls) and (dataclasses.is_dataclass(cls) or is_pydantic_model(cls))


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError, AttributeError) as e:
        raise BuildError(cls.__name__, f"unresolvable field annotations: {e}") from e


def _dataclass_table(cls: type) -> AccessorTable:
    hints = _type_hints(cls)
    fields = []
    for index, f in enumerate(dataclasses.fields(cls)):
        tag = f.metadata.get(TAG_KEY)
        fields.append(
            FieldAccessor(
                name=f.name,
                index=index,
                annotation=hints.get(f.name, Any),
                tag=tag,
                embedded=bool(f.metadata.get(EMBEDDED_KEY, False)),
            )
        )
    return AccessorTable(target_class=cls, fields=tuple(fields), kind="dataclass")


def _pydantic_table(cls: type[BaseModel]) -> AccessorTable:
    fields = []
    for index, (name, info) in enumerate(cls.model_fields.items()):
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        tag = extra.get(TAG_KEY)
        fields.append(
            FieldAccessor(
                name=name,
                index=index,
                annotation=info.annotation,
                tag=tag if isinstance(tag, str) else None,
                embedded=bool(extra.get(EMBEDDED_KEY, False)),
            )
        )
    return AccessorTable(target_class=cls, fields=tuple(fields), kind="pydantic")


def accessor_table(cls: type) -> AccessorTable:
    """Introspect a dataclass or Pydantic model into an accessor table.

    Raises:
        BuildError: If *cls* is neither, or its annotations cannot be resolved.
    """
    if is_pydantic_model(cls):
        return _pydantic_table(cls)
    if is_class(cls) and dataclasses.is_dataclass(cls):
        return _dataclass_table(cls)
    name = getattr(cls, "__name__", repr(cls))
    raise BuildError(name, "expected a dataclass, Pydantic model or registered class")
