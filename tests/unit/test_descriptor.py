"""Unit tests for TypeDescriptor building."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from row_nest.core.exceptions import (
    BuildError,
    DuplicateColumnError,
    InvalidColumnNameError,
)
from row_nest.mapping.registry import TypeRegistry
from row_nest.mapping.resolver import resolve
from row_nest.mapping.tags import column, model_column

# --- Test models ---


@dataclass
class Timestamps:
    created_at: str = column("created_at", default="")
    updated_at: str = column("updated_at", default="")


@dataclass
class Audit:
    created_by: str = ""
    deleted: bool = False


@dataclass
class Person:
    # Column defaults to the field name
    id: int
    # Column given by tag
    name: str = column("name")
    # Nested relations are addressed as child1_<column>
    child1: Person | None = column("child1", default=None)
    child2: Person | None = column("child2", default=None)
    ignore: Person | None = column("-", default=None)
    # Promoted under a prefix
    timestamps: Timestamps = column("timestamps,promote", default_factory=Timestamps)
    # Private embedded structures still expose their fields, unprefixed
    _audit: Audit = column(embedded=True, default_factory=Audit)
    _secret: str = ""


@dataclass
class Duplicated:
    a: int = column("x")
    b: int = column("x")


@dataclass
class Inner:
    id: int = 0
    label: str = ""


@dataclass
class Clashing:
    id: int
    inner: Inner = column(embedded=True)


@dataclass
class PrefixedEmbed:
    id: int
    inner: Inner = column("inner", embedded=True)


@dataclass
class HasBrokenChild:
    id: int
    broken: Duplicated | None = None


@dataclass
class Unresolvable:
    id: int
    ref: DoesNotExist | None = None  # noqa: F821


@dataclass
class Loop:
    id: int
    back: LoopBack


@dataclass
class LoopBack:
    loop: Loop


@dataclass
class Author:
    id: int
    best_book: Book | None = None


@dataclass
class Book:
    id: int
    author: Author


@dataclass
class Folded:
    id: int
    parent: Folded | None = column(",promote", default=None)


@dataclass
class BadTag:
    id: int
    name: str = column("bad'name", default="")


@dataclass
class NotPromotable:
    id: int = column("id,promote")


class PetModel(BaseModel):
    id: int = 0
    kind: str = model_column("type", default="")


class OwnerModel(BaseModel):
    id: int
    name: str
    pet: PetModel | None = None
    hidden: str = model_column("-", default="")


# --- Tests ---


class TestTypeDescriptor:
    def test_column_map(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(Person)
        assert {col: f.path for col, f in descriptor.by_column_name.items()} == {
            "id": (0,),
            "name": (1,),
            "child1": (2,),
            "child2": (3,),
            "timestamps_created_at": (5, 0),
            "timestamps_updated_at": (5, 1),
            "created_by": (6, 0),
            "deleted": (6, 1),
        }

    def test_field_metadata(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(Person)

        plain = descriptor.by_column_name["id"]
        assert plain.tagged is False
        assert plain.direct_type is int

        child = descriptor.by_column_name["child1"]
        assert child.tagged is True
        assert child.promote is False
        assert child.direct_type is Person
        assert child.steps[0].optional is True

        promoted = descriptor.by_column_name["timestamps_created_at"]
        assert [step.attribute for step in promoted.steps] == ["timestamps", "created_at"]
        assert promoted.column == "timestamps_created_at"

    def test_excluded_and_private_fields_skipped(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(Person)
        assert "ignore" not in descriptor.by_column_name
        assert "_secret" not in descriptor.by_column_name
        assert "_audit" not in descriptor.by_column_name

    def test_promoted_field_is_not_a_column(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(Person)
        assert "timestamps" not in descriptor.by_column_name

    def test_named_embed_is_not_promoted(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(PrefixedEmbed)
        assert set(descriptor.columns) == {"id", "inner"}
        assert descriptor.by_column_name["inner"].promote is False

        resolution = resolve("inner_id", descriptor, registry)
        assert resolution is not None
        assert [step.attribute for step in resolution.steps] == ["inner", "id"]

    def test_promote_option_ignored_for_leaf(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(NotPromotable)
        assert descriptor.by_column_name["id"].promote is False

    def test_nested_types_described_eagerly(self, registry: TypeRegistry) -> None:
        registry.get(Person)
        assert registry.has(Timestamps)
        assert registry.has(Audit)

    def test_pydantic_model(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(OwnerModel)
        assert descriptor.columns == ["id", "name", "pet"]
        assert registry.get(PetModel).columns == ["id", "type"]

    def test_descriptor_is_immutable(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(Person)
        with pytest.raises(TypeError):
            descriptor.by_column_name["extra"] = None  # type: ignore[index]


class TestBuildErrors:
    def test_duplicate_column(self, registry: TypeRegistry) -> None:
        with pytest.raises(DuplicateColumnError, match="'x'") as exc_info:
            registry.get(Duplicated)
        assert exc_info.value.column == "x"

    def test_duplicate_from_promotion(self, registry: TypeRegistry) -> None:
        with pytest.raises(DuplicateColumnError, match="'id'") as exc_info:
            registry.get(Clashing)
        assert exc_info.value.origin == "inner"

    def test_nested_failure_surfaces_on_parent(self, registry: TypeRegistry) -> None:
        with pytest.raises(BuildError, match="'x'"):
            registry.get(HasBrokenChild)
        assert not registry.has(HasBrokenChild)

    def test_unresolvable_annotation(self, registry: TypeRegistry) -> None:
        with pytest.raises(BuildError, match="unresolvable"):
            registry.get(Unresolvable)

    def test_not_structural(self, registry: TypeRegistry) -> None:
        with pytest.raises(BuildError, match="expected a dataclass"):
            registry.get(int)

    def test_non_optional_cycle(self, registry: TypeRegistry) -> None:
        with pytest.raises(BuildError, match="without an optional link"):
            registry.get(Loop)

    def test_promotion_cycle(self, registry: TypeRegistry) -> None:
        with pytest.raises(BuildError, match="cannot promote recursive type"):
            registry.get(Folded)

    def test_invalid_tag_falls_back(
        self, registry: TypeRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="row_nest.mapping.descriptor"):
            descriptor = registry.get(BadTag)
        assert "name" in descriptor.by_column_name
        assert "bad'name" in caplog.text

    def test_invalid_tag_strict(self, strict_registry: TypeRegistry) -> None:
        with pytest.raises(InvalidColumnNameError, match="bad'name"):
            strict_registry.get(BadTag)


class TestRecursiveTypes:
    def test_self_referential_type(self, registry: TypeRegistry) -> None:
        descriptor = registry.get(Person)
        assert descriptor.by_column_name["child1"].direct_type is Person

    def test_cycle_through_optional_link(self, registry: TypeRegistry) -> None:
        author = registry.get(Author)
        book = registry.get(Book)
        assert author.columns == ["id", "best_book"]
        assert book.columns == ["id", "author"]

    def test_cycle_described_from_either_end(self) -> None:
        registry = TypeRegistry()
        assert registry.get(Book).columns == ["id", "author"]
        assert registry.has(Author)
