"""Unit tests for the field tag micro-syntax."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from row_nest.mapping.tags import (
    EMBEDDED_KEY,
    TAG_KEY,
    column,
    is_valid_column_name,
    model_column,
    parse_tag,
)


@dataclass
class Tagged:
    id: int = column("person_id")
    nested: int = column(embedded=True, default=0)


class TaggedModel(BaseModel):
    id: int = model_column("person_id", default=0)


class TestParseTag:
    @pytest.mark.parametrize(
        ("tag", "name", "options"),
        [
            ("", "", ""),
            ("-", "-", ""),
            ("child", "child", ""),
            ("timestamps,promote", "timestamps", "promote"),
            (",promote", "", "promote"),
            ("a,b,promote", "a", "b,promote"),
        ],
    )
    def test_split(self, tag: str, name: str, options: str) -> None:
        parsed_name, parsed_options = parse_tag(tag)
        assert parsed_name == name
        assert parsed_options == options

    def test_options_contains(self) -> None:
        _, options = parse_tag("x,omit,promote")
        assert options.contains("promote") is True
        assert options.contains("omit") is True
        assert options.contains("prom") is False

    def test_empty_options(self) -> None:
        _, options = parse_tag("x")
        assert options.contains("promote") is False


class TestColumnNames:
    @pytest.mark.parametrize("name", ["id", "created_at", "col-1", "a.b", "Straße", "x y"])
    def test_valid(self, name: str) -> None:
        assert is_valid_column_name(name) is True

    @pytest.mark.parametrize("name", ["", "bad'name", 'q"uote', "back\\slash", "comma,"])
    def test_invalid(self, name: str) -> None:
        assert is_valid_column_name(name) is False


class TestFieldHelpers:
    def test_dataclass_metadata(self) -> None:
        fields = {f.name: f for f in dataclasses.fields(Tagged)}
        assert fields["id"].metadata[TAG_KEY] == "person_id"
        assert fields["nested"].metadata[EMBEDDED_KEY] is True
        assert fields["nested"].default == 0

    def test_keeps_existing_metadata(self) -> None:
        f = column("x", metadata={"other": 1})
        assert dict(f.metadata) == {"other": 1, TAG_KEY: "x"}

    def test_pydantic_extra(self) -> None:
        info = TaggedModel.model_fields["id"]
        assert info.json_schema_extra == {TAG_KEY: "person_id"}
        assert info.default == 0
