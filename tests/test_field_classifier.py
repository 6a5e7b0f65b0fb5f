import pytest

from protoc_gen_bruno.generator.field_classifier import Placement, classify_fields, place_field
from protoc_gen_bruno.models import Field


def _make_field(name: str, kind: str = "string") -> Field:
    return Field(name=name, json_name=name, kind=kind)


FIELDS = [_make_field("id"), _make_field("name"), _make_field("user"), _make_field("page")]


def _names(fields):
    return [f.name for f in fields]


class TestPathParams:
    @pytest.mark.parametrize("verb,body", [
        ("get", ""), ("delete", ""), ("post", "*"), ("put", "id"), ("patch", ""),
    ])
    def test_placeholder_always_in_path(self, verb, body):
        partition = classify_fields(FIELDS, ["id"], verb, body)
        assert _names(partition.path) == ["id"]
        assert "id" not in _names(partition.query)
        assert "id" not in _names(partition.body)


class TestQueryOnlyVerbs:
    @pytest.mark.parametrize("verb", ["get", "delete"])
    def test_no_body_fields(self, verb):
        partition = classify_fields(FIELDS, ["id"], verb, "*")
        assert partition.body == []
        assert _names(partition.query) == ["name", "user", "page"]


class TestBodyVerbs:
    def test_wildcard_body(self):
        partition = classify_fields(FIELDS, ["id"], "post", "*")
        assert _names(partition.body) == ["name", "user", "page"]
        assert partition.query == []

    def test_named_body_field(self):
        partition = classify_fields(FIELDS, ["id"], "patch", "user")
        assert _names(partition.body) == ["user"]
        assert _names(partition.query) == ["name", "page"]

    def test_empty_body_means_query(self):
        partition = classify_fields(FIELDS, [], "post", "")
        assert partition.body == []
        assert _names(partition.query) == ["id", "name", "user", "page"]

    def test_body_selector_naming_path_param(self):
        partition = classify_fields(FIELDS, ["user"], "put", "user")
        assert _names(partition.path) == ["user"]
        assert partition.body == []


class TestPlaceField:
    def test_decision_table(self):
        assert place_field("id", ["id"], "post", "*") is Placement.PATH
        assert place_field("name", [], "get", "name") is Placement.QUERY
        assert place_field("name", [], "put", "name") is Placement.BODY
        assert place_field("name", [], "put", "other") is Placement.QUERY
        assert place_field("name", [], "put", "") is Placement.QUERY
