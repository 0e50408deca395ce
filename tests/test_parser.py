"""Tests for token document loading."""

import json

import pytest

from tokensmith.errors import ParseError
from tokensmith.models import SetStatus, TokenDefinition
from tokensmith.parser import (
    coerce_token_set,
    flatten_token_group,
    load_token_document,
)


class TestLoadTokenDocument:
    def test_parse_yaml_string(self, themed_document_yaml):
        doc = load_token_document(themed_document_yaml)
        assert list(doc.sets) == ["core", "light", "dark", "compact"]
        assert doc.sets["core"]["color.brand"].value == "#0055ff"
        assert doc.sets["core"]["space.base"].type == "spacing"

    def test_group_type_inherited(self, themed_document_yaml):
        doc = load_token_document(themed_document_yaml)
        assert doc.sets["core"]["color.neutral"].type == "color"

    def test_themes_parsed(self, themed_document_yaml):
        doc = load_token_document(themed_document_yaml)
        assert [t.id for t in doc.themes] == ["light", "dark", "compact"]
        assert doc.themes[0].selected_token_sets["core"] is SetStatus.SOURCE

    def test_set_order_from_metadata(self):
        doc = load_token_document(
            {
                "b": {"x": {"value": 1}},
                "a": {"y": {"value": 2}},
                "$metadata": {"tokenSetOrder": ["a"]},
            }
        )
        assert doc.set_order == ["a", "b"]

    def test_parse_json_file(self, tmp_path):
        f = tmp_path / "tokens.json"
        f.write_text(json.dumps({"global": {"size": {"$value": "4px", "$type": "dimension"}}}))
        doc = load_token_document(f)
        assert doc.sets["global"]["size"].value == "4px"
        assert doc.sets["global"]["size"].type == "dimension"

    def test_single_set_document_wrapped(self):
        doc = load_token_document({"color": {"red": {"value": "#f00"}}, "gap": {"value": "4px"}})
        assert list(doc.sets) == ["global"]
        assert set(doc.sets["global"]) == {"color.red", "gap"}

    def test_reject_invalid_yaml(self):
        with pytest.raises(ParseError, match="Invalid YAML"):
            load_token_document("{{{{not valid yaml")

    def test_reject_invalid_json(self, tmp_path):
        f = tmp_path / "broken.json"
        f.write_text("{not json")
        with pytest.raises(ParseError, match="Invalid JSON"):
            load_token_document(f)

    def test_reject_non_dict(self):
        with pytest.raises(ParseError, match="mapping"):
            load_token_document("- item1\n- item2")

    def test_reject_scalar_set(self):
        with pytest.raises(ParseError, match="must be a mapping"):
            load_token_document({"core": "oops"})

    def test_reject_bad_themes(self):
        with pytest.raises(ParseError, match="themes"):
            load_token_document({"core": {}, "$themes": {"id": "x"}})

    def test_reject_null_token_value(self):
        with pytest.raises(ParseError, match="'a' in set 'core'"):
            load_token_document({"core": {"a": {"value": None}}})

    def test_file_not_found(self, tmp_path):
        with pytest.raises(ParseError, match="Cannot read"):
            load_token_document(tmp_path / "nonexistent.yaml")


class TestFlattenTokenGroup:
    def test_nested_paths(self):
        tokens = flatten_token_group({"a": {"b": {"c": {"value": 1}}}})
        assert list(tokens) == ["a.b.c"]

    def test_description_and_tags(self):
        tokens = flatten_token_group(
            {"x": {"value": 1, "description": "one", "tags": ["internal"]}}
        )
        assert tokens["x"].description == "one"
        assert tokens["x"].tags == ("internal",)

    def test_leaf_type_overrides_group_type(self):
        tokens = flatten_token_group(
            {"type": "color", "a": {"value": "#fff"}, "b": {"value": "4px", "type": "spacing"}}
        )
        assert tokens["a"].type == "color"
        assert tokens["b"].type == "spacing"

    def test_composite_value_is_leaf(self):
        tokens = flatten_token_group(
            {"h1": {"type": "typography", "value": {"fontFamily": "Foo", "fontSize": "16px"}}}
        )
        assert tokens["h1"].value == {"fontFamily": "Foo", "fontSize": "16px"}


class TestCoerceTokenSet:
    def test_mixed_forms(self):
        tokens = coerce_token_set(
            {
                "a": TokenDefinition(type="color", value="#fff"),
                "b": {"type": "spacing", "value": "4px"},
                "c": 3,
                "group": {"d": {"value": "x"}},
            },
            "set",
        )
        assert tokens["a"].type == "color"
        assert tokens["b"].value == "4px"
        assert tokens["c"].value == 3
        assert tokens["c"].type == "other"
        assert tokens["group.d"].value == "x"

    def test_none_rejected(self):
        with pytest.raises(ParseError, match="no value"):
            coerce_token_set({"a": None}, "set")
