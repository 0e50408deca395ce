"""Tests for output serializers."""

import json

import pytest

from tokensmith.models import ResolutionResult, ResolvedToken
from tokensmith.serializers import (
    css_value,
    css_variable_name,
    render,
    to_css,
    to_flat_json,
    to_nested_json,
    to_typescript,
)


def _result(*tokens):
    return ResolutionResult(tokens={t.path: t for t in tokens})


def _token(path, type_, value, **kwargs):
    return ResolvedToken(path=path, type=type_, value=value, set_name="s", **kwargs)


@pytest.fixture
def result():
    return _result(
        _token("color.brand", "color", "#0055ff", description="Brand blue"),
        _token("space.lg", "spacing", "16px", raw_value="{space.base} * 2"),
        _token("font.h1", "typography", {"fontFamily": "Foo", "fontSize": "24px"}),
        _token(
            "shadow.card", "boxShadow", [{"x": "0", "y": "1px", "blur": "2px", "color": "#000"}]
        ),
    )


class TestJson:
    def test_nested(self, result):
        nested = to_nested_json(result)
        assert nested["color"]["brand"] == {
            "type": "color",
            "value": "#0055ff",
            "description": "Brand blue",
        }
        assert nested["space"]["lg"] == {"type": "spacing", "value": "16px"}

    def test_nested_raw_value(self, result):
        nested = to_nested_json(result, include_raw=True)
        assert nested["space"]["lg"]["rawValue"] == "{space.base} * 2"

    def test_flat(self, result):
        flat = to_flat_json(result)
        assert list(flat) == ["color.brand", "space.lg", "font.h1", "shadow.card"]
        assert flat["space.lg"] == "16px"

    def test_render_json_parses(self, result):
        assert json.loads(render(result, "json"))["color"]["brand"]["value"] == "#0055ff"
        assert json.loads(render(result, "flat"))["space.lg"] == "16px"


class TestCss:
    def test_variable_name(self):
        assert css_variable_name("color.brand") == "--color-brand"
        assert css_variable_name("shadow.card.0.x", prefix="ds") == "--ds-shadow-card-0-x"
        assert css_variable_name("a b/c") == "--a-b-c"

    def test_shadow_shorthand(self):
        layer = {"x": "0", "y": "2px", "blur": "4px", "spread": "0", "color": "#000"}
        assert css_value("boxShadow", layer) == "0 2px 4px 0 #000"
        inner = dict(layer, type="innerShadow")
        expected = "inset 0 2px 4px 0 #000, 0 2px 4px 0 #000"
        assert css_value("boxShadow", [inner, layer]) == expected

    def test_border_shorthand(self):
        border = {"color": "#000", "width": "1px", "style": "solid"}
        assert css_value("border", border) == "1px solid #000"

    def test_numbers(self):
        assert css_value("number", 1.5) == "1.5"
        assert css_value("number", 2) == "2"

    def test_stylesheet(self, result):
        css = to_css(result)
        assert css.startswith(":root {\n")
        assert "  --color-brand: #0055ff;\n" in css
        assert "  --font-h1-fontFamily: Foo;\n" in css
        assert "  --shadow-card: 0 1px 2px #000;\n" in css
        assert css.endswith("}\n")


class TestTypescript:
    def test_const_and_key_type(self, result):
        ts = to_typescript(result)
        assert ts.startswith("export const tokens = {\n")
        assert '  "space.lg": "16px",\n' in ts
        assert "} as const;" in ts
        assert "export type TokensKey = keyof typeof tokens;" in ts


def test_unknown_format(result):
    with pytest.raises(ValueError, match="Unknown output format"):
        render(result, "xml")
