"""Shared fixtures for tokensmith tests."""

import pytest


@pytest.fixture
def basic_sets():
    return {
        "core": {
            "space.base": {"type": "spacing", "value": "8px"},
            "space.double": {"type": "spacing", "value": "{space.base} * 2"},
            "color.brand": {"type": "color", "value": "#0055ff"},
        },
        "semantic": {
            "color.primary": {"type": "color", "value": "{color.brand}"},
            "space.card": {"type": "spacing", "value": "{space.double} + {space.base}"},
        },
    }


@pytest.fixture
def themed_document_yaml():
    return """\
core:
  color:
    type: color
    brand:
      value: "#0055ff"
    neutral:
      value: "#888888"
  space:
    base:
      type: spacing
      value: 4px
light:
  color:
    background:
      type: color
      value: "#ffffff"
    text:
      type: color
      value: "{color.neutral}"
dark:
  color:
    background:
      type: color
      value: "#000000"
    text:
      type: color
      value: "{color.brand}"
compact:
  space:
    gap:
      type: spacing
      value: "{space.base} * 2"
$themes:
  - id: light
    name: Light
    group: mode
    selectedTokenSets:
      core: source
      light: enabled
  - id: dark
    name: Dark
    group: mode
    selectedTokenSets:
      core: source
      dark: enabled
  - id: compact
    name: Compact
    group: density
    selectedTokenSets:
      core: enabled
      compact: enabled
$metadata:
  tokenSetOrder:
    - core
    - light
    - dark
    - compact
"""


@pytest.fixture
def typography_sets():
    return {
        "base": {
            "font.size.body": {"type": "fontSizes", "value": "16px"},
            "heading": {
                "type": "typography",
                "value": {
                    "fontFamily": "Foo",
                    "fontSize": "{font.size.body} * 1.5",
                    "fontWeight": "700",
                },
            },
        }
    }
