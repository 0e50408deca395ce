"""Output serialization of resolved tokens: nested/flat JSON, CSS, TypeScript."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping

from tokensmith.math_eval import format_number
from tokensmith.models import ResolutionResult

_CSS_NAME_RE = re.compile(r"[^A-Za-z0-9_-]+")


def to_nested_json(result: ResolutionResult, include_raw: bool = False) -> dict:
    """Re-nest dotted paths into groups with ``{value, type}`` leaves."""
    root: dict = {}
    for path, token in result.tokens.items():
        node = root
        parts = path.split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        leaf = node.setdefault(parts[-1], {})
        leaf.update(token.to_dict(include_raw))
    return root


def to_flat_json(result: ResolutionResult) -> dict:
    return result.values()


def css_variable_name(path: str, prefix: str = "") -> str:
    name = _CSS_NAME_RE.sub("-", path.replace(".", "-")).strip("-")
    return f"--{prefix}-{name}" if prefix else f"--{name}"


def css_value(token_type: str, value: object) -> str:
    """Render a resolved value as CSS text; shadows and borders use shorthand."""
    if isinstance(value, list):
        return ", ".join(css_value(token_type, layer) for layer in value)
    if isinstance(value, Mapping):
        if token_type == "boxShadow":
            inset = "inset " if value.get("type") == "innerShadow" else ""
            fields = [value.get(k) for k in ("x", "y", "blur", "spread", "color")]
            return inset + " ".join(_css_scalar(f) for f in fields if f is not None)
        if token_type == "border":
            fields = [value.get(k) for k in ("width", "style", "color")]
            return " ".join(_css_scalar(f) for f in fields if f is not None)
        return json.dumps(value)
    return _css_scalar(value)


def _css_scalar(value: object) -> str:
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def to_css(result: ResolutionResult, selector: str = ":root", prefix: str = "") -> str:
    """CSS custom properties; typography/composition records become one
    variable per property."""
    lines = [f"{selector} {{"]
    for path, token in result.tokens.items():
        value = token.value
        if isinstance(value, Mapping) and token.type not in ("boxShadow", "border"):
            for prop, sub in value.items():
                name = css_variable_name(f"{path}.{prop}", prefix)
                lines.append(f"  {name}: {css_value('other', sub)};")
            continue
        lines.append(f"  {css_variable_name(path, prefix)}: {css_value(token.type, value)};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def to_typescript(result: ResolutionResult, const_name: str = "tokens") -> str:
    lines = [f"export const {const_name} = {{"]
    for path, value in result.values().items():
        lines.append(f"  {json.dumps(path)}: {json.dumps(value)},")
    lines.append("} as const;")
    lines.append("")
    type_name = const_name[:1].upper() + const_name[1:] + "Key"
    lines.append(f"export type {type_name} = keyof typeof {const_name};")
    return "\n".join(lines) + "\n"


def render(result: ResolutionResult, output_format: str, include_raw: bool = False) -> str:
    """Render ``result`` in one of ``json``, ``flat``, ``css`` or ``ts``."""
    if output_format == "json":
        return json.dumps(to_nested_json(result, include_raw), indent=2) + "\n"
    if output_format == "flat":
        return json.dumps(to_flat_json(result), indent=2) + "\n"
    if output_format == "css":
        return to_css(result)
    if output_format == "ts":
        return to_typescript(result)
    raise ValueError(f"Unknown output format: {output_format!r}")
