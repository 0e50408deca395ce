"""Composite token expansion into scalar sub-tokens."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import replace
from types import MappingProxyType

from tokensmith.models import ResolveOptions, ResolvedToken, infer_property_type
from tokensmith.references import has_references

Expander = Callable[[ResolvedToken], list[ResolvedToken]]


def expand_composites(
    tokens: Mapping[str, ResolvedToken], options: ResolveOptions
) -> Mapping[str, ResolvedToken]:
    """Replace composite tokens with ``<path>.<property>`` sub-tokens where enabled.

    Expansion is toggled per composite type. Sub-tokens take the position of the
    token they came from. A path already defined by an explicit token is never
    overwritten by a generated sub-token.
    """
    expanded: dict[str, ResolvedToken] = {}
    for path, token in tokens.items():
        expander = _EXPANDERS.get(token.type)
        if expander is None or token.failed or not options.expands(token.type):
            expanded[path] = token
            continue
        parts = expander(token)
        if not parts:
            expanded[path] = token
            continue
        for part in parts:
            if part.path not in tokens:
                expanded[part.path] = part
    return MappingProxyType(expanded)


def _sub_token(parent: ResolvedToken, suffix: str, prop: str, value: object, raw: object):
    return replace(
        parent,
        path=f"{parent.path}.{suffix}",
        type=infer_property_type(parent.type, prop),
        value=value,
        raw_value=raw,
        is_alias=has_references(raw) if raw is not None else parent.is_alias,
        expanded_from=parent.path,
        description=None,
    )


def _raw_part(raw: object, key: object) -> object:
    if isinstance(raw, Mapping) and isinstance(key, str):
        return raw.get(key)
    if isinstance(raw, list) and isinstance(key, int) and key < len(raw):
        return raw[key]
    return None


def _expand_mapping(token: ResolvedToken, value: object, raw: object, prefix: str = ""):
    if not isinstance(value, Mapping):
        return []
    return [
        _sub_token(token, f"{prefix}{prop}", prop, sub, _raw_part(raw, prop))
        for prop, sub in value.items()
    ]


def _expand_record(token: ResolvedToken) -> list[ResolvedToken]:
    """Typography / composition: one level of named properties."""
    return _expand_mapping(token, token.value, token.raw_value)


def _flatten_layers(value: list, raw: object) -> list[tuple[object, object]]:
    """(layer, raw layer) pairs in order; nested layer lists are spliced in place."""
    layers: list[tuple[object, object]] = []
    for index, layer in enumerate(value):
        raw_layer = _raw_part(raw, index)
        if isinstance(layer, list):
            nested_raw = raw_layer if isinstance(raw_layer, list) else None
            layers.extend(_flatten_layers(layer, nested_raw))
        else:
            layers.append((layer, raw_layer))
    return layers


def _expand_layers(token: ResolvedToken) -> list[ResolvedToken]:
    """Shadow / border: a single record, or a list of layers indexed ``<path>.<n>.<prop>``.

    A layer that is an alias of a multi-layer value contributes all of its
    layers. If any layer is not a record (e.g. an unresolved reference) the
    token is left unexpanded.
    """
    if not isinstance(token.value, list):
        return _expand_mapping(token, token.value, token.raw_value)
    layers = _flatten_layers(token.value, token.raw_value)
    if not layers or not all(isinstance(layer, Mapping) for layer, _ in layers):
        return []
    parts: list[ResolvedToken] = []
    for index, (layer, raw_layer) in enumerate(layers):
        parts.extend(_expand_mapping(token, layer, raw_layer, prefix=f"{index}."))
    return parts


_EXPANDERS: dict[str, Expander] = {
    "typography": _expand_record,
    "boxShadow": _expand_layers,
    "border": _expand_layers,
    "composition": _expand_record,
}
