"""Token document loading: JSON/YAML reading, group flattening, themes."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from tokensmith.errors import ParseError
from tokensmith.models import ThemeDefinition, TokenDefinition

THEMES_KEY = "$themes"
METADATA_KEY = "$metadata"
RESERVED_KEYS: frozenset[str] = frozenset({THEMES_KEY, METADATA_KEY})

DEFAULT_SET_NAME = "global"

TokenSets = dict[str, dict[str, TokenDefinition]]


@dataclass
class TokenDocument:
    sets: TokenSets
    themes: list[ThemeDefinition] = field(default_factory=list)
    set_order: list[str] = field(default_factory=list)


def _make_yaml() -> YAML:
    """Create a ruamel.yaml safe loader that errors on duplicate keys."""
    yml = YAML(typ="safe")
    yml.allow_duplicate_keys = False
    return yml


def _read_source_text(source: str | Path) -> str:
    """Read document content from path or treat input as raw text."""
    if isinstance(source, Path):
        try:
            return source.read_text(encoding="utf-8")
        except OSError as e:
            raise ParseError(f"Cannot read file: {e}") from e
    return source


def load_raw_data(source: str | Path) -> dict:
    """Load a JSON or YAML token document into plain dicts."""
    text = _read_source_text(source)
    if isinstance(source, Path) and source.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e}") from e
    else:
        try:
            data = _make_yaml().load(text)
        except YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Top-level token document must be a mapping")
    return data


def load_token_document(source: str | Path | Mapping) -> TokenDocument:
    """Load a token document from a path, raw JSON/YAML text, or a mapping.

    Top-level keys are token set names, except ``$themes`` and ``$metadata``.
    A document whose top level already holds tokens (rather than sets) is
    wrapped into a single set named ``global``.

    Raises:
        ParseError: On unreadable input, syntax errors, or malformed tokens/themes.
    """
    data = dict(source) if isinstance(source, Mapping) else load_raw_data(source)

    themes = parse_themes(data.get(THEMES_KEY, []))
    metadata = data.get(METADATA_KEY) or {}
    if not isinstance(metadata, Mapping):
        raise ParseError(f"{METADATA_KEY} must be a mapping")

    body = {k: v for k, v in data.items() if k not in RESERVED_KEYS}
    if _holds_tokens_directly(body):
        sets = {DEFAULT_SET_NAME: flatten_token_group(body)}
    else:
        sets = parse_token_sets(body)

    set_order = list(metadata.get("tokenSetOrder") or [])
    for name in sets:
        if name not in set_order:
            set_order.append(name)
    return TokenDocument(sets=sets, themes=themes, set_order=set_order)


def parse_token_sets(data: Mapping) -> TokenSets:
    """Convert ``{set name: nested token groups}`` into flattened token sets."""
    sets: TokenSets = {}
    for set_name, group in data.items():
        if not isinstance(group, Mapping):
            raise ParseError(f"Token set {set_name!r} must be a mapping")
        sets[str(set_name)] = flatten_token_group(group, set_name=str(set_name))
    return sets


def flatten_token_group(
    group: Mapping,
    prefix: str = "",
    inherited_type: str | None = None,
    set_name: str = DEFAULT_SET_NAME,
) -> dict[str, TokenDefinition]:
    """Flatten nested token groups into ``{dotted.path: TokenDefinition}``.

    A leaf is a mapping with ``value`` (or ``$value``). Scalar keys of a group
    are group metadata; a group ``type``/``$type`` is inherited by its leaves.
    """
    tokens: dict[str, TokenDefinition] = {}
    group_type = group.get("$type", group.get("type"))
    if not isinstance(group_type, str):
        group_type = inherited_type

    for key, child in group.items():
        if not isinstance(child, Mapping):
            continue
        path = f"{prefix}.{key}" if prefix else str(key)
        if _is_leaf(child):
            tokens[path] = _parse_leaf(child, path, group_type, set_name)
        else:
            tokens.update(flatten_token_group(child, path, group_type, set_name))
    return tokens


def parse_themes(raw: object) -> list[ThemeDefinition]:
    if not isinstance(raw, list):
        raise ParseError(f"{THEMES_KEY} must be a list of theme objects")
    themes: list[ThemeDefinition] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise ParseError(f"Each entry of {THEMES_KEY} must be a mapping")
        try:
            themes.append(ThemeDefinition.model_validate(dict(entry)))
        except PydanticValidationError as e:
            raise ParseError(f"Theme schema validation failed:\n{e}") from e
    return themes


def _is_leaf(node: Mapping) -> bool:
    return "value" in node or "$value" in node


def _holds_tokens_directly(body: Mapping) -> bool:
    return any(isinstance(v, Mapping) and _is_leaf(v) for v in body.values())


def _parse_leaf(node: Mapping, path: str, group_type: str | None, set_name: str) -> TokenDefinition:
    fields: dict = {
        "value": node.get("$value", node.get("value")),
        "type": node.get("$type", node.get("type")) or group_type or "other",
    }
    description = node.get("$description", node.get("description"))
    if description is not None:
        fields["description"] = str(description)
    tags = node.get("tags")
    if tags is not None:
        fields["tags"] = tags
    try:
        return TokenDefinition.model_validate(fields)
    except PydanticValidationError as e:
        raise ParseError(f"Token {path!r} in set {set_name!r} is invalid:\n{e}") from e


def coerce_token_set(raw: Mapping, set_name: str) -> dict[str, TokenDefinition]:
    """Accept ``{path: TokenDefinition | {type, value} | bare value}`` or nested groups.

    A bare scalar or list is shorthand for an untyped token with that value.
    """
    tokens: dict[str, TokenDefinition] = {}
    for path, node in raw.items():
        if isinstance(node, TokenDefinition):
            tokens[str(path)] = node
        elif isinstance(node, Mapping) and _is_leaf(node):
            tokens[str(path)] = _parse_leaf(node, str(path), None, set_name)
        elif isinstance(node, Mapping):
            tokens.update(flatten_token_group(node, str(path), set_name=set_name))
        elif node is None:
            raise ParseError(f"Token {path!r} in set {set_name!r} has no value")
        else:
            tokens[str(path)] = TokenDefinition(value=node)
    return tokens
