"""Pydantic v2 input models and immutable result records for token resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tokensmith.diagnostics import Diagnostic

# Token types whose (sub-)values take part in arithmetic evaluation: numbers
# with an optional unit suffix, plus untyped ("other") tokens.
MATH_TYPES: frozenset[str] = frozenset(
    {
        "dimension",
        "spacing",
        "sizing",
        "borderRadius",
        "borderWidth",
        "fontSizes",
        "lineHeights",
        "letterSpacing",
        "paragraphSpacing",
        "opacity",
        "number",
        "other",
    }
)

COMPOSITE_TYPES: frozenset[str] = frozenset({"typography", "boxShadow", "border", "composition"})

TYPOGRAPHY_PROPERTY_TYPES: dict[str, str] = {
    "fontFamily": "fontFamilies",
    "fontWeight": "fontWeights",
    "fontSize": "dimension",
    "lineHeight": "lineHeights",
    "letterSpacing": "letterSpacing",
    "paragraphSpacing": "paragraphSpacing",
    "paragraphIndent": "dimension",
    "textCase": "textCase",
    "textDecoration": "textDecoration",
}

SHADOW_PROPERTY_TYPES: dict[str, str] = {
    "x": "dimension",
    "y": "dimension",
    "blur": "dimension",
    "spread": "dimension",
    "color": "color",
    "type": "other",
}

BORDER_PROPERTY_TYPES: dict[str, str] = {
    "color": "color",
    "width": "borderWidth",
    "style": "borderStyle",
}

COMPOSITION_PROPERTY_TYPES: dict[str, str] = {
    "fill": "color",
    "backgroundColor": "color",
    "borderColor": "color",
    "sizing": "sizing",
    "width": "sizing",
    "height": "sizing",
    "minWidth": "sizing",
    "maxWidth": "sizing",
    "minHeight": "sizing",
    "maxHeight": "sizing",
    "spacing": "spacing",
    "itemSpacing": "spacing",
    "verticalPadding": "spacing",
    "horizontalPadding": "spacing",
    "paddingTop": "spacing",
    "paddingRight": "spacing",
    "paddingBottom": "spacing",
    "paddingLeft": "spacing",
    "borderRadius": "borderRadius",
    "borderRadiusTopLeft": "borderRadius",
    "borderRadiusTopRight": "borderRadius",
    "borderRadiusBottomRight": "borderRadius",
    "borderRadiusBottomLeft": "borderRadius",
    "borderWidth": "borderWidth",
    "borderWidthTop": "borderWidth",
    "borderWidthRight": "borderWidth",
    "borderWidthBottom": "borderWidth",
    "borderWidthLeft": "borderWidth",
    "border": "border",
    "boxShadow": "boxShadow",
    "typography": "typography",
    "opacity": "opacity",
    "fontFamilies": "fontFamilies",
    "fontWeights": "fontWeights",
    "fontSizes": "fontSizes",
    "lineHeights": "lineHeights",
    "letterSpacing": "letterSpacing",
    "paragraphSpacing": "paragraphSpacing",
    "textCase": "textCase",
    "textDecoration": "textDecoration",
    "dimension": "dimension",
}

_PROPERTY_TYPES: dict[str, dict[str, str]] = {
    "typography": TYPOGRAPHY_PROPERTY_TYPES,
    "boxShadow": SHADOW_PROPERTY_TYPES,
    "border": BORDER_PROPERTY_TYPES,
    "composition": COMPOSITION_PROPERTY_TYPES,
}


def infer_property_type(token_type: str, prop: str) -> str:
    """Scalar type of sub-property ``prop`` of a composite ``token_type`` value."""
    return _PROPERTY_TYPES.get(token_type, {}).get(prop, "other")


class SetStatus(str, Enum):
    """Per-theme status of a token set, ordered DISABLED < SOURCE < ENABLED."""

    DISABLED = "disabled"
    SOURCE = "source"
    ENABLED = "enabled"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def combine(self, other: SetStatus) -> SetStatus:
        return self if self.rank >= other.rank else other


_STATUS_RANK = {SetStatus.DISABLED: 0, SetStatus.SOURCE: 1, SetStatus.ENABLED: 2}


class TokenDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str = "other"
    value: Any
    description: str | None = None
    tags: tuple[str, ...] = ()

    @field_validator("value")
    @classmethod
    def value_present(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("token value must not be null")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: object) -> object:
        if isinstance(v, str):
            return (v,)
        return v


class ThemeDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    name: str | None = None
    group: str | None = None
    selected_token_sets: dict[str, SetStatus] = Field(
        default_factory=dict, alias="selectedTokenSets"
    )

    @field_validator("selected_token_sets", mode="before")
    @classmethod
    def lowercase_statuses(cls, v: object) -> object:
        if isinstance(v, Mapping):
            return {k: s.lower() if isinstance(s, str) else s for k, s in v.items()}
        return v

    @property
    def group_key(self) -> str:
        """Group (dimension) this theme belongs to; ungrouped themes are their own group."""
        return self.group or self.name or self.id

    def matches(self, theme_ref: str) -> bool:
        return theme_ref == self.id or (self.name is not None and theme_ref == self.name)


ResolveMode = Literal["off", "aliases", "math"]


class ResolveOptions(BaseModel):
    """Caller options for one resolution request.

    Accepts the camelCase option names of the token-transformer CLI as well as
    the snake_case field names.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    expand_typography: bool = Field(False, alias="expandTypography")
    expand_shadow: bool = Field(False, alias="expandShadow")
    expand_border: bool = Field(False, alias="expandBorder")
    expand_composition: bool = Field(False, alias="expandComposition")
    resolve_references: ResolveMode = Field("math", alias="resolveReferences")
    preserve_raw_value: bool = Field(False, alias="preserveRawValue")
    throw_error_when_not_resolved: bool = Field(False, alias="throwErrorWhenNotResolved")
    exclude_sets: frozenset[str] = Field(frozenset(), alias="excludeSets")
    exclude_tags: frozenset[str] = Field(frozenset(), alias="excludeTags")

    @field_validator("resolve_references", mode="before")
    @classmethod
    def normalize_resolve_mode(cls, v: object) -> object:
        if v is True or v == "true":
            return "math"
        if v is False or v == "false":
            return "off"
        return v

    @field_validator("exclude_sets", "exclude_tags", mode="before")
    @classmethod
    def split_comma_list(cls, v: object) -> object:
        if isinstance(v, str):
            return frozenset(part.strip() for part in v.split(",") if part.strip())
        return v

    def expands(self, token_type: str) -> bool:
        return {
            "typography": self.expand_typography,
            "boxShadow": self.expand_shadow,
            "border": self.expand_border,
            "composition": self.expand_composition,
        }.get(token_type, False)


@dataclass(frozen=True)
class SelectedSet:
    name: str
    exportable: bool


@dataclass(frozen=True)
class MergedToken:
    """A raw token after set merging, with the set that last defined it."""

    path: str
    type: str
    value: Any
    set_name: str
    exporting_sets: tuple[str, ...] = ()
    description: str | None = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedToken:
    path: str
    type: str
    value: Any
    set_name: str
    exporting_sets: tuple[str, ...] = ()
    raw_value: Any = None
    is_alias: bool = False
    expanded_from: str | None = None
    failed: bool = False
    description: str | None = None
    tags: tuple[str, ...] = ()

    def to_dict(self, include_raw: bool = False) -> dict:
        data: dict[str, Any] = {"type": self.type, "value": self.value}
        if include_raw and self.raw_value is not None:
            data["rawValue"] = self.raw_value
        if self.description:
            data["description"] = self.description
        return data

    def provenance(self) -> dict:
        return {
            "set": self.set_name,
            "alias": self.is_alias,
            "expandedFrom": self.expanded_from,
            "failed": self.failed,
        }


@dataclass(frozen=True)
class ResolutionResult:
    """Final output: resolved tokens (read-only mapping) plus diagnostics."""

    tokens: Mapping[str, ResolvedToken]
    diagnostics: tuple[Diagnostic, ...] = ()
    sets: tuple[SelectedSet, ...] = field(default_factory=tuple)

    def __contains__(self, path: object) -> bool:
        return path in self.tokens

    def __getitem__(self, path: str) -> ResolvedToken:
        return self.tokens[path]

    def __len__(self) -> int:
        return len(self.tokens)

    def values(self) -> dict[str, Any]:
        return {path: token.value for path, token in self.tokens.items()}

    def to_dict(self, include_raw: bool = False) -> dict[str, dict]:
        return {path: token.to_dict(include_raw) for path, token in self.tokens.items()}
