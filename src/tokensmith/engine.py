"""Resolution pipeline: select -> merge -> resolve -> expand -> filter."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from tokensmith.diagnostics import DiagnosticCollector, DiagnosticPolicy
from tokensmith.errors import ParseError, ThemeError
from tokensmith.expansion import expand_composites
from tokensmith.merger import merge_sets
from tokensmith.models import (
    MergedToken,
    ResolutionResult,
    ResolveOptions,
    ResolvedToken,
    ThemeDefinition,
)
from tokensmith.output import build_result
from tokensmith.parser import TokenDocument, coerce_token_set
from tokensmith.resolver import resolve_aliases
from tokensmith.themes import select_all_sets, select_explicit_sets, select_theme_sets


def resolve_tokens(
    token_sets: Mapping[str, Mapping],
    *,
    set_names: Sequence[str] | None = None,
    themes: Sequence[ThemeDefinition | Mapping] | None = None,
    active_themes: Mapping[str, str] | None = None,
    options: ResolveOptions | Mapping | None = None,
    policy: DiagnosticPolicy | None = None,
    set_order: Sequence[str] | None = None,
    emit_warnings: bool = True,
) -> ResolutionResult:
    """Resolve token sets into a flat, fully resolved token mapping.

    Args:
        token_sets: ``{set name: {path: TokenDefinition | {type, value}}}``;
            nested token groups are flattened. Never mutated.
        set_names: Explicit merge order; every listed set is exportable.
        themes: Theme definitions, used together with ``active_themes``.
        active_themes: ``{group: theme id or name}`` in merge order (later groups override).
        options: ``ResolveOptions`` or a mapping of option names.
        policy: Suppression/escalation per diagnostic code. Strict mode from
            ``options.throw_error_when_not_resolved`` is added on top.
        set_order: Default set order when neither ``set_names`` nor
            ``active_themes`` is given (all sets are then merged).
        emit_warnings: Also surface diagnostics through ``warnings.warn``.

    Returns:
        ResolutionResult with exported tokens and accumulated diagnostics.

    Raises:
        ParseError: On malformed token definitions or options.
        ThemeError: On an unknown theme group/id, or conflicting selections.
        ResolutionError: In strict mode or for escalated codes, on the first
            fatal condition (carrying every diagnostic collected so far).
    """
    options = _coerce_options(options)
    policy = policy or DiagnosticPolicy()
    if options.throw_error_when_not_resolved:
        policy = dataclasses.replace(policy, strict=True)
    collector = DiagnosticCollector(policy, emit_warnings=emit_warnings)

    store = {name: coerce_token_set(tokens, name) for name, tokens in token_sets.items()}

    if set_names is not None and active_themes is not None:
        raise ThemeError("Pass either an explicit set list or an active theme selection, not both")
    if set_names is not None:
        selected = select_explicit_sets(set_names, store, collector)
    elif active_themes is not None:
        theme_defs = [_coerce_theme(t) for t in themes or ()]
        selected = select_theme_sets(theme_defs, active_themes, store, collector)
    else:
        selected = select_all_sets(set_order or list(store), store)

    merged = merge_sets(store, selected)

    if options.resolve_references == "off":
        resolved = _unresolved(merged, options.preserve_raw_value)
    else:
        resolved = resolve_aliases(
            merged,
            collector,
            evaluate_math=options.resolve_references == "math",
            preserve_raw_value=options.preserve_raw_value,
        )

    expanded = expand_composites(resolved, options)
    return build_result(expanded, options, collector.diagnostics, selected)


def resolve_document(document: TokenDocument, **kwargs) -> ResolutionResult:
    """``resolve_tokens`` over a loaded document's sets, themes and set order."""
    kwargs.setdefault("themes", document.themes)
    kwargs.setdefault("set_order", document.set_order)
    return resolve_tokens(document.sets, **kwargs)


def _coerce_options(options: ResolveOptions | Mapping | None) -> ResolveOptions:
    if options is None:
        return ResolveOptions()
    if isinstance(options, ResolveOptions):
        return options
    try:
        return ResolveOptions.model_validate(dict(options))
    except PydanticValidationError as e:
        raise ParseError(f"Invalid resolve options:\n{e}") from e


def _coerce_theme(theme: ThemeDefinition | Mapping) -> ThemeDefinition:
    if isinstance(theme, ThemeDefinition):
        return theme
    try:
        return ThemeDefinition.model_validate(dict(theme))
    except PydanticValidationError as e:
        raise ParseError(f"Theme schema validation failed:\n{e}") from e


def _unresolved(
    merged: Mapping[str, MergedToken], preserve_raw_value: bool
) -> dict[str, ResolvedToken]:
    return {
        path: ResolvedToken(
            path=path,
            type=token.type,
            value=token.value,
            set_name=token.set_name,
            exporting_sets=token.exporting_sets,
            raw_value=token.value if preserve_raw_value else None,
            description=token.description,
            tags=token.tags,
        )
        for path, token in merged.items()
    }
