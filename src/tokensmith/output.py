"""Filter/output stage: drop non-exported tokens and assemble the result."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from tokensmith.diagnostics import Diagnostic
from tokensmith.models import ResolutionResult, ResolveOptions, ResolvedToken, SelectedSet


def is_exported(token: ResolvedToken, options: ResolveOptions) -> bool:
    """A token is exported when some exportable, non-excluded set defines it
    and none of its tags is excluded."""
    if options.exclude_tags and options.exclude_tags.intersection(token.tags):
        return False
    return any(name not in options.exclude_sets for name in token.exporting_sets)


def filter_tokens(
    tokens: Mapping[str, ResolvedToken], options: ResolveOptions
) -> Mapping[str, ResolvedToken]:
    return MappingProxyType(
        {path: token for path, token in tokens.items() if is_exported(token, options)}
    )


def build_result(
    tokens: Mapping[str, ResolvedToken],
    options: ResolveOptions,
    diagnostics: Sequence[Diagnostic],
    selected: Sequence[SelectedSet],
) -> ResolutionResult:
    return ResolutionResult(
        tokens=filter_tokens(tokens, options),
        diagnostics=tuple(diagnostics),
        sets=tuple(selected),
    )
