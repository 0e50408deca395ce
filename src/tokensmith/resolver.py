"""Alias resolution over the merged token graph.

Tokens are nodes addressed by path; every ``{path}`` placeholder is an edge to
the token that owns the referenced path. Resolution walks the graph depth
first with an explicit work stack, so leaves resolve before the tokens that
reference them and each path is resolved exactly once. Traversal state lives
in side tables keyed by path; merged token records are never modified.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from tokensmith.diagnostics import (
    CYCLE,
    MALFORMED_EXPRESSION,
    MISSING_REFERENCE,
    UNIT_MISMATCH,
    DiagnosticCollector,
)
from tokensmith.errors import MalformedExpressionError, UnitMismatchError
from tokensmith.math_eval import evaluate_value, format_number
from tokensmith.models import (
    MATH_TYPES,
    MergedToken,
    ResolvedToken,
    infer_property_type,
)
from tokensmith.references import (
    MISSING,
    REFERENCE_RE,
    find_references,
    has_references,
    lookup_subvalue,
    owner_of,
    whole_reference,
)

_VISITING = 1
_DONE = 2


def resolve_aliases(
    merged: Mapping[str, MergedToken],
    collector: DiagnosticCollector,
    *,
    evaluate_math: bool = True,
    preserve_raw_value: bool = False,
) -> Mapping[str, ResolvedToken]:
    """Resolve every placeholder in ``merged``, returning a new read-only mapping.

    Failures are isolated to the paths involved: cycle members, tokens whose
    expression fails, and references to missing or failed tokens are reported
    through ``collector`` and the remaining tokens resolve normally. Under a
    strict policy the collector raises on the first such condition instead.
    """
    return _Resolver(merged, collector, evaluate_math).run(preserve_raw_value)


class _Resolver:
    def __init__(
        self,
        merged: Mapping[str, MergedToken],
        collector: DiagnosticCollector,
        evaluate_math: bool,
    ):
        self.merged = merged
        self.collector = collector
        self.evaluate_math = evaluate_math
        self.state: dict[str, int] = {}
        self.values: dict[str, object] = {}
        self.failed: set[str] = set()
        self.dependencies = {
            path: _dependencies(token.value, merged) for path, token in merged.items()
        }

    def run(self, preserve_raw_value: bool) -> Mapping[str, ResolvedToken]:
        for path in self.merged:
            if path not in self.state:
                self._visit(path)

        resolved: dict[str, ResolvedToken] = {}
        for path, token in self.merged.items():
            failed = path in self.failed
            resolved[path] = ResolvedToken(
                path=path,
                type=token.type,
                value=token.value if failed else self.values[path],
                set_name=token.set_name,
                exporting_sets=token.exporting_sets,
                raw_value=token.value if preserve_raw_value else None,
                is_alias=has_references(token.value),
                failed=failed,
                description=token.description,
                tags=token.tags,
            )
        return MappingProxyType(resolved)

    def _visit(self, root: str) -> None:
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(self.dependencies[root]))]
        self.state[root] = _VISITING
        while stack:
            path, pending = stack[-1]
            descended = False
            for dep in pending:
                dep_state = self.state.get(dep)
                if dep_state is None:
                    self.state[dep] = _VISITING
                    stack.append((dep, iter(self.dependencies[dep])))
                    descended = True
                    break
                if dep_state == _VISITING:
                    on_stack = [p for p, _ in stack]
                    self._fail_cycle(on_stack[on_stack.index(dep) :])
            if descended:
                continue
            stack.pop()
            self.state[path] = _DONE
            if path not in self.failed:
                self._resolve_token(path)

    def _fail_cycle(self, members: list[str]) -> None:
        for i, member in enumerate(members):
            ordered = members[i:] + members[:i]
            chain = " -> ".join(ordered + [member])
            self.failed.add(member)
            self.collector.emit(
                CYCLE, tuple(ordered), f"Reference cycle at {member!r}: {chain}"
            )

    def _resolve_token(self, path: str) -> None:
        token = self.merged[path]
        try:
            value = self._substitute(token.value, path)
            if self.evaluate_math:
                value = _evaluate_token_math(token.type, value)
        except UnitMismatchError as e:
            self.failed.add(path)
            self.collector.emit(UNIT_MISMATCH, (path,), f"Token {path!r}: {e}")
            return
        except MalformedExpressionError as e:
            self.failed.add(path)
            self.collector.emit(MALFORMED_EXPRESSION, (path,), f"Token {path!r}: {e}")
            return
        self.values[path] = value

    def _substitute(self, value: object, path: str) -> object:
        if isinstance(value, str):
            return self._substitute_string(value, path)
        if isinstance(value, Mapping):
            return {k: self._substitute(v, path) for k, v in value.items()}
        if isinstance(value, list):
            return [self._substitute(v, path) for v in value]
        return value

    def _substitute_string(self, text: str, path: str) -> object:
        ref = whole_reference(text)
        if ref is not None:
            target = self._lookup(ref, path)
            return text if target is MISSING else target

        def replace(m) -> str:
            target = self._lookup(m.group(1), path)
            if target is MISSING:
                return m.group(0)
            if isinstance(target, (Mapping, list)):
                raise MalformedExpressionError(
                    f"composite value of {m.group(1)!r} cannot be embedded in {text!r}"
                )
            return _stringify(target)

        return REFERENCE_RE.sub(replace, text)

    def _lookup(self, ref: str, path: str) -> object:
        """Resolved value for ``ref``, or MISSING after reporting why."""
        owner = owner_of(ref, self.merged)
        if owner is None:
            self.collector.emit(
                MISSING_REFERENCE,
                (path, ref),
                f"Token {path!r} references {ref!r}, which does not exist",
            )
            return MISSING
        if owner in self.failed:
            self.collector.emit(
                MISSING_REFERENCE,
                (path, ref),
                f"Token {path!r} references {ref!r}, which failed to resolve",
            )
            return MISSING
        value = self.values[owner]
        if owner != ref:
            value = lookup_subvalue(value, ref[len(owner) + 1 :])
            if value is MISSING:
                self.collector.emit(
                    MISSING_REFERENCE,
                    (path, ref),
                    f"Token {path!r} references {ref!r}, which is not a property of {owner!r}",
                )
                return MISSING
        return _copy_value(value)


def _dependencies(value: object, merged: Mapping[str, MergedToken]) -> list[str]:
    owners: list[str] = []
    for ref in find_references(value):
        owner = owner_of(ref, merged)
        if owner is not None and owner not in owners:
            owners.append(owner)
    return owners


def _evaluate_token_math(token_type: str, value: object) -> object:
    if token_type in MATH_TYPES:
        return evaluate_value(value)
    return _evaluate_composite_math(token_type, value)


def _evaluate_composite_math(token_type: str, value: object) -> object:
    if isinstance(value, list):
        return [_evaluate_composite_math(token_type, layer) for layer in value]
    if not isinstance(value, Mapping):
        return value
    evaluated = {}
    for prop, sub in value.items():
        if infer_property_type(token_type, prop) in MATH_TYPES:
            sub = evaluate_value(sub)
        evaluated[prop] = sub
    return evaluated


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _copy_value(value: object) -> object:
    if isinstance(value, Mapping):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_value(v) for v in value]
    return value
