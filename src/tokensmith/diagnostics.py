"""Diagnostics and diagnostic policy for token resolution."""

from __future__ import annotations

import warnings
from dataclasses import dataclass

from tokensmith.errors import (
    CycleDetectedError,
    MalformedExpressionError,
    ResolutionError,
    UnitMismatchError,
    UnknownSetError,
    UnresolvedReferenceError,
)

UNKNOWN_SET = "unknown-set"
CYCLE = "cycle"
MISSING_REFERENCE = "missing-reference"
UNIT_MISMATCH = "unit-mismatch"
MALFORMED_EXPRESSION = "malformed-expression"

KIND_CODES: dict[str, str] = {
    UNKNOWN_SET: "T01",
    CYCLE: "T02",
    MISSING_REFERENCE: "T03",
    UNIT_MISMATCH: "T04",
    MALFORMED_EXPRESSION: "T05",
}

KNOWN_CODES: frozenset[str] = frozenset(KIND_CODES.values())

_KIND_ERRORS: dict[str, type[ResolutionError]] = {
    UNKNOWN_SET: UnknownSetError,
    CYCLE: CycleDetectedError,
    MISSING_REFERENCE: UnresolvedReferenceError,
    UNIT_MISMATCH: UnitMismatchError,
    MALFORMED_EXPRESSION: MalformedExpressionError,
}


class TokenWarning(UserWarning):
    """Warning with a machine-readable code."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(f"[{code}] {message}")


@dataclass(frozen=True)
class Diagnostic:
    """One non-fatal (or escalated) resolution problem.

    ``paths[0]`` is the affected token path (or set name for ``unknown-set``);
    any further entries name related paths, e.g. the other members of a cycle.
    """

    kind: str
    paths: tuple[str, ...]
    detail: str

    @property
    def code(self) -> str:
        return KIND_CODES[self.kind]

    @property
    def message(self) -> str:
        return f"[{self.code}] {self.detail}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "code": self.code,
            "paths": list(self.paths),
            "detail": self.detail,
        }


@dataclass(frozen=True)
class DiagnosticPolicy:
    """Controls how individual diagnostic codes are handled.

    ``strict`` escalates every code to an error, as does listing a code in
    ``warn_as_error``. Suppressed codes are dropped before escalation.
    """

    warn_as_error: frozenset[str] = frozenset()
    suppress: frozenset[str] = frozenset()
    strict: bool = False

    def escalates(self, code: str) -> bool:
        return self.strict or code in self.warn_as_error


class DiagnosticCollector:
    """Accumulates diagnostics for one resolution request, in emission order."""

    def __init__(self, policy: DiagnosticPolicy | None = None, *, emit_warnings: bool = True):
        self.policy = policy or DiagnosticPolicy()
        self.emit_warnings = emit_warnings
        self._items: list[Diagnostic] = []
        self._seen: set[Diagnostic] = set()

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def emit(self, kind: str, paths: tuple[str, ...] | list[str], detail: str) -> Diagnostic | None:
        """Record a diagnostic, respecting the active policy.

        - Suppressed codes are silently dropped and ``None`` is returned.
        - Escalated codes raise the matching ``ResolutionError`` subclass,
          carrying every diagnostic collected so far.
        - Otherwise the diagnostic is recorded and, unless disabled, issued as a
          ``TokenWarning`` via ``warnings.warn``.
        """
        diagnostic = Diagnostic(kind, tuple(paths), detail)
        code = diagnostic.code
        if code in self.policy.suppress:
            return None
        if diagnostic in self._seen:
            return diagnostic
        self._seen.add(diagnostic)
        self._items.append(diagnostic)

        if self.policy.escalates(code):
            raise _KIND_ERRORS[kind](
                diagnostic.message, paths=diagnostic.paths, diagnostics=self._items
            )
        if self.emit_warnings:
            warnings.warn(TokenWarning(code, detail), stacklevel=2)
        return diagnostic


def parse_code_list(raw: str) -> frozenset[str]:
    """Parse a comma-separated string of T-codes and validate them.

    Raises ``ValueError`` for unknown codes.
    """
    codes: set[str] = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        if token not in KNOWN_CODES:
            raise ValueError(f"Unknown diagnostic code: {token!r} (known: {sorted(KNOWN_CODES)})")
        codes.add(token)
    return frozenset(codes)
