"""Custom exception hierarchy for the tokensmith engine."""

from __future__ import annotations


class TokensmithError(Exception):
    """Base exception for all tokensmith errors."""


class ParseError(TokensmithError):
    """Raised when a token document cannot be read or has the wrong shape."""


class ThemeError(TokensmithError):
    """Raised when the active theme selection names an unknown group or theme."""


class ResolutionError(TokensmithError):
    """Raised when resolution aborts (strict mode or an escalated diagnostic).

    ``diagnostics`` holds every diagnostic collected up to the abort, the
    triggering one last.
    """

    def __init__(self, message: str, *, paths: tuple[str, ...] = (), diagnostics=()) -> None:
        super().__init__(message)
        self.paths = tuple(paths)
        self.diagnostics = tuple(diagnostics)


class UnknownSetError(ResolutionError):
    """A selected token set name does not exist in the store."""


class CycleDetectedError(ResolutionError):
    """Token references form a cycle."""


class UnresolvedReferenceError(ResolutionError):
    """A reference placeholder names a path that cannot be resolved."""


class UnitMismatchError(ResolutionError):
    """An arithmetic expression combines incompatible units."""


class MalformedExpressionError(ResolutionError):
    """An arithmetic expression or reference cannot be parsed or evaluated."""
