"""Reference placeholder syntax: ``{dotted.path}`` inside token values."""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping

REFERENCE_RE = re.compile(r"\{([^{}\s]+)\}")

MISSING = object()


def find_references(value: object) -> list[str]:
    """Referenced paths in a (possibly composite) value, first-occurrence order."""
    found: list[str] = []
    pending = [value]
    while pending:
        current = pending.pop()
        if isinstance(current, str):
            for ref in REFERENCE_RE.findall(current):
                if ref not in found:
                    found.append(ref)
        elif isinstance(current, Mapping):
            pending.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            pending.extend(reversed(current))
    return found


def has_references(value: object) -> bool:
    return bool(find_references(value))


def whole_reference(text: str) -> str | None:
    """Return the path if ``text`` is exactly one placeholder, else None."""
    m = REFERENCE_RE.fullmatch(text.strip())
    return m.group(1) if m else None


def owner_of(ref: str, known: Collection[str]) -> str | None:
    """Token path that owns ``ref``.

    An exact match wins; otherwise the longest dotted prefix naming a token is
    the owner, with the rest addressing a sub-property of its value.
    """
    if ref in known:
        return ref
    parts = ref.split(".")
    for i in range(len(parts) - 1, 0, -1):
        prefix = ".".join(parts[:i])
        if prefix in known:
            return prefix
    return None


def lookup_subvalue(value: object, subpath: str) -> object:
    """Walk ``a.b.0`` style ``subpath`` into a resolved value; MISSING if absent."""
    current = value
    for part in subpath.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return MISSING
    return current
