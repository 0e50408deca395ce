"""Build manifest for a tokensmith transform run."""

from __future__ import annotations

import hashlib
import sys
from datetime import datetime, timezone
from pathlib import Path

from tokensmith import __version__
from tokensmith.models import ResolutionResult


def _sha256_of_file(path: Path) -> str:
    """Return the hex SHA-256 digest of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            chunk = f.read(65536)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def build_manifest(
    *,
    input_path: Path,
    output_path: Path | None,
    result: ResolutionResult,
    command_args: list[str] | None = None,
) -> dict:
    """Build a manifest dict describing a transform run.

    Should be called *after* the output file has been written; ``output_path``
    is None when output went to stdout.
    """
    manifest: dict = {
        "manifest_version": 1,
        "tool": {
            "name": "tokensmith",
            "version": __version__,
            "python": sys.version.split()[0],
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "input": {
            "path": str(input_path),
            "sha256": _sha256_of_file(input_path),
        },
        "sets": [{"name": s.name, "exportable": s.exportable} for s in result.sets],
        "token_count": len(result),
        "diagnostics": [d.to_dict() for d in result.diagnostics],
    }

    if output_path is not None and output_path.exists():
        manifest["output"] = {
            "path": str(output_path),
            "sha256": _sha256_of_file(output_path),
        }

    if command_args is not None:
        manifest["command_args"] = command_args

    return manifest
