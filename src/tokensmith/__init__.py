"""tokensmith: design-token set merging, alias resolution and composite expansion."""

__version__ = "0.1.0"

from tokensmith.engine import resolve_document, resolve_tokens  # noqa: E402
from tokensmith.models import ResolutionResult, ResolveOptions  # noqa: E402
from tokensmith.parser import load_token_document  # noqa: E402

__all__ = [
    "__version__",
    "load_token_document",
    "resolve_document",
    "resolve_tokens",
    "ResolutionResult",
    "ResolveOptions",
]
