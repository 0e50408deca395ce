"""Set merging: fold the ordered set plan into one raw token mapping."""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from tokensmith.models import MergedToken, SelectedSet, TokenDefinition


def merge_sets(
    token_sets: Mapping[str, Mapping[str, TokenDefinition]],
    selected: Sequence[SelectedSet],
) -> Mapping[str, MergedToken]:
    """Merge sets in order; a later set replaces the whole record for a path.

    Paths keep the position of their first definition. ``exporting_sets``
    lists every exportable set that defines the path, so a SOURCE override of an
    ENABLED definition stays exportable.

    Raw values are deep-copied; the input store is never shared with the result.
    """
    merged: dict[str, MergedToken] = {}
    for entry in selected:
        for path, token in token_sets[entry.name].items():
            previous = merged.get(path)
            exporting = previous.exporting_sets if previous is not None else ()
            if entry.exportable and entry.name not in exporting:
                exporting = exporting + (entry.name,)
            merged[path] = MergedToken(
                path=path,
                type=token.type,
                value=copy.deepcopy(token.value),
                set_name=entry.name,
                exporting_sets=exporting,
                description=token.description,
                tags=token.tags,
            )
    return MappingProxyType(merged)
