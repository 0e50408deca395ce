"""Theme selection: active themes or an explicit set list -> ordered merge plan."""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence

from tokensmith.diagnostics import UNKNOWN_SET, DiagnosticCollector
from tokensmith.errors import ThemeError
from tokensmith.models import SelectedSet, SetStatus, ThemeDefinition


def select_explicit_sets(
    set_names: Sequence[str],
    available: Collection[str],
    collector: DiagnosticCollector,
) -> list[SelectedSet]:
    """Use ``set_names`` in exactly the given order; every listed set is exportable.

    Unknown names are reported as ``unknown-set`` and skipped.
    """
    selected: list[SelectedSet] = []
    for name in set_names:
        if name not in available:
            collector.emit(UNKNOWN_SET, (name,), f"Token set {name!r} not found")
            continue
        selected.append(SelectedSet(name=name, exportable=True))
    return selected


def find_theme(themes: Sequence[ThemeDefinition], group: str, theme_ref: str) -> ThemeDefinition:
    for theme in themes:
        if theme.group_key == group and theme.matches(theme_ref):
            return theme
    groups = sorted({t.group_key for t in themes})
    if group not in groups:
        raise ThemeError(f"Unknown theme group {group!r} (known: {groups})")
    raise ThemeError(f"Unknown theme {theme_ref!r} in group {group!r}")


def combine_statuses(active: Sequence[ThemeDefinition]) -> dict[str, SetStatus]:
    """Combine set statuses across active themes, ENABLED > SOURCE > DISABLED.

    Key order is the order in which each set first appears, walking themes in
    the given (merge) order and each theme's own set order.
    """
    statuses: dict[str, SetStatus] = {}
    for theme in active:
        for set_name, status in theme.selected_token_sets.items():
            previous = statuses.get(set_name)
            statuses[set_name] = status if previous is None else previous.combine(status)
    return statuses


def select_theme_sets(
    themes: Sequence[ThemeDefinition],
    active_themes: Mapping[str, str],
    available: Collection[str],
    collector: DiagnosticCollector,
) -> list[SelectedSet]:
    """Resolve ``{group: theme id or name}`` into the ordered merge plan.

    ``active_themes`` iteration order is the merge order: sets first
    contributed by a later group override earlier ones. DISABLED
    sets are dropped; SOURCE sets are merged but not exportable.

    Raises:
        ThemeError: If a group or theme in the selection does not exist.
    """
    active = [find_theme(themes, group, ref) for group, ref in active_themes.items()]

    selected: list[SelectedSet] = []
    for set_name, status in combine_statuses(active).items():
        if status is SetStatus.DISABLED:
            continue
        if set_name not in available:
            collector.emit(
                UNKNOWN_SET, (set_name,), f"Token set {set_name!r} selected by theme not found"
            )
            continue
        selected.append(SelectedSet(name=set_name, exportable=status is SetStatus.ENABLED))
    return selected


def select_all_sets(set_order: Sequence[str], available: Collection[str]) -> list[SelectedSet]:
    """Default plan when neither sets nor themes are given: every set, in order."""
    ordered = [name for name in set_order if name in available]
    ordered += [name for name in available if name not in ordered]
    return [SelectedSet(name=name, exportable=True) for name in ordered]
