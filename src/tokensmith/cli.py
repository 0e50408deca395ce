"""Click CLI entry point for tokensmith."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from tokensmith import __version__
from tokensmith.diagnostics import DiagnosticPolicy, parse_code_list
from tokensmith.engine import resolve_document
from tokensmith.errors import TokensmithError
from tokensmith.manifest import build_manifest
from tokensmith.models import ResolutionResult
from tokensmith.parser import load_token_document
from tokensmith.serializers import render


def _build_policy(warn_as_error: str | None, suppress_warning: str | None) -> DiagnosticPolicy:
    """Parse CLI diagnostic options into a DiagnosticPolicy."""
    try:
        wae = parse_code_list(warn_as_error) if warn_as_error else frozenset()
        sup = parse_code_list(suppress_warning) if suppress_warning else frozenset()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return DiagnosticPolicy(warn_as_error=wae, suppress=sup)


def _split_list(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_themes(raw: tuple[str, ...]) -> dict[str, str] | None:
    """``GROUP=ID`` pairs, in the order given (merge order of the groups)."""
    if not raw:
        return None
    selection: dict[str, str] = {}
    for item in raw:
        group, sep, theme_id = item.partition("=")
        if not sep or not group.strip() or not theme_id.strip():
            raise click.UsageError(f"--theme expects GROUP=ID, got {item!r}")
        selection[group.strip()] = theme_id.strip()
    return selection


def _echo_diagnostics(result: ResolutionResult) -> None:
    for diagnostic in result.diagnostics:
        click.echo(f"warning {diagnostic.message}", err=True)


def _write_output(text: str, destination: str) -> Path | None:
    """Write output either to a file path or stdout ('-')."""
    if destination == "-":
        click.echo(text, nl=False)
        return None
    output_path = Path(destination)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot write output to {output_path}: {e}") from e
    return output_path


def _resolve_reference_mode(raw: str) -> str:
    return {"true": "math", "false": "off"}.get(raw, raw)


@click.group()
@click.version_option(version=__version__, prog_name="tokensmith")
def main() -> None:
    """tokensmith - resolve design-token sets into flat, literal values."""


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.argument("output", type=str)
@click.argument("sets", required=False, default=None)
@click.argument("excludes", required=False, default=None)
@click.option("--expand-typography", is_flag=True, default=False, help="Expand typography tokens.")
@click.option("--expand-shadow", is_flag=True, default=False, help="Expand boxShadow tokens.")
@click.option("--expand-border", is_flag=True, default=False, help="Expand border tokens.")
@click.option(
    "--expand-composition", is_flag=True, default=False, help="Expand composition tokens."
)
@click.option(
    "--resolve-references",
    type=click.Choice(["off", "aliases", "math", "true", "false"]),
    default="math",
    show_default=True,
    help="Reference resolution mode.",
)
@click.option(
    "--preserve-raw-value",
    is_flag=True,
    default=False,
    help="Keep each token's unresolved value next to the resolved one.",
)
@click.option(
    "--throw-error-when-not-resolved",
    "strict",
    is_flag=True,
    default=False,
    help="Abort on the first unresolved reference, cycle, unit mismatch or unknown set.",
)
@click.option(
    "--theme",
    "themes",
    multiple=True,
    help=(
        "Activate theme ID for GROUP, as GROUP=ID. Repeat per group; "
        "later groups override earlier ones."
    ),
)
@click.option(
    "--exclude-tag",
    "exclude_tags",
    multiple=True,
    help="Drop tokens carrying this tag from the output. May be repeated.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "flat", "css", "ts"]),
    default="json",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--warn-as-error",
    "warn_as_error",
    type=str,
    default=None,
    help="Comma-separated T-codes to treat as errors (e.g. T01,T03).",
)
@click.option(
    "--suppress-warning",
    "suppress_warning",
    type=str,
    default=None,
    help="Comma-separated T-codes to suppress (e.g. T03).",
)
@click.option(
    "--emit-manifest",
    "emit_manifest",
    type=click.Path(path_type=Path),
    default=None,
    help="Write a JSON build manifest to this path after a successful transform.",
)
def transform(
    input_file: Path,
    output: str,
    sets: str | None = None,
    excludes: str | None = None,
    expand_typography: bool = False,
    expand_shadow: bool = False,
    expand_border: bool = False,
    expand_composition: bool = False,
    resolve_references: str = "math",
    preserve_raw_value: bool = False,
    strict: bool = False,
    themes: tuple[str, ...] = (),
    exclude_tags: tuple[str, ...] = (),
    output_format: str = "json",
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
    emit_manifest: Path | None = None,
) -> None:
    """Resolve INPUT_FILE and write the result to OUTPUT ('-' for stdout).

    SETS and EXCLUDES are comma-separated set names: SETS gives the merge
    order, EXCLUDES are sets used for resolution but left out of the output.
    """
    policy = _build_policy(warn_as_error, suppress_warning)
    set_names = _split_list(sets)
    active_themes = _parse_themes(themes)
    if set_names is not None and active_themes is not None:
        raise click.UsageError("SETS and --theme are mutually exclusive")

    options = {
        "expandTypography": expand_typography,
        "expandShadow": expand_shadow,
        "expandBorder": expand_border,
        "expandComposition": expand_composition,
        "resolveReferences": _resolve_reference_mode(resolve_references),
        "preserveRawValue": preserve_raw_value,
        "throwErrorWhenNotResolved": strict,
        "excludeSets": frozenset(_split_list(excludes) or ()),
        "excludeTags": frozenset(exclude_tags),
    }

    try:
        document = load_token_document(input_file)
        result = resolve_document(
            document,
            set_names=set_names,
            active_themes=active_themes,
            options=options,
            policy=policy,
            emit_warnings=False,
        )
    except TokensmithError as e:
        raise click.ClickException(str(e))

    _echo_diagnostics(result)
    text = render(result, output_format, include_raw=preserve_raw_value)
    output_path = _write_output(text, output)

    if emit_manifest is not None:
        manifest = build_manifest(
            input_path=input_file,
            output_path=output_path,
            result=result,
            command_args=sys.argv[1:],
        )
        emit_manifest.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    if output_path is not None:
        click.echo(f"Transformed: {output_path} ({len(result)} tokens)", err=True)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.argument("sets", required=False, default=None)
@click.option(
    "--theme",
    "themes",
    multiple=True,
    help="Activate theme ID for GROUP, as GROUP=ID. May be repeated.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Diagnostics output format.",
)
def check(
    input_file: Path,
    sets: str | None = None,
    themes: tuple[str, ...] = (),
    output_format: str = "text",
) -> None:
    """Resolve INPUT_FILE without writing output; exit 1 on any diagnostic."""
    set_names = _split_list(sets)
    active_themes = _parse_themes(themes)
    if set_names is not None and active_themes is not None:
        raise click.UsageError("SETS and --theme are mutually exclusive")

    try:
        document = load_token_document(input_file)
        result = resolve_document(
            document,
            set_names=set_names,
            active_themes=active_themes,
            emit_warnings=False,
        )
    except TokensmithError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        payload = {
            "tokens": len(result),
            "diagnostics": [d.to_dict() for d in result.diagnostics],
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        for diagnostic in result.diagnostics:
            click.echo(f"{diagnostic.kind}: {diagnostic.message}")
        click.echo(f"{len(result)} tokens, {len(result.diagnostics)} diagnostics")

    if result.diagnostics:
        raise click.exceptions.Exit(1)
