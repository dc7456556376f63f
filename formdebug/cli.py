"""CLI entrypoint for formdebug."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .errors import FormDebugError


class DebuggerUsageError(click.ClickException):
    """Load/configuration failure; distinct from findings (exit 1)."""

    exit_code = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_settings(settings_path: Path | None, start: Path):
    from .settings import resolve_settings

    try:
        return resolve_settings(settings_path, start)
    except FormDebugError as exc:
        raise DebuggerUsageError(str(exc)) from exc


_existing_file = click.Path(exists=True, dir_okay=False, path_type=Path)
_config_file = click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path)


@click.group()
@click.version_option(__version__, prog_name="formdebug")
def cli() -> None:
    """formdebug - Static analyzer for declarative form configurations.

    Reports impossible values, hidden required fields, broken field references,
    payload schema drift and version breaks.
    """


@cli.command()
@click.argument("config_path", metavar="[CONFIG]", type=_config_file, required=False, default="-")
@click.option(
    "--state",
    "state_path",
    type=_existing_file,
    default=None,
    help="State snapshot ({values, visibility}) or examples file ({states: [...]})",
)
@click.option(
    "--invariants",
    "invariants_path",
    type=_existing_file,
    default=None,
    help="Invariants file (payload schema and versioning)",
)
@click.option(
    "--rule",
    "only_rules",
    multiple=True,
    metavar="RULE_ID",
    help="Only run this rule (repeatable)",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output findings as a JSON array",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the JSON findings array to this file",
)
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default=None,
    help="Exit with error if this level or higher found (default: error)",
)
@click.option(
    "--settings",
    "settings_path",
    type=_existing_file,
    default=None,
    help="Settings file (defaults to auto-detected formdebug.toml / [tool.formdebug])",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def run(
    config_path: Path,
    state_path: Path | None,
    invariants_path: Path | None,
    only_rules: tuple[str, ...],
    output_json: bool,
    output_path: Path | None,
    fail_on: str | None,
    settings_path: Path | None,
    verbose: bool,
) -> None:
    """Analyze a form config and report findings.

    Reads a JSON config from stdin when CONFIG is omitted or "-".
    Exits 0 when nothing at or above --fail-on was found, 1 otherwise,
    and 2 when an input could not be loaded.

    Examples:

        formdebug run forms/contact.json

        formdebug run forms/contact.json --state examples.json --invariants invariants.json

        run-debugger forms/contact.json --json --output debugger-results.json

        cat forms/contact.json | formdebug run --json
    """
    from .commands.run import run_debug

    _configure_logging(verbose)
    start = Path.cwd() if str(config_path) == "-" else config_path
    settings = _load_settings(settings_path, start)

    try:
        exit_code = run_debug(
            config_path,
            settings,
            state_path=state_path,
            invariants_path=invariants_path,
            only_rules=only_rules,
            output_json=output_json,
            output_path=output_path,
            fail_on=fail_on,
        )
    except FormDebugError as exc:
        raise DebuggerUsageError(str(exc)) from exc
    sys.exit(exit_code)


@cli.command()
@click.argument("rule_id")
def explain(rule_id: str) -> None:
    """Explain a rule and exit (e.g. formdebug explain required-hidden)."""
    from .commands.run import run_explain

    sys.exit(run_explain(rule_id))


@cli.command()
@click.argument("config_paths", metavar="CONFIG...", nargs=-1, required=True, type=_existing_file)
@click.option(
    "--invariants",
    "invariants_path",
    type=_existing_file,
    default=None,
    help="Invariants file (payload schema and versioning)",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("summary.md"),
    show_default=True,
    help="Markdown file to write",
)
@click.option(
    "--settings",
    "settings_path",
    type=_existing_file,
    default=None,
    help="Settings file (defaults to auto-detected formdebug.toml / [tool.formdebug])",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def summary(
    config_paths: tuple[Path, ...],
    invariants_path: Path | None,
    output_path: Path,
    settings_path: Path | None,
    verbose: bool,
) -> None:
    """Write a markdown summary for several configs (for CI comments).

    Always exits 0 so the summary can be posted even when configs fail.
    """
    from .commands.summary import run_summary

    _configure_logging(verbose)
    settings = _load_settings(settings_path, config_paths[0])

    try:
        exit_code = run_summary(list(config_paths), settings, invariants_path=invariants_path, output_path=output_path)
    except FormDebugError as exc:
        raise DebuggerUsageError(str(exc)) from exc
    sys.exit(exit_code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
