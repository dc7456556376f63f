"""Run and explain command implementations."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

from ..engine import run_debugger, select_rules
from ..formatter import count_by_severity, findings_to_json, format_summary, print_findings, print_rule_table
from ..loader import STDIN, load_form_config, load_invariants, load_states
from ..rules import RULE_EXPLANATIONS, get_rule_ids
from ..settings import Settings

logger = logging.getLogger(__name__)


def exit_code_for(counts: dict[str, int], fail_on: str) -> int:
    """0 = success, 1 = findings at or above the fail-on level."""
    if fail_on == "warning":
        if counts["error"] > 0 or counts["warning"] > 0:
            return 1
    elif counts["error"] > 0:
        return 1
    return 0


def run_debug(
    config_path: Path,
    settings: Settings,
    *,
    state_path: Path | None = None,
    invariants_path: Path | None = None,
    only_rules: tuple[str, ...] = (),
    output_json: bool = False,
    output_path: Path | None = None,
    fail_on: str | None = None,
) -> int:
    """Analyze one form config.

    Args:
        config_path: Form config (JSON/YAML/TOML), or "-" to read JSON from stdin
        settings: Resolved project settings
        state_path: Optional state snapshot or examples file
        invariants_path: Optional invariants file (overrides settings)
        only_rules: Restrict to these rule ids
        output_json: Print findings as a JSON array instead of human-readable
        output_path: Also write the JSON findings array to this file
        fail_on: "error" or "warning" (overrides settings)

    Returns:
        Exit code (0 = success, 1 = failures found)
    """
    console = Console(stderr=True)
    out = Console()

    from_stdin = str(config_path) == STDIN
    source_name = "<stdin>" if from_stdin else config_path.name
    console.print(f"Loading form config from {source_name if from_stdin else config_path}...", style="dim")
    config = load_form_config(config_path)
    states = load_states(state_path, config)
    invariants = load_invariants(invariants_path or settings.invariants)
    rules = select_rules(only_rules or None, settings.disabled_rules)

    logger.info("Running %d rule(s) over %d state(s)", len(rules), len(states))
    findings = run_debugger(config, states, invariants, settings=settings.rules, rules=rules)
    counts = count_by_severity(findings)

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(findings_to_json(findings) + "\n", encoding="utf-8")
        console.print(f"Wrote JSON findings to: {output_path}", style="dim")

    if output_json:
        print(findings_to_json(findings))
    else:
        title = config.metadata.title if config.metadata and config.metadata.title else source_name
        print_findings(out, findings, title=f"Form: {title}")
        if findings:
            out.print()
            print_rule_table(out, findings)
        out.print()
        out.print(format_summary(findings), markup=False, highlight=False)

    return exit_code_for(counts, fail_on or settings.fail_on)


def run_explain(rule_id: str) -> int:
    """Print documentation for one rule."""
    console = Console()

    info = RULE_EXPLANATIONS.get(rule_id)
    if info is None:
        console.print(f"Unknown rule: {rule_id}", style="bold red")
        console.print(f"Available: {', '.join(get_rule_ids())}", style="dim")
        return 1

    console.print(f"{info['name']} ({rule_id})", style="bold")
    console.print()
    console.print("Checks:", style="bold")
    for check in info["checks"]:
        console.print(f"  - {check}", markup=False)
    console.print()
    console.print("Why it matters:", style="bold")
    console.print(f"  {info['why']}", markup=False)
    console.print()
    console.print("How to fix:", style="bold")
    for fix in info["fix"]:
        console.print(f"  - {fix}", markup=False)
    return 0
