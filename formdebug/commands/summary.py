"""Markdown summary across several form configs (CI comment body)."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

from ..engine import run_debugger, select_rules
from ..errors import DocumentLoadError
from ..formatter import ConfigReport, render_markdown_summary
from ..loader import load_form_config, load_invariants, load_states
from ..settings import Settings

logger = logging.getLogger(__name__)


def build_reports(config_paths: list[Path], settings: Settings, invariants_path: Path | None = None) -> list[ConfigReport]:
    invariants = load_invariants(invariants_path or settings.invariants)
    rules = select_rules(None, settings.disabled_rules)

    reports = []
    for path in config_paths:
        try:
            config = load_form_config(path)
        except DocumentLoadError as exc:
            logger.warning("Skipping %s: %s", path, exc.reason)
            reports.append(ConfigReport(name=path.stem, error=exc.reason))
            continue
        findings = run_debugger(config, load_states(None, config), invariants, settings=settings.rules, rules=rules)
        reports.append(ConfigReport(name=path.stem, findings=findings))
    return reports


def run_summary(
    config_paths: list[Path],
    settings: Settings,
    *,
    invariants_path: Path | None = None,
    output_path: Path = Path("summary.md"),
) -> int:
    """Write the markdown summary. Always succeeds so CI can post the comment."""
    console = Console(stderr=True)

    reports = build_reports(config_paths, settings, invariants_path)
    markdown = render_markdown_summary(reports)
    output_path.write_text(markdown, encoding="utf-8")

    console.print(f"Wrote summary for {len(reports)} config(s) to {output_path}", style="dim")
    return 0
