"""Rendering of findings: plain text, rich console, JSON and markdown."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field

from rich.console import Console
from rich.table import Table

from .models import Finding, Severity

SEVERITY_STYLES = {
    Severity.ERROR: ("ERROR", "bold red"),
    Severity.WARNING: ("WARN", "yellow"),
    Severity.INFO: ("INFO", "dim"),
}


def count_by_severity(findings: list[Finding]) -> dict[str, int]:
    counts = Counter(f.severity.value for f in findings)
    return {s.value: counts.get(s.value, 0) for s in Severity}


def format_summary(findings: list[Finding]) -> str:
    counts = count_by_severity(findings)
    return f"Debugger Summary: errors={counts['error']}, warnings={counts['warning']}, info={counts['info']}"


def findings_to_json(findings: list[Finding]) -> str:
    return json.dumps([f.to_dict() for f in findings], indent=2, default=str)


def print_findings(console: Console, findings: list[Finding], *, title: str | None = None) -> None:
    """Print findings grouped by severity (errors first), keeping emission order within a group."""
    if title:
        console.print(title, style="bold")

    for severity in sorted(Severity):
        group = [f for f in findings if f.severity == severity]
        if not group:
            continue
        prefix, style = SEVERITY_STYLES[severity]
        console.print()
        console.print(f"{prefix} ({len(group)})", style=style)
        for f in group:
            console.print(f"\n  [{f.rule}] {f.title}", style=style, markup=False, highlight=False)
            console.print(f"    Reason: {f.explanation}", markup=False, highlight=False)
            if f.json_paths:
                console.print(f"    Paths: {', '.join(f.json_paths)}", style="cyan", markup=False, highlight=False)
            if f.reproducer_state:
                console.print(
                    f"    Reproducer: {json.dumps(f.reproducer_state, sort_keys=True, default=str)}",
                    style="dim",
                    markup=False,
                    highlight=False,
                )
            if f.fix_guidance:
                console.print("    Fix Guidance:", style="bold")
                for i, g in enumerate(f.fix_guidance, start=1):
                    console.print(f"      {i}. {g}", markup=False, highlight=False)

    counts = count_by_severity(findings)
    console.print()
    if counts["error"] > 0:
        console.print(f"❌ {counts['error']} error(s)", style="bold red")
    if counts["warning"] > 0:
        console.print(f"⚠️  {counts['warning']} warning(s)", style="yellow")
    if counts["info"] > 0:
        console.print(f"ℹ️  {counts['info']} info(s)", style="dim")
    if counts["error"] == 0 and counts["warning"] == 0:
        console.print("✅ No errors or warnings", style="bold green")


def print_rule_table(console: Console, findings: list[Finding]) -> None:
    """Per-rule count table."""
    table = Table(title="Findings by Rule")
    table.add_column("Rule", style="cyan")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")
    table.add_column("Info", justify="right")

    by_rule: dict[str, list[Finding]] = {}
    for f in findings:
        by_rule.setdefault(f.rule, []).append(f)
    for rule_id, group in by_rule.items():
        counts = count_by_severity(group)
        table.add_row(rule_id, str(counts["error"]), str(counts["warning"]), str(counts["info"]))

    console.print(table)


def status_label(counts: dict[str, int]) -> str:
    if counts["error"] > 0:
        return "❌ Failed"
    if counts["warning"] > 0:
        return "⚠️ Warnings"
    return "✅ Passed"


@dataclass
class ConfigReport:
    """Findings for one config, as shown in the markdown summary."""

    name: str
    findings: list[Finding] = field(default_factory=list)
    error: str | None = None  # load failure, if the config could not be analyzed


def _detail_block(name: str, finding: Finding, label: str) -> list[str]:
    lines = [f"📄 {name}", f"**{finding.title}**", "", f"Reason: {finding.explanation}", ""]
    lines.append(f"Location: {', '.join(finding.json_paths) or 'N/A'}")
    lines.append("")
    lines.append(f"{label}:")
    lines.append("")
    lines.extend(f"- {g}" for g in finding.fix_guidance)
    lines.append("")
    return lines


def render_markdown_summary(reports: list[ConfigReport]) -> str:
    """Markdown summary across several configs (for CI comments)."""
    md = ["## Debugger Summary", "", "| Config | Errors | Warnings | Info | Status |", "|---|---|---|---|---|"]
    for report in reports:
        if report.error:
            md.append(f"| {report.name} | - | - | - | 💥 Not analyzed |")
            continue
        counts = count_by_severity(report.findings)
        md.append(
            f"| {report.name} | {counts['error']} | {counts['warning']} | {counts['info']} | {status_label(counts)} |"
        )

    sections = [
        (Severity.ERROR, "### ❌ Errors (Must Fix)", "Fix"),
        (Severity.WARNING, "### ⚠️ Warnings (Should Review)", "Fix"),
        (Severity.INFO, "### 💡 Info & Suggestions (Optional Improvements)", "Suggestions"),
    ]
    for severity, heading, label in sections:
        block: list[str] = []
        for report in reports:
            for f in report.findings:
                if f.severity == severity:
                    block.extend(_detail_block(report.name, f, label))
        if block:
            md.extend(["", heading, ""])
            md.extend(block)

    failed = [r for r in reports if r.error]
    if failed:
        md.extend(["", "### 💥 Configs that could not be analyzed", ""])
        md.extend(f"- {r.name}: {r.error}" for r in failed)

    return "\n".join(md).rstrip() + "\n"
