"""Config version compatibility and structural completeness."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from ..models import Finding, Severity
from ..paths import last_segment

if TYPE_CHECKING:
    from ..engine import RuleContext

RULE_ID = "version-break"

Drift = Literal["breaking", "non-breaking", "patch", "none"]


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse ``major.minor.patch``; missing or non-numeric parts count as 0."""
    parts = version.strip().lstrip("vV").split(".")
    numbers = []
    for part in (parts + ["0", "0", "0"])[:3]:
        digits = ""
        for ch in part:
            if not ch.isdigit():
                break
            digits += ch
        numbers.append(int(digits) if digits else 0)
    return numbers[0], numbers[1], numbers[2]


def classify_drift(declared: str, current: str) -> Drift:
    if declared == current:
        return "none"
    d, c = parse_version(declared), parse_version(current)
    if d[0] != c[0]:
        return "breaking"
    if d[1] != c[1]:
        return "non-breaking"
    return "patch"


def evaluate(ctx: RuleContext) -> list[Finding]:
    results = []
    results.extend(check_version(ctx))
    results.extend(check_structure(ctx))
    return results


def _missing_required_fields(ctx: RuleContext) -> list[str]:
    declared = set()
    for _, f in ctx.config.iter_fields():
        if f.name:
            declared.add(f.name)
        if f.submit_field:
            declared.add(f.submit_field)
            declared.add(last_segment(f.submit_field))
    return [
        path
        for path in ctx.invariants.payload_schema.required
        if path not in declared and last_segment(path) not in declared
    ]


def check_version(ctx: RuleContext) -> list[Finding]:
    results = []
    metadata = ctx.config.metadata
    declared = metadata.version if metadata else None
    current = ctx.invariants.versioning.current_version

    if declared is None:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.INFO,
                title="Config declares no version",
                explanation=(
                    "metadata.version is not set, so compatibility with "
                    f"{'version ' + current if current else 'the current contract'} cannot be checked."
                ),
                json_paths=["metadata.version"],
                fix_guidance=[f'Add "version": "{current or "1.0.0"}" to metadata'],
            )
        )
        return results

    if current is None:
        return results

    drift = classify_drift(declared, current)
    if drift in ("none", "patch"):
        return results

    note = ctx.invariants.versioning.note_for("metadata.version")
    if drift == "breaking":
        explanation = (
            f"Config version {declared} differs from the current version {current} in its major "
            f"component. This is a breaking change: field names, payload paths or validation semantics "
            f"may no longer match."
        )
        missing = _missing_required_fields(ctx)
        if missing:
            explanation += f" Required payload fields not declared by this config: {', '.join(missing)}."
        for rule in ctx.invariants.versioning.breaking_rules:
            if rule.path != "metadata.version" and rule.note:
                explanation += f" {rule.path}: {rule.note}"
        if note:
            explanation += f" {note}"
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title=f"Breaking version change ({declared} -> {current})",
                explanation=explanation,
                json_paths=["metadata.version"] + [r.path for r in ctx.invariants.versioning.breaking_rules
                                                   if r.path != "metadata.version"],
                fix_guidance=[
                    f"Migrate the config to {current} and update metadata.version",
                    "Add fields for every required payload path listed above",
                    "Document the changes and update migration notes",
                ],
            )
        )
    else:
        explanation = (
            f"Config version {declared} differs from the current version {current} in its minor "
            f"component. This is a non-breaking change; new optional features may be unavailable."
        )
        if note:
            explanation += f" {note}"
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.INFO,
                title=f"Non-breaking version drift ({declared} -> {current})",
                explanation=explanation,
                json_paths=["metadata.version"],
                fix_guidance=[f'Update "version" to "{current}" after reviewing the changelog'],
            )
        )

    return results


def _structural(severity: Severity, title: str, explanation: str, path: str, fix: str) -> Finding:
    return Finding(
        rule=RULE_ID,
        severity=severity,
        title=title,
        explanation=explanation,
        json_paths=[path],
        fix_guidance=[fix],
    )


def check_structure(ctx: RuleContext) -> list[Finding]:
    """Missing id/metadata/steps/fields, reported rather than raised."""
    results = []
    raw = ctx.config.raw

    if ctx.config.id is None:
        results.append(
            _structural(
                Severity.ERROR,
                "Config missing id",
                "The config has no top-level id; it cannot be referenced or cached.",
                "id",
                'Add a unique "id", e.g. "id": "contact-form"',
            )
        )

    metadata = raw.get("metadata")
    if not isinstance(metadata, dict):
        results.append(
            _structural(
                Severity.WARNING,
                "Config missing metadata",
                "The config has no metadata block (title, version).",
                "metadata",
                'Add "metadata": { "title": "...", "version": "1.0.0" }',
            )
        )
    elif ctx.config.metadata is not None and ctx.config.metadata.title is None:
        results.append(
            _structural(
                Severity.INFO,
                "Config missing metadata.title",
                "metadata.title is not set; the form renders without a heading.",
                "metadata.title",
                'Add "title" to metadata',
            )
        )

    steps = raw.get("steps")
    if steps is None:
        results.append(
            _structural(Severity.ERROR, "Config missing steps", "The config declares no steps, so nothing renders.",
                        "steps", 'Add "steps": [{ "id": "step-1", "title": "...", "fields": [...] }]')
        )
        return results
    if not isinstance(steps, list):
        results.append(
            _structural(Severity.ERROR, "Config steps is not an array",
                        f"steps must be an array, got {type(steps).__name__}.", "steps",
                        "Wrap the step definitions in an array")
        )
        return results
    if not steps:
        results.append(
            _structural(Severity.ERROR, "Config has no steps", "steps is an empty array, so nothing renders.",
                        "steps", "Add at least one step with fields")
        )
        return results

    seen_ids: dict[str, int] = {}
    for index, step in enumerate(steps):
        ref = f"steps[{index}]"
        if not isinstance(step, dict):
            results.append(
                _structural(Severity.ERROR, f"Step {index} is not an object",
                            f"{ref} must be an object, got {type(step).__name__}.", ref,
                            "Replace the entry with a step object")
            )
            continue

        step_id = step.get("id")
        if not isinstance(step_id, str) or not step_id.strip():
            results.append(
                _structural(Severity.ERROR, f"Step {index} missing id",
                            f"{ref} has no id; navigation and step validation cannot address it.",
                            f"{ref}.id", f'Add "id": "step-{index + 1}"')
            )
        elif step_id in seen_ids:
            results.append(
                _structural(Severity.ERROR, f'Duplicate step id "{step_id}"',
                            f'{ref} reuses id "{step_id}" from steps[{seen_ids[step_id]}].',
                            f"{ref}.id", "Give every step a unique id")
            )
        else:
            seen_ids[step_id] = index
            ref = f"steps[id={step_id}]"

        fields = step.get("fields")
        if fields is None:
            results.append(
                _structural(Severity.ERROR, f"Step {step_id or index} missing fields",
                            f"{ref} declares no fields array.", f"{ref}.fields", 'Add "fields": [...]')
            )
        elif not isinstance(fields, list):
            results.append(
                _structural(Severity.ERROR, f"Step {step_id or index} fields is not an array",
                            f"{ref}.fields must be an array, got {type(fields).__name__}.", f"{ref}.fields",
                            "Wrap the field definitions in an array")
            )
        elif not fields:
            results.append(
                _structural(Severity.WARNING, f"Step {step_id or index} has no fields",
                            f"{ref}.fields is empty; the step renders blank.", f"{ref}.fields",
                            "Add fields or remove the step")
            )
        else:
            for field_index, entry in enumerate(fields):
                if isinstance(entry, dict):
                    continue
                entry_ref = f"{ref}.fields[{field_index}]"
                results.append(
                    _structural(Severity.ERROR, f"Step {step_id or index} field {field_index} is not an object",
                                f"{entry_ref} must be a field object, got {type(entry).__name__}; "
                                "it is ignored by every other check.", entry_ref,
                                'Replace the entry with { "name": "...", "type": "...", "label": "..." }')
                )

    return results
