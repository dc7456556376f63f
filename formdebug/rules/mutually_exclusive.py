"""Mutually exclusive fields, broken field references and duplicate names."""

from __future__ import annotations

import json
from collections import defaultdict
from typing import TYPE_CHECKING

from ..models import Finding, Severity

if TYPE_CHECKING:
    from ..engine import RuleContext

RULE_ID = "mutually-exclusive"


def evaluate(ctx: RuleContext) -> list[Finding]:
    results = []
    results.extend(check_exclusive_values(ctx))
    results.extend(check_visibility_collisions(ctx))
    results.extend(check_broken_references(ctx))
    results.extend(check_duplicate_names(ctx))
    return results


def check_exclusive_values(ctx: RuleContext) -> list[Finding]:
    """Both fields of an exclusive pair are true at the same time."""
    results = []
    values = ctx.state.values

    for first, second in ctx.settings.exclusive_pairs:
        a = values.get(first)
        b = values.get(second)
        if a is True and b is True:
            results.append(
                Finding(
                    rule=RULE_ID,
                    severity=Severity.WARNING,
                    title="Mutually exclusive conditions active together",
                    explanation=(
                        f'Fields "{first}" and "{second}" are both true, which represents a logical '
                        f"contradiction. The user cannot hold both choices at once. This likely indicates "
                        f"missing validation rules or UI controls to enforce mutual exclusivity. Current "
                        f"state: {first}=true, {second}=true."
                    ),
                    json_paths=[f"steps[].fields[name={first}]", f"steps[].fields[name={second}]"],
                    reproducer_state=values,
                    fix_guidance=[
                        "Use a radio button group instead of two separate checkboxes to enforce a single selection",
                        f'Add a validation rule: "if {first} is true, {second} must be false (and vice versa)"',
                        f'Use one enum field with values ["{first}", "{second}", "no-change"] instead of two booleans',
                        f'Add cross-field validation: {{ "rule": "mutuallyExclusive", "fields": ["{first}", "{second}"] }}',
                    ],
                )
            )

    return results


def check_visibility_collisions(ctx: RuleContext) -> list[Finding]:
    """Exclusive fields shown by the same trigger value."""
    results = []

    # trigger field -> [(dependent name, comparison value, path)]
    triggers: dict[str, list[tuple[str, object, str]]] = defaultdict(list)
    for step, f in ctx.config.iter_fields():
        if f.name and f.show_if and f.show_if.field:
            triggers[f.show_if.field].append((f.name, f.show_if.value, step.field_path(f.name, "showIf")))

    for trigger, dependents in triggers.items():
        if len(dependents) < 2:
            continue

        groups: dict[str, list[tuple[str, str]]] = defaultdict(list)
        for name, value, path in dependents:
            groups[json.dumps(value, sort_keys=True, default=str)].append((name, path))

        for key, members in groups.items():
            if len(members) < 2:
                continue
            names = [name for name, _ in members]
            for first, second in ctx.settings.exclusive_pairs:
                if first not in names or second not in names:
                    continue
                results.append(
                    Finding(
                        rule=RULE_ID,
                        severity=Severity.WARNING,
                        title="Potentially conflicting conditional fields",
                        explanation=(
                            f'Multiple fields ({", ".join(names)}) become visible when "{trigger}" = {key}. '
                            f'"{first}" and "{second}" represent opposite user intents, so they should not '
                            f"both be showable at the same time."
                        ),
                        json_paths=[path for _, path in members],
                        reproducer_state=ctx.state.values,
                        fix_guidance=[
                            f'Use different trigger values: show "{first}" when {trigger}="yes" and '
                            f'"{second}" when {trigger}="no"',
                            "Consider a single select/radio field instead of multiple conditional fields",
                        ],
                    )
                )

    return results


def check_broken_references(ctx: RuleContext) -> list[Finding]:
    """showIf.field and dependency.parent must name a sibling field in the same step."""
    results = []

    for step in ctx.config.steps:
        siblings = step.field_names
        for f in step.fields:
            refs: list[tuple[str, str]] = []
            if f.dependency and f.dependency.parent:
                refs.append(("dependency.parent", f.dependency.parent))
            if f.show_if:
                for name in f.show_if.referenced_fields():
                    refs.append(("showIf.field", name))

            for prop, target in refs:
                if target == f.name:
                    results.append(
                        Finding(
                            rule=RULE_ID,
                            severity=Severity.ERROR,
                            title=f'Field "{f.name}" references itself in {prop}',
                            explanation=(
                                f'Field "{f.name}" uses itself as {prop}. A field cannot be conditioned on '
                                f"or depend on its own value; it will never change state as intended."
                            ),
                            json_paths=[step.field_path(f.name, prop)],
                            fix_guidance=[f"Point {prop} at the field that should control \"{f.name}\""],
                        )
                    )
                    continue
                if target in siblings:
                    continue

                elsewhere = [
                    other.ref for other in ctx.config.steps if other is not step and target in other.field_names
                ]
                location = (
                    f" It exists in {', '.join(elsewhere)}, but cross-step references are not supported."
                    if elsewhere
                    else ""
                )
                results.append(
                    Finding(
                        rule=RULE_ID,
                        severity=Severity.ERROR,
                        title=f'Field "{f.name}" references missing field "{target}"',
                        explanation=(
                            f'Field "{f.name}" declares {prop}="{target}" but no field named "{target}" '
                            f'exists in step "{step.id or step.index}".{location} The dependent field can '
                            f"never function."
                        ),
                        json_paths=[step.field_path(f.name, prop)],
                        fix_guidance=[
                            f'Add a field named "{target}" to the same step',
                            f"Or change {prop} to one of: {', '.join(sorted(siblings - {f.name})) or '(no other fields)'}",
                            f"Or remove {prop} from \"{f.name}\"",
                        ],
                    )
                )

    return results


def check_duplicate_names(ctx: RuleContext) -> list[Finding]:
    """Duplicate field names within one step overwrite each other's state."""
    results = []

    for step in ctx.config.steps:
        positions: dict[str, list[int]] = defaultdict(list)
        for f in step.fields:
            if f.name:
                positions[f.name].append(f.index)

        duplicates = {name: idx for name, idx in positions.items() if len(idx) > 1}
        if not duplicates:
            continue

        paths = [f"{step.ref}.fields[{i}][name={name}]" for name, idx in duplicates.items() for i in idx]
        names = ", ".join(f'"{name}" (x{len(idx)})' for name, idx in duplicates.items())
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title=f'Duplicate field names in step "{step.id or step.index}"',
                explanation=(
                    f"Step \"{step.id or step.index}\" declares {names} more than once. Fields share "
                    f"state by name, so the duplicates overwrite each other and corrupt form state."
                ),
                json_paths=paths,
                fix_guidance=[
                    "Rename the duplicates so every field name in the step is unique",
                    "If the same value is captured twice, remove the redundant field",
                ],
            )
        )

    return results
