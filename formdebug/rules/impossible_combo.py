"""Impossible values and validation rules that contradict the field type."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..models import FieldDefinition, Finding, Severity, StepConfig
from ..paths import describe, is_blank

if TYPE_CHECKING:
    from ..engine import RuleContext

RULE_ID = "impossible-combo"

# Field names treated as an age for the consent cross-check
AGE_NAME = re.compile(r"^([Aa]ge|.*_age|.*[a-z]Age)$")


def evaluate(ctx: RuleContext) -> list[Finding]:
    results = []
    results.extend(check_range_violations(ctx))
    results.extend(check_opt_out_contradictions(ctx))
    for step, f in ctx.config.iter_fields():
        results.extend(check_field_schema(step, f))
    return results


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_range_violations(ctx: RuleContext) -> list[Finding]:
    """Numeric values outside their field's declared min/max."""
    results = []
    values = ctx.state.values

    for step, f in ctx.config.iter_fields():
        if not f.name:
            continue
        is_age = bool(AGE_NAME.match(f.name))
        lo = f.validation.min if f.validation else None
        hi = f.validation.max if f.validation else None
        if lo is None and is_age:
            lo = 0  # ages are never negative
        if lo is None and hi is None:
            continue
        value = values.get(f.name)
        if not _is_number(value):
            continue

        below = lo is not None and value < lo
        above = hi is not None and value > hi
        if not (below or above):
            continue

        bounds = f"min={describe(lo)}, max={describe(hi)}"
        explanation = (
            f'Field "{f.name}" has value {describe(value)}, outside its declared range ({bounds}). '
            f"Validation will always reject this value."
        )
        paths = [step.field_path(f.name, "validation")]

        # Age below range is only reachable if a consent flag says otherwise
        if below and is_age:
            for consent in ctx.settings.consent_fields:
                if values.get(consent) is False:
                    explanation += (
                        f' Combined with {consent}=false, a {"negative" if value < 0 else "below-minimum"} '
                        f"{f.name} describes a respondent that can neither be accepted nor escalated for consent."
                    )
                    paths.append(f"steps[].fields[name={consent}]")

        suggested_min = lo if lo is not None else 0
        suggested_max = hi if hi is not None else max(value, suggested_min)
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title=f'Value of "{f.name}" is outside its declared range',
                explanation=explanation,
                json_paths=paths,
                reproducer_state=values,
                fix_guidance=[
                    f'Clamp input with {{ "min": {describe(suggested_min)}, "max": {describe(suggested_max)} }} '
                    f"and keep the browser from accepting out-of-range values",
                    f'Use "type": "number" on "{f.name}" so min/max are enforced while typing',
                    "If the value is legitimate, widen the declared range",
                ],
            )
        )

    return results


def check_opt_out_contradictions(ctx: RuleContext) -> list[Finding]:
    """A populated value alongside its own opt-out flag."""
    results = []
    values = ctx.state.values

    for value_field, flag in ctx.settings.opt_out_pairs:
        value = values.get(value_field)
        if values.get(flag) is True and not is_blank(value):
            results.append(
                Finding(
                    rule=RULE_ID,
                    severity=Severity.WARNING,
                    title=f'"{value_field}" provided while "{flag}" is set',
                    explanation=(
                        f'Field "{value_field}" is populated ({describe(value)}) but "{flag}" is true. '
                        f"The submission both supplies contact data and opts out of it, which downstream "
                        f"systems will interpret inconsistently."
                    ),
                    json_paths=[f"steps[].fields[name={value_field}]", f"steps[].fields[name={flag}]"],
                    reproducer_state=values,
                    fix_guidance=[
                        f'Hide "{value_field}" with showIf: {{ "field": "{flag}", "operator": "notEquals", "value": true }}',
                        f'Clear "{value_field}" when "{flag}" becomes true via dependency.resetOnChange',
                    ],
                )
            )

    return results


def check_field_schema(step: StepConfig, f: FieldDefinition) -> list[Finding]:
    """Static validation/type mismatches on one field."""
    results = []
    v = f.validation
    if v is None:
        return results

    if v.email and f.type != "email":
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title=f'Field "{f.name}" has email validation but type is "{f.type}"',
                explanation=(
                    f'Field "{f.name}" has validation.email=true but type="{f.type}". This mismatch means '
                    f"the browser won't show an email keyboard on mobile, autocomplete won't suggest "
                    f"addresses, and pattern validation may conflict. Match the field type with its validation."
                ),
                json_paths=[step.field_path(f.name, "type"), step.field_path(f.name, "validation.email")],
                fix_guidance=[
                    'Change the field type to "email": "type": "email"',
                    'If the type must stay "text", remove email validation and use '
                    'pattern: "^[^@]+@[^@]+\\\\.[^@]+$"',
                    'Add a placeholder to guide users: "placeholder": "you@example.com"',
                ],
            )
        )

    if v.pattern and (v.min_length is not None or v.max_length is not None):
        lo = v.min_length if v.min_length is not None else 0
        hi = v.max_length if v.max_length is not None else ""
        paths = [step.field_path(f.name, "validation.pattern")]
        if v.min_length is not None:
            paths.append(step.field_path(f.name, "validation.minLength"))
        if v.max_length is not None:
            paths.append(step.field_path(f.name, "validation.maxLength"))
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.INFO,
                title=f'Field "{f.name}" has both pattern and length constraints',
                explanation=(
                    f'Field "{f.name}" has pattern="{v.pattern}" and min/max length rules. The pattern may '
                    f"allow shorter or longer input than the length rules, and users get conflicting errors "
                    f'("format invalid" vs "too short") without knowing which rule they violated.'
                ),
                json_paths=paths,
                fix_guidance=[
                    f'Remove minLength/maxLength and encode length in the pattern: "^.{{{lo},{hi}}}$"',
                    'Keep only the pattern if the format is strict (e.g. phone: "^\\\\+?[0-9]{10,15}$")',
                    'Add a message explaining the exact format: "customMessage": "Format: 11-15 digits"',
                ],
            )
        )

    if f.type == "number" and v.pattern:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title=f'Number field "{f.name}" has pattern validation',
                explanation=(
                    f'Field "{f.name}" has type="number" but validation.pattern="{v.pattern}". Pattern '
                    f"validation only applies to strings; browsers ignore it on number inputs."
                ),
                json_paths=[step.field_path(f.name, "type"), step.field_path(f.name, "validation.pattern")],
                fix_guidance=[
                    'Remove the pattern and use min/max: { "min": 0, "max": 999 }',
                    'If a pattern is needed (e.g. "exactly 3 digits"), change the type to "text" or "tel"',
                ],
            )
        )

    if v.required and f.has_default and f.default_value == "":
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title=f'Required field "{f.name}" has empty string as default',
                explanation=(
                    f'Field "{f.name}" is required but defaultValue="". The field looks initialised but '
                    f"fails required validation, and users see an error on load before interacting."
                ),
                json_paths=[step.field_path(f.name, "validation.required"), step.field_path(f.name, "defaultValue")],
                reproducer_state={f.name: ""},
                fix_guidance=[
                    "Remove the defaultValue property entirely",
                    'Set it to null: "defaultValue": null',
                    "Or provide a real default value",
                    'Remove "required": true if empty should be valid',
                ],
            )
        )

    if v.min is not None and v.max is not None and v.min > v.max:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title=f'Field "{f.name}" has min greater than max',
                explanation=(
                    f'Field "{f.name}" declares min={describe(v.min)} and max={describe(v.max)}. No value '
                    f"can satisfy both, so the field can never validate."
                ),
                json_paths=[step.field_path(f.name, "validation.min"), step.field_path(f.name, "validation.max")],
                fix_guidance=[f'Swap the bounds: {{ "min": {describe(v.max)}, "max": {describe(v.min)} }}'],
            )
        )

    if v.min_length is not None and v.max_length is not None and v.min_length > v.max_length:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title=f'Field "{f.name}" has minLength greater than maxLength',
                explanation=(
                    f'Field "{f.name}" declares minLength={v.min_length} and maxLength={v.max_length}. '
                    f"No input length can satisfy both."
                ),
                json_paths=[
                    step.field_path(f.name, "validation.minLength"),
                    step.field_path(f.name, "validation.maxLength"),
                ],
                fix_guidance=[f'Swap the bounds: {{ "minLength": {v.max_length}, "maxLength": {v.min_length} }}'],
            )
        )

    return results
