"""Drift between form values and the submission payload contract."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from ..models import FormConfig, Finding, Severity
from ..paths import MISSING, describe, is_blank, js_type_name, last_segment, resolve_path, type_matches

if TYPE_CHECKING:
    from ..engine import RuleContext

RULE_ID = "schema-drift"

VALID_METHODS = ("POST", "PUT", "PATCH", "GET", "DELETE")
MUTATING_METHODS = ("POST", "PUT", "PATCH")


def evaluate(ctx: RuleContext) -> list[Finding]:
    results = []
    results.extend(check_required_paths(ctx))
    results.extend(check_path_types(ctx))
    results.extend(check_submit_config(ctx))
    results.extend(check_submit_field_collisions(ctx))
    return results


def suggest_field(config: FormConfig, path: str) -> str | None:
    """Find a form field whose name or submitField matches the path's last segment."""
    target = last_segment(path).lower()
    for _, f in config.iter_fields():
        if f.submit_field and f.submit_field.lower() == path.lower():
            return f.name
    for _, f in config.iter_fields():
        if f.name and f.name.lower() == target:
            return f.name
        if f.submit_field and last_segment(f.submit_field).lower() == target:
            return f.name
    return None


def check_required_paths(ctx: RuleContext) -> list[Finding]:
    results = []
    values = ctx.state.values

    for path in ctx.invariants.payload_schema.required:
        value = resolve_path(values, path)
        if not is_blank(value):
            continue

        fix = []
        candidate = suggest_field(ctx.config, path)
        if candidate:
            fix.append(f'Map form field "{candidate}" to this path: "submitField": "{path}"')
            fix.append(f'Make "{candidate}" required so it is always filled')
        else:
            fix.append(f'Add a field that captures "{last_segment(path)}" with "submitField": "{path}"')
        fix.append("Or remove the path from payloadSchema.required if the API no longer needs it")

        if value is MISSING:
            state_desc = "missing"
        elif value is None:
            state_desc = "null (null is treated as missing)"
        else:
            state_desc = f"empty ({describe(value)})"
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title="Payload schema required field missing",
                explanation=(
                    f"Required payload field {path} is {state_desc} in the form values. The receiving API "
                    f"will reject the submission."
                    + (f' Form field "{candidate}" looks like the intended source.' if candidate else "")
                ),
                json_paths=[path],
                reproducer_state=values,
                fix_guidance=fix,
            )
        )

    return results


def check_path_types(ctx: RuleContext) -> list[Finding]:
    results = []
    values = ctx.state.values

    for path, expected in ctx.invariants.payload_schema.types.items():
        value = resolve_path(values, path)
        if value is MISSING or value is None:
            continue
        if type_matches(value, expected):
            continue

        actual = js_type_name(value)
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title="Payload schema type drift",
                explanation=(
                    f"Field {path} is {actual} ({describe(value)}), expected {expected}. The API contract "
                    f"and the form disagree on this value's type."
                ),
                json_paths=[path],
                reproducer_state=values,
                fix_guidance=[
                    f"Coerce the value to {expected} before submission",
                    _type_hint(expected),
                ],
            )
        )

    return results


def _type_hint(expected: str) -> str:
    expected = expected.lower()
    if expected in ("number", "integer"):
        return 'Use "type": "number" on the source field so the value is numeric'
    if expected == "boolean":
        return 'Use "type": "checkbox" or "toggle" on the source field so the value is boolean'
    if expected in ("array", "object"):
        return 'Use "type": "multi-select" or map nested fields with submitField dot paths'
    return "Update payloadSchema.types if the API contract changed"


def check_submit_config(ctx: RuleContext) -> list[Finding]:
    """Static sanity checks on submitConfig."""
    results = []
    submit = ctx.config.submit_config

    if submit is None:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title="Form has no submitConfig",
                explanation="The config declares no submitConfig, so the form has nowhere to submit its data.",
                json_paths=["submitConfig"],
                fix_guidance=[
                    'Add { "submitConfig": { "endpoint": "https://api.yourservice.com/forms", "method": "POST", '
                    '"headers": { "Content-Type": "application/json" } } }',
                ],
            )
        )
        return results

    method = (submit.method or "").upper()
    if method not in VALID_METHODS:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title=f"Invalid submit method {describe(submit.raw.get('method', MISSING))}",
                explanation=(
                    f"submitConfig.method is {describe(submit.raw.get('method', MISSING))}; expected one of "
                    f"{', '.join(VALID_METHODS)}. The request cannot be sent."
                ),
                json_paths=["submitConfig.method"],
                fix_guidance=['Set "method": "POST" (or PUT/PATCH for updates)'],
            )
        )

    if submit.endpoint is None:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title="Submit endpoint missing",
                explanation="submitConfig has no endpoint, so the form cannot submit.",
                json_paths=["submitConfig.endpoint"],
                fix_guidance=['Set "endpoint" to the real API URL'],
            )
        )
    else:
        lowered = submit.endpoint.lower()
        marker = next((m for m in ctx.settings.placeholder_domains if m.lower() in lowered), None)
        if marker:
            results.append(
                Finding(
                    rule=RULE_ID,
                    severity=Severity.ERROR,
                    title="Submit endpoint looks like a placeholder",
                    explanation=(
                        f'submitConfig.endpoint "{submit.endpoint}" contains "{marker}", which looks like a '
                        f"placeholder. Submissions will fail or go to the wrong host in production."
                    ),
                    json_paths=["submitConfig.endpoint"],
                    fix_guidance=[
                        "Replace the endpoint with the real API URL",
                        "Or resolve it from environment configuration at build time",
                    ],
                )
            )

    if method in MUTATING_METHODS:
        header_names = {str(k).lower() for k in submit.headers}
        if "content-type" not in header_names:
            results.append(
                Finding(
                    rule=RULE_ID,
                    severity=Severity.WARNING,
                    title=f"{method} submission without Content-Type header",
                    explanation=(
                        f"submitConfig uses {method} but declares no Content-Type header. The server may "
                        f"not parse the JSON body."
                    ),
                    json_paths=["submitConfig.headers"],
                    fix_guidance=['Add "headers": { "Content-Type": "application/json" }'],
                )
            )

    if submit.state_transitions is not None and "onSuccess" not in submit.state_transitions:
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.INFO,
                title="No onSuccess state transition",
                explanation=(
                    "submitConfig.stateTransitions has no onSuccess handler, so users get no feedback "
                    "after a successful submission."
                ),
                json_paths=["submitConfig.stateTransitions"],
                fix_guidance=[
                    'Add "onSuccess": { "action": "showMessage", "message": "Thanks! Your form was submitted." }',
                ],
            )
        )

    return results


def check_submit_field_collisions(ctx: RuleContext) -> list[Finding]:
    """Several fields writing the same payload path overwrite each other."""
    results = []
    targets: dict[str, list[str]] = defaultdict(list)
    for step, f in ctx.config.iter_fields():
        if not f.name:
            continue
        targets[f.submit_field or f.name].append(step.field_path(f.name, "submitField" if f.submit_field else None))

    for target, paths in targets.items():
        # Same-name duplicates within a step are reported by the duplicate-name check
        if len(paths) < 2 or len(set(paths)) < len(paths):
            continue
        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.WARNING,
                title=f'Several fields submit to payload path "{target}"',
                explanation=(
                    f"{len(paths)} fields write to payload path {target}; only the last one filled in "
                    f"survives in the submitted payload."
                ),
                json_paths=paths,
                fix_guidance=["Give each field a distinct submitField path"],
            )
        )

    return results
