"""Required fields that are hidden by conditional visibility."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import ConditionalRule, Finding, Severity
from ..paths import MISSING, describe

if TYPE_CHECKING:
    from ..engine import RuleContext

RULE_ID = "required-hidden"

INVERSE_OPERATORS = {
    "equals": "notEquals",
    "notEquals": "equals",
    "in": "notIn",
    "notIn": "in",
    "contains": "notContains",
    "notContains": "contains",
    "greaterThan": "lessThanOrEqual",
    "lessThanOrEqual": "greaterThan",
    "lessThan": "greaterThanOrEqual",
    "greaterThanOrEqual": "lessThan",
    "isEmpty": "isNotEmpty",
    "isNotEmpty": "isEmpty",
}


def _condition_text(show_if: ConditionalRule | None) -> str:
    if show_if is None:
        return "unknown"
    return f"{show_if.field} {show_if.operator} {describe(show_if.value)}"


def evaluate(ctx: RuleContext) -> list[Finding]:
    results = []
    values = ctx.state.values
    visibility = ctx.state.visibility

    for step, f in ctx.config.iter_fields():
        if not f.name or not f.is_required:
            continue
        if visibility.get(f.name) is not False:
            continue

        show_if = f.show_if
        cause_field = show_if.field if show_if else None
        cause_value = values.get(cause_field, MISSING) if cause_field else MISSING
        inverse = INVERSE_OPERATORS.get(show_if.operator or "", "notIn") if show_if else "notIn"
        cond = _condition_text(show_if)

        if show_if is None:
            explanation = (
                f'Field "{f.name}" is marked as required (validation.required=true) but the state '
                f"reports it as hidden and it declares no showIf condition. A hidden required field "
                f"cannot be filled, so form submission is impossible."
            )
        else:
            explanation = (
                f'Field "{f.name}" is marked as required (validation.required=true) but is hidden '
                f'because its condition "{cond}" does not hold. When field "{cause_field}" has value '
                f"{describe(cause_value)}, this required field becomes inaccessible, making form "
                f"submission impossible."
            )

        results.append(
            Finding(
                rule=RULE_ID,
                severity=Severity.ERROR,
                title="Required field hidden by conditional visibility",
                explanation=explanation,
                json_paths=[
                    step.field_path(f.name, "validation.required"),
                    step.field_path(f.name, "showIf"),
                ],
                reproducer_state=values,
                fix_guidance=[
                    f'Remove "required": true from field "{f.name}" if it should be conditionally optional',
                    f'Change the showIf condition to invert its logic: {{ "field": "{cause_field}", '
                    f'"operator": "{inverse}", "value": {describe(show_if.value if show_if else None)} }}',
                    f'Add a default value to "{f.name}" so it is valid even when hidden',
                    f'Make "{cause_field}" a required field that is always visible to prevent this hiding condition',
                ],
            )
        )

    return results
