"""Rule registry for form config debugging.

Each rule module exposes ``RULE_ID`` and ``evaluate(ctx) -> list[Finding]``.
RULES is the fixed order the runner evaluates them in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from . import impossible_combo, mutually_exclusive, required_hidden, schema_drift, version_break

if TYPE_CHECKING:
    from ..engine import RuleContext
    from ..models import Finding


@dataclass(frozen=True)
class Rule:
    id: str
    evaluate: Callable[["RuleContext"], list["Finding"]]
    summary: str


RULES: list[Rule] = [
    Rule(required_hidden.RULE_ID, required_hidden.evaluate, "Required fields hidden by showIf"),
    Rule(mutually_exclusive.RULE_ID, mutually_exclusive.evaluate, "Exclusive fields, broken references, duplicate names"),
    Rule(impossible_combo.RULE_ID, impossible_combo.evaluate, "Impossible values and validation/type mismatches"),
    Rule(schema_drift.RULE_ID, schema_drift.evaluate, "Payload contract drift and submitConfig sanity"),
    Rule(version_break.RULE_ID, version_break.evaluate, "Version compatibility and structural completeness"),
]


def get_rule_ids() -> list[str]:
    return [rule.id for rule in RULES]


RULE_EXPLANATIONS = {
    required_hidden.RULE_ID: {
        "name": "Required Hidden",
        "checks": [
            "validation.required is true while the state's visibility map hides the field",
        ],
        "why": "A hidden field is never rendered, so it can never be filled, yet required "
        "validation still blocks submission.",
        "fix": [
            "Drop required if the field is conditionally optional",
            "Invert the showIf operator",
            "Give the field a default value",
            "Make the triggering field required and always visible",
        ],
    },
    mutually_exclusive.RULE_ID: {
        "name": "Mutually Exclusive",
        "checks": [
            "Both fields of an exclusive pair (e.g. subscribe/unsubscribe) are true",
            "Exclusive fields become visible for the same trigger value",
            "showIf.field / dependency.parent name a field missing from the same step",
            "Duplicate field names within one step",
        ],
        "why": "Contradictory answers, dead conditional fields and overwritten form state.",
        "fix": [
            "Use a single radio/select field for exclusive choices",
            "Reference only sibling fields of the same step",
            "Give every field in a step a unique name",
        ],
    },
    impossible_combo.RULE_ID: {
        "name": "Impossible Combination",
        "checks": [
            "Numeric values outside declared min/max (with consent context for age fields)",
            "Populated values alongside their opt-out flag",
            "validation.email on a non-email field",
            "pattern combined with minLength/maxLength",
            "pattern on a number field",
            "required with an empty-string default",
            "min > max or minLength > maxLength",
        ],
        "why": "Validation that cannot be satisfied, or that the browser silently ignores.",
        "fix": [
            "Align the field type with its validation",
            "Encode length in the pattern or drop one of the constraints",
            "Remove empty-string defaults from required fields",
        ],
    },
    schema_drift.RULE_ID: {
        "name": "Schema Drift",
        "checks": [
            "payloadSchema.required paths that are missing or empty in state values",
            "payloadSchema.types paths whose value has a different type",
            "Missing or malformed submitConfig (method, endpoint, Content-Type, onSuccess)",
            "Several fields mapped to the same payload path",
        ],
        "why": "The form produces data the receiving API contract does not accept.",
        "fix": [
            "Map a form field to the missing path via submitField",
            "Coerce values to the expected type",
            "Complete submitConfig",
        ],
    },
    version_break.RULE_ID: {
        "name": "Version Break",
        "checks": [
            "metadata.version missing or different from versioning.currentVersion",
            "Major version drift (breaking) vs minor drift (non-breaking)",
            "Missing id, metadata, steps or step fields",
        ],
        "why": "Configs written for another contract version, or structurally incomplete configs, "
        "fail at render or submit time.",
        "fix": [
            "Migrate the config and bump metadata.version",
            "Add the missing structural elements",
        ],
    },
}
