"""
Invariant store for form debugging.

Invariants are caller-supplied ground truth that a form config is checked
against:
- Payload schema: dot paths the submission payload must carry, and their types
- Versioning: the config version the rest of the system currently expects,
  plus migration notes for paths known to break between versions

They are read-only for the duration of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PayloadSchema:
    required: tuple[str, ...] = ()
    types: dict[str, str] = field(default_factory=dict)  # dot path -> JS type name


@dataclass(frozen=True)
class BreakingRule:
    path: str
    note: str


@dataclass(frozen=True)
class Versioning:
    current_version: str | None = None
    breaking_rules: tuple[BreakingRule, ...] = ()

    def note_for(self, path: str) -> str | None:
        for rule in self.breaking_rules:
            if rule.path == path:
                return rule.note
        return None


@dataclass(frozen=True)
class Invariants:
    payload_schema: PayloadSchema = field(default_factory=PayloadSchema)
    versioning: Versioning = field(default_factory=Versioning)


# Version assumed when no invariants file is supplied
DEFAULT_CURRENT_VERSION = "1.0.0"

DEFAULT_INVARIANTS = Invariants(
    payload_schema=PayloadSchema(),
    versioning=Versioning(
        current_version=DEFAULT_CURRENT_VERSION,
        breaking_rules=(
            BreakingRule(
                path="metadata.version",
                note="Review submitField mappings and required payload fields before rolling out.",
            ),
        ),
    ),
)


def _parse_breaking_rules(raw: Any) -> tuple[BreakingRule, ...]:
    """Accept both ``[{path, note}]`` and ``{path: note}`` shapes."""
    rules: list[BreakingRule] = []
    if isinstance(raw, dict):
        for path, note in raw.items():
            rules.append(BreakingRule(path=str(path), note=str(note)))
    elif isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict):
                continue
            path = item.get("path")
            if not isinstance(path, str) or not path.strip():
                continue
            rules.append(BreakingRule(path=path, note=str(item.get("note", ""))))
    return tuple(rules)


def parse_invariants(data: dict[str, Any]) -> Invariants:
    """Build Invariants from the JSON/TOML/YAML document shape."""
    schema_raw = data.get("payloadSchema")
    schema_raw = schema_raw if isinstance(schema_raw, dict) else {}
    required_raw = schema_raw.get("required")
    types_raw = schema_raw.get("types")

    required: tuple[str, ...] = ()
    if isinstance(required_raw, list):
        required = tuple(str(p) for p in required_raw if isinstance(p, str) and p.strip())

    types: dict[str, str] = {}
    if isinstance(types_raw, dict):
        types = {str(k): str(v) for k, v in types_raw.items() if isinstance(v, str)}

    versioning_raw = data.get("versioning")
    versioning_raw = versioning_raw if isinstance(versioning_raw, dict) else {}
    current = versioning_raw.get("currentVersion")

    return Invariants(
        payload_schema=PayloadSchema(required=required, types=types),
        versioning=Versioning(
            current_version=current if isinstance(current, str) and current.strip() else None,
            breaking_rules=_parse_breaking_rules(versioning_raw.get("breakingRules")),
        ),
    )
