"""Data models for form configurations, runtime state and findings."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

# Valid field types
FieldType = Literal[
    "text",
    "email",
    "password",
    "number",
    "tel",
    "url",
    "textarea",
    "select",
    "multi-select",
    "checkbox",
    "radio",
    "date",
    "time",
    "datetime",
    "toggle",
    "file",
]

# Valid showIf operators
ConditionalOperator = Literal[
    "equals",
    "notEquals",
    "contains",
    "notContains",
    "greaterThan",
    "lessThan",
    "greaterThanOrEqual",
    "lessThanOrEqual",
    "isEmpty",
    "isNotEmpty",
    "in",
    "notIn",
]


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


# Lower rank = more severe
_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass(frozen=True)
class ValidationRule:
    """Per-field validation declaration."""

    required: bool = False
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    email: bool = False
    url: bool = False
    custom_message: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationRule":
        def _num(key: str) -> float | None:
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
            return value

        def _int(key: str) -> int | None:
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                return None
            return value

        return cls(
            required=data.get("required") is True,
            min=_num("min"),
            max=_num("max"),
            min_length=_int("minLength"),
            max_length=_int("maxLength"),
            pattern=_as_str(data.get("pattern")),
            email=data.get("email") is True,
            url=data.get("url") is True,
            custom_message=_as_str(data.get("customMessage")),
        )


@dataclass(frozen=True)
class ConditionalRule:
    """A showIf condition referencing another field's value."""

    field: str | None
    operator: str | None
    value: Any = None
    and_: tuple["ConditionalRule", ...] = ()
    or_: tuple["ConditionalRule", ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConditionalRule":
        def _nested(key: str) -> tuple[ConditionalRule, ...]:
            raw = data.get(key)
            if not isinstance(raw, list):
                return ()
            return tuple(cls.from_dict(item) for item in raw if isinstance(item, dict))

        return cls(
            field=_as_str(data.get("field")),
            operator=_as_str(data.get("operator")),
            value=data.get("value"),
            and_=_nested("and"),
            or_=_nested("or"),
        )

    def referenced_fields(self) -> list[str]:
        """All field names this condition reads, including nested and/or rules."""
        names = [self.field] if self.field else []
        for sub in (*self.and_, *self.or_):
            names.extend(sub.referenced_fields())
        return names


@dataclass(frozen=True)
class DependencyConfig:
    """Parent-child relationship between two fields."""

    parent: str | None
    reset_on_change: bool = True
    disable_until_parent: bool = True
    reload_on_parent_change: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DependencyConfig":
        return cls(
            parent=_as_str(data.get("parent")),
            reset_on_change=_as_bool(data.get("resetOnChange"), True),
            disable_until_parent=_as_bool(data.get("disableUntilParent"), True),
            reload_on_parent_change=_as_bool(data.get("reloadOnParentChange"), True),
        )


@dataclass
class FieldDefinition:
    """A single form field."""

    name: str | None
    type: str | None
    label: str | None
    raw: dict[str, Any]  # field as declared
    index: int = 0  # declared position within step.fields
    validation: ValidationRule | None = None
    show_if: ConditionalRule | None = None
    dependency: DependencyConfig | None = None
    default_value: Any = None
    has_default: bool = False  # defaultValue key present (even if null)
    submit_field: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int = 0) -> "FieldDefinition":
        validation = data.get("validation")
        show_if = data.get("showIf")
        dependency = data.get("dependency")
        return cls(
            name=_as_str(data.get("name")),
            type=_as_str(data.get("type")),
            label=_as_str(data.get("label")),
            raw=data,
            index=index,
            validation=ValidationRule.from_dict(validation) if isinstance(validation, dict) else None,
            show_if=ConditionalRule.from_dict(show_if) if isinstance(show_if, dict) else None,
            dependency=DependencyConfig.from_dict(dependency) if isinstance(dependency, dict) else None,
            default_value=data.get("defaultValue"),
            has_default="defaultValue" in data,
            submit_field=_as_str(data.get("submitField")),
        )

    @property
    def is_required(self) -> bool:
        return self.validation is not None and self.validation.required


@dataclass
class StepConfig:
    """One step of a (possibly multi-step) form."""

    id: str | None
    title: str | None
    index: int  # declared position within config.steps
    raw: dict[str, Any]
    fields: list[FieldDefinition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int) -> "StepConfig":
        raw_fields = data.get("fields")
        fields: list[FieldDefinition] = []
        if isinstance(raw_fields, list):
            fields = [
                FieldDefinition.from_dict(f, i) for i, f in enumerate(raw_fields) if isinstance(f, dict)
            ]
        return cls(
            id=_as_str(data.get("id")),
            title=_as_str(data.get("title")),
            index=index,
            raw=data,
            fields=fields,
        )

    @property
    def ref(self) -> str:
        """Path reference for this step (by id when available, else by index)."""
        if self.id:
            return f"steps[id={self.id}]"
        return f"steps[{self.index}]"

    def field_path(self, field_name: str | None, prop: str | None = None) -> str:
        path = f"{self.ref}.fields[name={field_name}]"
        if prop:
            path += f".{prop}"
        return path

    @property
    def field_names(self) -> set[str]:
        return {f.name for f in self.fields if f.name}


@dataclass(frozen=True)
class FormMetadata:
    title: str | None = None
    version: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormMetadata":
        tags = data.get("tags")
        return cls(
            title=_as_str(data.get("title")),
            version=_as_str(data.get("version")),
            description=_as_str(data.get("description")),
            tags=tuple(str(t) for t in tags) if isinstance(tags, list) else (),
        )


@dataclass(frozen=True)
class SubmitConfig:
    """Submission contract for the form."""

    endpoint: str | None
    method: str | None
    headers: dict[str, Any]
    state_transitions: dict[str, Any] | None
    raw: dict[str, Any]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubmitConfig":
        transitions = data.get("stateTransitions")
        return cls(
            endpoint=_as_str(data.get("endpoint")),
            method=_as_str(data.get("method")),
            headers=_as_dict(data.get("headers")),
            state_transitions=transitions if isinstance(transitions, dict) else None,
            raw=data,
        )


@dataclass
class FormConfig:
    """Root form configuration.

    Parsing is lenient: anything malformed is left out of the typed view but
    kept in ``raw`` so structural rules can report it.
    """

    id: str | None
    raw: dict[str, Any]
    metadata: FormMetadata | None = None
    steps: list[StepConfig] = field(default_factory=list)
    submit_config: SubmitConfig | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormConfig":
        metadata = data.get("metadata")
        submit = data.get("submitConfig")
        raw_steps = data.get("steps")
        steps: list[StepConfig] = []
        if isinstance(raw_steps, list):
            steps = [
                StepConfig.from_dict(step, index)
                for index, step in enumerate(raw_steps)
                if isinstance(step, dict)
            ]
        return cls(
            id=_as_str(data.get("id")),
            raw=data,
            metadata=FormMetadata.from_dict(metadata) if isinstance(metadata, dict) else None,
            steps=steps,
            submit_config=SubmitConfig.from_dict(submit) if isinstance(submit, dict) else None,
        )

    def iter_fields(self):
        """Yield (step, field) pairs in declared order."""
        for step in self.steps:
            for f in step.fields:
                yield step, f

    @property
    def field_names(self) -> set[str]:
        return {f.name for _, f in self.iter_fields() if f.name}


@dataclass
class RuntimeState:
    """Snapshot of field values and precomputed visibility."""

    values: dict[str, Any] = field(default_factory=dict)
    visibility: dict[str, bool] = field(default_factory=dict)
    name: str | None = None  # label of the example this state came from


@dataclass
class Finding:
    """A single reported defect."""

    rule: str
    severity: Severity
    title: str
    explanation: str
    json_paths: list[str] = field(default_factory=list)
    reproducer_state: dict[str, Any] = field(default_factory=dict)
    fix_guidance: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.severity = Severity(self.severity)
        self.reproducer_state = copy.deepcopy(self.reproducer_state)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "title": self.title,
            "explanation": self.explanation,
            "jsonPaths": list(self.json_paths),
            "reproducerState": copy.deepcopy(self.reproducer_state),
            "fixGuidance": list(self.fix_guidance),
        }

    def __str__(self) -> str:
        return f"{self.severity.value.upper()}: [{self.rule}] {self.title}"
