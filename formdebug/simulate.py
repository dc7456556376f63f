"""Conditional visibility evaluation and runtime state simulation.

The rule engine only cross-checks a visibility snapshot; this module is what
produces one when a state file carries values but no visibility map.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from .models import ConditionalRule, FormConfig, RuntimeState
from .paths import MISSING, js_type_name

logger = logging.getLogger(__name__)


def _strict_equals(left: Any, right: Any) -> bool:
    if js_type_name(left) != js_type_name(right):
        return False
    return left == right


def _to_number(value: Any) -> float:
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _is_empty(value: Any) -> bool:
    return value is MISSING or value is None or value == "" or (isinstance(value, list) and not value)


def _contains(haystack: Any, needle: Any) -> bool | None:
    if isinstance(haystack, str):
        return str(needle) in haystack
    if isinstance(haystack, list):
        return any(_strict_equals(item, needle) for item in haystack)
    return None


def evaluate_operator(operator: str | None, field_value: Any, compare_value: Any) -> bool:
    """Evaluate one showIf operator."""
    if operator == "equals":
        return _strict_equals(field_value, compare_value)
    if operator == "notEquals":
        return not _strict_equals(field_value, compare_value)
    if operator == "contains":
        return _contains(field_value, compare_value) is True
    if operator == "notContains":
        found = _contains(field_value, compare_value)
        return True if found is None else not found
    if operator in ("greaterThan", "lessThan", "greaterThanOrEqual", "lessThanOrEqual"):
        left = _to_number(field_value)
        right = _to_number(compare_value)
        # NaN compares false on every side
        if operator == "greaterThan":
            return left > right
        if operator == "lessThan":
            return left < right
        if operator == "greaterThanOrEqual":
            return left >= right
        return left <= right
    if operator == "isEmpty":
        return _is_empty(field_value)
    if operator == "isNotEmpty":
        return not _is_empty(field_value)
    if operator == "in":
        if isinstance(compare_value, list):
            return any(_strict_equals(item, field_value) for item in compare_value)
        return False
    if operator == "notIn":
        if isinstance(compare_value, list):
            return not any(_strict_equals(item, field_value) for item in compare_value)
        return True

    logger.warning("Unknown showIf operator: %s", operator)
    return False


def evaluate_condition(rule: ConditionalRule, values: dict[str, Any]) -> bool:
    """Evaluate a condition, including nested ``and``/``or`` rules."""
    field_value = values.get(rule.field, MISSING) if rule.field else MISSING
    result = evaluate_operator(rule.operator, field_value, rule.value)

    if rule.and_:
        result = result and all(evaluate_condition(sub, values) for sub in rule.and_)
    if rule.or_:
        result = result or any(evaluate_condition(sub, values) for sub in rule.or_)

    return result


def simulate(config: FormConfig, base_values: dict[str, Any] | None = None, name: str | None = None) -> RuntimeState:
    """Build a RuntimeState from values, applying declared defaults first."""
    values = dict(base_values or {})

    for _, f in config.iter_fields():
        if f.name and f.has_default and f.default_value is not None and f.name not in values:
            values[f.name] = f.default_value

    visibility: dict[str, bool] = {}
    for _, f in config.iter_fields():
        if not f.name:
            continue
        visibility[f.name] = evaluate_condition(f.show_if, values) if f.show_if else True

    logger.debug(
        "Simulated state %s: %d value(s), %d hidden field(s)",
        name or "<unnamed>",
        len(values),
        sum(1 for v in visibility.values() if not v),
    )
    return RuntimeState(values=values, visibility=visibility, name=name)
