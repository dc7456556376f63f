"""Dot-path resolution and value description helpers shared by rules."""

from __future__ import annotations

import json
from typing import Any


class _Missing:
    """Sentinel for a path that does not resolve (JS ``undefined``)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def resolve_path(data: Any, path: str) -> Any:
    """Resolve ``a.b.c`` against nested mappings.

    Returns MISSING when any segment is absent or a non-mapping is walked into.
    """
    cur = data
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return MISSING
        cur = cur[part]
    return cur


def last_segment(path: str) -> str:
    return path.rsplit(".", 1)[-1]


def is_blank(value: Any) -> bool:
    """Missing, null or empty string."""
    return value is MISSING or value is None or value == ""


def js_type_name(value: Any) -> str:
    """Type name as a JSON-schema-minded consumer would report it."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def type_matches(value: Any, expected: str) -> bool:
    actual = js_type_name(value)
    expected = expected.strip().lower()
    if actual == expected:
        return True
    if expected == "object" and actual == "array":
        return True
    if expected == "integer" and actual == "number":
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    return False


def describe(value: Any) -> str:
    """Render a value for finding text (JSON where possible)."""
    if value is MISSING:
        return "undefined"
    try:
        return json.dumps(value, sort_keys=True)
    except (TypeError, ValueError):
        return repr(value)
