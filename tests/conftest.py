"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from formdebug.engine import RuleContext
from formdebug.invariants import Invariants, parse_invariants
from formdebug.models import FormConfig, RuntimeState

SUBMIT_CONFIG = {
    "endpoint": "https://api.acme-forms.io/v1/submissions",
    "method": "POST",
    "headers": {"Content-Type": "application/json"},
    "stateTransitions": {"onSuccess": {"action": "showMessage", "message": "Thanks!"}},
}


def config_data(*steps: dict, **overrides) -> dict:
    """A structurally complete config around the given steps."""
    data = {
        "id": "test-form",
        "metadata": {"title": "Test form", "version": "1.0.0"},
        "steps": list(steps),
        "submitConfig": dict(SUBMIT_CONFIG),
    }
    data.update(overrides)
    return data


def step(step_id: str, *fields: dict) -> dict:
    return {"id": step_id, "title": step_id.title(), "fields": list(fields)}


@pytest.fixture
def make_context():
    """Factory: make_context(config_dict, values=..., visibility=..., invariants=...)."""

    def _make(data: dict, values=None, visibility=None, invariants=None) -> RuleContext:
        return RuleContext(
            config=FormConfig.from_dict(data),
            state=RuntimeState(values=values or {}, visibility=visibility or {}),
            invariants=invariants if invariants is not None else Invariants(),
        )

    return _make


@pytest.fixture
def contact_config() -> dict:
    """A clean two-step contact form."""
    return config_data(
        step(
            "details",
            {"name": "fullName", "type": "text", "label": "Full name", "validation": {"required": True}},
            {"name": "email", "type": "email", "label": "Email", "validation": {"required": True, "email": True}},
            {"name": "country", "type": "select", "label": "Country"},
            {
                "name": "state",
                "type": "select",
                "label": "State",
                "showIf": {"field": "country", "operator": "equals", "value": "US"},
                "dependency": {"parent": "country"},
            },
        ),
        step(
            "preferences",
            {"name": "newsletter", "type": "checkbox", "label": "Newsletter", "defaultValue": False},
        ),
    )


@pytest.fixture
def invariants_data() -> dict:
    return {
        "payloadSchema": {"required": ["user.email"], "types": {"age": "number"}},
        "versioning": {
            "currentVersion": "2.0.0",
            "breakingRules": [{"path": "metadata.version", "note": "Review migration notes."}],
        },
    }


@pytest.fixture
def invariants(invariants_data: dict) -> Invariants:
    return parse_invariants(invariants_data)


@pytest.fixture
def write_json(tmp_path: Path):
    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
