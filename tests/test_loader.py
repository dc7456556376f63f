"""Tests for document loading, state loading and invariants parsing."""

from pathlib import Path

import pytest
from conftest import config_data, step

from formdebug.errors import DocumentLoadError
from formdebug.invariants import DEFAULT_INVARIANTS, parse_invariants
from formdebug.loader import load_document, load_form_config, load_invariants, load_states


def _config(write_json) -> Path:
    return write_json(
        "form.json",
        config_data(
            step(
                "s1",
                {"name": "country", "type": "select", "label": "Country"},
                {
                    "name": "state",
                    "type": "select",
                    "label": "State",
                    "showIf": {"field": "country", "operator": "equals", "value": "US"},
                },
            )
        ),
    )


def test_load_form_config(write_json):
    config = load_form_config(_config(write_json))

    assert config.id == "test-form"
    assert [f.name for _, f in config.iter_fields()] == ["country", "state"]


def test_load_yaml_document(tmp_path: Path):
    path = tmp_path / "form.yaml"
    path.write_text("id: yaml-form\nsteps:\n  - id: s1\n    fields: []\n", encoding="utf-8")

    data = load_document(path)

    assert data["id"] == "yaml-form"
    assert data["steps"][0]["fields"] == []


def test_load_toml_document(tmp_path: Path):
    path = tmp_path / "invariants.toml"
    path.write_text(
        '[payloadSchema]\nrequired = ["user.email"]\n[versioning]\ncurrentVersion = "3.0.0"\n',
        encoding="utf-8",
    )

    invariants = load_invariants(path)

    assert invariants.payload_schema.required == ("user.email",)
    assert invariants.versioning.current_version == "3.0.0"


def test_invalid_json_raises_load_error(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(DocumentLoadError) as exc:
        load_document(path)

    assert "invalid JSON" in str(exc.value)
    assert exc.value.path == path


def test_missing_file_raises_load_error(tmp_path: Path):
    with pytest.raises(DocumentLoadError, match="file not found"):
        load_document(tmp_path / "nope.json")


def test_non_object_top_level_is_rejected(write_json):
    with pytest.raises(DocumentLoadError, match="top level must be an object"):
        load_document(write_json("list.json", [1, 2]))


def test_state_with_visibility_is_used_as_is(write_json):
    config = load_form_config(_config(write_json))
    path = write_json("state.json", {"values": {"country": "CA"}, "visibility": {"state": True}})

    [state] = load_states(path, config)

    assert state.values == {"country": "CA"}
    assert state.visibility == {"state": True}


def test_state_without_visibility_is_simulated(write_json):
    config = load_form_config(_config(write_json))
    path = write_json("state.json", {"values": {"country": "CA"}})

    [state] = load_states(path, config)

    assert state.visibility == {"country": True, "state": False}


def test_examples_file_yields_one_state_per_example(write_json):
    config = load_form_config(_config(write_json))
    path = write_json(
        "examples.json",
        {"states": [{"name": "us", "values": {"country": "US"}}, {"values": {"country": "CA"}}, "junk"]},
    )

    states = load_states(path, config)

    assert [s.name for s in states] == ["us", "states[1]"]
    assert [s.visibility["state"] for s in states] == [True, False]


def test_no_state_file_gives_single_empty_state(write_json):
    config = load_form_config(_config(write_json))

    [state] = load_states(None, config)

    assert state.values == {}
    assert state.visibility["state"] is False


def test_default_invariants_when_no_file():
    assert load_invariants(None) is DEFAULT_INVARIANTS


def test_breaking_rules_accept_mapping_and_list():
    as_list = parse_invariants({"versioning": {"breakingRules": [{"path": "steps", "note": "Renamed"}]}})
    as_map = parse_invariants({"versioning": {"breakingRules": {"steps": "Renamed"}}})

    assert as_list.versioning.breaking_rules == as_map.versioning.breaking_rules
    assert as_list.versioning.note_for("steps") == "Renamed"
    assert as_list.versioning.current_version is None


def test_malformed_invariants_sections_are_ignored():
    invariants = parse_invariants({"payloadSchema": {"required": "user.email", "types": ["x"]}, "versioning": 1})

    assert invariants.payload_schema.required == ()
    assert invariants.payload_schema.types == {}
