"""Tests for the version-break rule."""

import pytest
from conftest import config_data, step

from formdebug.invariants import BreakingRule, Invariants, PayloadSchema, Versioning
from formdebug.models import Severity
from formdebug.rules import version_break


def _with_version(version, current, required=()):
    data = config_data(step("s1", {"name": "email", "type": "email", "label": "Email"}))
    if version is None:
        del data["metadata"]["version"]
    else:
        data["metadata"]["version"] = version
    invariants = Invariants(
        payload_schema=PayloadSchema(required=tuple(required)),
        versioning=Versioning(
            current_version=current,
            breaking_rules=(BreakingRule(path="metadata.version", note="See MIGRATION.md."),),
        ),
    )
    return data, invariants


@pytest.mark.parametrize(
    "declared,current,expected",
    [
        ("1.0.0", "1.0.0", "none"),
        ("1.0.0", "2.0.0", "breaking"),
        ("1.0.0", "1.1.0", "non-breaking"),
        ("1.0.0", "1.0.7", "patch"),
        ("v2.1", "2.1.0", "patch"),
    ],
)
def test_classify_drift(declared, current, expected):
    assert version_break.classify_drift(declared, current) == expected


def test_major_difference_is_breaking_warning(make_context):
    data, invariants = _with_version("1.0.0", "2.0.0", required=["user.email", "user.phone"])

    results = version_break.evaluate(make_context(data, invariants=invariants))

    assert len(results) == 1
    finding = results[0]
    assert finding.severity == Severity.WARNING
    assert "breaking" in finding.explanation
    # email is declared, phone is not
    assert "user.phone" in finding.explanation
    assert "user.email" not in finding.explanation
    assert "See MIGRATION.md." in finding.explanation


def test_minor_difference_is_non_breaking(make_context):
    data, invariants = _with_version("1.0.0", "1.1.0")

    results = version_break.evaluate(make_context(data, invariants=invariants))

    assert len(results) == 1
    assert "non-breaking" in results[0].explanation
    assert results[0].severity == Severity.INFO


def test_patch_difference_is_not_reported(make_context):
    data, invariants = _with_version("1.0.0", "1.0.3")

    assert version_break.evaluate(make_context(data, invariants=invariants)) == []


def test_missing_version_is_info(make_context):
    data, invariants = _with_version(None, "1.0.0")

    results = version_break.evaluate(make_context(data, invariants=invariants))

    assert len(results) == 1
    assert results[0].severity == Severity.INFO
    assert results[0].json_paths == ["metadata.version"]


def test_missing_id_and_metadata(make_context):
    data = config_data(step("s1", {"name": "a", "type": "text", "label": "A"}))
    del data["id"]
    del data["metadata"]

    results = version_break.check_structure(make_context(data))

    assert [(r.severity, r.json_paths[0]) for r in results] == [
        (Severity.ERROR, "id"),
        (Severity.WARNING, "metadata"),
    ]


def test_missing_title_is_info(make_context):
    data = config_data(step("s1", {"name": "a", "type": "text", "label": "A"}))
    del data["metadata"]["title"]

    results = version_break.check_structure(make_context(data))

    assert [(r.severity, r.json_paths[0]) for r in results] == [(Severity.INFO, "metadata.title")]


@pytest.mark.parametrize("steps", [None, "oops", []])
def test_bad_steps_are_errors_not_exceptions(make_context, steps):
    data = config_data()
    if steps is None:
        del data["steps"]
    else:
        data["steps"] = steps

    results = version_break.check_structure(make_context(data))

    assert len(results) == 1
    assert results[0].severity == Severity.ERROR
    assert results[0].json_paths == ["steps"]


def test_non_object_field_entries_are_errors(make_context):
    data = config_data(
        step("s", "junk", {"name": "city", "type": "text", "label": "City"}, 7),
    )

    results = version_break.check_structure(make_context(data))

    assert [(r.severity, r.json_paths[0]) for r in results] == [
        (Severity.ERROR, "steps[id=s].fields[0]"),
        (Severity.ERROR, "steps[id=s].fields[2]"),
    ]
    assert "str" in results[0].explanation


def test_per_step_structure(make_context):
    data = config_data(
        {"title": "No id", "fields": [{"name": "a", "type": "text", "label": "A"}]},
        {"id": "nofields", "title": "No fields"},
        {"id": "empty", "title": "Empty", "fields": []},
        {"id": "notalist", "title": "Bad", "fields": {"name": "x"}},
        {"id": "empty", "title": "Dup", "fields": [{"name": "b", "type": "text", "label": "B"}]},
    )

    results = version_break.check_structure(make_context(data))

    assert [(r.severity, r.json_paths[0]) for r in results] == [
        (Severity.ERROR, "steps[0].id"),
        (Severity.ERROR, "steps[id=nofields].fields"),
        (Severity.WARNING, "steps[id=empty].fields"),
        (Severity.ERROR, "steps[id=notalist].fields"),
        (Severity.ERROR, "steps[4].id"),
    ]


def test_every_rule_tolerates_malformed_config(make_context):
    from formdebug.engine import run_rules

    ctx = make_context({"steps": "oops", "metadata": 3, "submitConfig": []}, values={"x": 1})

    results = run_rules(ctx)

    assert any(r.json_paths == ["steps"] for r in results)
