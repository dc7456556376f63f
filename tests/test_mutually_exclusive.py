"""Tests for the mutually-exclusive rule."""

from conftest import config_data, step

from formdebug.models import Severity
from formdebug.rules import mutually_exclusive


def test_clean_config_has_no_findings(make_context, contact_config):
    ctx = make_context(contact_config, values={"country": "US"})

    assert mutually_exclusive.evaluate(ctx) == []


def test_subscribe_and_unsubscribe_both_true(make_context):
    data = config_data(
        step(
            "prefs",
            {"name": "subscribe", "type": "checkbox", "label": "Subscribe"},
            {"name": "unsubscribe", "type": "checkbox", "label": "Unsubscribe"},
        )
    )
    ctx = make_context(data, values={"subscribe": True, "unsubscribe": True})

    results = mutually_exclusive.check_exclusive_values(ctx)

    assert len(results) == 1
    assert results[0].severity == Severity.WARNING
    assert results[0].reproducer_state == {"subscribe": True, "unsubscribe": True}


def test_truthy_non_boolean_values_are_not_exclusive(make_context):
    data = config_data(step("prefs", {"name": "subscribe", "type": "text", "label": "S"}))
    ctx = make_context(data, values={"subscribe": "yes", "unsubscribe": 1})

    assert mutually_exclusive.check_exclusive_values(ctx) == []


def test_accept_and_decline_shown_by_same_trigger_value(make_context):
    data = config_data(
        step(
            "terms",
            {"name": "readTerms", "type": "radio", "label": "Read terms?"},
            {
                "name": "accept",
                "type": "checkbox",
                "label": "Accept",
                "showIf": {"field": "readTerms", "operator": "equals", "value": "yes"},
            },
            {
                "name": "decline",
                "type": "checkbox",
                "label": "Decline",
                "showIf": {"field": "readTerms", "operator": "equals", "value": "yes"},
            },
        )
    )
    ctx = make_context(data)

    results = mutually_exclusive.check_visibility_collisions(ctx)

    assert len(results) == 1
    assert results[0].severity == Severity.WARNING
    assert results[0].json_paths == [
        "steps[id=terms].fields[name=accept].showIf",
        "steps[id=terms].fields[name=decline].showIf",
    ]


def test_different_trigger_values_do_not_collide(make_context):
    data = config_data(
        step(
            "terms",
            {"name": "readTerms", "type": "radio", "label": "Read terms?"},
            {
                "name": "accept",
                "type": "checkbox",
                "label": "Accept",
                "showIf": {"field": "readTerms", "operator": "equals", "value": "yes"},
            },
            {
                "name": "decline",
                "type": "checkbox",
                "label": "Decline",
                "showIf": {"field": "readTerms", "operator": "equals", "value": "no"},
            },
        )
    )

    assert mutually_exclusive.check_visibility_collisions(make_context(data)) == []


def test_broken_dependency_parent(make_context):
    data = config_data(
        step(
            "address",
            {"name": "country", "type": "select", "label": "Country"},
            {"name": "city", "type": "select", "label": "City", "dependency": {"parent": "missingField"}},
        )
    )

    results = mutually_exclusive.evaluate(make_context(data))

    assert len(results) == 1
    assert results[0].severity == Severity.ERROR
    assert results[0].json_paths == ["steps[id=address].fields[name=city].dependency.parent"]
    assert "missingField" in results[0].explanation


def test_cross_step_show_if_reference_is_an_error(make_context):
    data = config_data(
        step("one", {"name": "country", "type": "select", "label": "Country"}),
        step(
            "two",
            {
                "name": "state",
                "type": "select",
                "label": "State",
                "showIf": {"field": "country", "operator": "equals", "value": "US"},
            },
        ),
    )

    results = mutually_exclusive.check_broken_references(make_context(data))

    assert len(results) == 1
    assert "steps[id=one]" in results[0].explanation
    assert "cross-step" in results[0].explanation


def test_nested_condition_references_are_checked(make_context):
    data = config_data(
        step(
            "s1",
            {"name": "a", "type": "text", "label": "A"},
            {
                "name": "b",
                "type": "text",
                "label": "B",
                "showIf": {
                    "field": "a",
                    "operator": "isNotEmpty",
                    "and": [{"field": "ghost", "operator": "equals", "value": 1}],
                },
            },
        )
    )

    results = mutually_exclusive.check_broken_references(make_context(data))

    assert len(results) == 1
    assert '"ghost"' in results[0].title


def test_self_reference_is_an_error(make_context):
    data = config_data(
        step("s1", {"name": "a", "type": "text", "label": "A", "dependency": {"parent": "a"}})
    )

    results = mutually_exclusive.check_broken_references(make_context(data))

    assert len(results) == 1
    assert "itself" in results[0].title


def test_duplicate_field_names_in_step(make_context):
    data = config_data(
        step(
            "address",
            {"name": "city", "type": "text", "label": "City"},
            {"name": "zip", "type": "text", "label": "ZIP"},
            {"name": "city", "type": "text", "label": "City again"},
        )
    )

    results = mutually_exclusive.check_duplicate_names(make_context(data))

    assert len(results) == 1
    assert results[0].severity == Severity.ERROR
    assert results[0].json_paths == [
        "steps[id=address].fields[0][name=city]",
        "steps[id=address].fields[2][name=city]",
    ]


def test_duplicate_paths_use_declared_positions(make_context):
    data = config_data(
        step(
            "s",
            "junk",
            {"name": "city", "type": "text", "label": "City"},
            {"name": "city", "type": "text", "label": "City again"},
        )
    )

    results = mutually_exclusive.check_duplicate_names(make_context(data))

    assert results[0].json_paths == [
        "steps[id=s].fields[1][name=city]",
        "steps[id=s].fields[2][name=city]",
    ]


def test_same_name_in_different_steps_is_not_a_duplicate(make_context):
    data = config_data(
        step("one", {"name": "notes", "type": "textarea", "label": "Notes"}),
        step("two", {"name": "notes", "type": "textarea", "label": "Notes"}),
    )

    assert mutually_exclusive.check_duplicate_names(make_context(data)) == []


def test_custom_exclusive_pairs(make_context):
    from formdebug.engine import RuleContext
    from formdebug.settings import RuleSettings

    base = make_context(config_data(step("s1", {"name": "on", "type": "toggle", "label": "On"})),
                        values={"on": True, "off": True})
    ctx = RuleContext(
        config=base.config,
        state=base.state,
        invariants=base.invariants,
        settings=RuleSettings(exclusive_pairs=(("on", "off"),)),
    )

    results = mutually_exclusive.check_exclusive_values(ctx)

    assert len(results) == 1
    assert '"on"' in results[0].explanation
