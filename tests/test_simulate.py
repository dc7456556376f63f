"""Tests for showIf evaluation and state simulation."""

import pytest
from conftest import config_data, step

from formdebug.models import ConditionalRule, FormConfig
from formdebug.simulate import evaluate_condition, evaluate_operator, simulate


@pytest.mark.parametrize(
    "operator,field_value,compare,expected",
    [
        ("equals", "US", "US", True),
        ("equals", 1, True, False),
        ("notEquals", "CA", "US", True),
        ("contains", "hello world", "world", True),
        ("contains", ["a", "b"], "b", True),
        ("contains", None, "b", False),
        ("notContains", ["a"], "b", True),
        ("notContains", 5, "b", True),
        ("greaterThan", "18", 17, True),
        ("lessThan", "abc", 5, False),
        ("greaterThanOrEqual", 18, 18, True),
        ("lessThanOrEqual", None, 0, True),
        ("isEmpty", "", None, True),
        ("isEmpty", [], None, True),
        ("isNotEmpty", "x", None, True),
        ("in", "b", ["a", "b"], True),
        ("in", "b", "b", False),
        ("notIn", "c", ["a", "b"], True),
        ("notIn", "c", "abc", True),
        ("bogus", "x", "x", False),
    ],
)
def test_evaluate_operator(operator, field_value, compare, expected):
    assert evaluate_operator(operator, field_value, compare) is expected


def test_undefined_field_is_empty_and_not_equal():
    rule = ConditionalRule(field="missing", operator="isEmpty")
    assert evaluate_condition(rule, {}) is True

    rule = ConditionalRule(field="missing", operator="greaterThan", value=0)
    assert evaluate_condition(rule, {}) is False


def test_and_or_composition():
    rule = ConditionalRule.from_dict(
        {
            "field": "country",
            "operator": "equals",
            "value": "US",
            "and": [{"field": "age", "operator": "greaterThanOrEqual", "value": 18}],
            "or": [{"field": "override", "operator": "equals", "value": True}],
        }
    )

    assert evaluate_condition(rule, {"country": "US", "age": 20}) is True
    assert evaluate_condition(rule, {"country": "US", "age": 10}) is False
    assert evaluate_condition(rule, {"country": "CA", "override": True}) is True


def test_simulate_applies_defaults_and_visibility():
    config = FormConfig.from_dict(
        config_data(
            step(
                "s1",
                {"name": "country", "type": "select", "label": "Country", "defaultValue": "US"},
                {
                    "name": "state",
                    "type": "select",
                    "label": "State",
                    "showIf": {"field": "country", "operator": "equals", "value": "US"},
                },
                {
                    "name": "province",
                    "type": "select",
                    "label": "Province",
                    "showIf": {"field": "country", "operator": "equals", "value": "CA"},
                },
            )
        )
    )

    state = simulate(config, {}, name="defaults")

    assert state.values == {"country": "US"}
    assert state.visibility == {"country": True, "state": True, "province": False}
    assert state.name == "defaults"


def test_simulate_keeps_supplied_values_and_does_not_mutate_input():
    config = FormConfig.from_dict(
        config_data(step("s1", {"name": "country", "type": "select", "label": "C", "defaultValue": "US"}))
    )
    base = {"country": "CA"}

    state = simulate(config, base)

    assert state.values == {"country": "CA"}
    assert state.values is not base
