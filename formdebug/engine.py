"""Rule runner: evaluates every rule module against one context."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .errors import UnknownRuleError
from .invariants import DEFAULT_INVARIANTS, Invariants
from .models import Finding, FormConfig, RuntimeState
from .rules import RULES, Rule, get_rule_ids
from .settings import RuleSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleContext:
    config: FormConfig
    state: RuntimeState = field(default_factory=RuntimeState)
    invariants: Invariants = DEFAULT_INVARIANTS
    settings: RuleSettings = field(default_factory=RuleSettings)


def select_rules(only: Iterable[str] | None = None, disabled: Iterable[str] = ()) -> list[Rule]:
    """Filter the registry without changing its order."""
    known = get_rule_ids()
    only_set = set(only) if only else None
    disabled_set = set(disabled)

    for rule_id in (only_set or set()) | disabled_set:
        if rule_id not in known:
            raise UnknownRuleError(rule_id, known)

    selected = []
    for rule in RULES:
        if only_set is not None and rule.id not in only_set:
            continue
        if rule.id in disabled_set:
            continue
        selected.append(rule)
    return selected


def run_rules(ctx: RuleContext, rules: list[Rule] | None = None) -> list[Finding]:
    """Run rules in registry order and concatenate their findings.

    Exceptions raised by a rule are not caught.
    """
    results: list[Finding] = []
    for rule in RULES if rules is None else rules:
        rule_results = rule.evaluate(ctx)
        logger.debug("Rule %s produced %d finding(s)", rule.id, len(rule_results))
        results.extend(rule_results)
    return results


def run_debugger(
    config: FormConfig,
    states: list[RuntimeState],
    invariants: Invariants = DEFAULT_INVARIANTS,
    *,
    settings: RuleSettings | None = None,
    rules: list[Rule] | None = None,
) -> list[Finding]:
    """Run the selected rules once per runtime state."""
    rule_settings = settings or RuleSettings()
    results: list[Finding] = []
    for state in states:
        ctx = RuleContext(config=config, state=state, invariants=invariants, settings=rule_settings)
        results.extend(run_rules(ctx, rules))
    return results
