"""Execution-cost estimation for scenario files."""

from __future__ import annotations

from cr_catalog.models import ScenarioDefinition, ScenarioSpec
from cr_catalog.tags import TagRuleSet

SLOW_MULTIPLIER = 2


def scenario_weight(scenario: ScenarioSpec) -> int:
    """Steps for a plain scenario; steps times example rows for an outline."""
    if scenario.example_rows is None:
        return scenario.step_count
    return scenario.step_count * scenario.example_rows


def definition_weight(definition: ScenarioDefinition) -> int:
    return sum(scenario_weight(scenario) for scenario in definition.scenarios)


def file_weight(definition: ScenarioDefinition, rules: TagRuleSet) -> int:
    """Total weight of a file, doubled once if it carries any slow tag."""
    weight = definition_weight(definition)
    if rules.is_slow(definition.tags):
        weight *= SLOW_MULTIPLIER
    return weight
