"""Adapter from the Gherkin parser to catalog definitions."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Mapping, Protocol

from gherkin.errors import ParserError
from gherkin.parser import Parser

from cr_common.errors import ParseError
from cr_catalog.models import ScenarioDefinition, ScenarioSpec


class ScenarioParser(Protocol):
    """Turns a scenario file into a structured definition."""

    def parse(self, path: Path) -> ScenarioDefinition:
        """Parse ``path``; raise ParseError on failure."""


def _iter_scenarios(children: list[Mapping[str, Any]]) -> Iterator[Mapping[str, Any]]:
    for child in children:
        if "scenario" in child:
            yield child["scenario"]
        elif "rule" in child:
            yield from _iter_scenarios(child["rule"].get("children") or [])


_OUTLINE_KEYWORDS = {"Scenario Outline", "Scenario Template"}


def _scenario_spec(scenario: Mapping[str, Any]) -> ScenarioSpec:
    examples = scenario.get("examples") or []
    rows = None
    # An outline without Examples expands to no runs at all.
    if examples or scenario.get("keyword", "").strip() in _OUTLINE_KEYWORDS:
        rows = sum(len(block.get("tableBody") or []) for block in examples)
    return ScenarioSpec(
        name=scenario.get("name", ""),
        step_count=len(scenario.get("steps") or []),
        example_rows=rows,
    )


def definition_from_document(path: str, document: Mapping[str, Any]) -> ScenarioDefinition:
    """Convert a Gherkin AST document into a ScenarioDefinition."""
    feature = document.get("feature") or {}
    tags = frozenset(tag["name"] for tag in feature.get("tags") or [])
    scenarios = tuple(
        _scenario_spec(scenario)
        for scenario in _iter_scenarios(feature.get("children") or [])
    )
    return ScenarioDefinition(path=path, tags=tags, scenarios=scenarios)


class GherkinParser:
    """ScenarioParser backed by the official Gherkin parser."""

    def parse(self, path: Path) -> ScenarioDefinition:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ParseError(
                f"Cannot read scenario file {path}: {exc}",
                context={"path": path},
                cause=exc,
            ) from exc
        try:
            document = Parser().parse(text)
        except ParserError as exc:
            raise ParseError(
                f"Cannot parse scenario file {path}: {exc}",
                context={"path": path},
                cause=exc,
            ) from exc
        return definition_from_document(path.as_posix(), document)
