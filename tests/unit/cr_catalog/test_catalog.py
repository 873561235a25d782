"""FeatureCatalog discovery, selection and failure behaviour."""

from pathlib import Path

import pytest

from cr_catalog.catalog import FeatureCatalog
from cr_catalog.models import ScenarioDefinition, ScenarioSpec
from cr_catalog.tags import TagRuleSet
from cr_common.errors import DiscoveryError, ParseError

pytestmark = pytest.mark.unit_catalog


class DictParser:
    """Returns canned definitions keyed by file name."""

    def __init__(self, definitions, fail_on=None):
        self.definitions = definitions
        self.fail_on = fail_on
        self.parsed = []

    def parse(self, path: Path) -> ScenarioDefinition:
        self.parsed.append(path.name)
        if path.name == self.fail_on:
            raise ParseError(f"bad {path}")
        tags, steps = self.definitions[path.name]
        return ScenarioDefinition(
            path=path.as_posix(),
            tags=frozenset(tags),
            scenarios=(ScenarioSpec(name="s", step_count=steps),),
        )


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "features"
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "a.feature").write_text("")
    (root / "nested" / "b.feature").write_text("")
    (root / "nested" / "deeper" / "c.feature").write_text("")
    (root / "nested" / "notes.txt").write_text("")
    return root


def test_discover_walks_recursively_and_filters_suffix(tree: Path):
    found = FeatureCatalog(tree, parser=DictParser({})).discover()
    assert [p.name for p in found] == ["a.feature", "b.feature", "c.feature"]


def test_discover_missing_root_raises(tmp_path: Path):
    with pytest.raises(DiscoveryError):
        FeatureCatalog(tmp_path / "nope", parser=DictParser({})).discover()


def test_select_filters_and_weights(tree: Path):
    parser = DictParser(
        {
            "a.feature": ({"@smoke"}, 3),
            "b.feature": ({"@smoke", "@slow"}, 2),
            "c.feature": ({"@wip"}, 5),
        }
    )
    rules = TagRuleSet.from_tokens(["~wip"], ["slow"])
    selected = FeatureCatalog(tree, parser=parser).select(rules)

    assert [(Path(f.path).name, f.weight) for f in selected] == [
        ("a.feature", 3),
        ("b.feature", 4),
    ]
    assert all(isinstance(f.tags, frozenset) for f in selected)


def test_select_aborts_on_first_parse_error(tree: Path):
    parser = DictParser(
        {"a.feature": (set(), 1), "c.feature": (set(), 1)},
        fail_on="b.feature",
    )
    with pytest.raises(ParseError):
        FeatureCatalog(tree, parser=parser).select(TagRuleSet())
    assert "c.feature" not in parser.parsed


def test_unexpected_parser_exception_becomes_parse_error(tree: Path):
    class Exploding:
        def parse(self, path):
            raise KeyError("steps")

    with pytest.raises(ParseError):
        FeatureCatalog(tree, parser=Exploding()).select(TagRuleSet())


def test_select_with_real_gherkin_files(tmp_path: Path):
    root = tmp_path / "features"
    root.mkdir()
    (root / "one.feature").write_text(
        "@smoke\nFeature: One\n  Scenario: s\n    Given a\n    Then b\n"
    )
    (root / "two.feature").write_text(
        "@slow @smoke\nFeature: Two\n  Scenario: s\n    Given a\n"
    )
    selected = FeatureCatalog(root).select(TagRuleSet.from_tokens(["smoke", "~slow"]))
    assert [Path(f.path).name for f in selected] == ["one.feature"]
    assert selected[0].weight == 2
