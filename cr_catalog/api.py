"""Public API surface for cr_catalog."""

from cr_catalog.catalog import DEFAULT_SUFFIX, FeatureCatalog
from cr_catalog.models import ScenarioDefinition, ScenarioFile, ScenarioSpec, Shard
from cr_catalog.parser import GherkinParser, ScenarioParser, definition_from_document
from cr_catalog.sharder import (
    ShardPolicy,
    build_shards,
    partition_positional,
    partition_weighted,
)
from cr_catalog.tags import TagRuleSet, normalize_tag
from cr_catalog.weights import SLOW_MULTIPLIER, definition_weight, file_weight, scenario_weight

__all__ = [
    "DEFAULT_SUFFIX",
    "FeatureCatalog",
    "GherkinParser",
    "SLOW_MULTIPLIER",
    "ScenarioDefinition",
    "ScenarioFile",
    "ScenarioParser",
    "ScenarioSpec",
    "Shard",
    "ShardPolicy",
    "TagRuleSet",
    "build_shards",
    "definition_from_document",
    "definition_weight",
    "file_weight",
    "normalize_tag",
    "partition_positional",
    "partition_weighted",
    "scenario_weight",
]
