"""Scenario catalog: discovery, tag filtering, weighting and sharding."""

from cr_catalog.api import FeatureCatalog, ScenarioFile, Shard, TagRuleSet, build_shards

__all__ = ["FeatureCatalog", "ScenarioFile", "Shard", "TagRuleSet", "build_shards"]
