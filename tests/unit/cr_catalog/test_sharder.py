"""Partitioning policies and their boundary behaviour."""

import random
from collections import Counter

import pytest

from cr_catalog.models import ScenarioFile
from cr_catalog.sharder import (
    ShardPolicy,
    build_shards,
    partition_positional,
    partition_weighted,
)

pytestmark = pytest.mark.unit_catalog


class Item:
    def __init__(self, name, weight):
        self.name = name
        self.weight = weight

    def __repr__(self):
        return f"Item({self.name}, {self.weight})"


def _items(weights):
    return [Item(f"f{i}", w) for i, w in enumerate(weights)]


def _shard_weights(groups):
    return [sum(item.weight for item in group) for group in groups.values()]


def test_positional_matches_modulo_rule():
    groups = partition_positional(list("abcdefg"), 3)
    assert groups == {1: ["a", "d", "g"], 2: ["b", "e"], 3: ["c", "f"]}


def test_positional_fewer_items_than_shards():
    groups = partition_positional(["a", "b"], 4)
    assert groups == {1: ["a"], 2: ["b"]}


@pytest.mark.parametrize("count", [0, -1])
def test_invalid_shard_count(count):
    with pytest.raises(ValueError):
        partition_weighted(_items([1]), count)
    with pytest.raises(ValueError):
        partition_positional([1], count)


@pytest.mark.parametrize("seed", range(50))
def test_weighted_preserves_multiset_and_shard_cap(seed):
    items = _items([3, 1, 4, 1, 5, 9, 2, 6, 5, 3, 5])
    groups = partition_weighted(items, 4, rng=random.Random(seed))
    assert 1 <= len(groups) <= 4
    assert sorted(groups) == list(range(1, len(groups) + 1))
    flat = [item for group in groups.values() for item in group]
    assert Counter(id(item) for item in flat) == Counter(id(item) for item in items)


@pytest.mark.parametrize("seed", range(200))
def test_weighted_balance_bound_for_one_heavy_file(seed):
    items = _items([1, 1, 1, 1, 1, 1, 6])
    groups = partition_weighted(items, 3, rng=random.Random(seed))
    weights = _shard_weights(groups)
    average = sum(weights) / len(weights)
    assert max(weights) / average <= 2


def test_weighted_threshold_reached_exactly_opens_next_shard():
    # total 8 over 2 shards -> threshold 4; the fourth unit item hits it exactly.
    items = _items([1] * 8)
    groups = partition_weighted(items, 2, rng=_NoShuffle())
    assert [len(group) for group in groups.values()] == [4, 4]


def test_weighted_below_threshold_stays_in_shard():
    # threshold 10/3: 3 < 3.33 keeps filling, 4 >= 3.33 advances.
    items = _items([3, 1, 3, 3])
    groups = partition_weighted(items, 3, rng=_NoShuffle())
    assert [[item.weight for item in group] for group in groups.values()] == [[3, 1], [3, 3]]


def test_weighted_remainder_lands_in_last_shard():
    items = _items([5, 5, 1, 1, 1])
    groups = partition_weighted(items, 2, rng=_NoShuffle())
    assert [[item.weight for item in group] for group in groups.values()] == [[5, 5], [1, 1, 1]]


def test_weighted_zero_weights_spread_one_per_shard():
    items = _items([0, 0, 0, 0, 0])
    groups = partition_weighted(items, 3, rng=_NoShuffle())
    assert [len(group) for group in groups.values()] == [1, 1, 3]


def test_weighted_empty_input():
    assert partition_weighted([], 3) == {}


def test_build_shards_assigns_string_ids():
    files = [ScenarioFile(path=f"features/{i}.feature", weight=2) for i in range(4)]
    shards = build_shards(files, 2, rng=random.Random(7))
    assert [shard.shard_id for shard in shards] == ["1", "2"]
    assert sum(shard.weight for shard in shards) == 8
    assert sorted(p for shard in shards for p in shard.paths) == sorted(f.path for f in files)


def test_build_shards_positional_policy():
    files = [ScenarioFile(path=f"{i}.feature", weight=1) for i in range(3)]
    shards = build_shards(files, 2, policy=ShardPolicy.POSITIONAL)
    assert {shard.shard_id: shard.paths for shard in shards} == {
        "1": ["0.feature", "2.feature"],
        "2": ["1.feature"],
    }


class _NoShuffle(random.Random):
    def shuffle(self, x):
        return None
