"""Partition weighted scenario files into balanced shards."""

from __future__ import annotations

import random
from enum import Enum
from typing import Callable, Sequence, TypeVar

from cr_catalog.models import ScenarioFile, Shard

T = TypeVar("T")


class ShardPolicy(str, Enum):
    POSITIONAL = "positional"
    WEIGHTED = "weighted"


def _check_count(shard_count: int) -> None:
    if shard_count < 1:
        raise ValueError(f"shard_count must be >= 1, got {shard_count}")


def partition_positional(items: Sequence[T], shard_count: int) -> dict[int, list[T]]:
    """Round-robin: item ``i`` goes to shard ``(i + 1) % n``, 0 meaning ``n``."""
    _check_count(shard_count)
    result: dict[int, list[T]] = {}
    for index, item in enumerate(items):
        shard = (index + 1) % shard_count or shard_count
        result.setdefault(shard, []).append(item)
    return result


def partition_weighted(
    items: Sequence[T],
    shard_count: int,
    *,
    weight: Callable[[T], int] = lambda item: item.weight,  # type: ignore[attr-defined]
    rng: random.Random | None = None,
) -> dict[int, list[T]]:
    """Greedy fill after a uniform shuffle.

    Items are shuffled, then accumulated into the current shard until its
    weight is ``>=`` total / shard_count, at which point the next shard is
    opened. Whatever remains lands in the last shard. Only populated shards
    are returned, numbered from 1 without gaps.
    """
    _check_count(shard_count)
    shuffled = list(items)
    (rng or random.Random()).shuffle(shuffled)

    threshold = sum(weight(item) for item in shuffled) / shard_count
    result: dict[int, list[T]] = {}
    current = 1
    accumulated = 0
    for item in shuffled:
        result.setdefault(current, []).append(item)
        accumulated += weight(item)
        if accumulated >= threshold and current < shard_count:
            current += 1
            accumulated = 0
    return result


def build_shards(
    files: Sequence[ScenarioFile],
    shard_count: int,
    *,
    policy: ShardPolicy = ShardPolicy.WEIGHTED,
    rng: random.Random | None = None,
) -> list[Shard]:
    """Return shards ordered by ordinal; may be fewer than ``shard_count``."""
    if policy == ShardPolicy.POSITIONAL:
        groups = partition_positional(files, shard_count)
    else:
        groups = partition_weighted(files, shard_count, rng=rng)
    return [
        Shard(shard_id=str(ordinal), files=tuple(groups[ordinal]))
        for ordinal in sorted(groups)
    ]
