"""Tag selection rules for scenario files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

REJECT_MARKER = "~"


def normalize_tag(tag: str) -> str:
    """Return the comparable form of a tag (whitespace and leading '@' removed)."""
    return tag.strip().removeprefix("@")


def _normalize_all(tags: Iterable[str]) -> frozenset[str]:
    return frozenset(name for name in (normalize_tag(tag) for tag in tags) if name)


@dataclass(frozen=True)
class TagRuleSet:
    """Select, reject and slow tag sets with membership-only semantics."""

    select: frozenset[str] = frozenset()
    reject: frozenset[str] = frozenset()
    slow: frozenset[str] = frozenset()

    @classmethod
    def from_tokens(
        cls, tokens: Iterable[str], slow_tokens: Iterable[str] = ()
    ) -> "TagRuleSet":
        """Build rules from CLI tokens; a leading '~' marks a reject tag."""
        select: list[str] = []
        reject: list[str] = []
        for token in tokens:
            token = token.strip()
            if token.startswith(REJECT_MARKER):
                reject.append(token[len(REJECT_MARKER):])
            else:
                select.append(token)
        return cls(
            select=_normalize_all(select),
            reject=_normalize_all(reject),
            slow=_normalize_all(slow_tokens),
        )

    def include(self, tags: Iterable[str]) -> bool:
        """Return True when a file with ``tags`` should be part of the run.

        Reject tags win over select tags. An empty select set includes
        everything that is not rejected.
        """
        names = _normalize_all(tags)
        if names & self.reject:
            return False
        if not self.select:
            return True
        return bool(names & self.select)

    def is_slow(self, tags: Iterable[str]) -> bool:
        return bool(_normalize_all(tags) & self.slow)
