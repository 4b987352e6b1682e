"""Utility functions for dbnav."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FuzzyMatch:
    """Result of matching a query against a candidate string."""

    matched: bool
    score: int = 0
    indices: list[int] = field(default_factory=list)


def fuzzy_score(query: str, target: str) -> FuzzyMatch:
    """Score a case-insensitive fuzzy match of query against target.

    An empty query matches everything with score 100. A contiguous substring
    scores ``100 - position`` (never below 50). Otherwise every query
    character must appear in order; each hit earns 15 in the first ten
    characters and 10 after that, plus 5 when it directly follows the
    previous hit.
    """
    query = query.lower()
    target = target.lower()

    if not query:
        return FuzzyMatch(matched=True, score=100)

    position = target.find(query)
    if position >= 0:
        return FuzzyMatch(
            matched=True,
            score=max(100 - position, 50),
            indices=list(range(position, position + len(query))),
        )

    query_idx = 0
    score = 0
    indices: list[int] = []
    last_hit = -1
    for i, char in enumerate(target):
        if query_idx < len(query) and char == query[query_idx]:
            indices.append(i)
            gain = 15 if i < 10 else 10
            if last_hit >= 0 and i == last_hit + 1:
                gain += 5
            score += gain
            last_hit = i
            query_idx += 1

    if query_idx == len(query):
        return FuzzyMatch(matched=True, score=score, indices=indices)
    return FuzzyMatch(matched=False)


def format_duration_ms(ms: float) -> str:
    """Format milliseconds into a human-readable duration string."""
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    if ms >= 1:
        return f"{ms:.0f}ms"
    return f"{ms:.2f}ms"
