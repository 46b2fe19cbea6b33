from __future__ import annotations

import random
from typing import Optional, Protocol


class ThreatScorer(Protocol):
    """Source of the [0, 1) score the mock media analysis buckets into a level."""

    def draw(self) -> float: ...


class RandomScorer:
    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def draw(self) -> float:
        return self._rng.random()


class FixedScorer:
    """Always returns the same score. Used in tests and demos."""

    def __init__(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise ValueError("score must be within [0, 1]")
        self.value = value

    def draw(self) -> float:
        return self.value


_scorer: Optional[ThreatScorer] = None


def get_scorer() -> ThreatScorer:
    global _scorer
    if _scorer is None:
        _scorer = RandomScorer()
    return _scorer
