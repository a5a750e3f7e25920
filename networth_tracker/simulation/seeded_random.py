"""
Seeded Random Generator

A minimal deterministic pseudo-random source. Two generators built from the
same seed always yield the same sequence, which is what lets the history
simulator reproduce a value for any date without storing anything.

IMPORTANT: normal() pairs its outputs. One Box-Muller transform produces
two variates; the first call returns one and caches the other as a
"spare" for the next call. Consecutive normal() calls are therefore two
halves of the same transform, not independent draws.
"""

import math
from datetime import date
from typing import Optional

from networth_tracker.simulation.constants import (
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
)


def seed_for_date(day: date) -> int:
    """
    Derive a generator seed from a calendar date.

    year*10000 + month*100 + day, so 2024-03-15 seeds with 20240315.
    """
    return day.year * 10000 + day.month * 100 + day.day


class SeededRandom:
    """Linear congruential generator with uniform and normal variates."""

    def __init__(self, seed: int):
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise TypeError(f"Seed must be an integer, got {type(seed).__name__}")
        self._state = seed % LCG_MODULUS
        self._spare: Optional[float] = None

    @classmethod
    def for_date(cls, day: date) -> "SeededRandom":
        """Build a generator seeded from a calendar date."""
        return cls(seed_for_date(day))

    @property
    def state(self) -> int:
        """Current internal state (the last produced seed)."""
        return self._state

    def next(self) -> float:
        """Advance the generator and return a value in [0, 1)."""
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def range(self, min_value: float, max_value: float) -> float:
        """Uniform value between min_value and max_value."""
        return min_value + self.next() * (max_value - min_value)

    def normal(self, mean: float = 0.0, std_dev: float = 1.0) -> float:
        """
        Normally distributed value (Box-Muller).

        Returns the cached spare from the previous transform if there is
        one; otherwise runs a fresh transform and caches its second half.
        """
        if self._spare is not None:
            spare = self._spare
            self._spare = None
            return mean + std_dev * spare

        u = self.next()
        while u == 0.0:
            # log(0) is undefined
            u = self.next()
        v = self.next()

        magnitude = math.sqrt(-2.0 * math.log(u))
        angle = 2.0 * math.pi * v
        self._spare = magnitude * math.sin(angle)
        return mean + std_dev * magnitude * math.cos(angle)
