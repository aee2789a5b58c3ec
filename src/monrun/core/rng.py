"""Deterministic RNG wrapper built on top of random.Random."""
from __future__ import annotations

from random import Random
from typing import Sequence, TypeVar

T_co = TypeVar("T_co")


class RNG:
    """Wrapper around random.Random that provides deterministic helpers."""

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._random = Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._random.random()

    def chance(self, probability: float) -> bool:
        """Return True when a uniform [0, 1) draw falls strictly below probability."""
        return self.random() < probability

    def uniform_factor(self, low: float, high: float) -> float:
        """Return low + draw * (high - low) for one uniform [0, 1) draw."""
        return low + self.random() * (high - low)

    def choice(self, seq: Sequence[T_co]) -> T_co:
        """Return a random element from the non-empty sequence."""
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return seq[int(self.random() * len(seq))]

