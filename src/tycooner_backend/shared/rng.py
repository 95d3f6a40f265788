"""Seeded randomness for challenge target selection."""

from __future__ import annotations

from collections.abc import Sequence  # noqa: TC003
from random import Random
from typing import TypeVar

_T = TypeVar("_T")


class DeterministicRandomService:
    """Reproducible random source injected wherever the rules draw lots.

    Two services built with the same seed make the same picks in the same
    order, so a restarted session replays its challenge targets.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = Random(seed)  # noqa: S311

    def reseed(self, seed: int | None) -> None:
        """Start the draw sequence over from *seed*."""
        self._random = Random(seed)  # noqa: S311

    def choice(self, population: Sequence[_T]) -> _T:
        """Pick one element of *population*, each with equal probability."""
        if not population:
            msg = "No candidates to choose from."
            raise ValueError(msg)
        return population[self._random.randrange(len(population))]


__all__ = ["DeterministicRandomService"]
