"""
Distribution abstraction for distance variables.

A distribution answers, for each distance variable of a propagator, how
likely a given distance is to absorb the stochastic disruptions of the
corresponding window ("success probability"), and the inverse question.
Concrete models only implement `probability` and `calculate_quantile`;
bound-level queries read the host variables they were built over.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from stochcum.host import DistanceVar


class Distribution(ABC):
    def __init__(self, variables: Sequence[DistanceVar]) -> None:
        self.variables = tuple(variables)
        if not self.variables:
            raise ValueError("variables cannot be empty")

    def __len__(self) -> int:
        return len(self.variables)

    @abstractmethod
    def probability(self, k: float, index: int) -> float:
        """
        Success probability when variable `index` takes distance `k`.
        """

    @abstractmethod
    def calculate_quantile(self, index: int, p: float) -> float:
        """
        Smallest integer distance whose success probability is at least `p`.

        Must be non-decreasing in `p`.
        """

    def get_min(self, index: int) -> float:
        return self.probability(self.variables[index].get_min(), index)

    def get_max(self, index: int) -> float:
        return self.probability(self.variables[index].get_max(), index)

    def add_max_distance(self, distance: float, index: int) -> float:
        """
        Shift `distance` by the current upper bound of variable `index`.

        Used when slack is redistributed across indices of a conflict.
        """
        return float(distance) + float(self.variables[index].get_max())
