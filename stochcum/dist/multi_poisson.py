"""
Multi-event Poisson disruption model.

For each distance variable, independent recurring event types (e.g. machine
breakdowns, material shortages) are aggregated into a single intensity

    lambda_i = sum_e rate(i, e) * duration(i, e)

and total disruption time during the window is approximated by a Poisson
variable with mean lambda_i. A distance k succeeds when it absorbs the
disruption, so its success probability is the Poisson CDF at k.

Indices with lambda_i == 0 are degenerate: success is certain and no
distance is required.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.stats import poisson

from stochcum.dist.base import Distribution
from stochcum.dist.events import EventTable
from stochcum.host import DistanceVar


class MultiPoissonDistribution(Distribution):
    def __init__(
        self,
        variables: Sequence[DistanceVar],
        durations: Sequence[int],
        mean_occurrences: Sequence[int],
    ) -> None:
        super().__init__(variables)
        self.table = EventTable(
            n_variables=len(self.variables),
            durations=tuple(durations),
            mean_occurrences=tuple(mean_occurrences),
        )
        lambdas = tuple(self.table.intensity(i) for i in range(len(self.variables)))
        self._lambdas = lambdas
        # One frozen Poisson law per non-degenerate index; None marks certain success.
        self._models: Tuple[Optional[object], ...] = tuple(
            poisson(lam) if lam > 0.0 else None for lam in lambdas
        )

    @staticmethod
    def from_table(variables: Sequence[DistanceVar], table: EventTable) -> "MultiPoissonDistribution":
        if int(table.n_variables) != len(variables):
            raise ValueError(
                f"Event table covers {table.n_variables} variables, got {len(variables)}"
            )
        return MultiPoissonDistribution(variables, table.durations, table.mean_occurrences)

    def intensity(self, index: int) -> float:
        return self._lambdas[index]

    @property
    def intensities(self) -> np.ndarray:
        return np.asarray(self._lambdas, dtype=float)

    def is_degenerate(self, index: int) -> bool:
        return self._models[index] is None

    def probability(self, k: float, index: int) -> float:
        model = self._models[index]
        if model is None:
            return 1.0
        return float(model.cdf(k))  # type: ignore[attr-defined]

    def calculate_quantile(self, index: int, p: float) -> float:
        model = self._models[index]
        if model is None:
            return 0.0
        p = float(p)
        if p >= 1.0:
            return math.inf
        if p <= 0.0:
            return 0.0
        # scipy reports the support's lower edge (-1) for tiny p.
        return float(max(0.0, float(model.ppf(p))))  # type: ignore[attr-defined]
