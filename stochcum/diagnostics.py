"""
Confidence diagnostics for distance assignments.

The following items are provided:
  - exact joint success probabilities of distances under a distribution
  - a per-index report at the current variable bounds
  - Monte Carlo estimates of joint success with Wilson confidence intervals,
    for checking a schedule against sampled Poisson disruptions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.stats import binomtest

from stochcum.dist.base import Distribution
from stochcum.dist.multi_poisson import MultiPoissonDistribution
from stochcum.propagators.confidence import derive_minimum_distances


@dataclass(frozen=True)
class SuccessRateInterval:
    level: float
    lower: float
    upper: float


@dataclass(frozen=True)
class EmpiricalConfidence:
    runs: int
    successes: int
    p_hat: float
    interval: SuccessRateInterval
    exact: float


@dataclass(frozen=True)
class ConfidenceReport:
    """
    Success probabilities of every index at its current bounds.

    `is_satisfiable` tells whether the upper bounds can still reach the
    confidence target; `minimum_distances` are the closed-form lower bounds
    implied by the upper bounds of the other indices.
    """

    confidence: float
    prob_at_min: Tuple[float, ...]
    prob_at_max: Tuple[float, ...]
    joint_at_min: float
    joint_at_max: float
    minimum_distances: Tuple[float, ...]
    is_satisfiable: bool

    @staticmethod
    def from_distribution(
        distribution: Distribution,
        confidence: float,
        *,
        epsilon: float = 1e-7,
    ) -> "ConfidenceReport":
        confidence = float(confidence)
        if not (0.0 <= confidence <= 1.0):
            raise ValueError("confidence must be in [0, 1]")
        n = len(distribution)
        at_min = tuple(float(distribution.get_min(i)) for i in range(n))
        at_max = tuple(float(distribution.get_max(i)) for i in range(n))
        joint_max = float(np.prod(at_max))
        return ConfidenceReport(
            confidence=confidence,
            prob_at_min=at_min,
            prob_at_max=at_max,
            joint_at_min=float(np.prod(at_min)),
            joint_at_max=joint_max,
            minimum_distances=derive_minimum_distances(distribution, confidence, epsilon=epsilon),
            is_satisfiable=bool(joint_max >= confidence),
        )


def joint_success_probability(distribution: Distribution, distances: Sequence[float]) -> float:
    """
    Product of per-index success probabilities at the given distances.
    """
    if len(distances) != len(distribution):
        raise ValueError(f"Expected {len(distribution)} distances, got {len(distances)}")
    p = 1.0
    for i, k in enumerate(distances):
        p *= float(distribution.probability(float(k), i))
    return float(p)


def success_rate_interval(successes: int, runs: int, *, level: float = 0.95) -> SuccessRateInterval:
    """
    Wilson score interval for the fraction of successful runs.
    """
    runs = int(runs)
    successes = int(successes)
    level = float(level)
    if runs <= 0:
        raise ValueError("runs must be positive")
    if successes < 0 or successes > runs:
        raise ValueError("successes must be in [0, runs]")
    if not (0.0 < level < 1.0):
        raise ValueError("level must be between 0 and 1")

    ci = binomtest(successes, runs).proportion_ci(confidence_level=level, method="wilson")
    return SuccessRateInterval(level=level, lower=float(ci.low), upper=float(ci.high))


def simulate_joint_success(
    distribution: MultiPoissonDistribution,
    distances: Sequence[int],
    *,
    runs: int = 10_000,
    seed: int = 123,
    level: float = 0.95,
    rng: Optional[np.random.Generator] = None,
) -> EmpiricalConfidence:
    """
    Estimate the joint success rate of `distances` by sampling disruptions.

    Each run draws an independent Poisson disruption total per index; the run
    succeeds when every total is at most its distance.
    """
    runs = int(runs)
    if runs <= 0:
        raise ValueError("runs must be positive")
    if len(distances) != len(distribution):
        raise ValueError(f"Expected {len(distribution)} distances, got {len(distances)}")
    if rng is None:
        rng = np.random.default_rng(int(seed))

    lam = distribution.intensities
    d = np.asarray(list(distances), dtype=np.int64)
    draws = rng.poisson(lam=lam, size=(runs, lam.shape[0]))
    ok = np.all(draws <= d[None, :], axis=1)
    k = int(np.count_nonzero(ok))
    return EmpiricalConfidence(
        runs=runs,
        successes=k,
        p_hat=float(k) / float(runs),
        interval=success_rate_interval(k, runs, level=float(level)),
        exact=joint_success_probability(distribution, [int(x) for x in d]),
    )
