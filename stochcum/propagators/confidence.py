"""
Joint-confidence distance propagator.

Given distance variables d_0..d_{n-1} and a disruption model P_i (success
probability of distance k at index i), the constraint

    prod_i P_i(d_i) >= f

is enforced, where f is the confidence target (e.g. 0.95: the schedule is
expected to absorb disruptions with 95% probability). Working with
log-probabilities turns the product into an additive constraint

    sum_i log P_i(d_i) >= log f

so each index can be bounded in closed form against the best case of all
others (their upper bounds), without enumerating joint assignments.

Propagation proceeds in two passes:

  1. Each index must reach f on its own; lower bounds below that are raised.
     Best-case log-probabilities are accumulated, and a conflict is reported
     as soon as one index, or the running sum, falls short of the target.
  2. Each index receives the smallest probability it must contribute when
     all others achieve their best case; the corresponding quantile becomes
     its new lower bound (or a conflict when above the upper bound).
"""

from __future__ import annotations

import math
import warnings
from typing import Any, Callable, Hashable, List, Optional, Sequence, Tuple

from stochcum.dist.base import Distribution
from stochcum.dist.multi_poisson import MultiPoissonDistribution
from stochcum.host import DistanceVar, Host
from stochcum.literals import neg_geq_lit
from stochcum.propagators.config import PropagatorConfig


# (distribution, failing index, log max probabilities 0..index, max literals 0..index) -> literals
ConflictRefiner = Callable[[Distribution, int, Sequence[float], Sequence[Hashable]], Sequence[Hashable]]


def safe_log(p: float) -> float:
    p = float(p)
    if p <= 0.0:
        return -math.inf
    return math.log(p)


def min_probability_needed(
    log_confidence: float,
    sum_log_max: float,
    log_max_i: float,
    *,
    epsilon: float = 1e-7,
) -> float:
    """
    Smallest success probability index i must reach when every other index
    achieves its best case.

    The value is stepped below 1 by `epsilon` because the quantile is
    unbounded at 1.
    """
    p = math.exp(float(log_confidence) - (float(sum_log_max) - float(log_max_i)))
    if p >= 1.0:
        p -= float(epsilon)
    return float(p)


def derive_minimum_distances(
    distribution: Distribution,
    confidence: float,
    *,
    epsilon: float = 1e-7,
) -> Tuple[float, ...]:
    """
    Closed-form minimum distance of every index given the current upper bounds.

    No bounds are changed. Values may exceed the upper bounds (infeasible
    index) or be infinite for models with unbounded quantiles.
    """
    log_confidence = safe_log(confidence)
    log_max = [safe_log(distribution.get_max(i)) for i in range(len(distribution))]
    sum_log_max = 0.0
    for v in log_max:
        sum_log_max += v
    out = []
    for i, lm in enumerate(log_max):
        p = min_probability_needed(log_confidence, sum_log_max, lm, epsilon=epsilon)
        out.append(float(distribution.calculate_quantile(i, p)))
    return tuple(out)


def _as_distance(q: float, var: DistanceVar) -> int:
    # Unbounded quantiles are mapped just past the upper bound so that the
    # host reports the wipeout.
    if not math.isfinite(float(q)):
        return int(var.get_max()) + 1
    return int(math.ceil(q))


class JointConfidencePropagator:
    """
    Propagator for `prod_i P_i(distance_i) >= confidence`.

    The propagator is attached to every distance variable for lower-bound
    events and holds no state between invocations besides the immutable
    model, confidence target and configuration.
    """

    def __init__(
        self,
        host: Host,
        variables: Sequence[DistanceVar],
        confidence: float,
        distribution: Distribution,
        *,
        config: Optional[PropagatorConfig] = None,
        conflict_refiner: Optional[ConflictRefiner] = None,
        _stacklevel: int = 2,
    ) -> None:
        confidence = float(confidence)
        if not (0.0 <= confidence <= 1.0):
            raise ValueError(f"confidence must be in [0, 1] (got {confidence})")
        variables = tuple(variables)
        if not variables:
            raise ValueError("variables cannot be empty")
        if len(distribution) != len(variables):
            raise ValueError(
                f"Distribution covers {len(distribution)} variables, got {len(variables)}"
            )
        config = config or PropagatorConfig()
        config.validate()

        if confidence == 1.0:
            warnings.warn(
                "A confidence target of 1 can only be met on disrupted indices whose "
                "success probability rounds to 1; most domains will be in conflict.",
                UserWarning,
                stacklevel=_stacklevel,
            )
        elif confidence == 0.0:
            warnings.warn(
                "A confidence target of 0 makes the constraint vacuous.",
                UserWarning,
                stacklevel=_stacklevel,
            )

        self.host = host
        self.variables = variables
        self.confidence = confidence
        self.log_confidence = safe_log(confidence)
        self.distribution = distribution
        self.config = config
        self.conflict_refiner = conflict_refiner

        for i, var in enumerate(self.variables):
            var.attach(self, i, config.attach_event)

    def __len__(self) -> int:
        return len(self.variables)

    def _reason(self, literals: Sequence[Hashable]) -> Any:
        explanation = self.host.new_explanation()
        explanation.extend(literals)
        return explanation.build()

    def _fail(self, literals: Sequence[Hashable]) -> bool:
        self.host.set_conflict(self._reason(literals))
        return False

    def propagate(self) -> bool:
        """
        Tighten lower bounds; returns False after recording a conflict.
        """
        if self.confidence <= 0.0:
            return True

        f = self.confidence
        eps = float(self.config.epsilon)
        dist = self.distribution
        n = len(self.variables)

        sum_log_max = 0.0
        log_max: List[float] = []
        max_literals: List[Hashable] = []

        for i in range(n):
            var = self.variables[i]

            val_max = dist.get_max(i)
            # Every index must reach f on its own since all other factors are at most 1.
            if self.config.pre_tighten and dist.get_min(i) + eps < f:
                q = dist.calculate_quantile(i, min(f, 1.0 - eps))
                target = _as_distance(q, var) + 1
                # A short upper bound is reported below with the max literals only.
                if target <= var.get_max() or val_max >= f:
                    if not var.set_min(target, self._reason([var.get_min_lit()])):
                        return False

            log_max.append(safe_log(val_max))
            sum_log_max += log_max[i]
            max_literals.append(var.get_max_lit())

            if val_max < f:
                literals: Sequence[Hashable] = max_literals
                if self.conflict_refiner is not None:
                    literals = self.conflict_refiner(dist, i, tuple(log_max), tuple(max_literals))
                return self._fail(literals)

            if sum_log_max < self.log_confidence:
                return self._fail(max_literals)

        for i in range(n):
            var = self.variables[i]
            p = min_probability_needed(self.log_confidence, sum_log_max, log_max[i], epsilon=eps)
            minimum_distance = _as_distance(dist.calculate_quantile(i, p), var)

            if minimum_distance > var.get_max():
                return self._fail(list(max_literals) + [neg_geq_lit(var, minimum_distance)])

            if minimum_distance > var.get_min():
                why = [var.get_min_lit()]
                if self.config.explain_bounds == "full":
                    why = [lit for j, lit in enumerate(max_literals) if j != i] + why
                if not var.set_min(minimum_distance, self._reason(why)):
                    return False

        return True


def joint_confidence_constraint(
    host: Host,
    variables: Sequence[DistanceVar],
    confidence_percent: int,
    durations: Sequence[int],
    mean_occurrences: Sequence[int],
    *,
    config: Optional[PropagatorConfig] = None,
    conflict_refiner: Optional[ConflictRefiner] = None,
) -> JointConfidencePropagator:
    """
    Post a joint-confidence constraint over `variables` on `host`.

    Args:
        host: Engine that owns the variables and schedules propagators.
        variables: Distance variables in task-transition order.
        confidence_percent: Integer confidence in [0, 100], e.g. 95 means the
            schedule is expected to absorb disruptions with 95% probability.
        durations: Flattened event durations, entry `i + e * len(variables)`
            for variable i and event type e.
        mean_occurrences: Flattened mean occurrences scaled by 100, same
            layout and length as `durations`.

    Returns:
        The posted propagator.

    Raises:
        ValueError: If the confidence is not an integer in range or the
            event tables are malformed.
    """
    if float(confidence_percent) != int(confidence_percent):
        raise ValueError(f"confidence_percent must be an integer (got {confidence_percent})")
    pct = int(confidence_percent)
    if not (0 <= pct <= 100):
        raise ValueError(f"confidence_percent must be in [0, 100] (got {pct})")
    distribution = MultiPoissonDistribution(variables, durations, mean_occurrences)
    propagator = JointConfidencePropagator(
        host,
        variables,
        pct / 100.0,
        distribution,
        config=config,
        conflict_refiner=conflict_refiner,
        _stacklevel=3,
    )
    host.post(propagator)
    return propagator
