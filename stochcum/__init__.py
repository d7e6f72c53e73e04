"""
Robust minimum-distance scheduling under stochastic disruptions.

This package provides a joint-confidence propagator that keeps the distances
between scheduled tasks large enough to absorb recurring disruptions (e.g.
machine breakdowns) with a target probability, the Poisson disruption model
it relies on, and a small reference engine and search for running it
standalone.
"""

from stochcum.dist import Distribution, EventTable, MultiPoissonDistribution
from stochcum.engine import BoundLiteral, Engine, IntVar, LiteralExplanation, Reason
from stochcum.propagators import (
    JointConfidencePropagator,
    PropagatorConfig,
    derive_minimum_distances,
    joint_confidence_constraint,
)
from stochcum.solvers import SearchConfig, SearchResult, solve
from stochcum.diagnostics import (
    SuccessRateInterval,
    ConfidenceReport,
    EmpiricalConfidence,
    joint_success_probability,
    simulate_joint_success,
    success_rate_interval,
)
from stochcum.utils import (
    load_events_from_csv,
    load_events_from_json,
    save_events_to_csv,
    save_events_to_json,
)

__all__ = [
    "Distribution",
    "EventTable",
    "MultiPoissonDistribution",
    "BoundLiteral",
    "Engine",
    "IntVar",
    "LiteralExplanation",
    "Reason",
    "JointConfidencePropagator",
    "PropagatorConfig",
    "derive_minimum_distances",
    "joint_confidence_constraint",
    "SearchConfig",
    "SearchResult",
    "solve",
    "SuccessRateInterval",
    "ConfidenceReport",
    "EmpiricalConfidence",
    "joint_success_probability",
    "simulate_joint_success",
    "success_rate_interval",
    "load_events_from_csv",
    "load_events_from_json",
    "save_events_to_csv",
    "save_events_to_json",
]
