from stochcum.propagators.config import PropagatorConfig
from stochcum.propagators.confidence import (
    ConflictRefiner,
    JointConfidencePropagator,
    derive_minimum_distances,
    joint_confidence_constraint,
    min_probability_needed,
)

__all__ = [
    "PropagatorConfig",
    "ConflictRefiner",
    "JointConfidencePropagator",
    "derive_minimum_distances",
    "joint_confidence_constraint",
    "min_probability_needed",
]
