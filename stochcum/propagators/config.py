"""
Configuration objects for propagators.

In this module, configuration dataclasses are provided as a stable, typed
surface for propagator tuning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class PropagatorConfig:
    """
    Configuration for the joint-confidence propagator.

    `epsilon` is the numeric tolerance used when comparing probabilities to
    the confidence target and when stepping probabilities away from 1 (the
    quantile is unbounded there).
    """

    epsilon: float = 1e-7
    pre_tighten: bool = True
    attach_event: Literal["lower", "any"] = "lower"

    # "minimal": a derived lower bound cites the previous lower-bound literal.
    # "full": the upper-bound literals of every other index are cited as well.
    explain_bounds: Literal["minimal", "full"] = "minimal"

    def validate(self) -> None:
        """
        Configuration validation is performed.
        """
        if not (0.0 < float(self.epsilon) < 1.0):
            raise ValueError("epsilon must be in (0, 1)")
        if str(self.attach_event) not in {"lower", "any"}:
            raise ValueError("attach_event is not recognised")
        if str(self.explain_bounds) not in {"minimal", "full"}:
            raise ValueError("explain_bounds is not recognised")
