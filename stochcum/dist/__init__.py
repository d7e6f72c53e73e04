"""
Stochastic disruption models for distance variables.

A model maps each distance variable to the probability that a given distance
absorbs the disruptions of its window. The propagators only rely on the
`Distribution` abstraction, so alternative disruption processes can be added
alongside the Poisson model without touching them.
"""

from stochcum.dist.base import Distribution
from stochcum.dist.events import RATE_SCALE, EventTable
from stochcum.dist.multi_poisson import MultiPoissonDistribution

__all__ = [
    "Distribution",
    "EventTable",
    "RATE_SCALE",
    "MultiPoissonDistribution",
]
