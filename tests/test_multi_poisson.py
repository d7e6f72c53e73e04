"""
Unit tests for the multi-event Poisson disruption model.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
from scipy.stats import poisson

from stochcum.dist.events import EventTable
from stochcum.dist.multi_poisson import MultiPoissonDistribution
from stochcum.engine import Engine


def _model(domains, durations, rates):
    engine = Engine()
    xs = [engine.new_var(lo, hi) for (lo, hi) in domains]
    return xs, MultiPoissonDistribution(xs, durations, rates)


def test_known_cdf_values_for_lambda_two() -> None:
    _, dist = _model([(0, 10)], [1], [200])
    assert np.isclose(dist.intensity(0), 2.0)
    assert abs(dist.probability(3, 0) - 0.8571) < 1e-4
    assert abs(dist.probability(4, 0) - 0.9473) < 1e-4
    assert dist.calculate_quantile(0, 0.9) == 4


def test_get_min_and_get_max_read_current_bounds() -> None:
    xs, dist = _model([(1, 3)], [1], [100])
    assert np.isclose(dist.get_min(0), poisson.cdf(1, 1.0))
    assert np.isclose(dist.get_max(0), poisson.cdf(3, 1.0))

    assert xs[0].set_min(2)
    assert np.isclose(dist.get_min(0), poisson.cdf(2, 1.0))


def test_degenerate_index_is_certain_success() -> None:
    _, dist = _model([(0, 10), (0, 10)], [0, 3], [100, 100])
    assert dist.is_degenerate(0)
    assert not dist.is_degenerate(1)
    assert dist.get_min(0) == 1.0
    assert dist.get_max(0) == 1.0
    for p in (0.0, 0.5, 0.999, 1.0):
        assert dist.calculate_quantile(0, p) == 0


def test_quantile_is_monotone_in_probability() -> None:
    _, dist = _model([(0, 50)], [3, 2], [150, 75])
    qs = [dist.calculate_quantile(0, p) for p in np.linspace(0.0, 0.999, 200)]
    assert all(a <= b for a, b in zip(qs, qs[1:]))


def test_quantile_is_smallest_distance_reaching_probability() -> None:
    _, dist = _model([(0, 50)], [5], [100])
    for p in (0.1, 0.5, 0.9, 0.99):
        k = int(dist.calculate_quantile(0, p))
        assert dist.probability(k, 0) >= p
        if k > 0:
            assert dist.probability(k - 1, 0) < p


def test_quantile_edges() -> None:
    _, dist = _model([(0, 10)], [1], [200])
    assert dist.calculate_quantile(0, 0.0) == 0
    assert dist.calculate_quantile(0, 1e-12) == 0
    assert math.isinf(dist.calculate_quantile(0, 1.0))


def test_add_max_distance_uses_current_upper_bound() -> None:
    xs, dist = _model([(0, 7)], [1], [100])
    assert dist.add_max_distance(2.0, 0) == 9.0
    assert xs[0].set_max(4)
    assert dist.add_max_distance(2.0, 0) == 6.0


def test_from_table_checks_variable_count() -> None:
    engine = Engine()
    xs = [engine.new_var(0, 5), engine.new_var(0, 5)]
    table = EventTable(n_variables=1, durations=(1,), mean_occurrences=(100,))
    with pytest.raises(ValueError):
        MultiPoissonDistribution.from_table(xs, table)

    table = EventTable.from_events([[(1, 100)], [(2, 50)]])
    dist = MultiPoissonDistribution.from_table(xs, table)
    assert np.allclose(dist.intensities, [1.0, 1.0])


def test_malformed_event_arrays_are_rejected() -> None:
    engine = Engine()
    xs = [engine.new_var(0, 5), engine.new_var(0, 5)]
    with pytest.raises(ValueError):
        MultiPoissonDistribution(xs, [1, 1], [100])
    with pytest.raises(ValueError):
        MultiPoissonDistribution(xs, [1, 1, 1], [100, 100, 100])
    with pytest.raises(ValueError):
        MultiPoissonDistribution([], [], [])
