"""
Unit tests for depth-first search with the joint-confidence propagator.
"""

from __future__ import annotations

import pytest

from stochcum.diagnostics import joint_success_probability
from stochcum.engine import Engine
from stochcum.propagators.confidence import joint_confidence_constraint
from stochcum.solvers.config import SearchConfig
from stochcum.solvers.dfs import solve


def _instance(domains, percent, durations, rates):
    engine = Engine()
    xs = [engine.new_var(lo, hi) for (lo, hi) in domains]
    prop = joint_confidence_constraint(engine, xs, percent, durations, rates)
    return engine, xs, prop


def test_minimum_total_distance_is_found() -> None:
    engine, xs, prop = _instance([(0, 10), (0, 10)], 90, [1, 1], [100, 100])
    res = solve(engine, xs)

    assert res.status == "optimal"
    assert res.is_complete is True
    assert res.assignment == (3, 3)
    assert res.objective == 6
    assert joint_success_probability(prop.distribution, res.assignment) >= 0.9


def test_degenerate_index_gets_zero_distance() -> None:
    engine, xs, _ = _instance([(0, 10), (0, 10)], 90, [0, 1], [0, 200])
    res = solve(engine, xs)
    assert res.status == "optimal"
    assert res.assignment == (0, 5)


def test_infeasible_instance_is_reported() -> None:
    engine, xs, _ = _instance([(0, 2)], 99, [5], [100])
    res = solve(engine, xs)
    assert res.status == "infeasible"
    assert res.assignment is None
    assert res.objective is None


def test_search_restores_engine_state() -> None:
    engine, xs, _ = _instance([(0, 6), (0, 6)], 80, [1, 1], [100, 100])
    before = [(x.get_min(), x.get_max()) for x in xs]
    solve(engine, xs)
    assert engine.decision_level == 0
    assert [(x.get_min(), x.get_max()) for x in xs] == before


def test_first_solution_mode_with_max_first_ordering() -> None:
    engine, xs, _ = _instance([(0, 8), (0, 8)], 90, [1, 1], [100, 100])
    res = solve(engine, xs, config=SearchConfig(objective="none", value_order="max_first"))
    assert res.status == "feasible"
    assert res.assignment == (8, 8)
    assert res.diagnostics["solutions_found"] == 1


def test_max_solutions_stops_early() -> None:
    engine, xs, _ = _instance([(0, 8), (0, 8)], 90, [1, 1], [100, 100])
    res = solve(engine, xs, config=SearchConfig(value_order="max_first", max_solutions=1))
    assert res.status == "max_solutions"
    assert res.is_complete is False
    assert res.assignment == (8, 8)


def test_time_limit_warns_and_stops() -> None:
    engine, xs, _ = _instance([(0, 10)] * 3, 90, [1, 1, 1], [100, 100, 100])
    with pytest.warns(UserWarning):
        res = solve(engine, xs, config=SearchConfig(time_limit_s=1e-12))
    assert res.status == "timeout"
    assert res.is_complete is False


def test_invalid_search_config_is_rejected() -> None:
    engine, xs, _ = _instance([(0, 5)], 90, [1], [100])
    with pytest.raises(ValueError):
        solve(engine, xs, config=SearchConfig(max_solutions=0))
    with pytest.raises(ValueError):
        solve(engine, xs, config=SearchConfig(objective="max"))  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        solve(engine, [])
