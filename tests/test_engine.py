"""
Unit tests for the reference propagation engine.
"""

from __future__ import annotations

import pytest

from stochcum.engine import BoundLiteral, Engine, LiteralExplanation, Reason
from stochcum.host import DistanceVar
from stochcum.literals import neg_geq_lit


class _CountingPropagator:
    def __init__(self, var, limit: int) -> None:
        self.var = var
        self.limit = limit
        self.runs = 0

    def propagate(self) -> bool:
        # Enforce var <= limit by reporting a conflict when the lower bound passes it.
        self.runs += 1
        if self.var.get_min() > self.limit:
            self.var.engine.set_conflict(Reason((self.var.get_min_lit(),)))
            return False
        return True


def test_literals_negate_and_hold() -> None:
    lit = BoundLiteral("x", ">=", 3)
    assert lit.negated() == BoundLiteral("x", "<=", 2)
    assert lit.negated().negated() == lit
    assert lit.holds(3, 9)
    assert not lit.holds(2, 9)
    assert BoundLiteral("x", "<=", 4).holds(0, 4)
    assert str(lit) == "[x >= 3]"


def test_explanation_deduplicates_preserving_order() -> None:
    a = BoundLiteral("x", ">=", 1)
    b = BoundLiteral("y", "<=", 2)
    e = LiteralExplanation()
    e.extend([a, b, a])
    e.add(b)
    reason = e.build()
    assert reason.literals == (a, b)
    assert len(reason) == 2
    assert a in reason
    assert reason.variables() == ("x", "y")


def test_int_var_satisfies_distance_protocol() -> None:
    engine = Engine()
    assert isinstance(engine.new_var(0, 3), DistanceVar)


def test_set_min_records_inference_and_trail() -> None:
    engine = Engine()
    x = engine.new_var(0, 10, name="d")
    why = Reason((BoundLiteral("y", "<=", 2),))

    assert x.set_min(4, why)
    assert x.get_min_lit() == BoundLiteral("d", ">=", 4)
    assert engine.inferences == [(BoundLiteral("d", ">=", 4), why)]

    # Weaker bounds are no-ops.
    assert x.set_min(2)
    assert x.get_min() == 4
    assert len(engine.inferences) == 1


def test_set_min_past_upper_bound_sets_conflict() -> None:
    engine = Engine()
    x = engine.new_var(0, 3, name="d")
    assert x.set_min(5, [BoundLiteral("y", ">=", 1)]) is False
    assert engine.conflict == Reason((BoundLiteral("y", ">=", 1), BoundLiteral("d", "<=", 3)))
    assert x.get_min() == 0
    assert engine.propagate() is False


def test_set_max_below_lower_bound_sets_conflict() -> None:
    engine = Engine()
    x = engine.new_var(2, 6, name="d")
    assert x.set_max(4)
    assert x.get_max_lit() == BoundLiteral("d", "<=", 4)
    assert x.set_max(1) is False
    assert engine.conflict == Reason((BoundLiteral("d", ">=", 2),))


def test_backtrack_restores_bounds_and_clears_conflict() -> None:
    engine = Engine()
    x = engine.new_var(0, 10)
    y = engine.new_var(0, 10)

    assert x.set_min(2)
    level = engine.push_level()
    assert level == 1
    assert x.set_min(5)
    assert y.set_max(3)
    assert y.set_min(4) is False

    engine.backtrack(0)
    assert engine.decision_level == 0
    assert (x.get_min(), x.get_max()) == (2, 10)
    assert (y.get_min(), y.get_max()) == (0, 10)
    assert engine.conflict is None
    assert len(engine.inferences) == 1

    with pytest.raises(ValueError):
        engine.backtrack(3)


def test_fixpoint_runs_watchers_and_stops_on_conflict() -> None:
    engine = Engine()
    x = engine.new_var(0, 10)
    prop = _CountingPropagator(x, limit=5)
    x.attach(prop, 0, "lower")
    engine.post(prop)

    assert engine.propagate() is True
    assert prop.runs == 1

    assert x.set_max(8)
    assert engine.propagate() is True
    assert prop.runs == 1

    assert x.set_min(7)
    assert engine.propagate() is False
    assert prop.runs == 2
    assert engine.conflict == Reason((BoundLiteral("x0", ">=", 7),))


def test_engine_rejects_bad_variables_and_events() -> None:
    engine = Engine()
    engine.new_var(0, 1, name="a")
    with pytest.raises(ValueError):
        engine.new_var(0, 1, name="a")
    with pytest.raises(ValueError):
        engine.new_var(3, 1)
    x = engine.new_var(0, 1)
    with pytest.raises(ValueError):
        x.attach(object(), 0, "fixed")  # type: ignore[arg-type]


def test_value_requires_fixed_variable() -> None:
    engine = Engine()
    x = engine.new_var(1, 2)
    with pytest.raises(ValueError):
        _ = x.value
    assert x.set_max(1)
    assert x.is_fixed()
    assert x.value == 1


class _BoundsOnlyVar:
    def get_max_lit(self):
        return "max-literal"


def test_neg_geq_lit_uses_value_literal_when_available() -> None:
    engine = Engine()
    x = engine.new_var(0, 5, name="d")
    assert neg_geq_lit(x, 7) == BoundLiteral("d", "<=", 6)
    assert neg_geq_lit(_BoundsOnlyVar(), 7) == "max-literal"  # type: ignore[arg-type]
