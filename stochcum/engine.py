"""
Reference host for bound propagation.

In this module, a small trail-based engine is provided so that the
propagators in this package can be run and tested without an external
constraint solver. It implements the collaborator surface declared in
`stochcum.host`:

  - integer variables with bound literals and lower/upper bound events,
  - reason objects built from literal explanations,
  - a single conflict slot,
  - a FIFO fixpoint loop over scheduled propagators,
  - decision levels with trail-based backtracking.

Literals denote facts that currently hold (e.g. `[d0 >= 3]`); a reason is the
set of facts that implies an inference or, for a conflict, a contradiction.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Iterable, Iterator, List, Literal, Optional, Tuple

from stochcum.host import BoundEvent


@dataclass(frozen=True)
class BoundLiteral:
    """
    Bound fact `var op value` with op in {">=", "<="}.
    """

    var: str
    op: Literal[">=", "<="]
    value: int

    def negated(self) -> "BoundLiteral":
        if self.op == ">=":
            return BoundLiteral(self.var, "<=", int(self.value) - 1)
        return BoundLiteral(self.var, ">=", int(self.value) + 1)

    def holds(self, lo: int, hi: int) -> bool:
        """
        Whether the fact is entailed by the domain [lo, hi].
        """
        if self.op == ">=":
            return int(lo) >= int(self.value)
        return int(hi) <= int(self.value)

    def __str__(self) -> str:
        return f"[{self.var} {self.op} {self.value}]"


@dataclass(frozen=True)
class Reason:
    literals: Tuple[BoundLiteral, ...] = ()

    def __iter__(self) -> Iterator[BoundLiteral]:
        return iter(self.literals)

    def __len__(self) -> int:
        return len(self.literals)

    def __contains__(self, lit: object) -> bool:
        return lit in self.literals

    def variables(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for lit in self.literals:
            seen.setdefault(lit.var, None)
        return tuple(seen)


class LiteralExplanation:
    """
    Order-preserving, duplicate-free accumulator of bound literals.
    """

    def __init__(self, literals: Iterable[BoundLiteral] = ()) -> None:
        self._lits: Dict[BoundLiteral, None] = {}
        self.extend(literals)

    def add(self, lit: BoundLiteral) -> None:
        self._lits.setdefault(lit, None)

    def extend(self, lits: Iterable[BoundLiteral]) -> None:
        for lit in lits:
            self.add(lit)

    def build(self) -> Reason:
        return Reason(tuple(self._lits))


def _as_reason(reason: Any) -> Reason:
    if reason is None:
        return Reason()
    if isinstance(reason, Reason):
        return reason
    if isinstance(reason, LiteralExplanation):
        return reason.build()
    return Reason(tuple(reason))


class IntVar:
    """
    Integer variable with domain [lo, hi] owned by an `Engine`.
    """

    def __init__(self, engine: "Engine", name: str, lo: int, hi: int) -> None:
        lo = int(lo)
        hi = int(hi)
        if lo > hi:
            raise ValueError(f"Empty domain for {name!r}: [{lo}, {hi}]")
        self.engine = engine
        self.name = str(name)
        self._lo = lo
        self._hi = hi
        self._watchers: List[Tuple[Any, int, BoundEvent]] = []

    def __repr__(self) -> str:
        return f"IntVar({self.name!r}, [{self._lo}, {self._hi}])"

    def get_min(self) -> int:
        return self._lo

    def get_max(self) -> int:
        return self._hi

    def is_fixed(self) -> bool:
        return self._lo == self._hi

    @property
    def value(self) -> int:
        if not self.is_fixed():
            raise ValueError(f"Variable {self.name!r} is not fixed")
        return self._lo

    def get_min_lit(self) -> BoundLiteral:
        return BoundLiteral(self.name, ">=", self._lo)

    def get_max_lit(self) -> BoundLiteral:
        return BoundLiteral(self.name, "<=", self._hi)

    def get_leq_lit(self, value: int) -> BoundLiteral:
        return BoundLiteral(self.name, "<=", int(value))

    def get_geq_lit(self, value: int) -> BoundLiteral:
        return BoundLiteral(self.name, ">=", int(value))

    def attach(self, propagator: Any, index: int, event: BoundEvent) -> None:
        if event not in {"lower", "upper", "any"}:
            raise ValueError(f"Unknown bound event: {event!r}")
        self._watchers.append((propagator, int(index), event))

    def set_min(self, value: int, reason: Any = None) -> bool:
        value = int(value)
        if value <= self._lo:
            return True
        why = _as_reason(reason)
        if value > self._hi:
            self.engine.set_conflict(Reason(why.literals + (self.get_max_lit(),)))
            return False
        self.engine._save(self)
        self._lo = value
        self.engine._infer(self.get_min_lit(), why)
        self.engine._notify(self, "lower")
        return True

    def set_max(self, value: int, reason: Any = None) -> bool:
        value = int(value)
        if value >= self._hi:
            return True
        why = _as_reason(reason)
        if value < self._lo:
            self.engine.set_conflict(Reason(why.literals + (self.get_min_lit(),)))
            return False
        self.engine._save(self)
        self._hi = value
        self.engine._infer(self.get_max_lit(), why)
        self.engine._notify(self, "upper")
        return True


class Engine:
    """
    Minimal propagation engine: variables, propagators, trail and conflict slot.

    Propagators are objects exposing `propagate() -> bool`. They are scheduled
    when posted and whenever a watched bound of one of their variables changes.
    """

    def __init__(self) -> None:
        self.variables: List[IntVar] = []
        self.propagators: List[Any] = []
        self.conflict: Optional[Reason] = None
        self.inferences: List[Tuple[BoundLiteral, Reason]] = []
        self.n_propagations = 0

        self._queue: Deque[Any] = deque()
        self._queued: set[int] = set()
        self._trail: List[Tuple[IntVar, int, int]] = []
        self._levels: List[Tuple[int, int]] = []

    # Variables and propagators.

    def new_var(self, lo: int, hi: int, name: Optional[str] = None) -> IntVar:
        if name is None:
            name = f"x{len(self.variables)}"
        if any(v.name == name for v in self.variables):
            raise ValueError(f"Duplicate variable name: {name!r}")
        var = IntVar(self, name, lo, hi)
        self.variables.append(var)
        return var

    def new_explanation(self) -> LiteralExplanation:
        return LiteralExplanation()

    def post(self, propagator: Any) -> None:
        self.propagators.append(propagator)
        self._schedule(propagator)

    def set_conflict(self, reason: Any) -> None:
        self.conflict = _as_reason(reason)

    def schedule_all(self) -> None:
        for prop in self.propagators:
            self._schedule(prop)

    # Fixpoint.

    def propagate(self) -> bool:
        """
        Run scheduled propagators until fixpoint or conflict.
        """
        if self.conflict is not None:
            return False
        while self._queue:
            prop = self._queue.popleft()
            self._queued.discard(id(prop))
            self.n_propagations += 1
            ok = bool(prop.propagate())
            if not ok or self.conflict is not None:
                if self.conflict is None:
                    self.conflict = Reason()
                self._clear_queue()
                return False
        return True

    # Decision levels.

    @property
    def decision_level(self) -> int:
        return len(self._levels)

    def push_level(self) -> int:
        self._levels.append((len(self._trail), len(self.inferences)))
        return self.decision_level

    def backtrack(self, level: int) -> None:
        """
        Undo every bound change made after decision level `level` was entered.
        """
        level = int(level)
        if level < 0 or level > self.decision_level:
            raise ValueError(f"Cannot backtrack to level {level} (current {self.decision_level})")
        while self.decision_level > level:
            trail_len, n_inferences = self._levels.pop()
            while len(self._trail) > trail_len:
                var, lo, hi = self._trail.pop()
                var._lo = lo
                var._hi = hi
            del self.inferences[n_inferences:]
        self.conflict = None
        self._clear_queue()

    # Internal hooks used by IntVar.

    def _save(self, var: IntVar) -> None:
        self._trail.append((var, var._lo, var._hi))

    def _infer(self, lit: BoundLiteral, reason: Reason) -> None:
        self.inferences.append((lit, reason))

    def _notify(self, var: IntVar, event: BoundEvent) -> None:
        for prop, _index, watched in var._watchers:
            if watched == "any" or watched == event:
                self._schedule(prop)

    def _schedule(self, prop: Any) -> None:
        key = id(prop)
        if key in self._queued:
            return
        self._queued.add(key)
        self._queue.append(prop)

    def _clear_queue(self) -> None:
        self._queue.clear()
        self._queued.clear()
