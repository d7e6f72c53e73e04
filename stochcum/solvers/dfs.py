"""
Depth-first search over distance variables (reference solver).

In this module, a branch-and-bound search on the reference `Engine` is
provided. Every node runs the engine's fixpoint, so posted propagators
prune the distance domains before branching. Branching splits the first
unfixed variable into `x <= v` / `x >= v + 1` (or the mirror for
value_order="max_first").
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from stochcum.engine import Engine, IntVar
from stochcum.solvers.config import SearchConfig


@dataclass(frozen=True)
class SearchResult:
    """
    Results of a depth-first search.
    """

    assignment: Optional[Tuple[int, ...]]
    objective: Optional[int]
    status: str
    is_complete: bool
    diagnostics: Dict[str, Any]
    runtime_s: float


def solve(
    engine: Engine,
    variables: Sequence[IntVar],
    *,
    config: Optional[SearchConfig] = None,
) -> SearchResult:
    """
    Search for an assignment of `variables` consistent with every posted propagator.

    The engine is returned to its entry decision level afterwards.
    """
    config = config or SearchConfig()
    config.validate()
    t0 = perf_counter()
    variables = tuple(variables)
    if not variables:
        raise ValueError("variables cannot be empty")

    entry_level = engine.decision_level
    best: Optional[Tuple[int, ...]] = None
    best_obj: Optional[int] = None
    solutions: List[Tuple[int, ...]] = []
    nodes_visited = 0
    failures = 0
    bound_pruned = 0
    status = "ok"
    is_complete = True
    stop = False

    max_solutions = int(config.max_solutions) if config.max_solutions is not None else None
    time_limit_s = float(config.time_limit_s) if config.time_limit_s is not None else None

    def timed_out() -> bool:
        return time_limit_s is not None and (perf_counter() - t0) >= float(time_limit_s)

    def branches(var: IntVar) -> List[Tuple[str, int]]:
        if config.value_order == "min_first":
            v = var.get_min()
            return [("le", v), ("ge", v + 1)]
        v = var.get_max()
        return [("ge", v), ("le", v - 1)]

    def dfs() -> None:
        nonlocal best, best_obj, nodes_visited, failures, bound_pruned
        nonlocal status, is_complete, stop
        if timed_out():
            status = "timeout"
            is_complete = False
            stop = True
            return
        nodes_visited += 1

        if config.objective == "sum" and best_obj is not None:
            if sum(v.get_min() for v in variables) >= int(best_obj):
                bound_pruned += 1
                return

        var = next((v for v in variables if not v.is_fixed()), None)
        if var is None:
            sol = tuple(v.value for v in variables)
            solutions.append(sol)
            best = sol
            best_obj = int(sum(sol))
            if config.objective == "none":
                status = "feasible"
                stop = True
            elif max_solutions is not None and len(solutions) >= int(max_solutions):
                status = "max_solutions"
                is_complete = False
                stop = True
            return

        for op, value in branches(var):
            level = engine.push_level()
            ok = var.set_max(value) if op == "le" else var.set_min(value)
            if ok:
                # Decisions may move upper bounds, which propagators do not watch.
                engine.schedule_all()
                ok = engine.propagate()
            if ok:
                dfs()
            else:
                failures += 1
            engine.backtrack(level - 1)
            if stop:
                return

    root_level = engine.push_level()
    engine.schedule_all()
    if engine.propagate():
        dfs()
    else:
        failures += 1
    engine.backtrack(root_level - 1)
    assert engine.decision_level == entry_level

    if status == "ok":
        status = "optimal" if best is not None else "infeasible"
    elif status == "timeout":
        warnings.warn(
            f"Search stopped after {time_limit_s}s; the returned assignment (if any) "
            "is not proven optimal.",
            UserWarning,
            stacklevel=2,
        )

    runtime_s = float(perf_counter() - t0)
    diagnostics: Dict[str, Any] = {
        "nodes_visited": int(nodes_visited),
        "failures": int(failures),
        "bound_pruned_nodes": int(bound_pruned),
        "solutions_found": int(len(solutions)),
        "objective": str(config.objective),
        "value_order": str(config.value_order),
    }
    return SearchResult(
        assignment=best,
        objective=best_obj,
        status=str(status),
        is_complete=bool(is_complete),
        diagnostics=diagnostics,
        runtime_s=float(runtime_s),
    )
