from __future__ import annotations

from typing import Hashable

from stochcum.host import DistanceVar


def neg_geq_lit(var: DistanceVar, value: int) -> Hashable:
    """
    Literal for the negation of `var >= value`, i.e. `var <= value - 1`.

    Hosts without value literals (lazy bound encodings) only expose bound
    literals; the upper-bound literal is then the strongest fact available.
    """
    get_leq = getattr(var, "get_leq_lit", None)
    if get_leq is None:
        return var.get_max_lit()
    return get_leq(int(value) - 1)
