"""
Collaborator protocols required from the host search engine.

The propagation code in this package never owns variables, literals or
reasons. It reads bounds and requests tightenings through the small surface
declared here, so that any trail-based solver can host it. A reference host
is available in `stochcum.engine`.
"""

from __future__ import annotations

from typing import Any, Hashable, Iterable, Literal, Protocol, runtime_checkable


BoundEvent = Literal["lower", "upper", "any"]


@runtime_checkable
class DistanceVar(Protocol):
    """
    Integer distance variable with a host-owned domain [min, max].
    """

    def get_min(self) -> int: ...

    def get_max(self) -> int: ...

    def set_min(self, value: int, reason: Any) -> bool:
        """
        Tighten the lower bound; returns False (and records a conflict in the
        host) when `value` exceeds the current upper bound.
        """
        ...

    def get_min_lit(self) -> Hashable: ...

    def get_max_lit(self) -> Hashable: ...

    def attach(self, propagator: Any, index: int, event: BoundEvent) -> None: ...


class ExplanationBuilder(Protocol):
    """
    Accumulates contributing facts and emits an opaque justification.
    """

    def add(self, lit: Hashable) -> None: ...

    def extend(self, lits: Iterable[Hashable]) -> None: ...

    def build(self) -> Any: ...


class Host(Protocol):
    def new_explanation(self) -> ExplanationBuilder: ...

    def set_conflict(self, reason: Any) -> None: ...

    def post(self, propagator: Any) -> None: ...
