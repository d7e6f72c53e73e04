"""
Configuration objects for search modes.

In this module, configuration dataclasses are provided as a stable, typed
surface for user-selectable search modes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class SearchConfig:
    """
    Configuration for depth-first search over distance variables.

    With objective="sum" the search minimises the total distance by branch
    and bound; with objective="none" it stops at the first solution.
    """

    objective: Literal["sum", "none"] = "sum"
    value_order: Literal["min_first", "max_first"] = "min_first"

    max_solutions: Optional[int] = None
    time_limit_s: Optional[float] = None

    def validate(self) -> None:
        """
        Configuration validation is performed.
        """
        if str(self.objective) not in {"sum", "none"}:
            raise ValueError("objective is not recognised")
        if str(self.value_order) not in {"min_first", "max_first"}:
            raise ValueError("value_order is not recognised")
        if self.max_solutions is not None and int(self.max_solutions) <= 0:
            raise ValueError("max_solutions must be positive when provided")
        if self.time_limit_s is not None and float(self.time_limit_s) <= 0.0:
            raise ValueError("time_limit_s must be positive when provided")
