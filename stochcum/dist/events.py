from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


# Mean occurrence rates are supplied as integers scaled by this factor.
RATE_SCALE = 100.0


@dataclass(frozen=True)
class EventTable:
    """
    Flattened disruption tables for a sequence of distance variables.

    Entry `variable + event_type * n_variables` of `durations` and
    `mean_occurrences` describes one recurring event type that may disrupt
    the window represented by `variable`. Mean occurrences are integers
    scaled by 100 (e.g. 150 means 1.5 expected occurrences).
    """

    n_variables: int
    durations: Tuple[int, ...]
    mean_occurrences: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "durations", tuple(int(x) for x in self.durations))
        object.__setattr__(self, "mean_occurrences", tuple(int(x) for x in self.mean_occurrences))
        n = int(self.n_variables)
        if n <= 0:
            raise ValueError("n_variables must be positive")
        if len(self.durations) != len(self.mean_occurrences):
            raise ValueError(
                "durations and mean_occurrences must have the same length "
                f"(got {len(self.durations)} and {len(self.mean_occurrences)})"
            )
        if len(self.durations) % n != 0:
            raise ValueError(
                f"Event table length {len(self.durations)} is not a multiple of the variable count {n}"
            )
        if any(d < 0 for d in self.durations):
            raise ValueError("Event durations must be non-negative")
        if any(m < 0 for m in self.mean_occurrences):
            raise ValueError("Event mean occurrences must be non-negative")

    @staticmethod
    def from_events(per_variable: Sequence[Sequence[Tuple[int, int]]]) -> "EventTable":
        """
        Build the flattened layout from `per_variable[i] = [(duration, rate_x100), ...]`.

        Every variable must list the same number of event types; pad with
        (0, 0) entries for event types that do not affect a variable.
        """
        n = len(per_variable)
        if n == 0:
            raise ValueError("per_variable cannot be empty")
        counts = {len(evs) for evs in per_variable}
        if len(counts) != 1:
            raise ValueError("Every variable must list the same number of event types")
        n_types = counts.pop()
        durations = [0] * (n * n_types)
        rates = [0] * (n * n_types)
        for i, evs in enumerate(per_variable):
            for e, (d, m) in enumerate(evs):
                durations[i + e * n] = int(d)
                rates[i + e * n] = int(m)
        return EventTable(n_variables=n, durations=tuple(durations), mean_occurrences=tuple(rates))

    @property
    def n_event_types(self) -> int:
        return len(self.durations) // int(self.n_variables)

    def _pos(self, variable: int, event_type: int) -> int:
        variable = int(variable)
        event_type = int(event_type)
        if not (0 <= variable < self.n_variables):
            raise IndexError(f"variable index {variable} out of range")
        if not (0 <= event_type < self.n_event_types):
            raise IndexError(f"event type index {event_type} out of range")
        return variable + event_type * int(self.n_variables)

    def duration(self, variable: int, event_type: int) -> int:
        return self.durations[self._pos(variable, event_type)]

    def rate(self, variable: int, event_type: int) -> float:
        return self.mean_occurrences[self._pos(variable, event_type)] / RATE_SCALE

    def intensity(self, variable: int) -> float:
        """
        Ponderated expectation of disruption time: sum_e rate(i, e) * duration(i, e).
        """
        lam = 0.0
        for e in range(self.n_event_types):
            lam += self.rate(variable, e) * self.duration(variable, e)
        return float(lam)

    def intensities(self) -> np.ndarray:
        n = int(self.n_variables)
        if self.n_event_types == 0:
            return np.zeros((n,), dtype=float)
        d = np.asarray(self.durations, dtype=float).reshape(self.n_event_types, n)
        m = np.asarray(self.mean_occurrences, dtype=float).reshape(self.n_event_types, n) / RATE_SCALE
        return (d * m).sum(axis=0)
