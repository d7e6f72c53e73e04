"""
Utility functions for event table import and export.

This module provides functions to load and save disruption event tables in
CSV and JSON formats, so that scheduling instances can be prepared by other
tools.
"""

from __future__ import annotations

import csv
import json
from typing import Dict, Tuple

from stochcum.dist.events import EventTable


def load_events_from_csv(path: str) -> EventTable:
    """
    Load an event table from a CSV file.

    Args:
        path: Path to CSV file with one row per (variable, event type).
            Expected format: Variable,EventType,Duration,MeanOccurrence
            where MeanOccurrence is the expected count scaled by 100.
            Missing (variable, event type) pairs are treated as (0, 0).

    Returns:
        The flattened event table.

    Raises:
        FileNotFoundError: If the CSV file is not found.
        ValueError: If the CSV format is invalid.
    """
    entries: Dict[Tuple[int, int], Tuple[int, int]] = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                key = (int(row["Variable"]), int(row["EventType"]))
                if key[0] < 0 or key[1] < 0:
                    raise ValueError(f"Negative index in row: {row}")
                if key in entries:
                    raise ValueError(f"Duplicate entry for variable {key[0]}, event type {key[1]}")
                entries[key] = (int(row["Duration"]), int(row["MeanOccurrence"]))
    except FileNotFoundError:
        raise FileNotFoundError(f"Events file not found: {path}")
    except KeyError as e:
        raise ValueError(f"Invalid CSV format: missing column {e}")

    if not entries:
        raise ValueError(f"Events file is empty: {path}")

    n_vars = max(v for v, _ in entries) + 1
    n_types = max(e for _, e in entries) + 1
    durations = [0] * (n_vars * n_types)
    rates = [0] * (n_vars * n_types)
    for (v, e), (d, m) in entries.items():
        durations[v + e * n_vars] = d
        rates[v + e * n_vars] = m
    return EventTable(n_variables=n_vars, durations=tuple(durations), mean_occurrences=tuple(rates))


def save_events_to_csv(table: EventTable, path: str) -> None:
    """
    Save an event table to a CSV file (one row per variable and event type).
    """
    with open(path, "w", encoding="utf-8", newline="") as f:
        fieldnames = ["Variable", "EventType", "Duration", "MeanOccurrence"]
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        n = int(table.n_variables)
        for e in range(table.n_event_types):
            for v in range(n):
                writer.writerow(
                    {
                        "Variable": v,
                        "EventType": e,
                        "Duration": table.durations[v + e * n],
                        "MeanOccurrence": table.mean_occurrences[v + e * n],
                    }
                )


def load_events_from_json(path: str) -> EventTable:
    """
    Load an event table from a JSON file.

    Args:
        path: Path to JSON file.
            Expected format:
            {
                "n_variables": 2,
                "durations": [3, 1, 0, 2],
                "mean_occurrences": [50, 100, 0, 25]
            }

    Raises:
        FileNotFoundError: If the JSON file is not found.
        ValueError: If the JSON format is invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"JSON file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON format: {e}")

    for key in ("n_variables", "durations", "mean_occurrences"):
        if key not in data:
            raise ValueError(f"JSON missing {key!r} key")

    return EventTable(
        n_variables=int(data["n_variables"]),
        durations=tuple(data["durations"]),
        mean_occurrences=tuple(data["mean_occurrences"]),
    )


def save_events_to_json(table: EventTable, path: str) -> None:
    data = {
        "n_variables": int(table.n_variables),
        "durations": list(table.durations),
        "mean_occurrences": list(table.mean_occurrences),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
