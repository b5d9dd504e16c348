"""Aggregate helpers shared by the lap converter and the activity aggregator."""

from __future__ import annotations

import statistics
from typing import Iterable, List, Optional


def elevation_gain(altitudes: Iterable[Optional[float]]) -> float:
    """Sum the positive deltas between consecutive known altitudes.

    Missing readings are skipped, so a climb across a gap still counts once.
    """

    total = 0.0
    previous: Optional[float] = None
    for altitude in altitudes:
        if altitude is None:
            continue
        if previous is not None and altitude > previous:
            total += altitude - previous
        previous = altitude
    return total


def positive_readings(values: Iterable[Optional[float]]) -> List[float]:
    """Return the strictly positive readings; zero means "no sensor data"."""

    return [value for value in values if value is not None and value > 0]


def mean_or_none(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return statistics.fmean(values)


def max_or_none(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return max(values)
