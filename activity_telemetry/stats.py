"""Derived performance statistics and display formatting.

Formatters take raw SI values (metres, seconds, metres per second) and return
the short strings shown on stat overlays. ``progress_stats`` computes the
running values at a given trackpoint index for playback-style views.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from .errors import IndexOutOfRange
from .models import Activity, Trackpoint
from .utils import to_utc_aware

LOGGER = logging.getLogger(__name__)

_ZERO_PACE = "0:00/km"


@dataclass(frozen=True, slots=True)
class ProgressStats:
    """Running totals at one trackpoint; ``pace`` is seconds per kilometre."""

    distance: float
    time_offset: float
    elevation_gain: float
    pace: Optional[float]


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def format_elevation(meters: float) -> str:
    return f"{meters:.0f}m"


def format_duration(seconds: float) -> str:
    """Format seconds as ``"1h 2m 3s"``, dropping leading zero units."""

    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_clock(seconds: float) -> str:
    """Format seconds as ``"h:mm:ss"`` or ``"m:ss"``."""

    total = max(0, int(round(seconds)))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def pace_seconds_per_km(distance: float, seconds: float) -> Optional[float]:
    if distance <= 0 or seconds <= 0:
        return None
    return seconds / (distance / 1000.0)


def _format_pace_value(pace: Optional[float]) -> str:
    if pace is None or not math.isfinite(pace):
        return _ZERO_PACE
    # Round to whole seconds first so 5:59.6 becomes 6:00, not 5:60.
    minutes, secs = divmod(int(round(pace)), 60)
    return f"{minutes}:{secs:02d}/km"


def format_pace(distance: float, seconds: float) -> str:
    """Format minutes per kilometre as ``"m:ss/km"``."""

    return _format_pace_value(pace_seconds_per_km(distance, seconds))


def format_speed(meters_per_second: Optional[float]) -> str:
    if meters_per_second is None:
        return "0.0 km/h"
    return f"{meters_per_second * 3.6:.1f} km/h"


def average_pace(activity: Activity) -> Optional[float]:
    """Seconds per kilometre from ``average_speed``, else distance / moving time."""

    if activity.average_speed is not None and activity.average_speed > 0:
        return 1000.0 / activity.average_speed
    return pace_seconds_per_km(activity.distance, activity.moving_time)


def format_average_pace(activity: Activity) -> str:
    return _format_pace_value(average_pace(activity))


def elevation_gain_until(trackpoints: Sequence[Trackpoint], index: int) -> float:
    """Sum climbs from the first trackpoint up to and including ``index``.

    A missing altitude repeats the last known one, so gaps add nothing.
    """

    total = 0.0
    last: Optional[float] = None
    for point in trackpoints[: max(0, index) + 1]:
        altitude = point.altitude if point.altitude is not None else last
        if altitude is None:
            continue
        if last is not None and altitude > last:
            total += altitude - last
        last = altitude
    return total


def _seconds_between(later: datetime, earlier: datetime) -> float:
    # Naive timestamps are read as UTC so they compare with aware ones.
    delta = to_utc_aware(later) - to_utc_aware(earlier)
    return float(math.floor(delta.total_seconds()))


def resolve_time_offset(activity: Activity, index: int) -> float:
    """Return seconds from the activity start to the trackpoint at ``index``.

    Tries the explicit offset, then the timestamp against ``start_date``,
    then against the first trackpoint, then a share of elapsed time
    proportional to the index.
    """

    trackpoints = activity.trackpoints
    if index < 0 or index >= len(trackpoints):
        raise IndexOutOfRange(
            f"index={index} outside trackpoint range [0, {len(trackpoints) - 1}]"
        )
    point = trackpoints[index]
    if point.time_offset is not None:
        return point.time_offset
    if point.time is not None:
        if activity.start_date is not None:
            return _seconds_between(point.time, activity.start_date)
        first = trackpoints[0].time
        if first is not None:
            return _seconds_between(point.time, first)
    if index > 0 and len(trackpoints) > 1:
        return float(math.floor(activity.elapsed_time * index / (len(trackpoints) - 1)))
    return 0.0


def progress_stats(activity: Activity, index: int) -> ProgressStats:
    """Running distance, time, climb and pace at trackpoint ``index``."""

    time_offset = resolve_time_offset(activity, index)
    point = activity.trackpoints[index]
    distance = point.distance if point.distance is not None else 0.0
    stats = ProgressStats(
        distance=distance,
        time_offset=time_offset,
        elevation_gain=elevation_gain_until(activity.trackpoints, index),
        pace=pace_seconds_per_km(distance, time_offset),
    )
    LOGGER.debug("Progress at index %d: %s", index, stats)
    return stats
