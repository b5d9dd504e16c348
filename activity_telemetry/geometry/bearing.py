"""Heading helpers used to orient a marker along the route."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..models import LatLon, Trackpoint


def bearing(origin: LatLon, target: LatLon) -> float:
    """Return the initial great-circle bearing from ``origin`` to ``target``.

    The result is in degrees clockwise from north, within ``[0, 360)``.
    """

    lat1 = math.radians(origin[0])
    lat2 = math.radians(target[0])
    delta_lng = math.radians(target[1] - origin[1])
    y = math.sin(delta_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        delta_lng
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def trackpoint_bearing(trackpoints: Sequence[Trackpoint], index: int) -> Optional[float]:
    """Bearing from ``trackpoints[index]`` to the next trackpoint with a position.

    Returns ``None`` when the indexed point has no position or no later point
    does.
    """

    if index < 0 or index >= len(trackpoints):
        return None
    origin = trackpoints[index].latlon
    if origin is None:
        return None
    for candidate in trackpoints[index + 1 :]:
        target = candidate.latlon
        if target is not None:
            return bearing(origin, target)
    return None
