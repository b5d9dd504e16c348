"""Resolve distance and duration for index ranges of a trackpoint sequence."""

from __future__ import annotations

from typing import Sequence, Tuple

from .errors import IndexOutOfRange
from .models import Lap, SegmentStats, Trackpoint

__all__ = ["clamp_index", "order_bounds", "resolve_lap", "resolve_segment"]


def _check_index(name: str, index: int, length: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfRange(f"{name}={index!r} is not an integer index")
    if index < 0 or index >= length:
        raise IndexOutOfRange(
            f"{name}={index} outside trackpoint range [0, {length - 1}]"
        )


def resolve_segment(
    trackpoints: Sequence[Trackpoint], start_index: int, end_index: int
) -> SegmentStats:
    """Return distance and duration between two trackpoint indices.

    Distance is the absolute difference of the cumulative distances, since
    sparse data does not guarantee monotonic distance in index order. Either
    value is ``0`` when one of the endpoints lacks the field. The indices are
    not reordered: a reversed range yields a negative duration.

    Raises:
        IndexOutOfRange: Either index falls outside ``[0, len(trackpoints) - 1]``.
    """

    length = len(trackpoints)
    _check_index("start_index", start_index, length)
    _check_index("end_index", end_index, length)
    start = trackpoints[start_index]
    end = trackpoints[end_index]

    distance = 0.0
    if start.distance is not None and end.distance is not None:
        distance = abs(end.distance - start.distance)
    duration = 0.0
    if start.time_offset is not None and end.time_offset is not None:
        duration = end.time_offset - start.time_offset
    return SegmentStats(distance=distance, duration=duration)


def resolve_lap(trackpoints: Sequence[Trackpoint], lap: Lap) -> SegmentStats:
    """Resolve the trackpoint range a lap covers."""

    return resolve_segment(trackpoints, lap.start_index, lap.end_index)


def order_bounds(first: int, second: int) -> Tuple[int, int]:
    """Return a forward ``(start, end)`` pair for two picked indices."""

    if second < first:
        return second, first
    return first, second


def clamp_index(index: int, length: int) -> int:
    """Clamp a UI-supplied index into ``[0, length - 1]``."""

    if length <= 0:
        raise IndexOutOfRange("Cannot clamp an index into an empty trackpoint sequence")
    return max(0, min(int(index), length - 1))
