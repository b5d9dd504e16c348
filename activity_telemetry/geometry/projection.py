"""Fit a geographic route into a pixel rectangle without distorting it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from ..config import (
    CANVAS_DATA_AREA,
    CANVAS_MAP_AREA,
    CANVAS_NARROW_BREAKPOINT_PX,
    CANVAS_NARROW_DATA_AREA,
    CANVAS_NARROW_MAP_AREA,
    CANVAS_SIDE_PADDING,
    PROJECTION_PADDING,
)
from ..models import ProjectedPoint, Rect

CoordArray = NDArray[np.float64]


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Latitude/longitude extent of a point set."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def lat_range(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lng_range(self) -> float:
        return self.max_lng - self.min_lng


@dataclass(frozen=True, slots=True)
class ProjectionFrame:
    """Everything needed to map one coordinate into the target rectangle."""

    bounds: BoundingBox
    lat_padding: float
    lng_padding: float
    padded_lat_range: float
    padded_lng_range: float
    scale_x: float
    scale_y: float
    scale: float
    scaled_width: float
    scaled_height: float
    offset_x: float
    offset_y: float


def _as_coord_array(points: Iterable[Sequence[float]]) -> CoordArray:
    """Convert an iterable of (lat, lng) pairs into an ``(n, 2)`` float64 array."""

    array = np.asarray(list(points), dtype=float)
    if array.size == 0:
        return np.empty((0, 2), dtype=float)
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError("Expected a sequence of (lat, lng) pairs")
    return array


def _widen_degenerate(low: float, high: float) -> Tuple[float, float]:
    # A zero range becomes a 1-unit range centred on the single value.
    if high - low > 0:
        return low, high
    return low - 0.5, high + 0.5


def bounding_box(points: Iterable[Sequence[float]]) -> BoundingBox:
    """Return the extent of ``points``; zero ranges are widened to one unit."""

    array = _as_coord_array(points)
    if len(array) == 0:
        raise ValueError("Cannot compute the bounds of an empty point collection")
    min_lat, max_lat = _widen_degenerate(
        float(np.min(array[:, 0])), float(np.max(array[:, 0]))
    )
    min_lng, max_lng = _widen_degenerate(
        float(np.min(array[:, 1])), float(np.max(array[:, 1]))
    )
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)


def projection_frame(
    bounds: BoundingBox, rect: Rect, padding: float = PROJECTION_PADDING
) -> ProjectionFrame:
    """Compute the uniform scale and centring offset for ``bounds`` in ``rect``."""

    if padding < 0:
        raise ValueError("padding must be non-negative")
    lat_padding = bounds.lat_range * padding
    lng_padding = bounds.lng_range * padding
    padded_lat_range = bounds.lat_range + lat_padding * 2
    padded_lng_range = bounds.lng_range + lng_padding * 2
    scale_x = rect.width / padded_lng_range
    scale_y = rect.height / padded_lat_range
    scale = min(scale_x, scale_y)
    scaled_width = padded_lng_range * scale
    scaled_height = padded_lat_range * scale
    return ProjectionFrame(
        bounds=bounds,
        lat_padding=lat_padding,
        lng_padding=lng_padding,
        padded_lat_range=padded_lat_range,
        padded_lng_range=padded_lng_range,
        scale_x=scale_x,
        scale_y=scale_y,
        scale=scale,
        scaled_width=scaled_width,
        scaled_height=scaled_height,
        offset_x=rect.x + (rect.width - scaled_width) / 2.0,
        offset_y=rect.y + (rect.height - scaled_height) / 2.0,
    )


def project_points(
    points: Iterable[Sequence[float]],
    rect: Rect,
    padding: float = PROJECTION_PADDING,
) -> List[ProjectedPoint]:
    """Project ``(lat, lng)`` points into ``rect``, one output point per input.

    Latitude grows upward, so pixel ``y`` is inverted. An empty input yields an
    empty list; identical points all land on the rectangle centre.
    """

    array = _as_coord_array(points)
    if len(array) == 0:
        return []
    frame = projection_frame(bounding_box(array), rect, padding)
    bounds = frame.bounds
    xs = frame.offset_x + (
        (array[:, 1] - (bounds.min_lng - frame.lng_padding))
        / frame.padded_lng_range
        * frame.scaled_width
    )
    ys = frame.offset_y + (
        (bounds.max_lat + frame.lat_padding - array[:, 0])
        / frame.padded_lat_range
        * frame.scaled_height
    )
    return [ProjectedPoint(float(x), float(y)) for x, y in zip(xs, ys)]


def route_area(width: float, height: float) -> Rect:
    """Return the part of a stats canvas reserved for the route drawing.

    The stats text sits above the route; narrow canvases give the text a
    larger share of the height.
    """

    if width < CANVAS_NARROW_BREAKPOINT_PX:
        data_area, map_area = CANVAS_NARROW_DATA_AREA, CANVAS_NARROW_MAP_AREA
    else:
        data_area, map_area = CANVAS_DATA_AREA, CANVAS_MAP_AREA
    side_padding = width * CANVAS_SIDE_PADDING
    return Rect(
        x=side_padding,
        y=height * data_area,
        width=width - side_padding * 2,
        height=height * map_area,
    )
