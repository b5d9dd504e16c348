"""Route geometry: canvas projection and heading helpers."""

from .bearing import bearing, trackpoint_bearing
from .projection import (
    BoundingBox,
    ProjectionFrame,
    bounding_box,
    project_points,
    projection_frame,
    route_area,
)

__all__ = [
    "BoundingBox",
    "ProjectionFrame",
    "bearing",
    "bounding_box",
    "project_points",
    "projection_frame",
    "route_area",
    "trackpoint_bearing",
]
