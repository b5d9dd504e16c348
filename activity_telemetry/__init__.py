"""Activity telemetry normalisation for Strava payloads and TCX files."""

from .aggregation import build_activity
from .errors import (
    ActivityFileError,
    IndexOutOfRange,
    MalformedDocument,
    MalformedPolyline,
    StravaAPIError,
    TelemetryError,
)
from .models import (
    Activity,
    ActivitySource,
    FileInput,
    Lap,
    ProjectedPoint,
    Rect,
    SegmentStats,
    Trackpoint,
    VendorApiInput,
)
from .segments import resolve_segment
from .tcx import parse_tcx
from .uploads import load_activity_file

__all__ = [
    "build_activity",
    "load_activity_file",
    "parse_tcx",
    "resolve_segment",
    "Activity",
    "ActivitySource",
    "FileInput",
    "Lap",
    "ProjectedPoint",
    "Rect",
    "SegmentStats",
    "Trackpoint",
    "VendorApiInput",
    "ActivityFileError",
    "IndexOutOfRange",
    "MalformedDocument",
    "MalformedPolyline",
    "StravaAPIError",
    "TelemetryError",
]
