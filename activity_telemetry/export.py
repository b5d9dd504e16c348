"""Export canonical activities as JSON, GPX or pandas DataFrames."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd

from .models import Activity, Trackpoint
from .utils import _normalise_value, json_dumps_sorted

LOGGER = logging.getLogger(__name__)

TRACKPOINT_COLUMNS = [
    "time_offset",
    "time",
    "latitude",
    "longitude",
    "altitude",
    "distance",
    "heart_rate",
    "speed",
    "cadence",
    "watts",
    "grade",
    "temperature",
    "moving",
]

LAP_COLUMNS = [
    "lap_index",
    "start_index",
    "end_index",
    "start_time",
    "elapsed_time",
    "moving_time",
    "distance",
    "average_speed",
    "max_speed",
    "average_heartrate",
    "max_heartrate",
    "average_cadence",
    "average_watts",
    "max_watts",
    "total_elevation_gain",
    "calories",
    "id",
    "name",
]


def activity_to_dict(activity: Activity) -> Dict[str, Any]:
    """Return a Strava-shaped, JSON-friendly mapping of ``activity``."""

    payload: Dict[str, Any] = {
        "id": activity.id,
        "name": activity.name,
        "type": activity.sport_type,
        "sport_type": activity.sport_type,
        "source": activity.source,
        "distance": activity.distance,
        "moving_time": activity.moving_time,
        "elapsed_time": activity.elapsed_time,
        "total_elevation_gain": activity.total_elevation_gain,
        "start_date": activity.start_date,
        "average_speed": activity.average_speed,
        "max_speed": activity.max_speed,
        "has_heartrate": activity.has_heartrate,
        "average_heartrate": activity.average_heartrate,
        "max_heartrate": activity.max_heartrate,
        "average_cadence": activity.average_cadence,
        "average_watts": activity.average_watts,
        "max_watts": activity.max_watts,
        "map": {"polyline": activity.polyline},
        "laps": [asdict(lap) for lap in activity.laps],
        "trackpoints": [asdict(point) for point in activity.trackpoints],
    }
    return _normalise_value(payload)


def activity_to_json(activity: Activity, *, indent: Optional[int] = None) -> str:
    return json_dumps_sorted(activity_to_dict(activity), indent=indent)


def _escape_xml(text: str) -> str:
    """Escape special XML characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def _point_time(point: Trackpoint, start: Optional[datetime]) -> Optional[datetime]:
    if point.time is not None:
        return point.time
    if start is not None and point.time_offset is not None:
        return start + timedelta(seconds=point.time_offset)
    return None


def activity_to_gpx(activity: Activity, *, include_altitude: bool = True) -> str:
    """Render the positioned trackpoints of ``activity`` as a GPX 1.1 track.

    Point times come from the trackpoint timestamp, or from ``start_date``
    plus the time offset when only the offset is known.
    """

    name = activity.name or "Activity"
    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="activity_telemetry"',
        '     xmlns="http://www.topografix.com/GPX/1/1"',
        '     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
        '     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 '
        'http://www.topografix.com/GPX/1/1/gpx.xsd">',
        "  <metadata>",
        f"    <name>{_escape_xml(name)}</name>",
    ]
    if activity.start_date is not None:
        gpx_lines.append(f"    <time>{activity.start_date.isoformat()}</time>")
    gpx_lines.extend(
        [
            "  </metadata>",
            "  <trk>",
            f"    <name>{_escape_xml(name)}</name>",
            f"    <type>{_escape_xml(activity.sport_type)}</type>",
            "    <trkseg>",
        ]
    )

    written = 0
    for point in activity.trackpoints:
        if point.latlon is None:
            continue
        gpx_lines.append(f'      <trkpt lat="{point.latitude}" lon="{point.longitude}">')
        if include_altitude and point.altitude is not None:
            gpx_lines.append(f"        <ele>{point.altitude}</ele>")
        point_time = _point_time(point, activity.start_date)
        if point_time is not None:
            gpx_lines.append(f"        <time>{point_time.isoformat()}</time>")
        gpx_lines.append("      </trkpt>")
        written += 1

    gpx_lines.extend(["    </trkseg>", "  </trk>", "</gpx>"])
    LOGGER.debug("Rendered GPX with %d points", written)
    return "\n".join(gpx_lines)


def trackpoints_frame(activity: Activity) -> pd.DataFrame:
    """One row per trackpoint, indexed by sequence position."""

    rows: List[Dict[str, Any]] = [asdict(point) for point in activity.trackpoints]
    df = pd.DataFrame(rows, columns=TRACKPOINT_COLUMNS)
    df.index.name = "index"
    return df


def laps_frame(activity: Activity) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = [asdict(lap) for lap in activity.laps]
    return pd.DataFrame(rows, columns=LAP_COLUMNS)
