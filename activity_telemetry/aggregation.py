"""Assemble canonical :class:`Activity` records from either data source.

``build_activity`` is the single entry point; it dispatches on the input
variant so the vendor payload and the parsed file both end up in the same
variant-free shape.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .errors import MalformedPolyline
from .metrics import elevation_gain, max_or_none, mean_or_none, positive_readings
from .models import (
    Activity,
    ActivitySource,
    FileInput,
    Lap,
    SourceInput,
    Trackpoint,
    VendorApiInput,
)
from .polyline_codec import decode, encode
from .streams import normalize_streams, streams_by_type
from .tcx import TcxActivity, convert_laps, flatten_trackpoints
from .utils import coerce_float, parse_iso_datetime

LOGGER = logging.getLogger(__name__)

__all__ = ["build_activity", "activity_route"]


def build_activity(source: SourceInput) -> Activity:
    """Normalise a vendor-API bundle or a parsed file into an :class:`Activity`."""

    if isinstance(source, FileInput):
        return _from_file(source.document)
    if isinstance(source, VendorApiInput):
        return _from_vendor_api(source)
    raise TypeError(f"Unsupported activity source: {type(source).__name__}")


def activity_route(activity: Activity) -> List[Tuple[float, float]]:
    """Return the activity's route as ``(lat, lng)`` pairs.

    Uses the encoded polyline when present, otherwise the positioned
    trackpoints.
    """

    if activity.polyline:
        return decode(activity.polyline)
    return [point.latlon for point in activity.trackpoints if point.latlon is not None]


# ---------------------------------------------------------------------------
# File-derived activities
# ---------------------------------------------------------------------------


def _start_date(document: TcxActivity, trackpoints: Sequence[Trackpoint]) -> Optional[datetime]:
    for point in trackpoints:
        if point.time is not None:
            return point.time
    for lap in document.laps:
        if lap.start_time is not None:
            return lap.start_time
    return parse_iso_datetime(document.id)


def _from_file(document: TcxActivity) -> Activity:
    trackpoints = flatten_trackpoints(document.laps)
    laps = convert_laps(document.laps)

    total_distance = sum(lap.distance_meters for lap in document.laps)
    total_time = sum(lap.total_time_seconds for lap in document.laps)
    # Summed over the whole sequence so climbs spanning a lap boundary count once.
    total_gain = elevation_gain(point.altitude for point in trackpoints)

    coordinates = [point.latlon for point in trackpoints if point.latlon is not None]
    polyline = encode(coordinates) if coordinates else None

    heart_rates = positive_readings(point.heart_rate for point in trackpoints)
    speeds = positive_readings(point.speed for point in trackpoints)
    cadences = positive_readings(point.cadence for point in trackpoints)
    watts = positive_readings(point.watts for point in trackpoints)

    max_speed = max_or_none(speeds)
    if max_speed is None:
        max_speed = max_or_none(
            positive_readings(lap.maximum_speed for lap in document.laps)
        )

    activity = Activity(
        id=document.id or None,
        name=f"{document.sport} Activity",
        sport_type=document.sport,
        source=ActivitySource.FILE,
        distance=total_distance,
        moving_time=total_time,
        elapsed_time=total_time,
        total_elevation_gain=total_gain,
        start_date=_start_date(document, trackpoints),
        average_speed=total_distance / total_time if total_time > 0 else None,
        max_speed=max_speed,
        has_heartrate=bool(heart_rates),
        average_heartrate=mean_or_none(heart_rates),
        max_heartrate=max_or_none(heart_rates),
        average_cadence=mean_or_none(cadences),
        average_watts=mean_or_none(watts),
        max_watts=max_or_none(watts),
        polyline=polyline,
        laps=laps,
        trackpoints=trackpoints,
    )
    LOGGER.info(
        "Built file activity sport=%s distance=%.1fm laps=%d trackpoints=%d",
        activity.sport_type,
        activity.distance,
        len(activity.laps),
        len(activity.trackpoints),
    )
    return activity


# ---------------------------------------------------------------------------
# Vendor-API activities
# ---------------------------------------------------------------------------


def _coerce_int(value: Any) -> Optional[int]:
    number = coerce_float(value)
    if number is None:
        return None
    return int(number)


def _non_negative(value: Any) -> float:
    number = coerce_float(value)
    if number is None or number < 0:
        return 0.0
    return number


def _vendor_polyline(detail: Mapping[str, Any]) -> Optional[str]:
    map_info = detail.get("map")
    if not isinstance(map_info, Mapping):
        return None
    encoded = map_info.get("polyline") or map_info.get("summary_polyline")
    if not encoded or not isinstance(encoded, str):
        return None
    try:
        points = decode(encoded)
    except MalformedPolyline as exc:
        LOGGER.warning(
            "Dropping malformed polyline for activity %s: %s", detail.get("id"), exc
        )
        return None
    return encoded if points else None


def _vendor_lap(raw: Mapping[str, Any], position: int, count: int) -> Optional[Lap]:
    lap_index = _coerce_int(raw.get("lap_index")) or position
    start_index = _coerce_int(raw.get("start_index"))
    end_index = _coerce_int(raw.get("end_index"))
    if start_index is None or end_index is None:
        LOGGER.warning("Lap %s has no index range; skipping", lap_index)
        return None
    if start_index < 0 or end_index < start_index:
        LOGGER.warning(
            "Lap %s has an invalid range %s..%s; skipping",
            lap_index,
            start_index,
            end_index,
        )
        return None
    if start_index >= count:
        LOGGER.warning(
            "Lap %s starts at %s beyond %s trackpoints; skipping",
            lap_index,
            start_index,
            count,
        )
        return None
    if end_index >= count:
        LOGGER.warning(
            "Lap %s end_index %s clamped to %s", lap_index, end_index, count - 1
        )
        end_index = count - 1
    return Lap(
        lap_index=lap_index,
        start_index=start_index,
        end_index=end_index,
        start_time=parse_iso_datetime(raw.get("start_date")),
        elapsed_time=_non_negative(raw.get("elapsed_time")),
        moving_time=coerce_float(raw.get("moving_time")),
        distance=_non_negative(raw.get("distance")),
        average_speed=coerce_float(raw.get("average_speed")),
        max_speed=coerce_float(raw.get("max_speed")),
        average_heartrate=coerce_float(raw.get("average_heartrate")),
        max_heartrate=coerce_float(raw.get("max_heartrate")),
        average_cadence=coerce_float(raw.get("average_cadence")),
        average_watts=coerce_float(raw.get("average_watts")),
        max_watts=coerce_float(raw.get("max_watts")),
        total_elevation_gain=coerce_float(raw.get("total_elevation_gain")),
        calories=coerce_float(raw.get("calories")),
        id=_coerce_int(raw.get("id")),
        name=raw.get("name") if isinstance(raw.get("name"), str) else None,
    )


def _vendor_laps(
    raw_laps: Optional[Sequence[Mapping[str, Any]]], count: int
) -> Tuple[Lap, ...]:
    if not raw_laps:
        return ()
    if count == 0:
        LOGGER.warning(
            "Dropping %d laps: activity has no trackpoints to index", len(raw_laps)
        )
        return ()
    laps: List[Lap] = []
    for position, raw in enumerate(raw_laps, start=1):
        if not isinstance(raw, Mapping):
            continue
        lap = _vendor_lap(raw, position, count)
        if lap is not None:
            laps.append(lap)
    laps.sort(key=lambda lap: lap.start_index)
    return _without_overlaps(laps)


def _without_overlaps(laps: Sequence[Lap]) -> Tuple[Lap, ...]:
    """Trim each lap to start after the previous one ends; drop laps left empty."""

    kept: List[Lap] = []
    for lap in laps:
        if kept and lap.start_index <= kept[-1].end_index:
            new_start = kept[-1].end_index + 1
            if new_start > lap.end_index:
                LOGGER.warning(
                    "Lap %s lies inside lap %s; skipping",
                    lap.lap_index,
                    kept[-1].lap_index,
                )
                continue
            LOGGER.warning(
                "Lap %s overlaps lap %s; start_index %s moved to %s",
                lap.lap_index,
                kept[-1].lap_index,
                lap.start_index,
                new_start,
            )
            lap = replace(lap, start_index=new_start)
        kept.append(lap)
    return tuple(kept)


def _from_vendor_api(source: VendorApiInput) -> Activity:
    detail = source.detail
    trackpoints: Tuple[Trackpoint, ...] = ()
    if source.streams is not None:
        trackpoints = normalize_streams(streams_by_type(source.streams))
    laps = _vendor_laps(source.laps, len(trackpoints))

    total_gain = coerce_float(detail.get("total_elevation_gain"))
    if total_gain is None:
        total_gain = elevation_gain(point.altitude for point in trackpoints)

    average_heartrate = coerce_float(detail.get("average_heartrate"))
    raw_id = detail.get("id")
    activity = Activity(
        id=raw_id if isinstance(raw_id, (int, str)) else None,
        name=str(detail.get("name") or ""),
        sport_type=str(detail.get("type") or detail.get("sport_type") or "Unknown"),
        source=ActivitySource.STRAVA,
        distance=_non_negative(detail.get("distance")),
        moving_time=_non_negative(detail.get("moving_time")),
        elapsed_time=_non_negative(detail.get("elapsed_time")),
        total_elevation_gain=total_gain,
        start_date=parse_iso_datetime(detail.get("start_date")),
        average_speed=coerce_float(detail.get("average_speed")),
        max_speed=coerce_float(detail.get("max_speed")),
        has_heartrate=bool(detail.get("has_heartrate")) or average_heartrate is not None,
        average_heartrate=average_heartrate,
        max_heartrate=coerce_float(detail.get("max_heartrate")),
        average_cadence=coerce_float(detail.get("average_cadence")),
        average_watts=coerce_float(detail.get("average_watts")),
        max_watts=coerce_float(detail.get("max_watts")),
        polyline=_vendor_polyline(detail),
        laps=laps,
        trackpoints=trackpoints,
    )
    LOGGER.info(
        "Built Strava activity id=%s laps=%d trackpoints=%d",
        activity.id,
        len(activity.laps),
        len(activity.trackpoints),
    )
    return activity
