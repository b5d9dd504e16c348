"""TCX (Training Center XML) parsing and lap conversion.

``parse_tcx`` extracts the sport, identifier and laps of the first
``Activity`` element. Lap aggregates declared by the device are kept as-is;
``convert_laps`` recomputes the ones TCX does not reliably carry (elevation
gain and power). Element matching ignores XML namespaces because exporters
disagree on the TCX and ActivityExtension prefixes.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .errors import MalformedDocument
from .metrics import elevation_gain, max_or_none, mean_or_none, positive_readings
from .models import Lap, Trackpoint
from .utils import coerce_float, parse_iso_datetime, to_utc_aware

LOGGER = logging.getLogger(__name__)

_BOM = "\ufeff"


@dataclass(frozen=True, slots=True)
class TcxTrackpoint:
    time: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    distance: Optional[float] = None
    heart_rate: Optional[float] = None
    speed: Optional[float] = None
    cadence: Optional[float] = None
    watts: Optional[float] = None


@dataclass(frozen=True, slots=True)
class TcxLap:
    """One ``Lap`` element with the aggregates the device declared."""

    start_time: Optional[datetime]
    total_time_seconds: float
    distance_meters: float
    maximum_speed: Optional[float] = None
    calories: Optional[float] = None
    average_heart_rate: Optional[float] = None
    maximum_heart_rate: Optional[float] = None
    average_cadence: Optional[float] = None
    trackpoints: Tuple[TcxTrackpoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class TcxActivity:
    sport: str
    id: str
    laps: Tuple[TcxLap, ...] = field(default_factory=tuple)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (child for child in element if _local(child.tag) == name)


def _child(element: ET.Element, *path: str) -> Optional[ET.Element]:
    """Follow direct children by local name; ``None`` when any step is missing."""

    current: Optional[ET.Element] = element
    for name in path:
        if current is None:
            return None
        current = next(_children(current, name), None)
    return current


def _descendants(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (node for node in element.iter() if _local(node.tag) == name)


def _text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None or element.text is None:
        return None
    text = element.text.strip()
    return text or None


def _number(element: ET.Element, *path: str) -> Optional[float]:
    # Present-but-garbled sensor values become absent instead of failing the file.
    return coerce_float(_text(_child(element, *path)))


def _extension_number(element: ET.Element, name: str) -> Optional[float]:
    extensions = _child(element, "Extensions")
    if extensions is None:
        return None
    for tpx in _descendants(extensions, "TPX"):
        value = _number(tpx, name)
        if value is not None:
            return value
    return None


def _non_negative(value: Optional[float]) -> float:
    if value is None or value < 0:
        return 0.0
    return value


def _parse_trackpoint(element: ET.Element) -> TcxTrackpoint:
    cadence = _extension_number(element, "RunCadence")
    if cadence is None:
        cadence = _number(element, "Cadence")
    return TcxTrackpoint(
        time=parse_iso_datetime(_text(_child(element, "Time"))),
        latitude=_number(element, "Position", "LatitudeDegrees"),
        longitude=_number(element, "Position", "LongitudeDegrees"),
        altitude=_number(element, "AltitudeMeters"),
        distance=_number(element, "DistanceMeters"),
        heart_rate=_number(element, "HeartRateBpm", "Value"),
        speed=_extension_number(element, "Speed"),
        cadence=cadence,
        watts=_extension_number(element, "Watts"),
    )


def _parse_lap(element: ET.Element) -> TcxLap:
    trackpoints = tuple(
        _parse_trackpoint(node) for node in _descendants(element, "Trackpoint")
    )
    return TcxLap(
        start_time=parse_iso_datetime(element.get("StartTime")),
        total_time_seconds=_non_negative(_number(element, "TotalTimeSeconds")),
        distance_meters=_non_negative(_number(element, "DistanceMeters")),
        maximum_speed=_number(element, "MaximumSpeed"),
        calories=_number(element, "Calories"),
        average_heart_rate=_number(element, "AverageHeartRateBpm", "Value"),
        maximum_heart_rate=_number(element, "MaximumHeartRateBpm", "Value"),
        average_cadence=_number(element, "Cadence"),
        trackpoints=trackpoints,
    )


def _prepare(content: Union[str, bytes]) -> Union[str, bytes]:
    # Some exporters emit a BOM or blank lines before the XML declaration.
    if isinstance(content, bytes):
        return content.lstrip(_BOM.encode("utf-8")).lstrip()
    return content.lstrip(_BOM).lstrip()


def parse_tcx(content: Union[str, bytes]) -> TcxActivity:
    """Parse TCX markup into a :class:`TcxActivity`.

    Raises:
        MalformedDocument: The markup is not well-formed or contains no
            ``Activity`` element.
    """

    try:
        root = ET.fromstring(_prepare(content))
    except ET.ParseError as exc:
        raise MalformedDocument(f"not well-formed: {exc}") from exc
    activity = next(_descendants(root, "Activity"), None)
    if activity is None:
        raise MalformedDocument("no activity element")

    sport = (activity.get("Sport") or "").strip() or "Unknown"
    identifier = _text(_child(activity, "Id")) or ""
    laps = tuple(_parse_lap(node) for node in _descendants(activity, "Lap"))
    LOGGER.debug(
        "Parsed TCX activity sport=%s id=%s laps=%d trackpoints=%d",
        sport,
        identifier,
        len(laps),
        sum(len(lap.trackpoints) for lap in laps),
    )
    return TcxActivity(sport=sport, id=identifier, laps=laps)


def _first_time(laps: Sequence[TcxLap]) -> Optional[datetime]:
    for lap in laps:
        for point in lap.trackpoints:
            if point.time is not None:
                return point.time
    return None


def flatten_trackpoints(laps: Sequence[TcxLap]) -> Tuple[Trackpoint, ...]:
    """Concatenate every lap's trackpoints, in lap order, as canonical records.

    ``time_offset`` is measured from the first timestamped trackpoint. Naive
    timestamps are read as UTC.
    """

    start = _first_time(laps)
    flattened: List[Trackpoint] = []
    for lap in laps:
        for point in lap.trackpoints:
            offset: Optional[float] = None
            if start is not None and point.time is not None:
                delta = to_utc_aware(point.time) - to_utc_aware(start)
                offset = delta.total_seconds()
            flattened.append(
                Trackpoint(
                    time_offset=offset,
                    time=point.time,
                    latitude=point.latitude,
                    longitude=point.longitude,
                    altitude=point.altitude,
                    distance=point.distance,
                    heart_rate=point.heart_rate,
                    speed=point.speed,
                    cadence=point.cadence,
                    watts=point.watts,
                )
            )
    return tuple(flattened)


def _convert_lap(lap: TcxLap, lap_index: int, start_index: int) -> Lap:
    watts = positive_readings(point.watts for point in lap.trackpoints)
    has_altitude = any(point.altitude is not None for point in lap.trackpoints)
    average_speed = None
    if lap.total_time_seconds > 0:
        average_speed = lap.distance_meters / lap.total_time_seconds
    return Lap(
        lap_index=lap_index,
        start_index=start_index,
        end_index=start_index + len(lap.trackpoints) - 1,
        start_time=lap.start_time,
        elapsed_time=lap.total_time_seconds,
        distance=lap.distance_meters,
        average_speed=average_speed,
        max_speed=lap.maximum_speed,
        average_heartrate=lap.average_heart_rate,
        max_heartrate=lap.maximum_heart_rate,
        average_cadence=lap.average_cadence,
        average_watts=mean_or_none(watts),
        max_watts=max_or_none(watts),
        total_elevation_gain=(
            elevation_gain(point.altitude for point in lap.trackpoints)
            if has_altitude
            else None
        ),
        calories=lap.calories,
    )


def convert_laps(laps: Sequence[TcxLap]) -> Tuple[Lap, ...]:
    """Convert parsed laps into index-range :class:`Lap` records.

    Ranges index into :func:`flatten_trackpoints` output. Laps without
    trackpoints cannot own a range and are left out; ``lap_index`` keeps the
    document position so numbering still matches the device.
    """

    converted: List[Lap] = []
    next_index = 0
    for position, lap in enumerate(laps, start=1):
        if not lap.trackpoints:
            LOGGER.debug("Lap %d has no trackpoints; omitting from lap list", position)
            continue
        converted.append(_convert_lap(lap, position, next_index))
        next_index += len(lap.trackpoints)
    return tuple(converted)
