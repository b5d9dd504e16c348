"""Canonical activity / lap / trackpoint records and pipeline inputs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:
    from .tcx import TcxActivity

LatLon = Tuple[float, float]


class ActivitySource(str, Enum):
    """Provenance of an activity; consumers treat the two differently for staleness."""

    STRAVA = "strava"
    FILE = "tcx"


@dataclass(frozen=True, slots=True)
class Trackpoint:
    """One observed instant along an activity. Every field may be absent."""

    time_offset: Optional[float] = None
    time: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    distance: Optional[float] = None
    heart_rate: Optional[float] = None
    speed: Optional[float] = None
    cadence: Optional[float] = None
    watts: Optional[float] = None
    grade: Optional[float] = None
    temperature: Optional[float] = None
    moving: Optional[bool] = None

    @property
    def latlon(self) -> Optional[LatLon]:
        if self.latitude is None or self.longitude is None:
            return None
        return self.latitude, self.longitude


@dataclass(frozen=True, slots=True)
class Lap:
    """A contiguous, inclusive index range of the owning activity's trackpoints."""

    lap_index: int
    start_index: int
    end_index: int
    start_time: Optional[datetime] = None
    elapsed_time: float = 0.0
    moving_time: Optional[float] = None
    distance: float = 0.0
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    average_cadence: Optional[float] = None
    average_watts: Optional[float] = None
    max_watts: Optional[float] = None
    total_elevation_gain: Optional[float] = None
    calories: Optional[float] = None
    id: Optional[int] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.start_index < 0 or self.end_index < self.start_index:
            raise ValueError(
                f"Invalid lap range {self.start_index}..{self.end_index}"
            )
        if self.elapsed_time < 0 or self.distance < 0:
            raise ValueError("Lap elapsed time and distance must be non-negative")

    @property
    def point_count(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass(frozen=True, slots=True)
class Activity:
    """Aggregate root shared by vendor-API and file-derived activities."""

    id: Optional[Union[int, str]]
    name: str
    sport_type: str
    source: ActivitySource
    distance: float = 0.0
    moving_time: float = 0.0
    elapsed_time: float = 0.0
    total_elevation_gain: float = 0.0
    start_date: Optional[datetime] = None
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    has_heartrate: bool = False
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    average_cadence: Optional[float] = None
    average_watts: Optional[float] = None
    max_watts: Optional[float] = None
    polyline: Optional[str] = None
    laps: Tuple[Lap, ...] = ()
    trackpoints: Tuple[Trackpoint, ...] = ()

    def __post_init__(self) -> None:
        count = len(self.trackpoints)
        previous: Optional[Lap] = None
        for lap in self.laps:
            if lap.end_index >= count:
                raise ValueError(
                    f"Lap {lap.lap_index} ends at {lap.end_index} but only "
                    f"{count} trackpoints exist"
                )
            if previous is not None and lap.start_index <= previous.end_index:
                raise ValueError(
                    f"Lap {lap.lap_index} starts at {lap.start_index} inside lap "
                    f"{previous.lap_index} ending at {previous.end_index}"
                )
            previous = lap

    def lap_trackpoints(self, lap: Lap) -> Tuple[Trackpoint, ...]:
        """Return the slice of trackpoints covered by ``lap``."""

        return self.trackpoints[lap.start_index : lap.end_index + 1]


@dataclass(frozen=True, slots=True)
class ProjectedPoint:
    """Pixel-space coordinate produced by the geographic projector."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rect:
    """Target rectangle in a top-left-origin raster space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> ProjectedPoint:
        return ProjectedPoint(self.x + self.width / 2.0, self.y + self.height / 2.0)


@dataclass(frozen=True, slots=True)
class SegmentStats:
    """Distance (metres) and duration (seconds) between two trackpoint indices."""

    distance: float
    duration: float


@dataclass(frozen=True, slots=True)
class VendorApiInput:
    """Raw Strava payloads: activity detail, optional laps and optional streams."""

    detail: Mapping[str, Any]
    laps: Optional[Sequence[Mapping[str, Any]]] = None
    streams: Optional[Any] = None


@dataclass(frozen=True, slots=True)
class FileInput:
    """A parsed activity file."""

    document: "TcxActivity"


SourceInput = Union[VendorApiInput, FileInput]
