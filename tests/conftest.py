"""Global pytest fixtures & helpers.

Adds project root to path and provides TCX document builders shared by the
parser, aggregation, upload and CLI tests.
"""
from __future__ import annotations

import os
import sys
from typing import Iterable, Optional, Sequence

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
TPX_NS = "http://www.garmin.com/xmlschemas/ActivityExtension/v2"


# --- Factory helpers -------------------------------------------------
def tcx_trackpoint(
    time: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    altitude: Optional[float] = None,
    distance: Optional[float] = None,
    heart_rate: Optional[float] = None,
    speed: Optional[float] = None,
    watts: Optional[float] = None,
    cadence: Optional[float] = None,
) -> str:
    parts = ["<Trackpoint>"]
    if time is not None:
        parts.append(f"<Time>{time}</Time>")
    if lat is not None and lng is not None:
        parts.append(
            f"<Position><LatitudeDegrees>{lat}</LatitudeDegrees>"
            f"<LongitudeDegrees>{lng}</LongitudeDegrees></Position>"
        )
    if altitude is not None:
        parts.append(f"<AltitudeMeters>{altitude}</AltitudeMeters>")
    if distance is not None:
        parts.append(f"<DistanceMeters>{distance}</DistanceMeters>")
    if heart_rate is not None:
        parts.append(f"<HeartRateBpm><Value>{heart_rate}</Value></HeartRateBpm>")
    if cadence is not None:
        parts.append(f"<Cadence>{cadence}</Cadence>")
    if speed is not None or watts is not None:
        parts.append(f'<Extensions><ns3:TPX xmlns:ns3="{TPX_NS}">')
        if speed is not None:
            parts.append(f"<ns3:Speed>{speed}</ns3:Speed>")
        if watts is not None:
            parts.append(f"<ns3:Watts>{watts}</ns3:Watts>")
        parts.append("</ns3:TPX></Extensions>")
    parts.append("</Trackpoint>")
    return "".join(parts)


def tcx_lap(
    start_time: str,
    total_time: float,
    distance: float,
    trackpoints: Sequence[str] = (),
    max_speed: Optional[float] = None,
    calories: Optional[float] = None,
) -> str:
    parts = [f'<Lap StartTime="{start_time}">']
    parts.append(f"<TotalTimeSeconds>{total_time}</TotalTimeSeconds>")
    parts.append(f"<DistanceMeters>{distance}</DistanceMeters>")
    if max_speed is not None:
        parts.append(f"<MaximumSpeed>{max_speed}</MaximumSpeed>")
    if calories is not None:
        parts.append(f"<Calories>{calories}</Calories>")
    if trackpoints:
        parts.append("<Track>" + "".join(trackpoints) + "</Track>")
    parts.append("</Lap>")
    return "".join(parts)


def tcx_document(
    laps: Iterable[str],
    sport: str = "Running",
    activity_id: str = "2024-05-01T07:00:00Z",
) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<TrainingCenterDatabase xmlns="{TCX_NS}">'
        "<Activities>"
        f'<Activity Sport="{sport}">'
        f"<Id>{activity_id}</Id>"
        + "".join(laps)
        + "</Activity></Activities></TrainingCenterDatabase>"
    )


def two_lap_document() -> str:
    """Two laps of two trackpoints; altitude climbs 10m then dips and climbs 2m."""

    lap_one = tcx_lap(
        "2024-05-01T07:00:00Z",
        total_time=300,
        distance=1000,
        max_speed=4.0,
        calories=60,
        trackpoints=[
            tcx_trackpoint("2024-05-01T07:00:00Z", 51.5, -0.12, 100, 0, 140, 3.2, 200),
            tcx_trackpoint("2024-05-01T07:05:00Z", 51.505, -0.115, 110, 1000, 150, 3.4, 220),
        ],
    )
    lap_two = tcx_lap(
        "2024-05-01T07:05:00Z",
        total_time=300,
        distance=1000,
        max_speed=3.8,
        calories=55,
        trackpoints=[
            tcx_trackpoint("2024-05-01T07:05:01Z", 51.506, -0.114, 105, 1005, 155, 3.3, 0),
            tcx_trackpoint("2024-05-01T07:10:00Z", 51.51, -0.11, 107, 2000, 160, 3.6, 240),
        ],
    )
    return tcx_document([lap_one, lap_two])


@pytest.fixture
def two_lap_tcx() -> str:
    return two_lap_document()
