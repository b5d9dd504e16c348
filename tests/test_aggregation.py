import logging
from datetime import datetime, timezone

import pytest

from activity_telemetry.aggregation import activity_route, build_activity
from activity_telemetry.models import (
    Activity,
    ActivitySource,
    FileInput,
    Lap,
    Trackpoint,
    VendorApiInput,
)
from activity_telemetry.polyline_codec import decode, encode
from activity_telemetry.segments import resolve_lap
from activity_telemetry.tcx import parse_tcx

from conftest import tcx_document, tcx_lap, tcx_trackpoint


# --- File-derived activities -------------------------------------------------
def test_two_lap_file_activity(two_lap_tcx):
    activity = build_activity(FileInput(parse_tcx(two_lap_tcx)))

    assert activity.source is ActivitySource.FILE
    assert activity.name == "Running Activity"
    assert activity.sport_type == "Running"
    assert activity.id == "2024-05-01T07:00:00Z"
    assert activity.distance == 2000
    assert activity.moving_time == 600
    assert activity.elapsed_time == 600
    assert activity.average_speed == pytest.approx(2000 / 600)
    assert activity.total_elevation_gain == pytest.approx(12)
    assert activity.start_date == datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)
    assert activity.max_speed == pytest.approx(3.6)
    assert activity.has_heartrate is True
    assert activity.average_heartrate == pytest.approx(151.25)
    assert activity.max_heartrate == 160
    assert activity.average_watts == pytest.approx(220)
    assert activity.max_watts == 240

    assert len(activity.trackpoints) == 4
    assert [(lap.start_index, lap.end_index) for lap in activity.laps] == [(0, 1), (2, 3)]
    assert decode(activity.polyline) == [tp.latlon for tp in activity.trackpoints]


def test_file_laps_resolve_against_flattened_sequence(two_lap_tcx):
    activity = build_activity(FileInput(parse_tcx(two_lap_tcx)))
    second = resolve_lap(activity.trackpoints, activity.laps[1])
    assert second.distance == pytest.approx(995)
    assert second.duration == pytest.approx(299)
    assert activity.lap_trackpoints(activity.laps[0])[1].altitude == 110


def test_file_without_positions_or_time():
    xml = tcx_document(
        [tcx_lap("2024-05-01T07:00:00Z", 0, 0, trackpoints=[tcx_trackpoint(heart_rate=0)])],
        sport="Biking",
        activity_id="",
    )
    activity = build_activity(FileInput(parse_tcx(xml)))
    assert activity.polyline is None
    assert activity.average_speed is None
    assert activity.has_heartrate is False
    assert activity.average_heartrate is None
    assert activity.id is None
    # No trackpoint timestamps: the lap start is used.
    assert activity.start_date == datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)
    assert activity.name == "Biking Activity"


def test_file_max_speed_falls_back_to_lap_declared():
    xml = tcx_document(
        [
            tcx_lap(
                "2024-05-01T07:00:00Z",
                60,
                200,
                max_speed=5.5,
                trackpoints=[tcx_trackpoint("2024-05-01T07:00:00Z", 1.0, 2.0)],
            )
        ]
    )
    activity = build_activity(FileInput(parse_tcx(xml)))
    assert activity.max_speed == 5.5


def test_file_gain_counts_climb_across_lap_boundary():
    xml = tcx_document(
        [
            tcx_lap(
                "2024-05-01T07:00:00Z",
                10,
                10,
                trackpoints=[tcx_trackpoint("2024-05-01T07:00:00Z", altitude=10)],
            ),
            tcx_lap(
                "2024-05-01T07:00:10Z",
                10,
                10,
                trackpoints=[tcx_trackpoint("2024-05-01T07:00:10Z", altitude=15)],
            ),
        ]
    )
    activity = build_activity(FileInput(parse_tcx(xml)))
    assert activity.total_elevation_gain == 5
    assert [lap.total_elevation_gain for lap in activity.laps] == [0, 0]


# --- Vendor-API activities ---------------------------------------------------
def _detail(**overrides):
    detail = {
        "id": 987,
        "name": "Morning Run",
        "type": "Run",
        "distance": 2000.0,
        "moving_time": 600,
        "elapsed_time": 620,
        "total_elevation_gain": 15.0,
        "start_date": "2024-05-01T07:00:00Z",
        "average_speed": 3.33,
        "max_speed": 4.1,
        "has_heartrate": True,
        "average_heartrate": 150.0,
        "max_heartrate": 171.0,
        "map": {"polyline": encode([(51.5, -0.1), (51.51, -0.11)])},
    }
    detail.update(overrides)
    return detail


def _streams():
    return {
        "time": {"data": [0, 300, 600]},
        "distance": {"data": [0.0, 1000.0, 2000.0]},
        "latlng": {"data": [[51.5, -0.1], [51.505, -0.105], [51.51, -0.11]]},
        "altitude": {"data": [10.0, 14.0, 12.0]},
        "heartrate": {"data": [140, 150]},
    }


def test_vendor_activity_with_laps_and_streams():
    laps = [
        {"lap_index": 1, "start_index": 0, "end_index": 1, "distance": 1000, "elapsed_time": 300},
        {"lap_index": 2, "start_index": 2, "end_index": 2, "distance": 1000, "elapsed_time": 300},
    ]
    activity = build_activity(VendorApiInput(detail=_detail(), laps=laps, streams=_streams()))

    assert activity.source is ActivitySource.STRAVA
    assert activity.id == 987
    assert activity.sport_type == "Run"
    assert activity.total_elevation_gain == 15.0
    assert activity.start_date == datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)
    assert len(activity.trackpoints) == 3
    assert activity.trackpoints[2].heart_rate is None
    assert [lap.lap_index for lap in activity.laps] == [1, 2]
    assert activity.polyline == _detail()["map"]["polyline"]
    assert activity_route(activity) == [(51.5, -0.1), (51.51, -0.11)]


def test_vendor_laps_dropped_without_streams(caplog):
    laps = [{"lap_index": 1, "start_index": 0, "end_index": 500, "distance": 2000}]
    with caplog.at_level(logging.WARNING, logger="activity_telemetry.aggregation"):
        activity = build_activity(VendorApiInput(detail=_detail(), laps=laps))
    assert activity.trackpoints == ()
    assert activity.laps == ()
    assert "no trackpoints" in caplog.text


def test_vendor_overlapping_laps_are_trimmed(caplog):
    streams = {"time": {"data": [0, 60, 120, 180, 240]}}
    laps = [
        {"lap_index": 2, "start_index": 2, "end_index": 4},
        {"lap_index": 1, "start_index": 0, "end_index": 3},
        {"lap_index": 3, "start_index": 1, "end_index": 2},
    ]
    with caplog.at_level(logging.WARNING, logger="activity_telemetry.aggregation"):
        activity = build_activity(
            VendorApiInput(detail=_detail(), laps=laps, streams=streams)
        )
    assert [(lap.lap_index, lap.start_index, lap.end_index) for lap in activity.laps] == [
        (1, 0, 3),
        (2, 4, 4),
    ]
    assert "Lap 3 lies inside lap 1" in caplog.text
    assert "Lap 2 overlaps lap 1" in caplog.text


def test_vendor_lap_end_is_clamped_to_streams():
    laps = [
        {"lap_index": 1, "start_index": 0, "end_index": 9},
        {"lap_index": 2, "start_index": 7, "end_index": 9},
        {"lap_index": 3, "start_index": 2, "end_index": 1},
    ]
    activity = build_activity(VendorApiInput(detail=_detail(), laps=laps, streams=_streams()))
    assert [(lap.start_index, lap.end_index) for lap in activity.laps] == [(0, 2)]


def test_vendor_falls_back_to_summary_polyline_and_computed_gain():
    detail = _detail(total_elevation_gain=None, map={"summary_polyline": encode([(1.0, 2.0)])})
    activity = build_activity(VendorApiInput(detail=detail, streams=_streams()))
    assert activity.polyline == encode([(1.0, 2.0)])
    assert activity.total_elevation_gain == pytest.approx(4.0)


def test_vendor_malformed_polyline_is_dropped():
    activity = build_activity(VendorApiInput(detail=_detail(map={"polyline": "_p~iF"})))
    assert activity.polyline is None
    assert activity_route(activity) == []


def test_vendor_zero_values_are_preserved():
    activity = build_activity(
        VendorApiInput(detail=_detail(average_speed=0, max_speed=0, total_elevation_gain=0))
    )
    assert activity.average_speed == 0
    assert activity.max_speed == 0
    assert activity.total_elevation_gain == 0


def test_vendor_sport_type_fallbacks():
    detail = _detail()
    del detail["type"]
    assert build_activity(VendorApiInput(detail={**detail, "sport_type": "TrailRun"})).sport_type == "TrailRun"
    assert build_activity(VendorApiInput(detail=detail)).sport_type == "Unknown"


def test_unsupported_source_raises_type_error():
    with pytest.raises(TypeError):
        build_activity({"id": 1})  # type: ignore[arg-type]


def test_activity_rejects_lap_outside_trackpoints():
    with pytest.raises(ValueError):
        Activity(
            id=1,
            name="x",
            sport_type="Run",
            source=ActivitySource.STRAVA,
            laps=(Lap(lap_index=1, start_index=0, end_index=3),),
            trackpoints=(Trackpoint(), Trackpoint()),
        )


def test_activity_rejects_laps_without_trackpoints():
    with pytest.raises(ValueError):
        Activity(
            id=1,
            name="x",
            sport_type="Run",
            source=ActivitySource.STRAVA,
            laps=(Lap(lap_index=1, start_index=0, end_index=0),),
        )


def test_activity_rejects_overlapping_laps():
    with pytest.raises(ValueError, match="inside lap 1"):
        Activity(
            id=1,
            name="x",
            sport_type="Run",
            source=ActivitySource.STRAVA,
            laps=(
                Lap(lap_index=1, start_index=0, end_index=3),
                Lap(lap_index=2, start_index=2, end_index=4),
            ),
            trackpoints=tuple(Trackpoint() for _ in range(5)),
        )


def test_lap_rejects_reversed_range():
    with pytest.raises(ValueError):
        Lap(lap_index=1, start_index=4, end_index=2)
