import pytest

from activity_telemetry.errors import IndexOutOfRange
from activity_telemetry.models import Lap, SegmentStats, Trackpoint
from activity_telemetry.segments import (
    clamp_index,
    order_bounds,
    resolve_lap,
    resolve_segment,
)


@pytest.fixture
def trackpoints():
    return (
        Trackpoint(time_offset=0, distance=0),
        Trackpoint(time_offset=10, distance=40),
        Trackpoint(time_offset=20),
        Trackpoint(time_offset=30, distance=120),
        Trackpoint(distance=150),
    )


def test_forward_segment(trackpoints):
    assert resolve_segment(trackpoints, 0, 3) == SegmentStats(distance=120, duration=30)


def test_same_index_is_zero(trackpoints):
    assert resolve_segment(trackpoints, 1, 1) == SegmentStats(distance=0, duration=0)


def test_missing_fields_resolve_to_zero(trackpoints):
    assert resolve_segment(trackpoints, 0, 2).distance == 0
    assert resolve_segment(trackpoints, 0, 4).duration == 0
    assert resolve_segment(trackpoints, 0, 4).distance == 150


def test_reversed_indices_keep_sign_of_duration(trackpoints):
    stats = resolve_segment(trackpoints, 3, 1)
    assert stats.distance == 80
    assert stats.duration == -20


@pytest.mark.parametrize("start,end", [(-1, 2), (0, 5), (7, 1)])
def test_out_of_range_raises(trackpoints, start, end):
    with pytest.raises(IndexOutOfRange):
        resolve_segment(trackpoints, start, end)


def test_out_of_range_is_an_index_error(trackpoints):
    with pytest.raises(IndexError):
        resolve_segment(trackpoints, 0, 99)


def test_empty_sequence_raises():
    with pytest.raises(IndexOutOfRange):
        resolve_segment((), 0, 0)


def test_non_integer_index_raises(trackpoints):
    with pytest.raises(IndexOutOfRange):
        resolve_segment(trackpoints, 0.0, 1)  # type: ignore[arg-type]
    with pytest.raises(IndexOutOfRange):
        resolve_segment(trackpoints, True, 1)  # type: ignore[arg-type]


def test_resolve_lap(trackpoints):
    lap = Lap(lap_index=1, start_index=1, end_index=3)
    assert resolve_lap(trackpoints, lap) == SegmentStats(distance=80, duration=20)


def test_order_bounds():
    assert order_bounds(5, 2) == (2, 5)
    assert order_bounds(2, 5) == (2, 5)
    assert order_bounds(3, 3) == (3, 3)


def test_clamp_index():
    assert clamp_index(-4, 10) == 0
    assert clamp_index(4, 10) == 4
    assert clamp_index(40, 10) == 9
    with pytest.raises(IndexOutOfRange):
        clamp_index(0, 0)
