"""Align independently indexed Strava stream channels into trackpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .models import Trackpoint
from .utils import coerce_float

LOGGER = logging.getLogger(__name__)

# Strava stream type -> canonical channel name.
CHANNEL_ALIASES: Dict[str, str] = {
    "time": "time",
    "latlng": "latlng",
    "altitude": "altitude",
    "heartrate": "heartrate",
    "velocity": "velocity",
    "velocity_smooth": "velocity",
    "cadence": "cadence",
    "watts": "watts",
    "distance": "distance",
    "moving": "moving",
    "grade": "grade",
    "grade_smooth": "grade",
    "temperature": "temperature",
    "temp": "temperature",
}

# Canonical channel -> Trackpoint field for the scalar channels.
_SCALAR_FIELDS: Dict[str, str] = {
    "time": "time_offset",
    "altitude": "altitude",
    "heartrate": "heart_rate",
    "velocity": "speed",
    "cadence": "cadence",
    "watts": "watts",
    "distance": "distance",
    "grade": "grade",
    "temperature": "temperature",
}

Channels = Mapping[str, Sequence[Any]]


def streams_by_type(payload: Any) -> Dict[str, List[Any]]:
    """Return ``{stream_type: data}`` from any shape the streams endpoint returns.

    Accepts the ``key_by_type=true`` mapping (``{type: {"data": [...]}}``), a
    plain ``{type: [...]}`` mapping, or the list of tagged arrays
    (``[{"type": ..., "data": [...]}]``).
    """

    result: Dict[str, List[Any]] = {}
    if payload is None:
        return result
    if isinstance(payload, Mapping):
        for key, stream in payload.items():
            data = stream.get("data") if isinstance(stream, Mapping) else stream
            if isinstance(data, (list, tuple)):
                result[str(key)] = list(data)
        return result
    if isinstance(payload, (list, tuple)):
        for stream in payload:
            if not isinstance(stream, Mapping):
                continue
            stream_type = stream.get("type")
            data = stream.get("data")
            if stream_type and isinstance(data, (list, tuple)):
                result[str(stream_type)] = list(data)
        return result
    LOGGER.warning("Unexpected streams payload type: %s", type(payload).__name__)
    return result


def _canonical_channels(channels: Channels) -> Dict[str, Sequence[Any]]:
    canonical: Dict[str, Sequence[Any]] = {}
    for name, samples in channels.items():
        alias = CHANNEL_ALIASES.get(name)
        if alias is None:
            LOGGER.debug("Ignoring unknown stream channel %r", name)
            continue
        if samples is None:
            continue
        # The canonical spelling wins when both it and an alias are supplied.
        if alias in canonical and name != alias:
            continue
        canonical[alias] = samples
    return canonical


def _latlng(sample: Any) -> Tuple[Optional[float], Optional[float]]:
    if not isinstance(sample, (list, tuple)) or len(sample) != 2:
        return None, None
    lat = coerce_float(sample[0])
    lng = coerce_float(sample[1])
    if lat is None or lng is None:
        return None, None
    return lat, lng


def _moving(sample: Any) -> Optional[bool]:
    if sample is None:
        return None
    return sample is True or sample == 1


def normalize_streams(channels: Channels) -> Tuple[Trackpoint, ...]:
    """Merge ragged stream channels into one trackpoint per sample index.

    The output length is the longest recognised channel. A channel contributes
    to index ``i`` only when it has an element there; shorter channels leave
    the field absent (no interpolation or carry-forward).
    """

    canonical = _canonical_channels(channels)
    if not canonical:
        return ()
    length = max(len(samples) for samples in canonical.values())
    trackpoints: List[Trackpoint] = []
    for index in range(length):
        fields: Dict[str, Any] = {}
        for channel, samples in canonical.items():
            if index >= len(samples):
                continue
            sample = samples[index]
            if channel == "latlng":
                lat, lng = _latlng(sample)
                if lat is not None:
                    fields["latitude"] = lat
                    fields["longitude"] = lng
            elif channel == "moving":
                moving = _moving(sample)
                if moving is not None:
                    fields["moving"] = moving
            else:
                value = coerce_float(sample)
                if value is not None:
                    fields[_SCALAR_FIELDS[channel]] = value
        trackpoints.append(Trackpoint(**fields))
    return tuple(trackpoints)
