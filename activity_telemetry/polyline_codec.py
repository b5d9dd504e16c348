"""Encoded polyline codec (the Google/Strava route summary format).

Encoding and decoding go through the ``polyline`` package. Decoding first
checks the text, because the library does not reject truncated or foreign
input cleanly: every character must be printable ASCII 63-126, the final
chunk must terminate its value, and values must pair up as (lat, lng).
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import polyline

from .config import POLYLINE_PRECISION
from .errors import MalformedPolyline
from .models import LatLon

_OFFSET = 63
_CONTINUATION = 0x20
_MIN_CHAR = 63
_MAX_CHAR = 126

__all__ = ["encode", "decode", "validate"]


def encode(points: Iterable[Sequence[float]], precision: int = POLYLINE_PRECISION) -> str:
    """Encode ``(lat, lng)`` pairs into a polyline string.

    Half units round away from zero.
    """

    coordinates = [(float(point[0]), float(point[1])) for point in points]
    if not coordinates:
        return ""
    return polyline.encode(coordinates, precision)


def validate(text: str) -> int:
    """Check ``text`` is a complete polyline and return its point count.

    Raises:
        MalformedPolyline: The text is not a string, ends mid-value, ends after
            a latitude with no longitude, or contains characters outside
            ASCII 63-126.
    """

    if not isinstance(text, str):
        raise MalformedPolyline(f"Expected polyline text, got {type(text).__name__}")
    values = 0
    in_value = False
    for position, char in enumerate(text):
        code = ord(char)
        if code < _MIN_CHAR or code > _MAX_CHAR:
            raise MalformedPolyline(
                f"Invalid character {char!r} at position {position}"
            )
        in_value = code - _OFFSET >= _CONTINUATION
        if not in_value:
            values += 1
    if in_value:
        raise MalformedPolyline("Polyline ends in the middle of a value")
    if values % 2:
        raise MalformedPolyline("Polyline ends after a latitude without a longitude")
    return values // 2


def decode(text: str, precision: int = POLYLINE_PRECISION) -> List[LatLon]:
    """Decode a polyline string into ``(lat, lng)`` tuples.

    Raises:
        MalformedPolyline: See :func:`validate`.
    """

    if validate(text) == 0:
        return []
    return [(float(lat), float(lng)) for lat, lng in polyline.decode(text, precision)]
