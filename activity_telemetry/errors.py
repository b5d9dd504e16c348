"""Central error types used across the package."""

from __future__ import annotations


class TelemetryError(RuntimeError):
    """Base error for activity telemetry processing failures."""


class MalformedDocument(TelemetryError):
    """Raised when an activity file is not well-formed or has no activity."""


class MalformedPolyline(TelemetryError):
    """Raised when an encoded polyline is truncated or contains invalid characters."""


class IndexOutOfRange(TelemetryError, IndexError):
    """Raised when a segment boundary falls outside the trackpoint sequence."""


class ActivityFileError(TelemetryError):
    """Raised when an uploaded file is rejected before it is parsed."""


class StravaAPIError(TelemetryError):
    """Base error for Strava API failures."""


class StravaUnauthorizedError(StravaAPIError):
    """Raised on HTTP 401 so the caller can refresh its access token."""


class StravaRateLimitError(StravaAPIError):
    """Raised on HTTP 429; carries the rate limit headers Strava returned."""

    def __init__(self, message: str, *, limit: str = "unknown", usage: str = "unknown"):
        super().__init__(message)
        self.limit = limit
        self.usage = usage


__all__ = [
    "TelemetryError",
    "MalformedDocument",
    "MalformedPolyline",
    "IndexOutOfRange",
    "ActivityFileError",
    "StravaAPIError",
    "StravaUnauthorizedError",
    "StravaRateLimitError",
]
