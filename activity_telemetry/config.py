"""Central configuration for the activity telemetry pipeline.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Overrides and secrets are read from environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_list(key: str, default: str) -> list[str]:
    return [
        item.strip()
        for item in os.getenv(key, default).split(",")
        if item.strip()
    ]


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Route encoding / projection
# ---------------------------------------------------------------------------
# Decimal digits kept by the polyline codec (Strava and Google use 5).
POLYLINE_PRECISION = _env_int("POLYLINE_PRECISION", 5)

# Fraction of each axis range added on both sides of the route bounding box.
PROJECTION_PADDING = _env_float("PROJECTION_PADDING", 0.1)

# Canvas layout used by ``geometry.route_area``. Widths below the breakpoint
# are treated as narrow (mobile) canvases.
CANVAS_NARROW_BREAKPOINT_PX = _env_int("CANVAS_NARROW_BREAKPOINT_PX", 640)
CANVAS_SIDE_PADDING = _env_float("CANVAS_SIDE_PADDING", 0.08)
CANVAS_DATA_AREA = _env_float("CANVAS_DATA_AREA", 0.4)
CANVAS_MAP_AREA = _env_float("CANVAS_MAP_AREA", 0.5)
CANVAS_NARROW_DATA_AREA = _env_float("CANVAS_NARROW_DATA_AREA", 0.45)
CANVAS_NARROW_MAP_AREA = _env_float("CANVAS_NARROW_MAP_AREA", 0.45)


# ---------------------------------------------------------------------------
# Activity file uploads
# ---------------------------------------------------------------------------
# Files above this size are rejected before parsing.
MAX_ACTIVITY_FILE_MB = _env_float("MAX_ACTIVITY_FILE_MB", 50.0)

# Accepted (lower-case) file extensions.
ACTIVITY_FILE_EXTENSIONS = tuple(
    ext.lower() for ext in _env_list("ACTIVITY_FILE_EXTENSIONS", ".tcx")
)


# ---------------------------------------------------------------------------
# Strava settings
# ---------------------------------------------------------------------------
STRAVA_BASE_URL = "https://www.strava.com/api/v3"

# Bearer token used by the command-line ``strava`` sub-command when no
# ``--access-token`` is passed. Do not hardcode secrets.
STRAVA_ACCESS_TOKEN = os.getenv("STRAVA_ACCESS_TOKEN", "")

# Stream channels requested from /activities/{id}/streams.
STRAVA_STREAM_KEYS = tuple(
    _env_list(
        "STRAVA_STREAM_KEYS",
        "time,latlng,altitude,heartrate,velocity_smooth,cadence,watts,"
        "distance,moving,grade_smooth,temp",
    )
)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)


# ---------------------------------------------------------------------------
# In-memory activity cache
# ---------------------------------------------------------------------------
# Maximum number of detailed activities kept in memory.
ACTIVITY_CACHE_SIZE = _env_int("ACTIVITY_CACHE_SIZE", 64)

# Entries older than this are dropped (default seven days).
ACTIVITY_CACHE_TTL_SECONDS = _env_int("ACTIVITY_CACHE_TTL_SECONDS", 7 * 24 * 3600)

# Log every cache hit/miss at INFO instead of DEBUG.
ACTIVITY_CACHE_VERBOSE = _env_bool("ACTIVITY_CACHE_VERBOSE", False)
