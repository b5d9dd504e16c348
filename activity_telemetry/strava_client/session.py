"""Pooled ``requests`` session for the activity detail, laps and streams reads.

:class:`~activity_telemetry.strava_client.activities.ActivityDetailAPI` issues
three GETs per activity; they share one session and its connection pool.
"""

from __future__ import annotations

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import HTTP_POOL_CONNECTIONS, HTTP_POOL_MAXSIZE

__all__ = ["create_default_session"]


def _build_retry() -> Retry:
    # Only gateway errors are retried here. 401 and 429 map to
    # StravaUnauthorizedError and StravaRateLimitError in response_handling.
    return Retry(
        total=3,
        backoff_factor=1.0,
        status_forcelist=[502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )


def create_default_session() -> Session:
    """Return a session that asks for JSON and retries read-only gateway failures."""

    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=HTTP_POOL_MAXSIZE,
        max_retries=_build_retry(),
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/json",
        }
    )
    return session
