"""Fetch a single Strava activity (detail, laps, streams) and normalise it."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import requests

from ..aggregation import build_activity
from ..config import REQUEST_TIMEOUT, STRAVA_BASE_URL, STRAVA_STREAM_KEYS
from ..errors import StravaAPIError
from ..models import Activity, VendorApiInput
from .response_handling import error_for_response, parse_json
from .session import create_default_session

LOGGER = logging.getLogger(__name__)

ActivityId = Union[int, str]


class ActivityDetailAPI:
    """Thin wrapper over the three per-activity Strava endpoints."""

    def __init__(
        self,
        access_token: str,
        session: requests.Session | None = None,
        *,
        base_url: str = STRAVA_BASE_URL,
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        if not access_token:
            raise ValueError("access_token is required")
        self._access_token = access_token
        self._session = session or create_default_session()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _get_json(
        self, path: str, context: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.get(
                url,
                headers={"Authorization": f"Bearer {self._access_token}"},
                params=params,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise StravaAPIError(
                f"{context} network error: {exc.__class__.__name__}"
            ) from exc
        error = error_for_response(response, context)
        if error is not None:
            raise error
        return parse_json(response, context)

    def get_activity_details(self, activity_id: ActivityId) -> Dict[str, Any]:
        context = f"Activity {activity_id} detail"
        data = self._get_json(f"/activities/{activity_id}", context)
        if not isinstance(data, dict):
            raise StravaAPIError(f"{context} returned unexpected payload")
        return data

    def get_activity_laps(self, activity_id: ActivityId) -> List[Dict[str, Any]]:
        context = f"Activity {activity_id} laps"
        data = self._get_json(f"/activities/{activity_id}/laps", context)
        if not isinstance(data, list):
            raise StravaAPIError(f"{context} returned unexpected payload")
        return data

    def get_activity_streams(self, activity_id: ActivityId) -> Any:
        """Return the raw streams payload keyed by stream type."""

        params = {"keys": ",".join(STRAVA_STREAM_KEYS), "key_by_type": "true"}
        return self._get_json(
            f"/activities/{activity_id}/streams",
            f"Activity {activity_id} streams",
            params=params,
        )

    def get_activity(
        self,
        activity_id: ActivityId,
        include_laps: bool = True,
        include_streams: bool = True,
    ) -> Activity:
        """Fetch and normalise one activity into the canonical model."""

        detail = self.get_activity_details(activity_id)
        laps = self.get_activity_laps(activity_id) if include_laps else None
        streams = self.get_activity_streams(activity_id) if include_streams else None
        LOGGER.info(
            "Fetched activity %s (laps=%s streams=%s)",
            activity_id,
            "none" if laps is None else len(laps),
            "yes" if streams is not None else "no",
        )
        return build_activity(VendorApiInput(detail=detail, laps=laps, streams=streams))
