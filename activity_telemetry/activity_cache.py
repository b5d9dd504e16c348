"""In-memory cache of detailed activities with a list-summary staleness check."""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Hashable, Mapping, Optional

from cachetools import TTLCache

from .config import (
    ACTIVITY_CACHE_SIZE,
    ACTIVITY_CACHE_TTL_SECONDS,
    ACTIVITY_CACHE_VERBOSE,
)
from .models import Activity, ActivitySource
from .utils import coerce_float

LOGGER = logging.getLogger(__name__)


def _log(message: str, *args: Any) -> None:
    level = logging.INFO if ACTIVITY_CACHE_VERBOSE else logging.DEBUG
    LOGGER.log(level, message, *args)


def is_cached_activity_stale(
    cached: Optional[Activity], summary: Optional[Mapping[str, Any]]
) -> bool:
    """Return ``True`` when ``cached`` no longer matches the list summary.

    Users commonly rename activities or crop them after upload, so a change
    in name, distance or moving time invalidates the detailed copy.
    """

    if cached is None or not summary:
        return True
    name_changed = cached.name != (summary.get("name") or "")
    distance_changed = cached.distance != coerce_float(summary.get("distance"))
    time_changed = cached.moving_time != coerce_float(summary.get("moving_time"))
    if name_changed or distance_changed or time_changed:
        LOGGER.info(
            "Cached activity %s is stale (name=%s distance=%s moving_time=%s)",
            cached.id,
            name_changed,
            distance_changed,
            time_changed,
        )
        return True
    return False


class ActivityCache:
    """Thread-safe TTL cache of vendor activities keyed by activity id."""

    def __init__(
        self,
        max_entries: int = ACTIVITY_CACHE_SIZE,
        ttl_seconds: float = ACTIVITY_CACHE_TTL_SECONDS,
    ) -> None:
        self._lock = RLock()
        self._store: TTLCache[Hashable, Activity] = TTLCache(
            maxsize=max(1, max_entries), ttl=ttl_seconds
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, activity_id: Hashable) -> Optional[Activity]:
        with self._lock:
            activity = self._store.get(activity_id)
        outcome = "hit" if activity is not None else "miss"
        _log("Activity cache %s id=%s", outcome, activity_id)
        return activity

    def put(self, activity: Activity) -> bool:
        """Store ``activity``; returns ``False`` when it is not cacheable.

        File-derived activities have no stable vendor id and are never stored.
        """

        if activity.source is not ActivitySource.STRAVA or activity.id is None:
            _log("Skipping cache for %s activity id=%s", activity.source.value, activity.id)
            return False
        with self._lock:
            self._store[activity.id] = activity
        return True

    def invalidate(self, activity_id: Hashable) -> None:
        with self._lock:
            self._store.pop(activity_id, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def get_fresh(self, summary: Mapping[str, Any]) -> Optional[Activity]:
        """Return the cached detail for ``summary['id']`` unless it is stale.

        Stale entries are evicted so the caller refetches.
        """

        activity_id = summary.get("id")
        if activity_id is None:
            return None
        with self._lock:
            cached = self._store.get(activity_id)
            if cached is None:
                _log("Activity cache miss id=%s", activity_id)
                return None
            if is_cached_activity_stale(cached, summary):
                self._store.pop(activity_id, None)
                return None
        _log("Activity cache hit id=%s", activity_id)
        return cached
