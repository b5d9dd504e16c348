"""Strava API adapter: session factory, error mapping and activity fetcher."""

from .activities import ActivityDetailAPI  # noqa: F401
from .session import create_default_session  # noqa: F401
