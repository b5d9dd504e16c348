"""Map Strava HTTP responses onto package errors."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..errors import StravaAPIError, StravaRateLimitError, StravaUnauthorizedError

LOGGER = logging.getLogger(__name__)

__all__ = ["error_for_response", "extract_error", "parse_json"]


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with Strava error info (message + codes) if present."""

    if resp is None:
        return None
    try:
        data = resp.json()
    except ValueError:
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    parts: List[str] = []
    message = data.get("message")
    if message:
        parts.append(str(message))
    errors = data.get("errors")
    if isinstance(errors, list):
        for err in errors:
            if not isinstance(err, dict):
                continue
            target = "/".join(filter(None, (err.get("resource"), err.get("field"))))
            code = err.get("code")
            if code and target:
                parts.append(f"{target}:{code}")
            elif code:
                parts.append(str(code))
    return parts


def error_for_response(
    response: requests.Response, context: str
) -> Optional[StravaAPIError]:
    """Return the error a non-success response maps to, or ``None`` when it is OK."""

    status = response.status_code
    if status < 400:
        return None
    detail = extract_error(response)
    suffix = f" | {detail}" if detail else ""

    if status == 401:
        message = f"{context} unauthorized (401){suffix}"
        LOGGER.warning(message)
        return StravaUnauthorizedError(message)
    if status == 429:
        limit = response.headers.get("X-RateLimit-Limit") or "unknown"
        usage = response.headers.get("X-RateLimit-Usage") or "unknown"
        message = f"{context} rate limited (429) limit={limit} usage={usage}"
        LOGGER.warning(message)
        return StravaRateLimitError(message, limit=limit, usage=usage)
    message = f"{context} request failed (status {status}){suffix}"
    LOGGER.error(message)
    return StravaAPIError(message)


def parse_json(response: requests.Response, context: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise StravaAPIError(f"{context} returned a non-JSON body") from exc
