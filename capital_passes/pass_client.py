"""
pass_client.py
--------------
Thin client for the ISS pass prediction service.

One GET per call, no retry and no caching. Rise times come back as epoch
seconds and are returned as timezone-aware UTC datetimes, ranked 1..k in the
order the service lists them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests

from capital_passes import config
from capital_passes.errors import MalformedResponse, PredictionUnavailable
from capital_passes.utils import safe_get

RankedPass = Tuple[int, datetime]


def _to_utc(risetime: Any) -> datetime:
    # bool is an int subclass; reject it explicitly
    if isinstance(risetime, bool) or not isinstance(risetime, int):
        raise MalformedResponse(f"risetime is not an integer epoch: {risetime!r}")
    try:
        return datetime.fromtimestamp(risetime, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedResponse(f"risetime out of range: {risetime!r}") from e


def parse_passes(payload: Any) -> List[RankedPass]:
    """Turn a decoded service payload into [(rank, risetime), ...]."""
    if not isinstance(payload, dict):
        raise MalformedResponse(f"expected a JSON object, got {type(payload).__name__}")

    message = payload.get("message", "success")
    if message != "success":
        reason = payload.get("reason", "no reason given")
        raise MalformedResponse(f"service reported {message!r}: {reason}")

    items = payload.get("response")
    if not isinstance(items, list):
        raise MalformedResponse("missing 'response' list")

    passes = []
    for rank, item in enumerate(items, start=1):
        risetime = safe_get(item, "risetime")
        if risetime is None:
            raise MalformedResponse(f"prediction #{rank} has no 'risetime'")
        passes.append((rank, _to_utc(risetime)))
    return passes


class PassTimeClient:
    """Calls the prediction service for one latitude/longitude at a time."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        pass_count: Optional[int] = None,
        altitude_m: Optional[int] = None,
    ):
        self.base_url = base_url or config.PASS_API_URL
        self.timeout = config.PASS_API_TIMEOUT if timeout is None else timeout
        self.pass_count = config.PASS_COUNT if pass_count is None else pass_count
        self.altitude_m = config.OBSERVER_ALTITUDE_M if altitude_m is None else altitude_m

    def _params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        params: Dict[str, Any] = {"lat": latitude, "lon": longitude}
        if self.pass_count is not None:
            params["n"] = self.pass_count
        if self.altitude_m is not None:
            params["alt"] = self.altitude_m
        return params

    def predict(self, latitude: float, longitude: float) -> List[RankedPass]:
        params = self._params(latitude, longitude)
        try:
            resp = requests.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise PredictionUnavailable(
                f"request for ({latitude}, {longitude}) failed: {e}"
            ) from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise MalformedResponse(
                f"response for ({latitude}, {longitude}) is not JSON: {e}"
            ) from e

        passes = parse_passes(payload)
        logging.info(f"({latitude}, {longitude}): {len(passes)} predictions")
        return passes
