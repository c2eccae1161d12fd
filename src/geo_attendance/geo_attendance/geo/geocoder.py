from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from ..core.constants import DEFAULT_GEOCODER_URL, DEFAULT_HTTP_TIMEOUT_SECONDS, GEOCODER_USER_AGENT

logger = logging.getLogger(__name__)


class ReverseGeocoder(Protocol):
    def reverse(self, lat: float, lng: float) -> str:
        """Human-readable address for the coordinates, or "" when unknown."""

        raise NotImplementedError


class NullGeocoder(ReverseGeocoder):
    def reverse(self, lat: float, lng: float) -> str:
        return ""


class NominatimGeocoder(ReverseGeocoder):
    """Reverse geocoding through a Nominatim-compatible ``/reverse`` endpoint.

    Best-effort: every failure (network, status, body) yields "".
    """

    def __init__(
        self,
        base_url: str = DEFAULT_GEOCODER_URL,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()

    def reverse(self, lat: float, lng: float) -> str:
        try:
            resp = self._http.get(
                f"{self._base_url}/reverse",
                params={"format": "jsonv2", "lat": lat, "lon": lng},
                headers={"Accept": "application/json", "User-Agent": GEOCODER_USER_AGENT},
                timeout=self._timeout,
            )
            if resp.status_code != 200:
                logger.warning("reverse geocode failed: HTTP %s", resp.status_code)
                return ""
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("reverse geocode failed: %s", e)
            return ""

        if not isinstance(data, dict):
            return ""
        return str(data.get("display_name") or "")
