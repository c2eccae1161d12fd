from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.exceptions import LocationUnavailable

# W3C GeolocationPositionError codes reported by browsers.
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

_ERROR_REASONS = {
    PERMISSION_DENIED: ("denied", "Location permission was denied"),
    POSITION_UNAVAILABLE: ("unavailable", "Location is unavailable"),
    TIMEOUT: ("timeout", "Timed out while acquiring location"),
}


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float
    accuracy: Optional[float] = None

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0 or not -180.0 <= self.lng <= 180.0:
            raise LocationUnavailable(
                f"Coordinates out of range: lat={self.lat}, lng={self.lng}", reason="invalid"
            )


class PositionProvider(Protocol):
    def get_current_position(self, *, timeout: float) -> Position:
        """Return one fix or raise LocationUnavailable."""

        raise NotImplementedError


class StaticPositionProvider(PositionProvider):
    """Always reports the same position (kiosks with a known location, tests)."""

    def __init__(self, lat: float, lng: float, accuracy: Optional[float] = None):
        self._position = Position(lat=float(lat), lng=float(lng), accuracy=accuracy)

    def get_current_position(self, *, timeout: float) -> Position:
        return self._position


class ReportedPositionProvider(PositionProvider):
    """Fix acquired by the client device and posted with the request.

    The browser runs the Geolocation API with the options published by
    ``/api/config``; it sends either coordinates or the error code it got,
    plus how long the acquisition took.
    """

    def __init__(
        self,
        *,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        accuracy: Optional[float] = None,
        error_code: Optional[int] = None,
        elapsed_ms: Optional[float] = None,
    ):
        self._lat = lat
        self._lng = lng
        self._accuracy = accuracy
        self._error_code = error_code
        self._elapsed_ms = elapsed_ms

    @classmethod
    def from_payload(cls, payload: dict) -> "ReportedPositionProvider":
        def _num(name: str) -> Optional[float]:
            value = payload.get(name)
            if value is None or value == "":
                return None
            try:
                number = float(value)
            except (TypeError, ValueError):
                number = math.nan
            if not math.isfinite(number):
                raise LocationUnavailable(f"Invalid {name}: {value!r}", reason="invalid")
            return number

        error_code = _num("error_code")
        return cls(
            lat=_num("lat"),
            lng=_num("lng"),
            accuracy=_num("accuracy"),
            error_code=int(error_code) if error_code is not None else None,
            elapsed_ms=_num("elapsed_ms"),
        )

    def get_current_position(self, *, timeout: float) -> Position:
        if self._error_code is not None:
            reason, message = _ERROR_REASONS.get(self._error_code, ("unavailable", "Location is unavailable"))
            raise LocationUnavailable(message, reason=reason)

        if self._elapsed_ms is not None and self._elapsed_ms > timeout * 1000:
            raise LocationUnavailable("Timed out while acquiring location", reason="timeout")

        if self._lat is None or self._lng is None:
            raise LocationUnavailable("Geolocation not supported", reason="unsupported")

        return Position(lat=self._lat, lng=self._lng, accuracy=self._accuracy)
