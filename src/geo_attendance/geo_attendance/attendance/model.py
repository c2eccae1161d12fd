from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import parse_iso_datetime, to_iso
from ..core.enums import AttendanceType, MirrorState, WorkStatus
from ..geo.device import DeviceInfo
from ..users.model import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in or check-out event."""

    id: str
    user_id: str
    user_name: str
    type: AttendanceType
    time: datetime
    lat: float
    lng: float
    address: str = ""
    device: DeviceInfo = DeviceInfo()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "type": self.type.value,
            "time": to_iso(self.time),
            "lat": self.lat,
            "lng": self.lng,
            "address": self.address,
            "device": self.device.to_dict(),
        }

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "AttendanceRecord":
        """Decode a cached or remote row.

        Raises KeyError/ValueError/TypeError for rows missing required fields.
        """
        device = row.get("device")
        if isinstance(device, str):
            device = _decode_device(device)
        return cls(
            id=str(row["id"]),
            user_id=str(row.get("userId") or row.get("user_id") or ""),
            user_name=str(row.get("userName") or row.get("user_name") or ""),
            type=AttendanceType(row["type"]),
            time=parse_iso_datetime(str(row["time"])),
            lat=float(row["lat"]),
            lng=float(row["lng"]),
            address=str(row.get("address") or ""),
            device=DeviceInfo.from_dict(device if isinstance(device, Mapping) else None),
        )


def _decode_device(raw: str) -> Optional[Mapping[str, Any]]:
    try:
        value = json.loads(raw)
    except ValueError:
        return None
    return value if isinstance(value, Mapping) else None


def decode_records(rows: Iterable[Any]) -> list[AttendanceRecord]:
    """Decode stored rows, skipping the ones that are malformed."""
    records = []
    for row in rows:
        try:
            records.append(AttendanceRecord.from_dict(row))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("skipping malformed attendance row: %s", e)
    return records


@dataclass(frozen=True)
class StatusView:
    status: WorkStatus
    latest: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "latest": self.latest.to_dict() if self.latest else None,
        }


@dataclass(frozen=True)
class AttendanceOutcome:
    """Result of ``create_attendance``.

    The local write always succeeded when an outcome exists; ``mirror``
    tells whether the remote copy did too.
    """

    record: AttendanceRecord
    mirror: MirrorState
    error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return self.mirror == MirrorState.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "mirror": self.mirror.value,
            "partial": self.partial,
            "error": self.error,
        }


@dataclass(frozen=True)
class RosterEntry:
    """Read-model for the admin roster."""

    user: User
    status: WorkStatus
    latest: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.public_dict(),
            "status": self.status.value,
            "latest": self.latest.to_dict() if self.latest else None,
        }
