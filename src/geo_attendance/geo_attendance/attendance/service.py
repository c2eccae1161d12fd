from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..cache.local_cache import LocalCache
from ..common.datetime_utils import now_utc
from ..common.identifiers import new_id
from ..core.constants import GEOLOCATION_TIMEOUT_SECONDS
from ..core.enums import AttendanceType, MirrorState, Role, WorkStatus
from ..core.exceptions import ValidationError
from ..geo.device import DeviceInfo
from ..geo.geocoder import NullGeocoder, ReverseGeocoder
from ..geo.position import PositionProvider
from ..remote.repository import RemoteSyncAdapter
from ..users.model import User
from .model import AttendanceOutcome, AttendanceRecord, RosterEntry, StatusView

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: check in / check out and the status derived from it.

    The local cache is the source of truth for status and logs; the remote
    adapter only receives a best-effort copy of each new record.
    """

    def __init__(
        self,
        cache: LocalCache,
        remote: Optional[RemoteSyncAdapter] = None,
        *,
        geocoder: Optional[ReverseGeocoder] = None,
        geolocation_timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
    ):
        self._cache = cache
        self._remote = remote
        self._geocoder = geocoder or NullGeocoder()
        self._geolocation_timeout = float(geolocation_timeout)

    def get_user_logs(self, user_id: str) -> list[AttendanceRecord]:
        rows = [r for r in self._cache.get_attendance() if r.user_id == user_id]
        # sorted() is stable, so equal timestamps keep their cache order.
        return sorted(rows, key=lambda r: r.time, reverse=True)

    def latest_status_for(self, user_id: str) -> StatusView:
        rows = self.get_user_logs(user_id)
        if not rows:
            return StatusView(status=WorkStatus.NOT_WORKING)

        latest = rows[0]
        status = WorkStatus.WORKING if latest.type == AttendanceType.CHECKIN else WorkStatus.NOT_WORKING
        return StatusView(status=status, latest=latest)

    def create_attendance(
        self,
        *,
        user_id: str,
        type: AttendanceType | str,
        user_name: str,
        locator: PositionProvider,
        device: Optional[DeviceInfo] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceOutcome:
        try:
            kind = AttendanceType(type)
        except ValueError:
            raise ValidationError(f"Unknown attendance type: {type!r}")

        # Raises LocationUnavailable before anything is written.
        position = locator.get_current_position(timeout=self._geolocation_timeout)
        address = self._reverse_geocode(position.lat, position.lng)

        record = AttendanceRecord(
            id=new_id("a"),
            user_id=user_id,
            user_name=user_name,
            type=kind,
            time=now or now_utc(),
            lat=position.lat,
            lng=position.lng,
            address=address,
            device=device or DeviceInfo(),
        )
        self._cache.append_attendance(record)

        return self._mirror(record)

    def _reverse_geocode(self, lat: float, lng: float) -> str:
        try:
            return self._geocoder.reverse(lat, lng)
        except Exception:
            logger.exception("reverse geocoder raised; storing an empty address")
            return ""

    def _mirror(self, record: AttendanceRecord) -> AttendanceOutcome:
        if self._remote is None:
            return AttendanceOutcome(record=record, mirror=MirrorState.SKIPPED)

        try:
            ok = self._remote.record_attendance(record)
        except Exception as e:
            # The record is already in the local cache.
            logger.warning("could not mirror attendance %s: %s", record.id, e)
            return AttendanceOutcome(record=record, mirror=MirrorState.FAILED, error=str(e))

        if not ok:
            logger.warning("remote backend rejected attendance %s", record.id)
            return AttendanceOutcome(record=record, mirror=MirrorState.FAILED, error="Remote backend rejected the record")

        logger.info("attendance %s mirrored to remote backend", record.id)
        return AttendanceOutcome(record=record, mirror=MirrorState.SYNCED)

    def fetch_remote_logs(self, user_id: str) -> Sequence[AttendanceRecord]:
        if self._remote is None:
            return []
        return self._remote.list_attendance(user_id)

    def roster(self, users: Iterable[User]) -> list[RosterEntry]:
        employees = sorted((u for u in users if u.role == Role.EMPLOYEE), key=lambda u: u.name.casefold())
        entries = []
        for user in employees:
            view = self.latest_status_for(user.id)
            entries.append(RosterEntry(user=user, status=view.status, latest=view.latest))
        return entries

    @staticmethod
    def working_count(entries: Iterable[RosterEntry]) -> int:
        return sum(1 for e in entries if e.status == WorkStatus.WORKING)

    def reset_demo(self) -> None:
        self._cache.reset_demo()
