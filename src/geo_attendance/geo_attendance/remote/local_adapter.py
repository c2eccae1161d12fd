from __future__ import annotations

from typing import Sequence

from ..attendance.model import AttendanceRecord, decode_records
from ..cache.local_cache import LocalCache
from ..common.validators import normalize_email
from ..core.constants import LOCAL_ATTENDANCE_KEY, LOCAL_USERS_KEY
from ..core.exceptions import EmailExists
from ..users.model import User, decode_users
from .repository import RemoteSyncAdapter, newest_first


class LocalSyncAdapter(RemoteSyncAdapter):
    """Backend contract over the device cache.

    Used when no remote backend is configured and as the target of
    ErrorPolicy.FALLBACK. Uses its own keys so it never touches the
    attendance rows owned by the AttendanceService.
    """

    def __init__(self, cache: LocalCache):
        self._cache = cache

    def list_users(self) -> Sequence[User]:
        return decode_users(self._cache.load_json(LOCAL_USERS_KEY, []))

    def add_user(self, user: User) -> bool:
        rows = self._cache.load_json(LOCAL_USERS_KEY, [])
        email = normalize_email(user.email)
        if any(normalize_email(str(r.get("email") or "")) == email for r in rows if isinstance(r, dict)):
            raise EmailExists("Email already exists")
        rows.append(user.to_dict())
        self._cache.save_json(LOCAL_USERS_KEY, rows)
        return True

    def record_attendance(self, record: AttendanceRecord) -> bool:
        rows = self._cache.load_json(LOCAL_ATTENDANCE_KEY, [])
        rows.append(record.to_dict())
        self._cache.save_json(LOCAL_ATTENDANCE_KEY, rows)
        return True

    def list_attendance(self, user_id: str) -> Sequence[AttendanceRecord]:
        records = decode_records(self._cache.load_json(LOCAL_ATTENDANCE_KEY, []))
        return newest_first([r for r in records if r.user_id == user_id])
