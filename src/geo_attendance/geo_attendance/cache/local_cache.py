from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..attendance.model import AttendanceRecord, decode_records
from ..core.constants import ATTENDANCE_KEY, SESSION_KEY, SESSION_USER_KEY
from ..core.enums import Role
from ..core.exceptions import MalformedCache
from ..users.model import User
from .store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Who is logged in on this device. ``type`` None means logged out."""

    type: Optional[Role] = None
    user_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.type is not None and self.user_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value if self.type else None, "userId": self.user_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        raw_type = data.get("type")
        return cls(type=Role(raw_type) if raw_type else None, user_id=data.get("userId") or None)


def decode_json(raw: str, expected: type) -> Any:
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise MalformedCache(f"invalid JSON: {e}") from e
    if not isinstance(value, expected):
        raise MalformedCache(f"expected {expected.__name__}, got {type(value).__name__}")
    return value


class LocalCache:
    """Device-local JSON cache for attendance rows and the session.

    Reads never fail: missing or corrupt values fall back to defaults.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def load_json(self, key: str, default: Any) -> Any:
        raw = self._store.get(key)
        if not raw:
            return default
        try:
            return decode_json(raw, type(default))
        except MalformedCache as e:
            logger.warning("load_json failed for key=%r: %s", key, e)
            return default

    def save_json(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("save_json failed for key=%r: %s", key, e)
            return
        self._store.set(key, raw)

    # Attendance

    def get_attendance(self) -> list[AttendanceRecord]:
        return decode_records(self.load_json(ATTENDANCE_KEY, []))

    def set_attendance(self, records: list[AttendanceRecord]) -> None:
        if not isinstance(records, list):
            logger.warning("set_attendance expects a list, got %r", type(records).__name__)
            return
        self.save_json(ATTENDANCE_KEY, [r.to_dict() for r in records])

    def append_attendance(self, record: AttendanceRecord) -> None:
        records = self.get_attendance()
        records.append(record)
        self.set_attendance(records)

    # Session

    def get_session(self) -> Session:
        data = self.load_json(SESSION_KEY, {})
        try:
            return Session.from_dict(data)
        except ValueError as e:
            logger.warning("session is malformed: %s", e)
            return Session()

    def set_session(self, session: Session) -> None:
        if not isinstance(session, Session):
            logger.warning("set_session expects a Session, got %r", type(session).__name__)
            return
        self.save_json(SESSION_KEY, session.to_dict())

    def get_session_user(self) -> Optional[User]:
        """Profile of the logged-in user, as saved at login (no password hash)."""
        data = self.load_json(SESSION_USER_KEY, {})
        if not data:
            return None
        try:
            return User.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning("session user is malformed: %s", e)
            return None

    def set_session_user(self, user: User) -> None:
        self.save_json(SESSION_USER_KEY, user.public_dict())

    def clear_session(self) -> None:
        self._store.delete(SESSION_KEY)
        self._store.delete(SESSION_USER_KEY)

    def reset_demo(self) -> None:
        self._store.delete(ATTENDANCE_KEY)
        self.clear_session()
