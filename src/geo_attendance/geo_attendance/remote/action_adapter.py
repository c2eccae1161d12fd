from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

import requests

from ..attendance.model import AttendanceRecord, decode_records
from ..core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, REMOTE_EMPTY_ADDRESS, REMOTE_EMPTY_USER_NAME
from ..core.enums import ErrorPolicy
from ..core.exceptions import EmailExists, RemoteUnavailable
from ..users.model import User, decode_users
from .repository import PolicySyncAdapter, RemoteSyncAdapter, newest_first

logger = logging.getLogger(__name__)


class ActionSyncAdapter(PolicySyncAdapter):
    """Single-endpoint backend multiplexed by an ``action`` field.

    Serves both the Apps Script spreadsheet API (FALLBACK policy) and the
    same API behind a backend proxy (PROPAGATE policy). Under FALLBACK an
    unconfigured endpoint sends every call straight to the fallback adapter;
    under PROPAGATE it is a configuration error.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        *,
        policy: ErrorPolicy = ErrorPolicy.FALLBACK,
        fallback: Optional[RemoteSyncAdapter] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(policy=policy, fallback=fallback)
        self._endpoint = endpoint or None
        self._timeout = timeout
        self._http = session or requests.Session()
        if not self._endpoint:
            if self.policy != ErrorPolicy.FALLBACK:
                raise ValueError("ActionSyncAdapter needs an endpoint unless the policy is FALLBACK")
            logger.warning("remote endpoint not configured, using the local store")

    def _post(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self._endpoint:
            raise RemoteUnavailable("remote endpoint not configured")
        try:
            resp = self._http.post(self._endpoint, json={"action": action, **payload}, timeout=self._timeout)
        except requests.RequestException as e:
            raise RemoteUnavailable(f"{action} failed: {e}") from e

        if not resp.ok:
            raise RemoteUnavailable(f"{action} failed: HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteUnavailable(f"{action} returned a malformed body") from e
        if not isinstance(data, dict):
            raise RemoteUnavailable(f"{action} returned a malformed body")
        return data

    def _run(self, operation, remote_call, fallback_call):
        # Unconfigured endpoint: local only.
        if not self._endpoint:
            return fallback_call(self._fallback)
        return self._guard(operation, remote_call, fallback_call)

    def list_users(self) -> Sequence[User]:
        def remote() -> list[User]:
            rows = self._post("getUsers", {}).get("users") or []
            return decode_users(rows)

        return self._run("getUsers", remote, lambda fb: fb.list_users())

    def add_user(self, user: User) -> bool:
        def remote() -> bool:
            data = self._post("addUser", {"user": user.to_dict()})
            error = str(data.get("error") or "")
            if not data.get("success") and "exist" in error.lower():
                raise EmailExists("Email already exists")
            return bool(data.get("success"))

        return self._run("addUser", remote, lambda fb: fb.add_user(user))

    def record_attendance(self, record: AttendanceRecord) -> bool:
        def remote() -> bool:
            data = self._post("addAttendance", {"attendance": _attendance_payload(record)})
            return bool(data.get("success"))

        return self._run("addAttendance", remote, lambda fb: fb.record_attendance(record))

    def list_attendance(self, user_id: str) -> Sequence[AttendanceRecord]:
        def remote() -> list[AttendanceRecord]:
            rows = self._post("getUserAttendance", {"userId": user_id}).get("records") or []
            return newest_first(decode_records(rows))

        return self._run("getUserAttendance", remote, lambda fb: fb.list_attendance(user_id))


def _attendance_payload(record: AttendanceRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "userId": record.user_id,
        "userName": record.user_name or REMOTE_EMPTY_USER_NAME,
        "type": record.type.value,
        "time": record.time.isoformat(),
        "address": record.address or REMOTE_EMPTY_ADDRESS,
        "lat": record.lat,
        "lng": record.lng,
        "device": json.dumps(record.device.to_dict()),
    }
