from __future__ import annotations

import json
from typing import Any, Optional, Sequence

import requests

from ..attendance.model import AttendanceRecord, decode_records
from ..common.validators import normalize_email
from ..core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, REMOTE_EMPTY_ADDRESS, REMOTE_EMPTY_USER_NAME
from ..core.enums import ErrorPolicy
from ..core.exceptions import EmailExists, RemoteUnavailable
from ..users.model import User, decode_users
from .repository import PolicySyncAdapter, RemoteSyncAdapter, newest_first


class RestSyncAdapter(PolicySyncAdapter):
    """Hosted relational store behind a PostgREST-style API.

    Tables expected:
    - users: id, name, phone, email, password, role, created_at
    - attendance: id, user_id, user_name, type, time, address, lat, lng, device
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        policy: ErrorPolicy = ErrorPolicy.PROPAGATE,
        fallback: Optional[RemoteSyncAdapter] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(policy=policy, fallback=fallback)
        if not base_url:
            raise ValueError("RestSyncAdapter requires a base URL")
        self._rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._timeout = timeout
        self._http = session or requests.Session()

    def _request(
        self,
        table: str,
        *,
        method: str = "GET",
        params: Optional[dict[str, str]] = None,
        body: Any = None,
    ) -> Any:
        headers = {"apikey": self._api_key, "Authorization": f"Bearer {self._api_key}"}
        if body is not None:
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=minimal"

        try:
            resp = self._http.request(
                method,
                f"{self._rest_url}/{table}",
                params=params,
                data=json.dumps(body) if body is not None else None,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise RemoteUnavailable(f"{method} {table} failed: {e}") from e

        content_type = resp.headers.get("content-type") or ""
        if "application/json" in content_type:
            try:
                data = resp.json()
            except ValueError as e:
                raise RemoteUnavailable(f"{method} {table} returned a malformed body") from e
        else:
            data = resp.text

        if not resp.ok:
            message = data.get("message") if isinstance(data, dict) else data
            raise RemoteUnavailable(message or f"{method} {table} failed", status_code=resp.status_code)
        return data

    def _rows(self, table: str, params: dict[str, str]) -> list[dict]:
        data = self._request(table, params=params)
        if not isinstance(data, list):
            raise RemoteUnavailable(f"GET {table} returned a malformed body")
        return [r for r in data if isinstance(r, dict)]

    def list_users(self) -> Sequence[User]:
        def remote() -> list[User]:
            return decode_users(self._rows("users", {"select": "*"}))

        return self._guard("list users", remote, lambda fb: fb.list_users())

    def find_user_by_email(self, email: str) -> Optional[User]:
        def remote() -> Optional[User]:
            rows = self._rows("users", {"select": "*", "email": f"eq.{normalize_email(email)}", "limit": "1"})
            users = decode_users(rows[:1])
            return users[0] if users else None

        return self._guard("find user", remote, lambda fb: fb.find_user_by_email(email))

    def add_user(self, user: User) -> bool:
        payload = {
            "id": user.id,
            "name": user.name,
            "phone": user.phone,
            "email": normalize_email(user.email),
            "password": user.password_hash,
            "role": user.role.value,
            "created_at": user.created_at,
        }

        def remote() -> bool:
            try:
                self._request("users", method="POST", body=[payload])
            except RemoteUnavailable as e:
                if e.status_code == 409:
                    raise EmailExists("Email already exists") from e
                raise
            return True

        return self._guard("add user", remote, lambda fb: fb.add_user(user))

    def record_attendance(self, record: AttendanceRecord) -> bool:
        payload = {
            "id": record.id,
            "user_id": record.user_id,
            "user_name": record.user_name or REMOTE_EMPTY_USER_NAME,
            "type": record.type.value,
            "time": record.time.isoformat(),
            "address": record.address or REMOTE_EMPTY_ADDRESS,
            "lat": record.lat,
            "lng": record.lng,
            "device": json.dumps(record.device.to_dict()),
        }

        def remote() -> bool:
            self._request("attendance", method="POST", body=[payload])
            return True

        return self._guard("record attendance", remote, lambda fb: fb.record_attendance(record))

    def list_attendance(self, user_id: str) -> Sequence[AttendanceRecord]:
        def remote() -> list[AttendanceRecord]:
            rows = self._rows(
                "attendance",
                {"select": "*", "user_id": f"eq.{user_id}", "order": "time.desc"},
            )
            return newest_first(decode_records(rows))

        return self._guard("list attendance", remote, lambda fb: fb.list_attendance(user_id))
