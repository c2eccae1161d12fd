from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
import requests

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord
from src.geo_attendance.geo_attendance.cache.local_cache import LocalCache
from src.geo_attendance.geo_attendance.cache.store import InMemoryKeyValueStore
from src.geo_attendance.geo_attendance.core.enums import AttendanceType, ErrorPolicy, Role
from src.geo_attendance.geo_attendance.core.exceptions import EmailExists, RemoteUnavailable
from src.geo_attendance.geo_attendance.remote.local_adapter import LocalSyncAdapter
from src.geo_attendance.geo_attendance.remote.rest_adapter import RestSyncAdapter
from src.geo_attendance.geo_attendance.users.model import User

BASE = "https://db.example.co"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = {"content-type": "application/json; charset=utf-8"} if payload is not None else {}

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._payload


class FakeHttp:
    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.calls = []

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "data": data, "headers": headers})
        if self.error:
            raise self.error
        return self.responses.pop(0)


def _adapter(http, **kwargs):
    return RestSyncAdapter(BASE, "anon-key", session=http, **kwargs)


def _user_row(email="asha@example.com"):
    return {
        "id": "u_1",
        "name": "Asha",
        "email": email,
        "password": "pbkdf2:sha256:600000$x$y",
        "phone": None,
        "role": "employee",
        "created_at": "2026-03-01T00:00:00+00:00",
    }


def test_find_user_by_email_uses_equality_filter():
    http = FakeHttp(FakeResponse(payload=[_user_row()]))
    user = _adapter(http).find_user_by_email("Asha@Example.com ")

    assert user.id == "u_1"
    assert user.role == Role.EMPLOYEE
    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == f"{BASE}/rest/v1/users"
    assert call["params"] == {"select": "*", "email": "eq.asha@example.com", "limit": "1"}
    assert call["headers"]["apikey"] == "anon-key"
    assert call["headers"]["Authorization"] == "Bearer anon-key"


def test_find_user_returns_none_when_no_rows():
    assert _adapter(FakeHttp(FakeResponse(payload=[]))).find_user_by_email("x@y.io") is None


def test_record_attendance_posts_snake_case_row():
    http = FakeHttp(FakeResponse(status_code=201, text=""))
    record = AttendanceRecord(
        id="a_1",
        user_id="u_1",
        user_name="Asha",
        type=AttendanceType.CHECKOUT,
        time=datetime(2026, 3, 2, 17, tzinfo=timezone.utc),
        lat=12.97,
        lng=77.59,
        address="MG Road",
    )

    assert _adapter(http).record_attendance(record) is True

    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == f"{BASE}/rest/v1/attendance"
    assert call["headers"]["Prefer"] == "return=minimal"
    [row] = json.loads(call["data"])
    assert row["user_id"] == "u_1"
    assert row["user_name"] == "Asha"
    assert row["type"] == "checkout"
    assert row["time"] == "2026-03-02T17:00:00+00:00"
    assert isinstance(row["device"], str)


def test_list_attendance_orders_by_time_desc():
    rows = [
        {"id": "a_2", "user_id": "u_1", "user_name": "Asha", "type": "checkout", "time": "2026-03-02T17:00:00Z", "lat": 1, "lng": 2, "device": "{}"},
        {"id": "a_1", "user_id": "u_1", "user_name": "Asha", "type": "checkin", "time": "2026-03-02T09:00:00Z", "lat": 1, "lng": 2, "device": None},
    ]
    http = FakeHttp(FakeResponse(payload=rows))

    records = _adapter(http).list_attendance("u_1")

    assert [r.id for r in records] == ["a_2", "a_1"]
    assert http.calls[0]["params"] == {"select": "*", "user_id": "eq.u_1", "order": "time.desc"}


def test_error_body_message_is_surfaced():
    http = FakeHttp(FakeResponse(status_code=401, payload={"message": "Invalid API key"}))
    with pytest.raises(RemoteUnavailable) as exc:
        _adapter(http).list_users()
    assert str(exc.value) == "Invalid API key"
    assert exc.value.status_code == 401


def test_conflict_on_insert_is_email_exists():
    user = User.from_dict(_user_row())
    http = FakeHttp(FakeResponse(status_code=409, payload={"message": "duplicate key value"}))
    with pytest.raises(EmailExists):
        _adapter(http).add_user(user)


def test_network_error_propagates_by_default():
    http = FakeHttp(error=requests.ConnectionError("offline"))
    with pytest.raises(RemoteUnavailable):
        _adapter(http).list_attendance("u_1")


def test_fallback_policy_can_be_selected():
    local = LocalSyncAdapter(LocalCache(InMemoryKeyValueStore()))
    local.add_user(User.from_dict(_user_row()))
    http = FakeHttp(error=requests.ConnectionError("offline"))

    adapter = _adapter(http, policy=ErrorPolicy.FALLBACK, fallback=local)
    assert adapter.find_user_by_email("asha@example.com").id == "u_1"


def test_requires_base_url():
    with pytest.raises(ValueError):
        RestSyncAdapter("", "key")
