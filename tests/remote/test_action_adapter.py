from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
import requests
from werkzeug.security import generate_password_hash

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord
from src.geo_attendance.geo_attendance.cache.local_cache import LocalCache
from src.geo_attendance.geo_attendance.cache.store import InMemoryKeyValueStore
from src.geo_attendance.geo_attendance.container import build_remote
from src.geo_attendance.geo_attendance.core.enums import AttendanceType, ErrorPolicy, Role
from src.geo_attendance.geo_attendance.core.exceptions import EmailExists, RemoteUnavailable
from src.geo_attendance.geo_attendance.remote.action_adapter import ActionSyncAdapter
from src.geo_attendance.geo_attendance.remote.local_adapter import LocalSyncAdapter
from src.geo_attendance.geo_attendance.users.model import User

ENDPOINT = "https://script.example/exec"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("empty body")
        return self._payload


class FakeHttp:
    """Replays responses per action and records every POST body."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.bodies = []

    def post(self, url, json=None, timeout=None):
        assert url == ENDPOINT
        assert timeout is not None
        self.bodies.append(json)
        if self.error:
            raise self.error
        return self.responses[json["action"]]


def _user(email="asha@example.com", password="secret123"):
    return User(
        id="u_1",
        name="Asha",
        email=email,
        password_hash=generate_password_hash(password),
        role=Role.EMPLOYEE,
        created_at="2026-03-01T00:00:00+00:00",
    )


def _record(rid="a_1", hour=9, address=""):
    return AttendanceRecord(
        id=rid,
        user_id="u_1",
        user_name="",
        type=AttendanceType.CHECKIN,
        time=datetime(2026, 3, 2, hour, tzinfo=timezone.utc),
        lat=12.97,
        lng=77.59,
        address=address,
    )


def _local():
    return LocalSyncAdapter(LocalCache(InMemoryKeyValueStore()))


def test_list_users_and_lookup_by_email_case_insensitive():
    user = _user()
    http = FakeHttp({"getUsers": FakeResponse(payload={"users": [user.to_dict()]})})
    adapter = ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.PROPAGATE, session=http)

    assert adapter.list_users() == [user]
    assert adapter.user_exists("ASHA@example.com")
    assert adapter.find_user_by_email_and_password("asha@example.com", "secret123") == user
    assert adapter.find_user_by_email_and_password("asha@example.com", "wrong") is None
    assert http.bodies[0] == {"action": "getUsers"}


def test_record_attendance_payload_shape():
    http = FakeHttp({"addAttendance": FakeResponse(payload={"success": True})})
    adapter = ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.PROPAGATE, session=http)

    assert adapter.record_attendance(_record()) is True

    body = http.bodies[0]
    assert body["action"] == "addAttendance"
    sent = body["attendance"]
    assert sent["userId"] == "u_1"
    assert sent["userName"] == "Unknown"
    assert sent["address"] == "Location unavailable"
    assert json.loads(sent["device"]) == {"userAgent": "", "platform": "", "language": ""}


def test_list_attendance_is_newest_first():
    rows = [_record("a_old", 8).to_dict(), _record("a_new", 17).to_dict(), {"broken": True}]
    http = FakeHttp({"getUserAttendance": FakeResponse(payload={"records": rows})})
    adapter = ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.PROPAGATE, session=http)

    assert [r.id for r in adapter.list_attendance("u_1")] == ["a_new", "a_old"]
    assert http.bodies[0] == {"action": "getUserAttendance", "userId": "u_1"}


@pytest.mark.parametrize(
    "http",
    [
        FakeHttp(error=requests.ConnectionError("offline")),
        FakeHttp({"getUsers": FakeResponse(status_code=500, payload={})}),
        FakeHttp({"getUsers": FakeResponse(payload=None)}),
        FakeHttp({"getUsers": FakeResponse(payload=["not", "an", "object"])}),
    ],
)
def test_propagate_policy_raises_remote_unavailable(http):
    adapter = ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.PROPAGATE, session=http)
    with pytest.raises(RemoteUnavailable):
        adapter.list_users()


def test_fallback_policy_uses_local_store_when_offline():
    local = _local()
    adapter = ActionSyncAdapter(
        ENDPOINT,
        policy=ErrorPolicy.FALLBACK,
        fallback=local,
        session=FakeHttp(error=requests.Timeout("slow")),
    )

    assert adapter.add_user(_user()) is True
    assert adapter.record_attendance(_record()) is True

    assert [u.id for u in adapter.list_users()] == ["u_1"]
    assert [r.id for r in local.list_attendance("u_1")] == ["a_1"]


def test_add_user_reports_email_exists():
    http = FakeHttp({"addUser": FakeResponse(payload={"success": False, "error": "Email already exists"})})
    adapter = ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.FALLBACK, fallback=_local(), session=http)

    with pytest.raises(EmailExists):
        adapter.add_user(_user())


def test_add_user_sends_hash_not_plaintext():
    http = FakeHttp({"addUser": FakeResponse(payload={"success": True})})
    adapter = ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.PROPAGATE, session=http)

    adapter.add_user(_user(password="secret123"))

    sent = http.bodies[0]["user"]
    assert sent["email"] == "asha@example.com"
    assert sent["password"] != "secret123"
    assert sent["createdAt"] == "2026-03-01T00:00:00+00:00"


def test_unconfigured_spreadsheet_endpoint_goes_straight_to_local():
    http = FakeHttp()
    adapter = ActionSyncAdapter("", policy=ErrorPolicy.FALLBACK, fallback=_local(), session=http)

    adapter.add_user(_user())
    assert [u.email for u in adapter.list_users()] == ["asha@example.com"]
    assert http.bodies == []


def test_invalid_construction():
    with pytest.raises(ValueError):
        ActionSyncAdapter(ENDPOINT, policy=ErrorPolicy.FALLBACK)
    with pytest.raises(ValueError):
        ActionSyncAdapter(None, policy=ErrorPolicy.PROPAGATE)
    with pytest.raises(ValueError):
        ActionSyncAdapter("", policy=ErrorPolicy.PROPAGATE, fallback=_local())


def test_local_adapter_rejects_duplicate_email():
    local = _local()
    local.add_user(_user())
    with pytest.raises(EmailExists):
        local.add_user(_user(email="Asha@Example.com"))


class ProxySettings:
    REMOTE_BACKEND = "proxy"
    BACKEND_PROXY_URL = ""


def test_proxy_backend_without_url_is_a_configuration_error():
    with pytest.raises(ValueError):
        build_remote(ProxySettings(), LocalCache(InMemoryKeyValueStore()))


def test_proxy_backend_has_no_local_fallback():
    class Settings(ProxySettings):
        BACKEND_PROXY_URL = ENDPOINT

    remote = build_remote(Settings(), LocalCache(InMemoryKeyValueStore()))
    assert remote.policy == ErrorPolicy.PROPAGATE
    assert remote._fallback is None
