from __future__ import annotations

from datetime import datetime, timezone

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord
from src.geo_attendance.geo_attendance.cache.local_cache import LocalCache, Session
from src.geo_attendance.geo_attendance.cache.store import FileKeyValueStore, InMemoryKeyValueStore
from src.geo_attendance.geo_attendance.core.constants import ATTENDANCE_KEY, SESSION_KEY
from src.geo_attendance.geo_attendance.core.enums import AttendanceType, Role
from src.geo_attendance.geo_attendance.geo.device import DeviceInfo
from src.geo_attendance.geo_attendance.users.model import User


def _record(rid: str, minute: int) -> AttendanceRecord:
    return AttendanceRecord(
        id=rid,
        user_id="u1",
        user_name="Asha",
        type=AttendanceType.CHECKIN,
        time=datetime(2026, 3, 2, 9, minute, 30, 123456, tzinfo=timezone.utc),
        lat=12.9716,
        lng=77.5946,
        address="Bengaluru",
        device=DeviceInfo(user_agent="Mozilla/5.0", platform="Android", language="kn-IN"),
    )


def test_load_save_reload_is_identical():
    cache = LocalCache(InMemoryKeyValueStore())
    cache.set_attendance([_record("a_1", 1), _record("a_2", 2)])

    first = cache.get_attendance()
    cache.set_attendance(first)
    second = cache.get_attendance()

    assert first == second
    assert cache.store.get(ATTENDANCE_KEY) is not None


def test_corrupt_json_falls_back_to_empty():
    store = InMemoryKeyValueStore({ATTENDANCE_KEY: "{not json", SESSION_KEY: "[1, 2]"})
    cache = LocalCache(store)

    assert cache.get_attendance() == []
    assert cache.get_session() == Session()


def test_wrong_shape_falls_back_to_default():
    cache = LocalCache(InMemoryKeyValueStore({ATTENDANCE_KEY: '{"id": "a_1"}'}))
    assert cache.get_attendance() == []


def test_malformed_rows_are_skipped():
    good = _record("a_ok", 5).to_dict()
    cache = LocalCache(InMemoryKeyValueStore())
    cache.save_json(ATTENDANCE_KEY, [good, {"id": "a_bad"}, "junk"])

    assert [r.id for r in cache.get_attendance()] == ["a_ok"]


def test_browser_style_timestamps_are_accepted():
    row = _record("a_js", 1).to_dict()
    row["time"] = "2026-03-02T09:01:30.123Z"
    cache = LocalCache(InMemoryKeyValueStore())
    cache.save_json(ATTENDANCE_KEY, [row])

    [record] = cache.get_attendance()
    assert record.time.tzinfo is not None
    assert record.time.microsecond == 123000


def test_append_preserves_call_order():
    cache = LocalCache(InMemoryKeyValueStore())
    for i in range(3):
        cache.append_attendance(_record(f"a_{i}", i))
    assert [r.id for r in cache.get_attendance()] == ["a_0", "a_1", "a_2"]


def test_session_set_clear_and_reset_demo():
    cache = LocalCache(InMemoryKeyValueStore())
    assert not cache.get_session().is_active

    cache.set_session(Session(type=Role.ADMIN, user_id="u_admin"))
    assert cache.get_session() == Session(type=Role.ADMIN, user_id="u_admin")

    cache.clear_session()
    assert not cache.get_session().is_active

    cache.set_session(Session(type=Role.EMPLOYEE, user_id="u1"))
    cache.append_attendance(_record("a_1", 1))
    cache.reset_demo()
    assert cache.get_attendance() == []
    assert not cache.get_session().is_active


def test_session_user_is_cached_without_password_and_cleared_with_session():
    cache = LocalCache(InMemoryKeyValueStore())
    user = User(
        id="u1",
        name="Asha",
        email="asha@example.com",
        password_hash="pbkdf2:sha256:xyz",
        role=Role.EMPLOYEE,
        created_at="2026-03-01T00:00:00+00:00",
    )
    cache.set_session_user(user)

    cached = cache.get_session_user()
    assert cached.id == "u1"
    assert cached.name == "Asha"
    assert cached.password_hash == ""

    cache.clear_session()
    assert cache.get_session_user() is None


def test_set_session_ignores_non_session_values():
    cache = LocalCache(InMemoryKeyValueStore())
    cache.set_session({"type": "admin"})
    assert cache.store.get(SESSION_KEY) is None


def test_file_store_survives_reopen(tmp_path):
    LocalCache(FileKeyValueStore(tmp_path / "cache")).append_attendance(_record("a_1", 1))

    reopened = LocalCache(FileKeyValueStore(tmp_path / "cache"))
    assert [r.id for r in reopened.get_attendance()] == ["a_1"]

    reopened.store.clear()
    assert reopened.get_attendance() == []


def test_file_store_missing_key_is_none(tmp_path):
    store = FileKeyValueStore(tmp_path / "missing")
    assert store.get("nothing") is None
    store.delete("nothing")
