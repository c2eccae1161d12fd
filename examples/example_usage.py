"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the attendance logic lives in the services.
"""

from src.geo_attendance.geo_attendance.cache.store import InMemoryKeyValueStore
from src.geo_attendance.geo_attendance.container import build_container
from src.geo_attendance.geo_attendance.geo.device import DeviceInfo
from src.geo_attendance.geo_attendance.geo.position import StaticPositionProvider


class DemoSettings:
    REMOTE_BACKEND = "local"
    GEOCODER_ENABLED = False


def main():
    container = build_container(settings=DemoSettings(), store=InMemoryKeyValueStore())
    user = container.auth_service.signup(name="Asha Rao", email="asha@example.com", password="secret123")

    outcome = container.attendance_service.create_attendance(
        user_id=user.id,
        type="checkin",
        user_name=user.name,
        locator=StaticPositionProvider(12.97, 77.59),
        device=DeviceInfo(user_agent="example-script"),
    )
    print(outcome.to_dict())
    print(container.attendance_service.latest_status_for(user.id).to_dict())


if __name__ == "__main__":
    main()
