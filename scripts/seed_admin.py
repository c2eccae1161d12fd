"""Create an admin account on the configured backend.

Signup through the API only creates employees; admins are provisioned here.
Usage: python scripts/seed_admin.py "Admin Name" admin@example.com <password>
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.geo_attendance.geo_attendance.container import build_container
from src.geo_attendance.geo_attendance.core.enums import Role
from src.geo_attendance.geo_attendance.core.exceptions import DomainError


def main(argv: list[str]) -> None:
    if len(argv) != 3:
        raise SystemExit(__doc__)
    name, email, password = argv

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    try:
        user = container.auth_service.signup(name=name, email=email, password=password, role=Role.ADMIN)
    except DomainError as e:
        raise SystemExit(f"Could not create admin: {e}")

    print(f"OK: Admin {user.email} created (id={user.id}, backend={settings.REMOTE_BACKEND})")


if __name__ == "__main__":
    main(sys.argv[1:])
