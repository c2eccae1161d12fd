"""Back up the device-local cache.

Note: Only the local store is exported; the remote backend keeps its own
copy of whatever was mirrored successfully.
"""

from __future__ import annotations

import importlib
import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.geo_attendance.geo_attendance.cache.local_cache import LocalCache
from src.geo_attendance.geo_attendance.cache.store import FileKeyValueStore
from src.geo_attendance.geo_attendance.core.constants import (
    ATTENDANCE_KEY,
    LOCAL_ATTENDANCE_KEY,
    LOCAL_USERS_KEY,
    SESSION_KEY,
)


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    if not settings.CACHE_DIR:
        raise SystemExit("CACHE_DIR is not set; nothing to back up.")

    cache = LocalCache(FileKeyValueStore(settings.CACHE_DIR))
    snapshot = {
        "attendance": cache.load_json(ATTENDANCE_KEY, []),
        "session": cache.load_json(SESSION_KEY, {}),
        "localUsers": cache.load_json(LOCAL_USERS_KEY, []),
        "localAttendance": cache.load_json(LOCAL_ATTENDANCE_KEY, []),
    }

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"geo_attendance_cache_{ts}.json"
    out_file.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
    print(f"OK: Backup created: {out_file} ({len(snapshot['attendance'])} attendance rows)")


if __name__ == "__main__":
    main()
