from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for dashboard access."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


class AttendanceType(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class WorkStatus(str, Enum):
    """Derived from the latest attendance record; never stored."""

    WORKING = "Working"
    NOT_WORKING = "Not working"


class MirrorState(str, Enum):
    """Result of copying a locally stored record to the remote backend."""

    SYNCED = "synced"
    FAILED = "failed"
    SKIPPED = "skipped"


class ErrorPolicy(str, Enum):
    """How a remote adapter reacts when the backend cannot be reached."""

    FALLBACK = "fallback"
    PROPAGATE = "propagate"


class BackendKind(str, Enum):
    LOCAL = "local"
    SHEETS = "sheets"
    PROXY = "proxy"
    REST = "rest"
