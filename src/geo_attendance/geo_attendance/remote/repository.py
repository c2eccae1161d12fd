from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from werkzeug.security import check_password_hash

from ..attendance.model import AttendanceRecord
from ..common.validators import normalize_email
from ..core.enums import ErrorPolicy
from ..core.exceptions import RemoteUnavailable
from ..users.model import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemoteSyncAdapter(Protocol):
    """Contract shared by every backend (spreadsheet API, proxy, REST, local).

    Note (DIP): services depend on this interface only, so the variants are
    drop-in replacements for each other.
    """

    def list_users(self) -> Sequence[User]:
        raise NotImplementedError

    def add_user(self, user: User) -> bool:
        """Persist a new user; raises EmailExists on a duplicate email."""

        raise NotImplementedError

    def find_user_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        for user in self.list_users():
            if normalize_email(user.email) == email:
                return user
        return None

    def user_exists(self, email: str) -> bool:
        return self.find_user_by_email(email) is not None

    def find_user_by_email_and_password(self, email: str, password: str) -> Optional[User]:
        user = self.find_user_by_email(email)
        if not user:
            return None
        try:
            ok = check_password_hash(user.password_hash, password)
        except (TypeError, ValueError):
            # e.g. legacy plaintext rows or corrupted hashes
            ok = False
        return user if ok else None

    def record_attendance(self, record: AttendanceRecord) -> bool:
        raise NotImplementedError

    def list_attendance(self, user_id: str) -> Sequence[AttendanceRecord]:
        """Records of one user, newest first."""

        raise NotImplementedError


def newest_first(records: Sequence[AttendanceRecord]) -> list[AttendanceRecord]:
    return sorted(records, key=lambda r: r.time, reverse=True)


class PolicySyncAdapter(RemoteSyncAdapter):
    """Base for HTTP adapters: applies the configured ErrorPolicy.

    FALLBACK reruns a failed operation against ``fallback`` (an adapter of the
    same shape, usually the local one); PROPAGATE re-raises RemoteUnavailable.
    """

    def __init__(self, *, policy: ErrorPolicy, fallback: Optional[RemoteSyncAdapter] = None):
        if policy == ErrorPolicy.FALLBACK and fallback is None:
            raise ValueError("ErrorPolicy.FALLBACK requires a fallback adapter")
        self._policy = policy
        self._fallback = fallback

    @property
    def policy(self) -> ErrorPolicy:
        return self._policy

    def _guard(
        self,
        operation: str,
        remote_call: Callable[[], T],
        fallback_call: Callable[[RemoteSyncAdapter], T],
    ) -> T:
        try:
            return remote_call()
        except RemoteUnavailable as e:
            if self._policy != ErrorPolicy.FALLBACK:
                raise
            logger.warning("%s unavailable, falling back to local store: %s", operation, e)
            return fallback_call(self._fallback)
