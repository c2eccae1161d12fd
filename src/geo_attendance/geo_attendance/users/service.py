from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..cache.local_cache import LocalCache, Session
from ..common.datetime_utils import now_utc, to_iso
from ..common.identifiers import new_id
from ..common.validators import normalize_email, require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, EmailExists, RemoteUnavailable
from ..remote.repository import RemoteSyncAdapter
from .model import User

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: signup, login and the device session."""

    def __init__(self, users: RemoteSyncAdapter, cache: LocalCache):
        self._users = users
        self._cache = cache

    def signup(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        role: Role = Role.EMPLOYEE,
    ) -> User:
        name = require_non_empty(name, "Name")
        email = normalize_email(require_email(email))
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.user_exists(email):
            raise EmailExists("Email already exists")

        user = User(
            id=new_id("u"),
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role(role),
            created_at=to_iso(now_utc()),
            phone=(phone or "").strip() or None,
        )
        if not self._users.add_user(user):
            raise RemoteUnavailable("Could not create the account")
        logger.info("created %s account %s", user.role.value, user.id)
        return user

    def login(self, *, email: str, password: str, role: Role = Role.EMPLOYEE) -> User:
        user = self._users.find_user_by_email_and_password(normalize_email(email), password or "")
        if not user or user.role != Role(role):
            raise AuthenticationError("Invalid email or password")

        self._cache.set_session_user(user)
        self._cache.set_session(Session(type=user.role, user_id=user.id))
        logger.info("%s %s logged in", user.role.value, user.id)
        return user

    def logout(self) -> None:
        self._cache.clear_session()

    def current_session(self) -> Session:
        return self._cache.get_session()

    def current_user(self) -> Optional[User]:
        """Resolved from the device cache so requests keep working while the backend is down."""
        session = self.current_session()
        if not session.is_active:
            return None
        user = self._cache.get_session_user()
        if user is None or user.id != session.user_id or user.role != session.type:
            return None
        return user


class UserService:
    """Use case: user listings for the admin roster."""

    def __init__(self, users: RemoteSyncAdapter):
        self._users = users

    def list_users(self) -> Sequence[User]:
        return self._users.list_users()

    def get_user(self, user_id: str) -> Optional[User]:
        for user in self._users.list_users():
            if user.id == user_id:
                return user
        return None
