from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from ..core.enums import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object; the remote adapters own the mapping to their
    wire formats.
    """

    id: str
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: str
    phone: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password_hash,
            "phone": self.phone,
            "role": self.role.value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "User":
        # Accepts both the camelCase (action API, local cache) and the
        # snake_case (REST) column names.
        return cls(
            id=str(row.get("id") or ""),
            name=str(row.get("name") or ""),
            email=str(row.get("email") or ""),
            password_hash=str(row.get("password") or row.get("password_hash") or ""),
            role=Role(row.get("role") or Role.EMPLOYEE.value),
            created_at=str(row.get("createdAt") or row.get("created_at") or ""),
            phone=row.get("phone") or None,
        )

    def public_dict(self) -> dict[str, Any]:
        data = self.to_dict()
        data.pop("password")
        return data


def decode_users(rows: Iterable[Any]) -> list[User]:
    """Decode stored rows, skipping the ones that are malformed."""
    users = []
    for row in rows:
        try:
            users.append(User.from_dict(row))
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("skipping malformed user row: %s", e)
    return users
