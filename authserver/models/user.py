"""
Domain model (plain Python dataclass) representing a User row from the DB.
This is the internal representation used across service and repository layers.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class RoleType(str, Enum):
    ROLE_ADMIN = "ADMIN"
    ROLE_USER = "USER"


class ProviderType(str, Enum):
    LOCAL = "LOCAL"
    GOOGLE = "GOOGLE"
    KAKAO = "KAKAO"
    NAVER = "NAVER"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class User:
    username: str
    password: Optional[str]
    provider_type: ProviderType
    role: RoleType
    id: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new_instance(
        cls,
        username: str,
        password: Optional[str],
        provider_type: ProviderType,
        role: RoleType,
    ) -> "User":
        """Build a user that has not been persisted yet (no id)."""
        return cls(
            username=username,
            password=password,
            provider_type=provider_type,
            role=role,
        )

    @classmethod
    def from_row(cls, row) -> "User":
        """Build a User from a sqlite3.Row object."""
        import logging

        logger = logging.getLogger(__name__)
        logger.trace("Hydrating User from database row")
        return cls(
            id=row["id"],
            username=row["username"],
            password=row["password"],
            provider_type=ProviderType(row["provider_type"]),
            role=RoleType(row["role"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
