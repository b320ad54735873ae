"""
Resolution of the authenticated identity from persistence.
"""
import sqlite3
from dataclasses import dataclass
from typing import Optional
import logging

from authserver.core.exceptions import ErrorCode, UnauthorizedError
from authserver.db.database import get_db
from authserver.models.user import RoleType, User
from authserver.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Minimal view of a user attached to an authenticated request."""

    id: int
    username: str
    password: Optional[str]
    role: RoleType

    @classmethod
    def of(cls, user: User) -> "Principal":
        return cls(
            id=user.id,  # type: ignore[arg-type]
            username=user.username,
            password=user.password,
            role=user.role,
        )

    @property
    def authorities(self) -> list[str]:
        return [self.role.name]


class UserDetailsService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._repo = UserRepository(conn)

    def load_user_by_username(self, username: str) -> Principal:
        user = self._repo.get_by_username(username)
        if user is None:
            logger.warning("User not found username=%s", username)
            raise UnauthorizedError(ErrorCode.USER_NOT_FOUND)
        return Principal.of(user)

    def load_user_by_id(self, user_id: int) -> Principal:
        user = self._repo.get_by_id(user_id)
        if user is None:
            logger.warning("User not found id=%s", user_id)
            raise UnauthorizedError(ErrorCode.USER_NOT_FOUND)
        return Principal.of(user)


def load_principal_by_id(user_id: int) -> Principal:
    """Open a connection and resolve the principal for *user_id*."""
    with get_db() as conn:
        return UserDetailsService(conn).load_user_by_id(user_id)
