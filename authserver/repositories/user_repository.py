"""
Repository layer for User persistence.
All SQL for the `users` table lives here.
"""
import sqlite3
from typing import Optional
import logging

from authserver.models.user import User
from authserver.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class UserRepository:
    """Data access layer for user records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing UserRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Return a user by id or None if missing."""
        logger.trace("Fetching user by id=%s", user_id)
        row = self._conn.execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def get_by_username(self, username: str) -> Optional[User]:
        """Return a user by username or None if missing."""
        logger.trace("Fetching user by username=%s", username)
        row = self._conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()
        return User.from_row(row) if row else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(self, user: User) -> User:
        """Insert an unsaved user and return the stored row."""
        logger.info("Creating user record username=%s", user.username)
        cursor = self._conn.execute(
            """
            INSERT INTO users (username, password, provider_type, role)
            VALUES (?, ?, ?, ?)
            """,
            (
                user.username,
                user.password,
                user.provider_type.value,
                user.role.value,
            ),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]
