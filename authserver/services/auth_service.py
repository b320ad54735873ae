"""
Authentication service: orchestrates login, sign-up and logout logic.
"""
import sqlite3
import logging

from authserver.core.exceptions import (
    ConflictError,
    ErrorCode,
    NotFoundError,
    UnauthorizedError,
)
from authserver.core.security import hash_password, verify_password
from authserver.models.user import ProviderType, RoleType, User
from authserver.repositories.user_repository import UserRepository
from authserver.schemas.auth import LoginResponse
from authserver.security.token_manager import TokenManager

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, conn: sqlite3.Connection, token_manager: TokenManager) -> None:
        logger.trace("Initializing AuthService")
        self._user_repo = UserRepository(conn)
        self._token_manager = token_manager

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> LoginResponse:
        """Validate credentials and issue a new access + refresh token pair."""
        logger.info("Authenticating user '%s'", username)
        user = self._user_repo.get_by_username(username)
        if user is None:
            logger.warning("Login for unknown user '%s'", username)
            raise NotFoundError(
                ErrorCode.NOT_FOUND_USER,
                f"User ({username}) does not exist.",
            )

        if not user.password or not verify_password(password, user.password):
            logger.warning("Invalid login attempt for '%s'", username)
            raise UnauthorizedError(ErrorCode.UNAUTHORIZED)

        pair = self._token_manager.create_token_pair(user.id)
        logger.info("Login successful for user id=%s", user.id)
        return LoginResponse.of(user.id, pair.access_token, pair.refresh_token)

    # ------------------------------------------------------------------
    # Sign-up
    # ------------------------------------------------------------------

    def sign_up(
        self,
        username: str,
        password: str,
        provider_type: ProviderType = ProviderType.LOCAL,
    ) -> User:
        """Register a regular user account."""
        logger.info("Registering user %s", username)
        if self._user_repo.get_by_username(username):
            logger.warning("Duplicate username registration attempt: %s", username)
            raise ConflictError(ErrorCode.CONFLICT_USER)

        user = self._user_repo.create(
            User.new_instance(
                username=username,
                password=hash_password(password),
                provider_type=provider_type,
                role=RoleType.ROLE_USER,
            )
        )
        logger.info("User registered id=%s", user.id)
        return user

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------

    def logout(self, user_id: int) -> None:
        """Expire the refresh token stored for *user_id*."""
        self._token_manager.expire_refresh_token(user_id)
        logger.info("Logged out user id=%s", user_id)
