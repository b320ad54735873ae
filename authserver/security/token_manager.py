"""
Token lifecycle: issuing, validating, reissuing and expiring tokens.

Access tokens are stateless. Refresh tokens are kept in the token store, one
per user id, and reissue always reads the stored value, never a token
supplied by the client.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from authserver.core.config import Settings
from authserver.core.exceptions import ErrorCode, UnauthorizedError
from authserver.security.jwt_codec import JwtCodec, decode_secret
from authserver.security.token_store import TokenStore, refresh_token_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenManager:
    def __init__(
        self,
        codec: JwtCodec,
        store: TokenStore,
        access_token_lifetime: timedelta = timedelta(minutes=10),
        refresh_token_lifetime: timedelta = timedelta(days=180),
        tombstone_ttl_ms: int = 1,
    ) -> None:
        self._codec = codec
        self._store = store
        self._access_token_lifetime = access_token_lifetime
        self._refresh_token_lifetime = refresh_token_lifetime
        self._tombstone_ttl_ms = tombstone_ttl_ms

    @classmethod
    def from_settings(cls, settings: Settings, store: TokenStore) -> "TokenManager":
        codec = JwtCodec(decode_secret(settings.JWT_SECRET), settings.JWT_ALGORITHM)
        return cls(
            codec,
            store,
            access_token_lifetime=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_token_lifetime=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            tombstone_ttl_ms=settings.REFRESH_TOKEN_TOMBSTONE_MS,
        )

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def create_token_pair(self, user_id: int) -> TokenPair:
        """Issue an access + refresh token pair and store the refresh token."""
        access_token = self._issue_access_token(user_id)
        refresh_token = self._codec.issue(None, self._refresh_token_lifetime)

        ttl_ms = int(self._refresh_token_lifetime.total_seconds() * 1000)
        self._store.set(refresh_token_key(user_id), refresh_token, ttl_ms)
        logger.info("Issued token pair for user id=%s", user_id)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def reissue_access_token(self, user_id: int) -> str:
        """
        Issue a fresh access token from the refresh token stored for *user_id*.

        The stored refresh token is left as is.
        """
        refresh_token = self._store.get(refresh_token_key(user_id))

        if not refresh_token or not refresh_token.strip():
            logger.warning("No stored refresh token for user id=%s", user_id)
            raise UnauthorizedError(ErrorCode.EXPIRED_REFRESH_TOKEN)
        try:
            valid = self.is_valid(refresh_token)
        except UnauthorizedError:
            valid = False
        if not valid:
            logger.warning("Stored refresh token is no longer valid for user id=%s", user_id)
            raise UnauthorizedError(ErrorCode.EXPIRED_REFRESH_TOKEN)

        logger.info("Reissuing access token for user id=%s", user_id)
        return self._issue_access_token(user_id)

    # ------------------------------------------------------------------
    # Expire
    # ------------------------------------------------------------------

    def expire_refresh_token(self, user_id: int) -> None:
        """Overwrite the stored refresh token with an empty, short-lived value."""
        self._store.set(refresh_token_key(user_id), "", self._tombstone_ttl_ms)
        logger.info("Expired refresh token for user id=%s", user_id)

    # ------------------------------------------------------------------
    # Inspect
    # ------------------------------------------------------------------

    def is_valid(self, token: Optional[str]) -> bool:
        """
        Return True when *token* parses and its expiry lies in the future.

        A token expiring exactly now counts as expired. Structural failures
        raise the codec's ``UnauthorizedError``.
        """
        if token is None or not token.strip():
            return False
        claims = self._codec.parse(token)
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        return expires_at > self._codec.now()

    def get_subject(self, access_token: str) -> Optional[str]:
        """Return the ``sub`` claim without checking expiry."""
        return self._codec.parse(access_token).get("sub")

    def _issue_access_token(self, user_id: int) -> str:
        return self._codec.issue(str(user_id), self._access_token_lifetime)
