"""
Signing and parsing of bearer tokens (JWT, HMAC-SHA512).

Parsing checks the signature and structure only. An expired token still
yields its claims so that callers can read the subject of a stale access
token; temporal validity is decided by
:meth:`authserver.security.token_manager.TokenManager.is_valid`.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
import base64
import logging

from jose import JWTError, jwt

from authserver.core.exceptions import ErrorCode, UnauthorizedError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

TOKEN_TYPE = "JWT"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def decode_secret(encoded_secret: str) -> bytes:
    """Decode the base64 encoded signing key from configuration."""
    return base64.b64decode(encoded_secret)


class JwtCodec:
    def __init__(
        self,
        secret_key: bytes,
        algorithm: str = "HS512",
        clock: Clock = utc_now,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, subject: Optional[str], lifetime: timedelta) -> str:
        """Build and sign a token; refresh tokens pass ``subject=None``."""
        now = self._clock()
        claims: dict[str, Any] = {
            "iat": now,
            "exp": now + lifetime,
        }
        if subject is not None:
            claims["sub"] = subject
        return jwt.encode(
            claims,
            self._secret_key,
            algorithm=self._algorithm,
            headers={"typ": TOKEN_TYPE},
        )

    def parse(self, token: Optional[str]) -> dict[str, Any]:
        """
        Verify the signature of *token* and return its claims.

        Raises:
            UnauthorizedError: ``EMPTY_TOKEN`` for blank input,
                ``UNSUPPORTED_TOKEN`` for a foreign algorithm or token type,
                ``INVALID_TOKEN`` for anything that fails verification.
        """
        if token is None or not token.strip():
            logger.warning("JWT claims string is empty")
            raise UnauthorizedError(ErrorCode.EMPTY_TOKEN)

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            logger.warning("Invalid JWT token: undecodable header")
            raise UnauthorizedError(ErrorCode.INVALID_TOKEN)

        token_type = header.get("typ")
        if header.get("alg") != self._algorithm or (
            token_type is not None and str(token_type).upper() != TOKEN_TYPE
        ):
            logger.warning(
                "Unsupported JWT token alg=%s typ=%s", header.get("alg"), token_type
            )
            raise UnauthorizedError(ErrorCode.UNSUPPORTED_TOKEN)

        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            logger.warning("Invalid JWT token", exc_info=True)
            raise UnauthorizedError(ErrorCode.INVALID_TOKEN)
        except Exception:
            logger.error("Unhandled JWT exception", exc_info=True)
            raise UnauthorizedError(ErrorCode.INVALID_TOKEN)

        # Expiry is not verified here, but every token must carry one.
        if not isinstance(claims.get("exp"), (int, float)):
            logger.warning("Invalid JWT token: missing exp claim")
            raise UnauthorizedError(ErrorCode.INVALID_TOKEN)
        return claims

    def now(self) -> datetime:
        return self._clock()
