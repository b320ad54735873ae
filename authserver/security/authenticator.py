"""
Per-request bearer token authentication.

:class:`RequestAuthenticator` turns an ``Authorization`` header into either
an :class:`Authenticated` result (principal plus an optional reissued access
token) or a :class:`Rejected` result carrying the failure. Only the HTTP
boundary converts a rejection into a response.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Union
import logging

from authserver.core.exceptions import AppException, ErrorCode, UnauthorizedError
from authserver.security.token_manager import TokenManager
from authserver.security.user_details import Principal

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

WHITE_LIST = (
    "/login",
    "/css",
    "/js",
    "/favicon.ico",
    "/error",
    "/lib",
    "/oauth2",
    "/images",
    "/index.html",
)

PrincipalLoader = Callable[[int], Principal]


@dataclass(frozen=True)
class Authenticated:
    principal: Principal
    reissued_access_token: Optional[str] = None


@dataclass(frozen=True)
class Rejected:
    error: AppException

    @property
    def error_code(self) -> ErrorCode:
        return self.error.error_code


AuthResult = Union[Authenticated, Rejected]


def should_skip(path: str) -> bool:
    """Return True for paths that bypass authentication."""
    return any(path.startswith(prefix) for prefix in WHITE_LIST)


def _parse_user_id(subject: Optional[str]) -> int:
    if not subject or not subject.strip():
        raise UnauthorizedError(ErrorCode.INVALID_TOKEN_SUBJECT)
    if not (subject.isascii() and subject.isdigit()) or int(subject) <= 0:
        raise UnauthorizedError(ErrorCode.INVALID_TOKEN_SUBJECT)
    return int(subject)


class RequestAuthenticator:
    def __init__(self, token_manager: TokenManager, load_principal: PrincipalLoader) -> None:
        self._token_manager = token_manager
        self._load_principal = load_principal

    def authenticate(self, authorization: Optional[str]) -> AuthResult:
        try:
            return self._authenticate(authorization)
        except AppException as exc:
            logger.warning("Request authentication rejected code=%s", exc.error_code.name)
            return Rejected(exc)

    def _authenticate(self, authorization: Optional[str]) -> Authenticated:
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise UnauthorizedError(ErrorCode.MISSING_ACCESS_TOKEN)
        access_token = authorization[len(BEARER_PREFIX):]
        if not access_token.strip():
            raise UnauthorizedError(ErrorCode.MISSING_ACCESS_TOKEN)

        user_id = _parse_user_id(self._token_manager.get_subject(access_token))

        if self._token_manager.is_valid(access_token):
            return Authenticated(self._load_principal(user_id))

        # Expired access token: fall back to the stored refresh token.
        reissued = self._token_manager.reissue_access_token(user_id)
        logger.info("Access token reissued during request for user id=%s", user_id)
        return Authenticated(self._load_principal(user_id), reissued_access_token=reissued)
