"""Unit tests for per-request bearer token authentication."""

from datetime import timedelta

import pytest

from authserver.core.exceptions import ErrorCode, UnauthorizedError
from authserver.models.user import RoleType
from authserver.security.authenticator import (
    Authenticated,
    Rejected,
    RequestAuthenticator,
    should_skip,
)
from authserver.security.user_details import Principal

KNOWN_USERS = {
    7: Principal(id=7, username="user@example.com", password="hash", role=RoleType.ROLE_USER),
}


def load_principal(user_id: int) -> Principal:
    try:
        return KNOWN_USERS[user_id]
    except KeyError:
        raise UnauthorizedError(ErrorCode.USER_NOT_FOUND)


@pytest.fixture
def authenticator(token_manager):
    return RequestAuthenticator(token_manager, load_principal)


def _rejection_code(result):
    assert isinstance(result, Rejected)
    return result.error_code


class TestWhiteList:
    @pytest.mark.parametrize(
        "path",
        [
            "/login",
            "/login/sign-up",
            "/css/app.css",
            "/js/app.js",
            "/favicon.ico",
            "/error",
            "/lib/vendor.js",
            "/oauth2/authorization/google",
            "/images/logo.png",
            "/index.html",
        ],
    )
    def test_white_listed_paths_are_skipped(self, path):
        assert should_skip(path) is True

    @pytest.mark.parametrize("path", ["/api/profile", "/", "/api/login"])
    def test_other_paths_require_authentication(self, path):
        assert should_skip(path) is False


class TestBearerHeader:
    @pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc", "Bearer ", "Bearer    "])
    def test_missing_or_malformed_header(self, authenticator, header):
        assert _rejection_code(authenticator.authenticate(header)) is ErrorCode.MISSING_ACCESS_TOKEN

    def test_garbage_token_is_invalid(self, authenticator):
        assert _rejection_code(authenticator.authenticate("Bearer garbage")) is ErrorCode.INVALID_TOKEN


class TestSubject:
    def test_token_without_subject_is_rejected(self, authenticator, codec):
        token = codec.issue(None, timedelta(minutes=10))

        code = _rejection_code(authenticator.authenticate(f"Bearer {token}"))
        assert code is ErrorCode.INVALID_TOKEN_SUBJECT

    @pytest.mark.parametrize("subject", ["abc", "-5", "0", "7.0", " 7"])
    def test_non_numeric_subject_is_rejected(self, authenticator, codec, subject):
        token = codec.issue(subject, timedelta(minutes=10))

        code = _rejection_code(authenticator.authenticate(f"Bearer {token}"))
        assert code is ErrorCode.INVALID_TOKEN_SUBJECT


class TestAuthenticate:
    def test_valid_token_authenticates_user(self, authenticator, token_manager):
        pair = token_manager.create_token_pair(7)

        result = authenticator.authenticate(f"Bearer {pair.access_token}")

        assert isinstance(result, Authenticated)
        assert result.principal.id == 7
        assert result.reissued_access_token is None

    def test_unknown_user_is_rejected(self, authenticator, token_manager):
        pair = token_manager.create_token_pair(99)

        code = _rejection_code(authenticator.authenticate(f"Bearer {pair.access_token}"))
        assert code is ErrorCode.USER_NOT_FOUND

    def test_expired_token_is_reissued(self, authenticator, token_manager, clock):
        pair = token_manager.create_token_pair(7)
        clock.advance(timedelta(minutes=10))

        result = authenticator.authenticate(f"Bearer {pair.access_token}")

        assert isinstance(result, Authenticated)
        assert result.principal.id == 7
        assert result.reissued_access_token is not None
        assert token_manager.get_subject(result.reissued_access_token) == "7"
        assert token_manager.is_valid(result.reissued_access_token) is True

    def test_expired_token_after_logout_is_rejected(self, authenticator, token_manager, clock):
        pair = token_manager.create_token_pair(7)
        token_manager.expire_refresh_token(7)
        clock.advance(timedelta(minutes=10))

        code = _rejection_code(authenticator.authenticate(f"Bearer {pair.access_token}"))
        assert code is ErrorCode.EXPIRED_REFRESH_TOKEN
