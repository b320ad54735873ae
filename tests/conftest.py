import base64
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Configure the environment before any application module reads settings.
_test_tmp_dir = tempfile.mkdtemp(prefix="authserver_test_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_test_tmp_dir}/test.db")
os.environ.setdefault("LOG_FILE_PATH", os.path.join(_test_tmp_dir, "logs", "app.log"))
os.environ.setdefault("TOKEN_STORE_BACKEND", "memory")
os.environ.setdefault("SEED_ADMIN", "false")
os.environ.setdefault(
    "JWT_SECRET",
    base64.b64encode(b"test-secret-key-for-testing-only-" * 3).decode("ascii"),
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from authserver.core.logging_config import TRACE_LEVEL  # noqa: E402,F401
from authserver.core.config import settings  # noqa: E402
from authserver.core.security import hash_password  # noqa: E402
from authserver.db.database import get_connection, get_db  # noqa: E402
from authserver.db.schema import create_tables  # noqa: E402
from authserver.main import create_app  # noqa: E402
from authserver.models.user import ProviderType, RoleType, User  # noqa: E402
from authserver.repositories.user_repository import UserRepository  # noqa: E402
from authserver.security.jwt_codec import JwtCodec, decode_secret  # noqa: E402
from authserver.security.token_manager import TokenManager  # noqa: E402
from authserver.security.token_store import MemoryTokenStore  # noqa: E402

USER_PASSWORD = "Password1234!"


class FrozenClock:
    """Clock returning a settable instant, used to move tokens through time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture(autouse=True)
def clean_database():
    create_tables()
    conn = get_connection()
    try:
        conn.execute("DELETE FROM users")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture
def secret_key() -> bytes:
    return decode_secret(settings.JWT_SECRET)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime.now(tz=timezone.utc).replace(microsecond=0))


@pytest.fixture
def codec(secret_key, clock) -> JwtCodec:
    return JwtCodec(secret_key, "HS512", clock=clock)


@pytest.fixture
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def token_manager(codec, store) -> TokenManager:
    return TokenManager(codec, store)


@pytest.fixture
def user() -> User:
    with get_db() as conn:
        return UserRepository(conn).create(
            User.new_instance(
                username="user@example.com",
                password=hash_password(USER_PASSWORD),
                provider_type=ProviderType.LOCAL,
                role=RoleType.ROLE_USER,
            )
        )


@pytest.fixture
def admin() -> User:
    with get_db() as conn:
        return UserRepository(conn).create(
            User.new_instance(
                username="admin@example.com",
                password=hash_password(USER_PASSWORD),
                provider_type=ProviderType.LOCAL,
                role=RoleType.ROLE_ADMIN,
            )
        )


@pytest.fixture
def app(store):
    return create_app(token_store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
