"""
SQL DDL statements for the application tables.

Refresh tokens are not stored here; they live in the token store keyed by
user id (see authserver.security.token_store).
"""
from authserver.db.database import get_connection

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    username        TEXT    NOT NULL UNIQUE CHECK(length(username) <= 30),
    password        TEXT             CHECK(length(password) <= 100),
    provider_type   TEXT    NOT NULL DEFAULT 'LOCAL'
                            CHECK(provider_type IN ('LOCAL', 'GOOGLE', 'KAKAO', 'NAVER')),
    role            TEXT    NOT NULL DEFAULT 'USER'
                            CHECK(role IN ('ADMIN', 'USER')),
    created_at      TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at      TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

ALL_TABLES = [
    CREATE_USERS_TABLE,
]


def create_tables() -> None:
    """Create all tables; safe to call on every startup."""
    conn = get_connection()
    try:
        cursor = conn.cursor()
        for ddl in ALL_TABLES:
            cursor.execute(ddl)
        conn.commit()
    finally:
        conn.close()
