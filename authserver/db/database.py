"""
SQLite access for the user store.

Each request or lookup opens its own short-lived connection through
:func:`get_db`; identity loading runs in a threadpool during request
authentication, so connections are never shared between threads.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from authserver.core.config import settings

logger = logging.getLogger(__name__)

SQLITE_URL_PREFIX = "sqlite:///"


def _database_path(url: str) -> str:
    if not url.startswith(SQLITE_URL_PREFIX):
        raise ValueError(f"Only sqlite:/// database URLs are supported, got {url!r}")
    return url[len(SQLITE_URL_PREFIX):]


DB_PATH = _database_path(settings.DATABASE_URL)

_db_dir = os.path.dirname(DB_PATH)
if _db_dir:
    os.makedirs(_db_dir, exist_ok=True)
    logger.info("User database directory ensured at %s", _db_dir)


def get_connection() -> sqlite3.Connection:
    """Open a connection to the user database; rows behave like mappings."""
    logger.trace("Opening user database connection to %s", DB_PATH)
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db() -> Iterator[sqlite3.Connection]:
    """Yield a connection that commits on success and rolls back on error."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
        logger.trace("User database transaction committed")
    except Exception:
        logger.error("User database transaction rolled back", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Create the ``users`` table when it does not exist yet."""
    logger.info("Initializing user database schema at %s", DB_PATH)
    from authserver.db import schema
    schema.create_tables()
