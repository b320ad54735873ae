"""
Key-value stores holding one refresh token per user id.

Keys have the form ``refresh:<userId>``; values are raw refresh token
strings, or an empty string once the token has been expired.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Dict, Optional, Protocol, Tuple

from redis import Redis, RedisError

from authserver.core.config import Settings
from authserver.core.exceptions import ErrorCode, UnauthorizedError
from authserver.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)

REFRESH_TOKEN_KEY_PREFIX = "refresh:"


def refresh_token_key(user_id: int) -> str:
    return f"{REFRESH_TOKEN_KEY_PREFIX}{user_id}"


class TokenStore(Protocol):
    def set(self, key: str, value: str, ttl_ms: int) -> None: ...

    def get(self, key: str) -> Optional[str]: ...


class RedisTokenStore:
    """Refresh token store backed by Redis ``SET key value PX ttl`` / ``GET key``."""

    def __init__(self, redis_url: str, *, socket_timeout: float = 5.0) -> None:
        self.redis_url = redis_url
        self.client = Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    @log_db_timing
    def set(self, key: str, value: str, ttl_ms: int) -> None:
        try:
            self.client.set(key, value, px=ttl_ms)
        except RedisError as exc:
            logger.error("Token store write failed key=%s", key, exc_info=True)
            raise UnauthorizedError(ErrorCode.UNKNOWN_TOKEN) from exc

    @log_db_timing
    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except RedisError as exc:
            logger.error("Token store read failed key=%s", key, exc_info=True)
            raise UnauthorizedError(ErrorCode.UNKNOWN_TOKEN) from exc


class MemoryTokenStore:
    """In-process store with millisecond expiry, for development and tests."""

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now_ms() -> float:
        return time.monotonic() * 1000

    def set(self, key: str, value: str, ttl_ms: int) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        with self._lock:
            self._entries[key] = (value, self._now_ms() + ttl_ms)
        logger.trace("Memory token store set key=%s ttl_ms=%s", key, ttl_ms)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._now_ms():
                del self._entries[key]
                return None
            return value


def build_token_store(settings: Settings) -> TokenStore:
    """Create the token store selected by ``TOKEN_STORE_BACKEND``."""
    backend = settings.TOKEN_STORE_BACKEND.strip().lower()
    if backend == "memory":
        logger.info("Using in-memory refresh token store")
        return MemoryTokenStore()
    if backend == "redis":
        logger.info("Using Redis refresh token store")
        return RedisTokenStore(
            settings.REDIS_URL, socket_timeout=settings.REDIS_SOCKET_TIMEOUT
        )
    raise ValueError(f"Unknown TOKEN_STORE_BACKEND: {settings.TOKEN_STORE_BACKEND}")
