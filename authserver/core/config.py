"""Application configuration loaded via pydantic settings."""

from typing import List
import base64
import secrets

from pydantic_settings import BaseSettings


def _generate_secret() -> str:
    return base64.b64encode(secrets.token_bytes(64)).decode("ascii")


class Settings(BaseSettings):
    """Strongly-typed application settings with environment overrides."""

    # Application
    APP_NAME: str = "Token Auth Server"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # JWT
    # Base64 encoded HMAC key; HS512 wants at least 64 bytes once decoded.
    JWT_SECRET: str = _generate_secret()
    JWT_ALGORITHM: str = "HS512"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10
    REFRESH_TOKEN_EXPIRE_DAYS: int = 180
    REFRESH_TOKEN_TOMBSTONE_MS: int = 1

    # Refresh token store
    TOKEN_STORE_BACKEND: str = "redis"  # "redis" | "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # Database
    DATABASE_URL: str = "sqlite:///./authserver/auth.db"
    SEED_ADMIN: bool = True

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_LEVELS: str = "TRACE,ERROR,WARNING,INFO"
    LOG_FILE_PATH: str = "./authserver/logs/app.log"

    class Config:
        """Configure environment file loading behavior."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
