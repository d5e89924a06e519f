# config/settings.py
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")

    # Distributed cache
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )
    REDIS_PASSWORD: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    REDIS_SOCKET_TIMEOUT: float = Field(
        default=2.0, validation_alias="REDIS_SOCKET_TIMEOUT"
    )
    REDIS_RETRIES: int = Field(default=3, validation_alias="REDIS_RETRIES")
    REDIS_BACKOFF_STEP_MS: int = Field(
        default=200, validation_alias="REDIS_BACKOFF_STEP_MS"
    )
    REDIS_BACKOFF_CAP_MS: int = Field(
        default=3000, validation_alias="REDIS_BACKOFF_CAP_MS"
    )

    # In-process cache
    MEMORY_CACHE_MAX_ENTRIES: int = Field(
        default=1024, validation_alias="MEMORY_CACHE_MAX_ENTRIES"
    )

    # Relational store
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./mediadock.db", validation_alias="DATABASE_URL"
    )
    DATABASE_ECHO: bool = Field(default=False, validation_alias="DATABASE_ECHO")

    # Object storage
    STORAGE_HOSTNAME: str = Field(
        default="storage.bunnycdn.com", validation_alias="STORAGE_HOSTNAME"
    )
    STORAGE_NAMESPACE: str = Field(
        default="mediadock", validation_alias="STORAGE_NAMESPACE"
    )
    STORAGE_ACCESS_KEY: str = Field(default="", validation_alias="STORAGE_ACCESS_KEY")
    # Falls back to https://{STORAGE_HOSTNAME} when unset
    STORAGE_PUBLIC_URL: Optional[str] = Field(
        default=None, validation_alias="STORAGE_PUBLIC_URL"
    )
    STORAGE_TIMEOUT_SECONDS: float = Field(
        default=30.0, validation_alias="STORAGE_TIMEOUT_SECONDS"
    )

    # Identity forwarded by the auth gateway
    SUBJECT_HEADER: str = Field(default="X-Subject-Id", validation_alias="SUBJECT_HEADER")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(
        default="http://localhost:3000", validation_alias="ALLOWED_ORIGIN"
    )
    RATE_LIMIT_TIMES: int = Field(default=30, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    MAX_FILE_MB: int = Field(default=10, validation_alias="MAX_FILE_MB")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Logging knobs
    LOGGER_NAME: str = "mediadock"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @property
    def storage_public_url(self) -> str:
        base = self.STORAGE_PUBLIC_URL or f"https://{self.STORAGE_HOSTNAME}"
        return base.rstrip("/")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
