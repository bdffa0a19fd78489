# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hotelhub.domain.users.entities import SessionPolicy


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///hotelhub.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")
    # Ignored for SQLite, which always runs BEGIN IMMEDIATE transactions.
    isolation_level: str = Field("SERIALIZABLE", alias="DATABASE_ISOLATION_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", validate_by_name=True
    )

    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class SessionConfig(BaseSettings):
    max_tokens: int = Field(3, ge=1, alias="MAX_TOKENS")
    token_bytes: int = Field(32, ge=16, alias="TOKEN_BYTES")
    token_ttl_seconds: int | None = Field(24 * 60 * 60, alias="TOKEN_TTL_SECONDS")
    token_rolling_ttl_seconds: int | None = Field(60 * 60, alias="TOKEN_ROLLING_TTL_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", validate_by_name=True
    )

    @field_validator("token_ttl_seconds", "token_rolling_ttl_seconds", mode="before")
    @classmethod
    def _parse_optional_ttl(cls, value: str | int | None) -> int | None:
        # "0", "none" or an empty value disables the limit
        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip().lower()
            if value in ("", "none", "off"):
                return None
        value = int(value)
        return value if value > 0 else None

    def to_policy(self) -> SessionPolicy:
        return SessionPolicy(
            max_tokens=self.max_tokens,
            token_ttl=_seconds(self.token_ttl_seconds),
            token_rolling_ttl=_seconds(self.token_rolling_ttl_seconds),
        )


def _seconds(value: int | None) -> timedelta | None:
    return timedelta(seconds=value) if value is not None else None


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _session_config_factory() -> SessionConfig:
    return SessionConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str | None = Field(None, alias="LOG_FILE")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    sessions: SessionConfig = Field(default_factory=_session_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        validate_by_name=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_logging else self.log_level.upper()


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "DatabaseConfig", "SessionConfig", "load_config"]
