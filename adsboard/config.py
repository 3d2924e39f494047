"""Настройки приложения из переменных окружения."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus


DEFAULT_DB_URL = "sqlite:///dev.db"
DEFAULT_TOKEN_TTL_MINUTES = 120
DEFAULT_FEED_TIMEOUT_SECONDS = 30.0
DEFAULT_BCRYPT_ROUNDS = 12


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: Optional[str]
    data_url: Optional[str]
    token_ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES
    feed_timeout_seconds: float = DEFAULT_FEED_TIMEOUT_SECONDS
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def require_jwt_secret(self) -> str:
        if not self.jwt_secret:
            raise RuntimeError("Не задана переменная окружения JWT_SECRET")
        return self.jwt_secret


def quote_database_password(value: str) -> str:
    """Экранирует не-ASCII пароль в postgresql:// строке подключения."""

    if not value.startswith("postgresql://"):
        return value
    prefix, rest = value.split("://", 1)
    if "@" not in rest:
        return value
    creds, host_part = rest.rsplit("@", 1)
    if ":" not in creds:
        return value
    user, pwd = creds.split(":", 1)
    if any(ord(ch) > 127 for ch in pwd):
        pwd = quote_plus(pwd)
    return f"{prefix}://{user}:{pwd}@{host_part}"


def _int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _float_env(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Читает настройки один раз за процесс."""

    return Settings(
        database_url=quote_database_password(os.getenv("DATABASE_URL", DEFAULT_DB_URL)),
        jwt_secret=os.getenv("JWT_SECRET") or None,
        data_url=os.getenv("DATA_URL") or None,
        token_ttl_minutes=_int_env("TOKEN_TTL_MINUTES", DEFAULT_TOKEN_TTL_MINUTES),
        feed_timeout_seconds=_float_env("FEED_TIMEOUT_SECONDS", DEFAULT_FEED_TIMEOUT_SECONDS),
        bcrypt_rounds=_int_env("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
    )
