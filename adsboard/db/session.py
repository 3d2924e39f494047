"""Инструменты для создания сессий SQLAlchemy."""

from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from adsboard.config import get_settings


_settings = get_settings()
DATABASE_URL = _settings.database_url

# FastAPI выполняет sync-эндпоинты в пуле потоков
_connect_args = {"check_same_thread": False} if _settings.is_sqlite else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, future=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def get_session() -> Iterator[Session]:
    """Поставляет сессию для использования в FastAPI/CLI."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
