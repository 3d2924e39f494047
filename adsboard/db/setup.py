"""Утилиты для первичной инициализации базы."""

from __future__ import annotations

import logging

from sqlalchemy import inspect

from .models import Base
from .session import engine

logger = logging.getLogger(__name__)


def ensure_schema() -> list[str]:
    """Создает недостающие таблицы и возвращает их имена."""

    existing = set(inspect(engine).get_table_names())
    missing = [name for name in Base.metadata.tables if name not in existing]
    if missing:
        Base.metadata.create_all(bind=engine)
        logger.info("Созданы таблицы: %s", ", ".join(missing))
    return missing
