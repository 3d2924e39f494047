"""Получение внешнего фида рекламной статистики."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


class FeedError(Exception):
    """Фид недоступен или вернул не то, что ожидалось."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _ensure_list(payload: Any, source: str) -> list[dict]:
    if not isinstance(payload, list):
        raise FeedError(f"Фид {source} вернул {type(payload).__name__} вместо списка записей")
    return payload


class FeedClient:
    """HTTP-клиент фида: один GET без повторов и кэша."""

    def __init__(self, url: Optional[str], timeout: float = 30.0, session: Optional[requests.Session] = None) -> None:
        self.url = url
        self.timeout = timeout
        self._http = session or requests.Session()

    def fetch(self) -> list[dict]:
        if not self.url:
            raise FeedError("Не задан адрес фида (DATA_URL)")

        logger.info("Запрашиваю фид %s", self.url)
        try:
            response = self._http.get(self.url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FeedError(f"Ошибка запроса к фиду: {exc}") from exc

        if not response.ok:
            logger.error("Фид ответил %s %s", response.status_code, response.reason)
            raise FeedError(
                f"Фид ответил {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedError("Фид вернул не JSON") from exc

        records = _ensure_list(payload, self.url)
        logger.info("Получено %s записей из фида", len(records))
        return records


def load_feed_file(file_path: str | Path) -> list[dict]:
    """Читает сохраненный JSON фида с диска."""

    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Файл {file_path} не найден")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise FeedError(f"Файл {path.name} не является корректным JSON") from exc
    return _ensure_list(payload, path.name)
