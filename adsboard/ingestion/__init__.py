"""Получение и нормализация фида рекламной статистики."""

from .feed_client import FeedClient, FeedError, load_feed_file
from .normalizer import normalize

__all__ = [
    "FeedClient",
    "FeedError",
    "load_feed_file",
    "normalize",
]
