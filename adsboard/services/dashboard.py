"""Состояние дашборда: загруженные данные, фильтры, сортировка, страница."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional

from adsboard.ingestion.feed_client import FeedError
from adsboard.ingestion.normalizer import normalize

from .aggregation import group_by_campaign, summary_metrics
from .filters import FilterCriteria, apply_filters, filter_options
from .pagination import DEFAULT_ROWS_PER_PAGE, Page, paginate
from .records import CampaignGroup, NormalizedRecord, SummaryMetrics
from .sorting import SortState, request_sort, sort_records

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load data. Please ensure the backend is running and you are authenticated."


class DashboardState:
    """Держит рабочий набор и выбор пользователя; представления считаются заново при каждом вызове."""

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self.records: list[NormalizedRecord] = []
        self.criteria = FilterCriteria()
        self.sort = SortState()
        self.page = 0
        self.rows_per_page = DEFAULT_ROWS_PER_PAGE
        self.error: Optional[str] = None
        self._today = today or date.today

    def load(self, fetch: Callable[[], Iterable[Mapping[str, Any]]]) -> int:
        self.error = None
        try:
            raw = fetch()
        except FeedError:
            logger.exception("Не удалось загрузить фид")
            self.records = []
            self.error = LOAD_ERROR_MESSAGE
            raise
        self.records = normalize(raw)
        self.page = 0
        return len(self.records)

    def set_criteria(self, **changes: Any) -> FilterCriteria:
        self.criteria = replace(self.criteria, **changes)
        self.page = 0
        return self.criteria

    def request_sort(self, key: str) -> SortState:
        self.sort = request_sort(self.sort, key)
        self.page = 0
        return self.sort

    def set_rows_per_page(self, rows_per_page: int) -> None:
        if rows_per_page < 1:
            raise ValueError("rows_per_page должен быть положительным")
        self.rows_per_page = rows_per_page
        self.page = 0

    def clear(self) -> None:
        self.records = []
        self.sort = SortState()
        self.page = 0
        self.error = None

    def filtered(self) -> list[NormalizedRecord]:
        return apply_filters(self.records, self.criteria, today=self._today())

    def detail_rows(self) -> list[NormalizedRecord]:
        return sort_records(self.filtered(), self.sort)

    def detail_page(self) -> Page[NormalizedRecord]:
        return paginate(self.detail_rows(), self.page, self.rows_per_page)

    def grouped(self) -> list[CampaignGroup]:
        return group_by_campaign(self.filtered(), self.sort)

    def totals(self) -> SummaryMetrics:
        return summary_metrics(self.filtered())

    def options(self) -> dict[str, list[str]]:
        return filter_options(self.records)
