"""Постраничная выдача детального отчета."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_ROWS_PER_PAGE = 10
ROWS_PER_PAGE_CHOICES = (5, 10, 25, 50, 100)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = 0
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE
    start_index: int = 0
    end_index: int = 0
    total: int = 0
    total_pages: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages


def paginate(records: Sequence[T], page: int = 0, rows_per_page: int = DEFAULT_ROWS_PER_PAGE) -> Page[T]:
    if rows_per_page < 1:
        raise ValueError("rows_per_page должен быть положительным")
    if page < 0:
        raise ValueError("Номер страницы не может быть отрицательным")

    total = len(records)
    offset = page * rows_per_page
    return Page(
        items=list(records[offset:offset + rows_per_page]),
        page=page,
        rows_per_page=rows_per_page,
        start_index=0 if total == 0 else offset + 1,
        end_index=min(offset + rows_per_page, total),
        total=total,
        total_pages=math.ceil(total / rows_per_page),
    )
