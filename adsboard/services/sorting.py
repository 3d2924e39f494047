"""Сортировка строк отчета с переключением asc -> desc -> без сортировки."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")

# Колонки, по которым разрешена сортировка в каждом представлении
DETAIL_SORT_KEYS = frozenset(
    {
        "date",
        "campaign",
        "ad_name",
        "platform",
        "objective",
        "impressions",
        "clicks",
        "ctr",
        "budget",
        "spent",
        "cost_metric",
    }
)
SUMMARY_SORT_KEYS = frozenset(
    {
        "campaign",
        "impressions",
        "clicks",
        "installs",
        "follows",
        "engagement",
        "spent",
        "budget",
        "ctr",
        "cpm",
        "cpc",
        "cpi",
        "cpe",
    }
)


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def parse(cls, value: "str | SortDirection | None") -> "SortDirection":
        if value is None or value == "":
            return cls.ASCENDING
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in {"asc", "ascending"}:
            return cls.ASCENDING
        if text in {"desc", "descending"}:
            return cls.DESCENDING
        raise ValueError(f"Неизвестное направление сортировки: {value}")


@dataclass(frozen=True)
class SortState:
    key: Optional[str] = None
    direction: SortDirection = SortDirection.ASCENDING

    @property
    def is_active(self) -> bool:
        return self.key is not None


def request_sort(state: SortState, key: str) -> SortState:
    """Повторный клик по той же колонке: asc -> desc -> сброс."""

    if state.key == key and state.direction == SortDirection.ASCENDING:
        return SortState(key, SortDirection.DESCENDING)
    if state.key == key and state.direction == SortDirection.DESCENDING:
        return SortState()
    return SortState(key, SortDirection.ASCENDING)


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _collation_key(text: str) -> tuple[str, str]:
    # Сначала без учета регистра, затем исходная строка для стабильного порядка
    return text.casefold(), text


def _sort_value(value: Any) -> Any:
    if isinstance(value, str):
        return _collation_key(value)
    if isinstance(value, date):
        return value.toordinal()
    return value


def sort_records(records: Iterable[T], state: SortState) -> list[T]:
    """Возвращает новый список; исходный порядок не меняется."""

    rows: Sequence[T] = list(records)
    if not state.is_active or not rows:
        return list(rows)

    key = state.key
    if not hasattr(rows[0], key):
        raise ValueError(f"Нельзя сортировать по полю {key}")

    # NaN всегда в конце, в любом направлении
    present = [row for row in rows if not _is_nan(getattr(row, key))]
    missing = [row for row in rows if _is_nan(getattr(row, key))]
    ordered = sorted(
        present,
        key=lambda row: _sort_value(getattr(row, key)),
        reverse=state.direction == SortDirection.DESCENDING,
    )
    return ordered + missing
