"""Фильтрация нормализованных записей по критериям дашборда."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Optional

from .records import NormalizedRecord

ALL = "All"
END_OF_DAY = time(23, 59, 59, 999000)


class DateRange(str, Enum):
    ALL = "All"
    LAST_7_DAYS = "Last 7 Days"
    LAST_30_DAYS = "Last 30 Days"
    LAST_MONTH = "Last Month"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: "str | DateRange | None") -> "DateRange":
        """Принимает подпись ("Last 7 Days") или имя ("LAST_7_DAYS")."""
        if value is None or value == "":
            return cls.ALL
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for item in cls:
            if text == item.value or text.upper() == item.name:
                return item
        raise ValueError(f"Неизвестный период: {value}")


@dataclass(frozen=True)
class FilterCriteria:
    campaign: str = ""
    ad_name: str = ""
    platform: str = ALL
    objective: str = ALL
    date_range: DateRange = DateRange.ALL
    custom_start: Optional[date] = None
    custom_end: Optional[date] = None


def resolve_date_window(
    criteria: FilterCriteria, today: Optional[date] = None
) -> Optional[tuple[datetime, datetime]]:
    """Границы периода [начало дня, конец дня] или None, если фильтра нет."""

    today = today or date.today()
    selector = criteria.date_range

    if selector == DateRange.LAST_7_DAYS:
        start, end = today - timedelta(days=6), today
    elif selector == DateRange.LAST_30_DAYS:
        start, end = today - timedelta(days=29), today
    elif selector == DateRange.LAST_MONTH:
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    elif selector == DateRange.CUSTOM and criteria.custom_start and criteria.custom_end:
        start, end = criteria.custom_start, criteria.custom_end
    else:
        return None

    return datetime.combine(start, time.min), datetime.combine(end, END_OF_DAY)


def apply_filters(
    records: Iterable[NormalizedRecord],
    criteria: FilterCriteria,
    today: Optional[date] = None,
) -> list[NormalizedRecord]:
    campaign = criteria.campaign.lower()
    ad_name = criteria.ad_name.lower()
    platform = criteria.platform or ALL
    objective = criteria.objective or ALL
    window = resolve_date_window(criteria, today)

    filtered = []
    for row in records:
        # Текстовые фильтры (содержит, без учета регистра)
        if campaign and campaign not in row.campaign.lower():
            continue
        if ad_name and ad_name not in row.ad_name.lower():
            continue

        if platform != ALL and row.platform != platform:
            continue
        if objective != ALL and row.objective != objective:
            continue

        if window is not None:
            moment = datetime.combine(row.date, time.min)
            if moment < window[0] or moment > window[1]:
                continue

        filtered.append(row)
    return filtered


def filter_options(records: Iterable[NormalizedRecord]) -> dict[str, list[str]]:
    """Значения для выпадающих списков платформ и целей."""

    platforms: set[str] = set()
    objectives: set[str] = set()
    for row in records:
        if row.platform:
            platforms.add(row.platform)
        if row.objective:
            objectives.add(row.objective)
    return {"platforms": sorted(platforms), "objectives": sorted(objectives)}
