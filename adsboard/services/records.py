"""Типы записей отчета: нормализованная строка фида и агрегаты."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Optional


class Objective(str, Enum):
    IMPRESSION = "Impression"
    CLICK = "Click"
    INSTALL = "Install"
    ENGAGEMENT = "Engagement"

    @classmethod
    def from_value(cls, value: str) -> Optional["Objective"]:
        """Возвращает известную цель или None для прочих значений."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def metric_label(self) -> str:
        return _METRIC_LABELS[self]


_METRIC_LABELS = {
    Objective.IMPRESSION: "CPM",
    Objective.CLICK: "CPC",
    Objective.INSTALL: "CPI",
    Objective.ENGAGEMENT: "CPE",
}


def ratio(num: float, den: float, scale: float = 1.0) -> float:
    """num / den * scale, 0 при нулевом знаменателе."""
    if den <= 0:
        return 0.0
    return num / den * scale


@dataclass(frozen=True)
class NormalizedRecord:
    date: date
    campaign: str
    ad_name: str
    platform: str
    objective: str
    impressions: int = 0
    clicks: int = 0
    installs: int = 0
    follows: int = 0
    engagement: int = 0
    spent: float = 0.0
    budget: float = 0.0
    devices: str = ""
    segment: str = ""
    ctr: float = 0.0
    cost_metric: float = math.nan

    @property
    def has_cost_metric(self) -> bool:
        return not math.isnan(self.cost_metric)


# Стоимостная метрика в зависимости от цели кампании
_COST_METRICS: dict[Objective, Callable[[int, int, int, int, float], float]] = {
    Objective.IMPRESSION: lambda impressions, clicks, installs, engagement, spent: ratio(spent, impressions, 1000),
    Objective.CLICK: lambda impressions, clicks, installs, engagement, spent: ratio(spent, clicks),
    Objective.INSTALL: lambda impressions, clicks, installs, engagement, spent: ratio(spent, installs),
    Objective.ENGAGEMENT: lambda impressions, clicks, installs, engagement, spent: ratio(spent, engagement, 1000),
}


def cost_metric_for(
    objective: str,
    impressions: int,
    clicks: int,
    installs: int,
    engagement: int,
    spent: float,
) -> float:
    """CPM/CPC/CPI/CPE по цели; NaN, если цель неизвестна."""

    known = Objective.from_value(objective)
    if known is None:
        return math.nan
    return _COST_METRICS[known](impressions, clicks, installs, engagement, spent)


@dataclass(frozen=True)
class SummaryMetrics:
    impressions: int = 0
    clicks: int = 0
    installs: int = 0
    follows: int = 0
    engagement: int = 0
    spent: float = 0.0
    budget: float = 0.0
    ctr: float = 0.0
    cpm: float = 0.0
    cpc: float = 0.0
    cpi: float = 0.0
    cpe: float = 0.0

    @classmethod
    def from_totals(
        cls,
        impressions: int,
        clicks: int,
        installs: int,
        follows: int,
        engagement: int,
        spent: float,
        budget: float,
        **extra,
    ):
        """Собирает агрегат, пересчитывая доли из сумм."""
        return cls(
            impressions=impressions,
            clicks=clicks,
            installs=installs,
            follows=follows,
            engagement=engagement,
            spent=spent,
            budget=budget,
            ctr=ratio(clicks, impressions, 100),
            cpm=ratio(spent, impressions, 1000),
            cpc=ratio(spent, clicks),
            cpi=ratio(spent, installs),
            cpe=ratio(spent, engagement, 1000),
            **extra,
        )


@dataclass(frozen=True)
class CampaignGroup(SummaryMetrics):
    campaign: str = ""
