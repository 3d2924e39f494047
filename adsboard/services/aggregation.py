"""Группировка по кампаниям и итоговые метрики дашборда."""

from __future__ import annotations

from typing import Iterable, Optional

from .records import CampaignGroup, NormalizedRecord, SummaryMetrics
from .sorting import SortState, sort_records

ADDITIVE_FIELDS = ("impressions", "clicks", "installs", "follows", "engagement", "spent", "budget")


def _empty_sums() -> dict:
    return {
        "impressions": 0,
        "clicks": 0,
        "installs": 0,
        "follows": 0,
        "engagement": 0,
        "spent": 0.0,
        "budget": 0.0,
    }


def _accumulate(acc: dict, row: NormalizedRecord) -> None:
    for field in ADDITIVE_FIELDS:
        acc[field] += getattr(row, field)


def group_by_campaign(
    records: Iterable[NormalizedRecord], sort_state: Optional[SortState] = None
) -> list[CampaignGroup]:
    """Одна строка на кампанию; доли пересчитываются из сумм, а не усредняются."""

    sums: dict[str, dict] = {}
    for row in records:
        acc = sums.setdefault(row.campaign, _empty_sums())
        _accumulate(acc, row)

    groups = [CampaignGroup.from_totals(campaign=campaign, **acc) for campaign, acc in sums.items()]
    if sort_state is not None:
        groups = sort_records(groups, sort_state)
    return groups


def summary_metrics(records: Iterable[NormalizedRecord]) -> SummaryMetrics:
    """Итоги по всему отфильтрованному набору; пустой набор дает нули."""

    acc = _empty_sums()
    for row in records:
        _accumulate(acc, row)
    return SummaryMetrics.from_totals(**acc)
