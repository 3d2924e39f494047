"""Расчет отчетов: фильтры, сортировка, агрегаты, выгрузка."""

from .aggregation import group_by_campaign, summary_metrics
from .export import ExportFormat, export_detail, export_summary
from .filters import DateRange, FilterCriteria, apply_filters, filter_options, resolve_date_window
from .pagination import Page, paginate
from .records import CampaignGroup, NormalizedRecord, Objective, SummaryMetrics
from .sorting import SortDirection, SortState, request_sort, sort_records

__all__ = [
    "CampaignGroup",
    "DateRange",
    "ExportFormat",
    "FilterCriteria",
    "NormalizedRecord",
    "Objective",
    "Page",
    "SortDirection",
    "SortState",
    "SummaryMetrics",
    "apply_filters",
    "export_detail",
    "export_summary",
    "filter_options",
    "group_by_campaign",
    "paginate",
    "request_sort",
    "resolve_date_window",
    "sort_records",
    "summary_metrics",
]
