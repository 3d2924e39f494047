"""Выгрузка детального и сводного отчетов в CSV/TSV."""

from __future__ import annotations

import csv
import io
from enum import Enum
from typing import Callable, Iterable

from .formatting import format_currency, format_date, format_fixed, format_number, format_percent
from .records import CampaignGroup, NormalizedRecord


class ExportFormat(str, Enum):
    CSV = "csv"
    EXCEL = "excel"

    @property
    def delimiter(self) -> str:
        return "," if self is ExportFormat.CSV else "\t"

    @property
    def extension(self) -> str:
        return "csv" if self is ExportFormat.CSV else "xls"

    @property
    def media_type(self) -> str:
        if self is ExportFormat.CSV:
            return "text/csv; charset=utf-8"
        return "text/tab-separated-values; charset=utf-8"

    @classmethod
    def parse(cls, value: "str | ExportFormat | None") -> "ExportFormat":
        if value is None or value == "":
            return cls.CSV
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in {"excel", "xls", "tsv"}:
            return cls.EXCEL
        if text == "csv":
            return cls.CSV
        raise ValueError(f"Неизвестный формат выгрузки: {value}")


DETAIL_COLUMNS: list[tuple[str, Callable[[NormalizedRecord], str]]] = [
    ("Date", lambda row: format_date(row.date)),
    ("Campaign", lambda row: row.campaign),
    ("Ads Name", lambda row: row.ad_name),
    ("Platform", lambda row: row.platform),
    ("Objective", lambda row: row.objective),
    ("Impressions", lambda row: format_number(row.impressions)),
    ("Clicks", lambda row: format_number(row.clicks)),
    ("CTR", lambda row: format_fixed(row.ctr)),
    ("Budget", lambda row: format_number(row.budget)),
    ("Spent", lambda row: format_number(row.spent)),
    ("CostMetric", lambda row: format_fixed(row.cost_metric)),
]

SUMMARY_COLUMNS: list[tuple[str, Callable[[CampaignGroup], str]]] = [
    ("Campaign", lambda row: row.campaign),
    ("TotalImpressions", lambda row: format_number(row.impressions)),
    ("TotalClicks", lambda row: format_number(row.clicks)),
    ("TotalInstall", lambda row: format_number(row.installs)),
    ("TotalFollow", lambda row: format_number(row.follows)),
    ("TotalEngagement", lambda row: format_number(row.engagement)),
    ("TotalSpent", lambda row: format_currency(row.spent)),
    ("TotalBudget", lambda row: format_currency(row.budget)),
    ("CTR", lambda row: format_percent(row.ctr)),
    ("CPM", lambda row: format_currency(row.cpm)),
    ("CPC", lambda row: format_currency(row.cpc)),
    ("CPI", lambda row: format_currency(row.cpi)),
    ("CPE", lambda row: format_currency(row.cpe)),
]


def _write_table(rows: Iterable, columns: list[tuple[str, Callable]], fmt: ExportFormat) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=fmt.delimiter, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow([title for title, _ in columns])
    for row in rows:
        writer.writerow([render(row) for _, render in columns])
    return buffer.getvalue().rstrip("\n")


def export_detail(records: Iterable[NormalizedRecord], fmt: ExportFormat = ExportFormat.CSV) -> str:
    return _write_table(records, DETAIL_COLUMNS, fmt)


def export_summary(groups: Iterable[CampaignGroup], fmt: ExportFormat = ExportFormat.CSV) -> str:
    return _write_table(groups, SUMMARY_COLUMNS, fmt)


def export_filename(view: str, fmt: ExportFormat) -> str:
    prefix = "detailed_report" if view == "detail" else "summary_report"
    return f"{prefix}.{fmt.extension}"
