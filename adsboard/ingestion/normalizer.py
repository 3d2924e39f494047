"""Нормализация сырых строк фида в типизированные записи."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping

import pandas as pd

from adsboard.services.records import NormalizedRecord, cost_metric_for, ratio

logger = logging.getLogger(__name__)


DATE_COLUMN = "Date"
DATE_FORMAT = "%m/%d/%Y"

# Колонка фида -> поле NormalizedRecord
TEXT_COLUMNS = {
    "Core Campaign Name": "campaign",
    "Ads Campaign Name": "ad_name",
    "Platform": "platform",
    "Objective": "objective",
    "Device Target": "devices",
    "Segment": "segment",
}
INTEGER_COLUMNS = {
    "Impression": "impressions",
    "Click": "clicks",
    "Install": "installs",
    "Follow": "follows",
    "Engagement": "engagement",
}
FLOAT_COLUMNS = {
    "Spent": "spent",
    "Budget": "budget",
}

# Ведущее число; хвост строки игнорируется ("1.5" -> 1, "12abc" -> 12)
INTEGER_PATTERN = r"^\s*([+-]?\d+)"
FLOAT_PATTERN = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"


def _as_text(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str)


def _extract_number(series: pd.Series, pattern: str) -> pd.Series:
    cleaned = _as_text(series).str.replace(",", "", regex=False)
    return cleaned.str.extract(pattern, expand=False)


def _parse_integers(series: pd.Series) -> pd.Series:
    # Python int вместо int64: большие счетчики не переполняются
    digits = _extract_number(series, INTEGER_PATTERN)
    return digits.map(lambda text: int(text) if isinstance(text, str) else 0).astype(object)


def _parse_floats(series: pd.Series) -> pd.Series:
    return pd.to_numeric(_extract_number(series, FLOAT_PATTERN), errors="coerce").fillna(0).astype(float)


def _read_feed_frame(raw_records: List[Mapping[str, Any]]) -> pd.DataFrame:
    # dtype=object: значения остаются как в фиде, без приведения 2024 -> 2024.0
    df = pd.DataFrame(raw_records, dtype=object)

    expected = [DATE_COLUMN, *TEXT_COLUMNS, *INTEGER_COLUMNS, *FLOAT_COLUMNS]
    for column in expected:
        if column not in df.columns:
            df[column] = ""

    # Строки с нераспознанной датой отбрасываются
    df[DATE_COLUMN] = pd.to_datetime(
        _as_text(df[DATE_COLUMN]).str.strip(), format=DATE_FORMAT, errors="coerce"
    ).dt.date
    df = df[df[DATE_COLUMN].notna()].copy()

    for column in TEXT_COLUMNS:
        df[column] = _as_text(df[column])
    for column in INTEGER_COLUMNS:
        df[column] = _parse_integers(df[column])
    for column in FLOAT_COLUMNS:
        df[column] = _parse_floats(df[column])

    return df


def normalize(raw_records: Iterable[Mapping[str, Any]]) -> list[NormalizedRecord]:
    """Приводит сырые записи фида к NormalizedRecord, сохраняя порядок."""

    rows = list(raw_records)
    if not rows:
        return []

    df = _read_feed_frame(rows)

    records: List[NormalizedRecord] = []
    for row in df.to_dict(orient="records"):
        values = {field: row[column] for column, field in TEXT_COLUMNS.items()}
        values.update({field: int(row[column]) for column, field in INTEGER_COLUMNS.items()})
        values.update({field: float(row[column]) for column, field in FLOAT_COLUMNS.items()})

        records.append(
            NormalizedRecord(
                date=row[DATE_COLUMN],
                ctr=ratio(values["clicks"], values["impressions"], 100),
                cost_metric=cost_metric_for(
                    values["objective"],
                    values["impressions"],
                    values["clicks"],
                    values["installs"],
                    values["engagement"],
                    values["spent"],
                ),
                **values,
            )
        )

    dropped = len(rows) - len(records)
    logger.info("Нормализовано %s строк фида, отброшено с некорректной датой: %s", len(records), dropped)
    return records
