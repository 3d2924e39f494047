"""Форматирование чисел, денег и дат для отчетов."""

from __future__ import annotations

import math
from datetime import date
from typing import Any

from .records import Objective

CURRENCY = "MMK"
NOT_AVAILABLE = "N/A"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def format_number(value: Any) -> str:
    """Группировка тысяч, не больше трех знаков после запятой."""
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:,}"
    if not _is_number(value):
        return NOT_AVAILABLE
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def format_currency(value: Any) -> str:
    if not _is_number(value):
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY} {abs(value):,.2f}"


def format_percent(value: Any) -> str:
    if not _is_number(value):
        return "0.00%"
    return f"{value:.2f}%"


def format_fixed(value: Any) -> str:
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{value:.2f}"


def format_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def cost_metric_label(objective: str, value: Any) -> str:
    """Например, "MMK 10.00 (CPC)"; N/A для неизвестной цели."""
    known = Objective.from_value(objective)
    if known is None or not _is_number(value):
        return NOT_AVAILABLE
    return f"{format_currency(value)} ({known.metric_label})"
