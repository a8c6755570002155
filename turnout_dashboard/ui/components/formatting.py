"""
Utility helpers for formatting counts, percentages, and scores.
"""

from __future__ import annotations

import math
from typing import Optional

SCALE_FACTORS = [
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
]


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def format_number(value: Optional[float], decimals: int = 0) -> str:
    if _is_missing(value):
        return "–"
    return f"{float(value):,.{decimals}f}"


def _scale_value(value: float):
    for factor, suffix in SCALE_FACTORS:
        if abs(value) >= factor:
            return value / factor, suffix
    return value, ""


def format_compact(value: Optional[float], decimals: int = 1) -> str:
    if _is_missing(value):
        return "–"
    display_value, suffix = _scale_value(float(value))
    if not suffix:
        return f"{display_value:,.0f}"
    return f"{display_value:,.{decimals}f}{suffix}"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    if _is_missing(value):
        return "–"
    return f"{float(value):.{decimals}f}%"


def format_signed_percent(value: Optional[float], decimals: int = 2) -> str:
    if _is_missing(value):
        return "–"
    sign = "+" if float(value) > 0 else ""
    return f"{sign}{float(value):.{decimals}f}%"


def format_score(value: Optional[float], decimals: int = 3) -> str:
    if _is_missing(value):
        return "–"
    return f"{float(value):.{decimals}f}"
