"""
Application-wide configuration constants and helper utilities.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import List, Optional

import streamlit as st
from loguru import logger


@dataclass(frozen=True)
class TabConfig:
    key: str
    label: str


# Ordered tab definitions for the dashboard
TABS: List[TabConfig] = [
    TabConfig("overview", "Overview"),
    TabConfig("trends", "Trends"),
    TabConfig("drivers", "Drivers"),
    TabConfig("prioritization", "Prioritization"),
    TabConfig("forward_looking", "Forward-Looking"),
    TabConfig("methodology", "Methodology"),
]

DEFAULT_DATASET_SOURCE = "dataset/constituency_level.csv"
DEFAULT_SHEET_NAME = "constituency_level"
DEFAULT_QUERY_CACHE_SIZE = 50
MISSING_NUMERIC_POLICIES = ("null", "zero")


def get_setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """Try env first, then st.secrets (if available)."""
    val = os.getenv(name)
    if val:
        return val
    try:
        sec = getattr(st, "secrets", None)
        if sec:
            v = sec.get(name)  # type: ignore[index]
            return str(v) if v is not None else default
    except Exception:
        # no secrets.toml outside Streamlit Cloud
        pass
    return default


def _int_setting(name: str, default: int) -> int:
    raw = get_setting(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer; using {default}")
        return default


@dataclass(frozen=True)
class DatasetSettings:
    source: str
    spreadsheet_id: Optional[str]
    sheet_name: str
    credentials_path: Optional[str]
    cache_size: int
    missing_numeric: str
    log_level: str


def load_settings() -> DatasetSettings:
    missing_numeric = (get_setting("MISSING_NUMERIC", "null") or "null").lower()
    if missing_numeric not in MISSING_NUMERIC_POLICIES:
        logger.warning(f"Unknown MISSING_NUMERIC policy {missing_numeric!r}; using 'null'")
        missing_numeric = "null"
    return DatasetSettings(
        source=get_setting("DATASET_SOURCE", DEFAULT_DATASET_SOURCE) or DEFAULT_DATASET_SOURCE,
        spreadsheet_id=get_setting("SPREADSHEET_ID"),
        sheet_name=get_setting("SHEET_NAME", DEFAULT_SHEET_NAME) or DEFAULT_SHEET_NAME,
        credentials_path=get_setting("GOOGLE_APPLICATION_CREDENTIALS"),
        cache_size=_int_setting("QUERY_CACHE_SIZE", DEFAULT_QUERY_CACHE_SIZE),
        missing_numeric=missing_numeric,
        log_level=(get_setting("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
