"""
Dataset loading: fetch the constituency-level table from a file, URL or Google
Sheet and coerce each column to its declared type.
"""

from __future__ import annotations

import io
import os
from typing import Dict, List, Optional, Tuple

import gspread
import numpy as np
import pandas as pd
import requests
from google.oauth2.service_account import Credentials
from loguru import logger

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

INT_FIELDS: Tuple[str, ...] = (
    "year",
    "total_electors",
    "total_valid_votes",
    "num_candidates",
)
FLOAT_FIELDS: Tuple[str, ...] = (
    "turnout",
    "margin",
    "winner_vote_share",
    "turnout_change",
    "avg_turnout",
    "turnout_volatility",
    "low_turnout_score",
    "negative_trend_score",
    "volatility_score",
    "large_electorate_penalty",
    "priority_score",
)
STRING_FIELDS: Tuple[str, ...] = ("state_name", "ac_name")

# Column order of a constituency-year record
RECORD_FIELDS: List[str] = [
    "year",
    "state_name",
    "ac_name",
    "total_electors",
    "total_valid_votes",
    "turnout",
    "margin",
    "num_candidates",
    "winner_vote_share",
    "turnout_change",
    "avg_turnout",
    "turnout_volatility",
    "low_turnout_score",
    "negative_trend_score",
    "volatility_score",
    "large_electorate_penalty",
    "priority_score",
]


class LoadError(RuntimeError):
    """The dataset could not be fetched or yielded no rows."""


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_text(source: str) -> str:
    """Return the raw delimited text behind a local path or an http(s) URL."""
    if _is_url(source):
        try:
            response = requests.get(source)
        except requests.RequestException as exc:
            raise LoadError(f"Could not fetch dataset from {source}: {exc}") from exc
        if not response.ok:
            raise LoadError(f"HTTP error fetching {source}: status {response.status_code}")
        return response.text

    try:
        with open(source, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as exc:
        raise LoadError(f"Could not read dataset file {source}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise LoadError(f"Dataset file {source} is not valid UTF-8: {exc}") from exc


def parse_csv(text: str) -> pd.DataFrame:
    """Parse delimited text into a frame of raw strings, one column per header field.

    Values past the header length on a line are dropped and the affected
    lines are counted in ``attrs["truncated_lines"]``.
    """
    if not text or not text.strip():
        raise LoadError("Dataset is empty")
    try:
        width = len(pd.read_csv(io.StringIO(text), nrows=0, index_col=False).columns)
        truncated: List[int] = []

        def _fit_to_header(fields: List[str]) -> List[str]:
            truncated.append(1)
            return fields[:width]

        raw = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            index_col=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_fit_to_header,
        )
    except pd.errors.EmptyDataError as exc:
        raise LoadError("Dataset is empty") from exc
    except pd.errors.ParserError as exc:
        raise LoadError(f"Dataset is malformed: {exc}") from exc
    raw.columns = [str(c).strip() for c in raw.columns]
    if truncated:
        logger.warning(f"Dropped values past the header on {len(truncated)} line(s)")
    raw.attrs["truncated_lines"] = len(truncated)
    return raw


def fetch_sheet(
    spreadsheet_id: str,
    sheet_name: str,
    credentials_path: Optional[str],
) -> pd.DataFrame:
    """Read a worksheet as a frame of raw strings using a service account."""
    service_account_file = credentials_path or "google-credentials.json"
    if not os.path.exists(service_account_file):
        raise LoadError(f"Service account file not found: {service_account_file}")
    try:
        credentials = Credentials.from_service_account_file(service_account_file, scopes=SCOPES)
    except ValueError as exc:
        raise LoadError(f"Invalid service account file {service_account_file}: {exc}") from exc
    try:
        client = gspread.authorize(credentials)
        values = client.open_by_key(spreadsheet_id).worksheet(sheet_name).get_all_values()
    except gspread.exceptions.GSpreadException as exc:
        raise LoadError(f"Could not read sheet {sheet_name!r} of {spreadsheet_id}: {exc}") from exc
    except requests.RequestException as exc:
        raise LoadError(f"Could not reach Google Sheets: {exc}") from exc

    if not values:
        raise LoadError("Dataset is empty")
    header = [str(h).strip() for h in values[0]]
    return pd.DataFrame(values[1:], columns=header, dtype=str)


def _coerce_numeric(raw: pd.Series) -> Tuple[pd.Series, int]:
    text = raw.where(raw.notna(), "").astype(str).str.strip()
    numeric = pd.to_numeric(text, errors="coerce").astype("float64")
    numeric = numeric.replace([np.inf, -np.inf], np.nan)
    failed = int((numeric.isna() & (text != "")).sum())
    return numeric, failed


def coerce_types(raw: pd.DataFrame, missing_numeric: str = "null") -> pd.DataFrame:
    """Convert raw string columns to record types by column name.

    Integer fields become nullable ``Int64`` (fractions truncate toward zero),
    float fields become ``float64`` and everything else stays a string. Values
    that do not parse are missing, or 0 when ``missing_numeric == "zero"``.
    """
    df = raw.copy()
    failures: Dict[str, int] = {}
    missing_counts: Dict[str, int] = {}

    for col in df.columns:
        if col in INT_FIELDS or col in FLOAT_FIELDS:
            numeric, failed = _coerce_numeric(df[col])
            if failed:
                failures[col] = failed
            if missing_numeric == "zero":
                numeric = numeric.fillna(0.0)
            elif numeric.isna().any():
                missing_counts[col] = int(numeric.isna().sum())
            if col in INT_FIELDS:
                df[col] = np.trunc(numeric).astype("Int64")
            else:
                df[col] = numeric
        else:
            df[col] = df[col].fillna("").astype(str)

    absent = [f for f in RECORD_FIELDS if f not in df.columns]
    for col in absent:
        if col in INT_FIELDS:
            fill = 0 if missing_numeric == "zero" else pd.NA
            df[col] = pd.Series(fill, index=df.index, dtype="Int64")
        elif col in FLOAT_FIELDS:
            fill = 0.0 if missing_numeric == "zero" else np.nan
            df[col] = pd.Series(fill, index=df.index, dtype="float64")
        else:
            df[col] = ""
    if absent:
        logger.warning(f"Dataset is missing expected columns: {absent}")
    if failures:
        action = "filled with 0" if missing_numeric == "zero" else "left missing"
        logger.warning(f"Unparseable numeric values {action}: {failures}")

    df.attrs["diagnostics"] = {
        "row_count": int(len(df)),
        "coercion_failures": failures,
        "missing_numeric": missing_counts,
        "missing_columns": absent,
        "missing_numeric_policy": missing_numeric,
        "truncated_lines": int(raw.attrs.get("truncated_lines", 0)),
    }
    return df


def load_table(
    source: str,
    missing_numeric: str = "null",
    spreadsheet_id: Optional[str] = None,
    sheet_name: Optional[str] = None,
    credentials_path: Optional[str] = None,
) -> pd.DataFrame:
    """Fetch, parse and type the dataset. Raises LoadError when no rows result."""
    if spreadsheet_id:
        origin = f"sheet {spreadsheet_id}/{sheet_name}"
        logger.info(f"Loading dataset from {origin}")
        raw = fetch_sheet(spreadsheet_id, sheet_name or "", credentials_path)
    else:
        origin = source
        logger.info(f"Loading dataset from {origin}")
        raw = parse_csv(fetch_text(source))

    if raw.empty:
        raise LoadError(f"No data parsed from {origin}")

    table = coerce_types(raw, missing_numeric=missing_numeric)
    table.attrs["diagnostics"]["source"] = origin
    return table
