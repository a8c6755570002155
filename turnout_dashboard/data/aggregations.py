"""
Pure aggregations over a filtered set of constituency rows.

Every function accepts a DataFrame shaped like the loaded table and returns a
scalar, a small frame, or a tuple of frames ready for charts and tables. Empty
or degenerate input resolves to 0 or an empty frame, never NaN or an error.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

TURNOUT_BUCKETS: List[str] = ["<50%", "50-60%", "60-70%", "70-80%", ">80%"]
TURNOUT_BUCKET_EDGES: List[float] = [-np.inf, 50.0, 60.0, 70.0, 80.0, np.inf]


def _numeric(df: pd.DataFrame, column: str) -> pd.Series:
    return pd.to_numeric(df[column], errors="coerce").astype("float64")


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------

def pearson_correlation(df: pd.DataFrame, x: str, y: str) -> float:
    """Pearson r between two columns; 0 when empty or when either is constant.

    Rows missing either value are ignored.
    """
    if df.empty:
        return 0.0
    pairs = pd.DataFrame({"x": _numeric(df, x), "y": _numeric(df, y)}).dropna()
    n = len(pairs)
    if n == 0:
        return 0.0

    xs = pairs["x"].to_numpy()
    ys = pairs["y"].to_numpy()
    if (xs == xs[0]).all() or (ys == ys[0]).all():
        return 0.0
    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = (xs * ys).sum()
    sum_x2 = (xs * xs).sum()
    sum_y2 = (ys * ys).sum()

    numerator = n * sum_xy - sum_x * sum_y
    variance_product = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if variance_product <= 0:
        return 0.0
    denominator = math.sqrt(variance_product)
    return float(max(-1.0, min(1.0, numerator / denominator)))


def correlation_strength(r: float) -> str:
    magnitude = abs(r)
    if magnitude < 0.3:
        return "weak"
    if magnitude < 0.7:
        return "moderate"
    return "strong"


def correlation_direction(r: float) -> str:
    # r == 0 reads as negative
    return "positive" if r > 0 else "negative"


# ---------------------------------------------------------------------------
# Distributions and trends
# ---------------------------------------------------------------------------

def yearly_average(df: pd.DataFrame, value_col: str = "turnout") -> pd.DataFrame:
    """Mean of ``value_col`` per year, ascending by year."""
    if df.empty or "year" not in df or value_col not in df:
        return pd.DataFrame(columns=["year", value_col])
    working = pd.DataFrame({"year": df["year"], value_col: _numeric(df, value_col)})
    working = working.dropna(subset=["year"])
    if working.empty:
        return pd.DataFrame(columns=["year", value_col])
    grouped = (
        working.groupby("year", sort=True)[value_col]
        .mean()
        .reset_index()
    )
    grouped["year"] = grouped["year"].astype(int)
    return grouped.dropna(subset=[value_col]).reset_index(drop=True)


def national_average_change(yearly: pd.DataFrame, value_col: str = "turnout") -> Optional[float]:
    """Latest yearly average minus the earliest; None with fewer than two years."""
    if len(yearly) < 2:
        return None
    return float(yearly[value_col].iloc[-1] - yearly[value_col].iloc[0])


def turnout_distribution(df: pd.DataFrame, value_col: str = "turnout") -> pd.DataFrame:
    """Row counts per turnout bucket; bounds are left-closed, right-open."""
    counts = pd.Series(0, index=TURNOUT_BUCKETS, dtype="int64")
    if not df.empty and value_col in df:
        values = _numeric(df, value_col).dropna()
        buckets = pd.cut(values, bins=TURNOUT_BUCKET_EDGES, labels=TURNOUT_BUCKETS, right=False)
        counts = (
            buckets.astype(str)
            .value_counts()
            .reindex(TURNOUT_BUCKETS, fill_value=0)
            .astype("int64")
        )
    return pd.DataFrame({"bucket": TURNOUT_BUCKETS, "count": counts.to_numpy()})


def change_split(df: pd.DataFrame) -> Dict[str, float]:
    """Counts of rising, falling and flat turnout plus shares of the non-flat total."""
    if df.empty:
        changes = pd.Series(dtype="float64")
    else:
        changes = _numeric(df, "turnout_change")
    increasing = int((changes > 0).sum())
    decreasing = int((changes < 0).sum())
    stable = int((changes == 0).sum())
    with_change = increasing + decreasing
    return {
        "increasing": increasing,
        "decreasing": decreasing,
        "stable": stable,
        "increasing_pct": increasing / with_change * 100 if with_change else 0.0,
        "decreasing_pct": decreasing / with_change * 100 if with_change else 0.0,
    }


def trend_label(change: float) -> str:
    if change > 1:
        return "rising"
    if change < -1:
        return "falling"
    return "stable"


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------

def top_n(df: pd.DataFrame, column: str, n: int, ascending: bool = False) -> pd.DataFrame:
    """Stable sort on ``column`` and keep the first ``n`` rows; missing values sort last."""
    if df.empty:
        return df
    return df.sort_values(column, ascending=ascending, kind="stable", na_position="last").head(n)


def largest_changes(df: pd.DataFrame, n: int = 10) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Biggest increases and biggest decreases in turnout_change.

    Both lists come from a single descending sort of the non-zero changes; the
    decreases are the tail of that sort reversed so the steepest drop leads.
    With fewer than ``2 * n`` non-zero rows the two lists overlap.
    """
    if df.empty:
        return df, df
    changes = _numeric(df, "turnout_change")
    nonzero = df[changes.ne(0) & changes.notna()]
    ordered = nonzero.sort_values("turnout_change", ascending=False, kind="stable")
    increases = ordered.head(n)
    decreases = ordered.tail(n).iloc[::-1]
    return increases, decreases


def most_volatile(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    return top_n(df, "turnout_volatility", n)


def steepest_declines(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    if df.empty:
        return df
    declining = df[_numeric(df, "turnout_change") < 0]
    return top_n(declining, "turnout_change", n, ascending=True)


def watchlist(df: pd.DataFrame, n: int = 15) -> pd.DataFrame:
    """Low, falling turnout or high volatility, ranked by precomputed priority."""
    if df.empty:
        return df
    avg = _numeric(df, "avg_turnout")
    change = _numeric(df, "turnout_change")
    volatility = _numeric(df, "turnout_volatility")
    at_risk = df[((avg < 60) & (change < 0)) | (volatility > 5)]
    return top_n(at_risk, "priority_score", n)


def risk_flag(row: pd.Series) -> str:
    priority = row.get("priority_score")
    avg = row.get("avg_turnout")
    change = row.get("turnout_change")
    volatility = row.get("turnout_volatility")

    def _gt(value, threshold) -> bool:
        return pd.notna(value) and value > threshold

    def _lt(value, threshold) -> bool:
        return pd.notna(value) and value < threshold

    if _gt(priority, 0.30) or (_lt(avg, 50) and _lt(change, -3)):
        return "Critical"
    if _gt(priority, 0.20) or _gt(volatility, 5):
        return "High"
    return "Monitor"


# ---------------------------------------------------------------------------
# Overview helpers
# ---------------------------------------------------------------------------

def overview_kpis(df: pd.DataFrame) -> Dict[str, float]:
    if df.empty:
        return {
            "avg_turnout": 0.0,
            "constituencies": 0,
            "declining": 0,
            "declining_pct": 0.0,
            "highest_priority": 0.0,
        }
    turnout = _numeric(df, "turnout")
    declining = int((_numeric(df, "turnout_change") < 0).sum())
    priority = _numeric(df, "priority_score")
    return {
        "avg_turnout": float(turnout.mean()) if turnout.notna().any() else 0.0,
        "constituencies": int(df[["state_name", "ac_name"]].drop_duplicates().shape[0]),
        "declining": declining,
        "declining_pct": declining / len(df) * 100,
        "highest_priority": float(priority.max()) if priority.notna().any() else 0.0,
    }


def search_rows(df: pd.DataFrame, term: str) -> pd.DataFrame:
    """Case-insensitive substring match on constituency or state name."""
    needle = (term or "").strip().lower()
    if not needle or df.empty:
        return df
    ac = df["ac_name"].astype(str).str.lower().str.contains(needle, regex=False)
    state = df["state_name"].astype(str).str.lower().str.contains(needle, regex=False)
    return df[ac | state]
