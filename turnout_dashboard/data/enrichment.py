"""
Validation of the longitudinal fields precomputed by the offline pipeline.

Nothing here recomputes turnout change, volatility or priority scores; values
are only checked against their nominal ranges and counted in diagnostics.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger


# column -> (lower, upper); None means unbounded on that side
NOMINAL_RANGES: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "turnout": (0.0, 100.0),
    "avg_turnout": (0.0, 100.0),
    "turnout_volatility": (0.0, None),
    "low_turnout_score": (0.0, 1.0),
    "negative_trend_score": (0.0, 1.0),
    "volatility_score": (0.0, 1.0),
    "large_electorate_penalty": (0.0, 1.0),
    "priority_score": (0.0, 1.0),
}

DERIVED_FIELDS = (
    "turnout_change",
    "avg_turnout",
    "turnout_volatility",
    "low_turnout_score",
    "negative_trend_score",
    "volatility_score",
    "large_electorate_penalty",
    "priority_score",
)


def _count_out_of_range(series: pd.Series, lower: Optional[float], upper: Optional[float]) -> int:
    values = series.dropna()
    mask = pd.Series(False, index=values.index)
    if lower is not None:
        mask |= values < lower
    if upper is not None:
        mask |= values > upper
    return int(mask.sum())


def resolve_derived_fields(df: pd.DataFrame) -> pd.DataFrame:
    """
    Ensure every precomputed field is present as a float column and record
    how many values fall outside their nominal range. Values are left as-is.
    """
    if df.empty:
        return df

    working = df.copy()
    for col in DERIVED_FIELDS:
        if col not in working.columns:
            working[col] = np.nan
        elif working[col].dtype != "float64":
            working[col] = pd.to_numeric(working[col], errors="coerce").astype("float64")

    violations: Dict[str, int] = {}
    for col, (lower, upper) in NOMINAL_RANGES.items():
        if col not in working.columns:
            continue
        count = _count_out_of_range(working[col], lower, upper)
        if count:
            violations[col] = count

    if violations:
        logger.warning(f"Values outside nominal range (kept unchanged): {violations}")

    diagnostics = dict(working.attrs.get("diagnostics", {}))
    diagnostics["range_violations"] = violations
    working.attrs["diagnostics"] = diagnostics
    return working
