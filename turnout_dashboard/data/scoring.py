"""
User-weighted priority scoring.

Four factors are normalised against the rows currently in scope (not the
whole dataset) and combined with weights expressed in percent:

- turnout factor: 1 for the lowest average turnout, 0 for the highest
- trend factor: share of the steepest decline; rising or flat turnout scores 0
- volatility factor: share of the highest volatility
- size factor: share of the largest electorate

Weights are not required to sum to 100. When they do not, scores are simply
not bounded to [0, 1]; warning the user is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

FACTOR_COLUMNS = ["turnout_factor", "trend_factor", "volatility_factor", "size_factor"]
SCORE_COLUMN = "custom_score"


@dataclass(frozen=True)
class ScoreWeights:
    turnout: float = 40
    trend: float = 30
    volatility: float = 20
    size: float = 10

    def __post_init__(self) -> None:
        for name in ("turnout", "trend", "volatility", "size"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} weight must be non-negative, got {getattr(self, name)}")

    @property
    def total(self) -> float:
        return self.turnout + self.trend + self.volatility + self.size

    @property
    def sums_to_100(self) -> bool:
        return self.total == 100


DEFAULT_WEIGHTS = ScoreWeights()


def _float_column(df: pd.DataFrame, column: str) -> pd.Series:
    return pd.to_numeric(df[column], errors="coerce").astype("float64")


def _nonzero_or_one(value: float) -> float:
    if pd.isna(value) or value == 0:
        return 1.0
    return float(value)


def compute_factors(df: pd.DataFrame) -> pd.DataFrame:
    """Return the four normalised factor columns, indexed like ``df``."""
    avg_turnout = _float_column(df, "avg_turnout")
    change = _float_column(df, "turnout_change")
    volatility = _float_column(df, "turnout_volatility")
    electors = _float_column(df, "total_electors")

    min_turnout = avg_turnout.min()
    turnout_span = _nonzero_or_one(avg_turnout.max() - min_turnout)
    # only the steepest decline scales the trend factor
    min_change = abs(_nonzero_or_one(change.min()))

    factors = pd.DataFrame(index=df.index)
    factors["turnout_factor"] = 1 - (avg_turnout - min_turnout) / turnout_span
    factors["trend_factor"] = np.where(change < 0, change.abs() / min_change, 0.0)
    factors["volatility_factor"] = volatility / _nonzero_or_one(volatility.max())
    factors["size_factor"] = electors / _nonzero_or_one(electors.max())
    return factors


def compute_custom_scores(df: pd.DataFrame, weights: ScoreWeights = DEFAULT_WEIGHTS) -> pd.DataFrame:
    """Annotate rows with factors and ``custom_score``, highest score first.

    Ties keep their incoming order. Rows with a missing score sort last.
    """
    if df.empty:
        empty = df.copy()
        for col in FACTOR_COLUMNS + [SCORE_COLUMN]:
            empty[col] = pd.Series(dtype="float64")
        return empty

    scored = df.copy()
    factors = compute_factors(scored)
    for col in FACTOR_COLUMNS:
        scored[col] = factors[col]

    scored[SCORE_COLUMN] = (
        scored["turnout_factor"] * weights.turnout / 100
        + scored["trend_factor"] * weights.trend / 100
        + scored["volatility_factor"] * weights.volatility / 100
        + scored["size_factor"] * weights.size / 100
    )
    return scored.sort_values(SCORE_COLUMN, ascending=False, kind="stable", na_position="last")
