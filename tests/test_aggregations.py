"""
Unit tests for data/aggregations.py

Run:
  pytest -q tests/test_aggregations.py
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from conftest import make_rows
from turnout_dashboard.data.aggregations import (
    TURNOUT_BUCKETS,
    change_split,
    correlation_direction,
    correlation_strength,
    largest_changes,
    most_volatile,
    national_average_change,
    overview_kpis,
    pearson_correlation,
    risk_flag,
    search_rows,
    steepest_declines,
    top_n,
    trend_label,
    turnout_distribution,
    watchlist,
    yearly_average,
)


# ----------------------------- Correlation ------------------------------

def test_perfect_positive_correlation():
    df = pd.DataFrame({"a": [1.0, 2.0, 3.0], "b": [2.0, 4.0, 6.0]})
    assert pearson_correlation(df, "a", "b") == pytest.approx(1.0)


def test_perfect_negative_correlation():
    df = pd.DataFrame({"a": [1.0, 2.0, 3.0], "b": [6.0, 4.0, 2.0]})
    assert pearson_correlation(df, "a", "b") == pytest.approx(-1.0)


def test_constant_column_gives_zero():
    df = pd.DataFrame({"a": [5.0, 5.0, 5.0], "b": [1.0, 2.0, 3.0]})
    assert pearson_correlation(df, "a", "b") == 0.0


def test_empty_input_gives_zero():
    df = pd.DataFrame({"a": [], "b": []})
    assert pearson_correlation(df, "a", "b") == 0.0


def test_rows_with_missing_values_are_ignored():
    df = pd.DataFrame({"a": [1.0, 2.0, np.nan, 3.0], "b": [2.0, 4.0, 100.0, 6.0]})
    assert pearson_correlation(df, "a", "b") == pytest.approx(1.0)


def test_correlation_is_bounded():
    rng = np.random.default_rng(7)
    df = pd.DataFrame({"a": rng.normal(size=200), "b": rng.normal(size=200)})
    r = pearson_correlation(df, "a", "b")
    assert -1.0 <= r <= 1.0


@pytest.mark.parametrize(
    "r,expected",
    [(0.0, "weak"), (0.29, "weak"), (0.3, "moderate"), (-0.69, "moderate"), (0.7, "strong"), (-1.0, "strong")],
)
def test_correlation_strength_boundaries(r, expected):
    assert correlation_strength(r) == expected


def test_correlation_direction():
    assert correlation_direction(0.4) == "positive"
    assert correlation_direction(-0.4) == "negative"
    assert correlation_direction(0.0) == "negative"


# ----------------------------- Distributions ----------------------------

def test_bucket_bounds_are_left_closed():
    df = make_rows(turnout=[49.99, 50.0, 59.9, 60.0, 79.99, 80.0, 95.0])
    dist = turnout_distribution(df)
    assert list(dist["bucket"]) == TURNOUT_BUCKETS
    assert list(dist["count"]) == [1, 2, 1, 1, 2]


def test_distribution_counts_sum_to_rows_with_turnout():
    df = make_rows(turnout=[45.0, np.nan, 72.0])
    dist = turnout_distribution(df)
    assert dist["count"].sum() == 2


def test_distribution_of_empty_frame_is_all_zero():
    dist = turnout_distribution(make_rows(turnout=[]))
    assert list(dist["count"]) == [0, 0, 0, 0, 0]


def test_yearly_average_ascending():
    df = make_rows(year=[2019, 2014, 2019, 2014], turnout=[40.0, 50.0, 80.0, 70.0])
    yearly = yearly_average(df)
    assert list(yearly["year"]) == [2014, 2019]
    assert list(yearly["turnout"]) == [pytest.approx(60.0), pytest.approx(60.0)]


def test_yearly_average_other_column():
    df = make_rows(year=[2014, 2019], margin=[2.0, 6.0])
    yearly = yearly_average(df, "margin")
    assert list(yearly["margin"]) == [2.0, 6.0]


def test_national_average_change():
    yearly = pd.DataFrame({"year": [2009, 2014, 2019], "turnout": [55.0, 60.0, 62.5]})
    assert national_average_change(yearly) == pytest.approx(7.5)
    assert national_average_change(yearly.head(1)) is None


def test_change_split():
    df = make_rows(turnout_change=[2.0, -1.0, 0.0, -3.0, np.nan])
    split = change_split(df)
    assert split["increasing"] == 1
    assert split["decreasing"] == 2
    assert split["stable"] == 1
    assert split["increasing_pct"] == pytest.approx(100 / 3)
    assert split["decreasing_pct"] == pytest.approx(200 / 3)


def test_change_split_without_changes():
    split = change_split(make_rows(turnout_change=[0.0, 0.0]))
    assert split["increasing_pct"] == 0.0
    assert split["decreasing_pct"] == 0.0


@pytest.mark.parametrize(
    "change,label",
    [(1.5, "rising"), (1.0, "stable"), (0.0, "stable"), (-1.0, "stable"), (-1.01, "falling")],
)
def test_trend_label(change, label):
    assert trend_label(change) == label


# ----------------------------- Rankings ---------------------------------

def test_largest_changes_without_overlap():
    values = [float(v) for v in list(range(-12, 0)) + list(range(1, 14))]
    df = make_rows(turnout_change=values)
    increases, decreases = largest_changes(df, n=10)
    assert list(increases["turnout_change"]) == [float(v) for v in range(13, 3, -1)]
    assert list(decreases["turnout_change"]) == [float(v) for v in range(-12, -2)]
    assert set(increases.index).isdisjoint(decreases.index)


def test_largest_changes_skip_zero_and_missing():
    df = make_rows(turnout_change=[0.0, 3.0, np.nan, -2.0])
    increases, decreases = largest_changes(df, n=10)
    assert 0.0 not in list(increases["turnout_change"])
    assert len(increases) == 2
    assert list(decreases["turnout_change"]) == [-2.0, 3.0]


def test_top_n_keeps_incoming_order_for_ties():
    df = make_rows(ac_name=["a", "b", "c", "d"], priority_score=[0.5, 0.9, 0.5, 0.1])
    ranked = top_n(df, "priority_score", 3)
    assert list(ranked["ac_name"]) == ["b", "a", "c"]


def test_top_n_sorts_missing_last():
    df = make_rows(ac_name=["a", "b", "c"], turnout_volatility=[np.nan, 2.0, 8.0])
    assert list(most_volatile(df, n=3)["ac_name"]) == ["c", "b", "a"]


def test_steepest_declines():
    df = make_rows(ac_name=["a", "b", "c", "d"], turnout_change=[-1.0, 4.0, -6.5, -2.0])
    assert list(steepest_declines(df, n=2)["ac_name"]) == ["c", "d"]


def test_watchlist_selection_and_order():
    df = make_rows(
        ac_name=["low-falling", "volatile", "healthy", "low-rising"],
        avg_turnout=[52.0, 75.0, 72.0, 55.0],
        turnout_change=[-2.0, 1.0, -0.5, 3.0],
        turnout_volatility=[1.0, 7.5, 2.0, 1.0],
        priority_score=[0.2, 0.4, 0.9, 0.8],
    )
    assert list(watchlist(df)["ac_name"]) == ["volatile", "low-falling"]


def test_risk_flag():
    critical = pd.Series({"priority_score": 0.35, "avg_turnout": 70.0, "turnout_change": 1.0, "turnout_volatility": 1.0})
    dropping = pd.Series({"priority_score": 0.1, "avg_turnout": 45.0, "turnout_change": -4.0, "turnout_volatility": 1.0})
    high = pd.Series({"priority_score": 0.1, "avg_turnout": 70.0, "turnout_change": 1.0, "turnout_volatility": 6.0})
    monitor = pd.Series({"priority_score": 0.1, "avg_turnout": np.nan, "turnout_change": 0.0, "turnout_volatility": 1.0})
    assert risk_flag(critical) == "Critical"
    assert risk_flag(dropping) == "Critical"
    assert risk_flag(high) == "High"
    assert risk_flag(monitor) == "Monitor"


# ----------------------------- Overview ---------------------------------

def test_overview_kpis():
    df = make_rows(
        state_name=["A", "A", "B"],
        ac_name=["x", "y", "x"],
        turnout=[50.0, 60.0, 70.0],
        turnout_change=[-1.0, 2.0, -3.0],
        priority_score=[0.1, 0.6, 0.3],
    )
    kpis = overview_kpis(df)
    assert kpis["avg_turnout"] == pytest.approx(60.0)
    assert kpis["constituencies"] == 3
    assert kpis["declining"] == 2
    assert kpis["declining_pct"] == pytest.approx(200 / 3)
    assert kpis["highest_priority"] == pytest.approx(0.6)


def test_overview_kpis_empty():
    kpis = overview_kpis(make_rows(turnout=[]))
    assert kpis["avg_turnout"] == 0.0
    assert kpis["constituencies"] == 0


def test_search_rows_matches_either_name():
    df = make_rows(state_name=["Kerala", "Bihar"], ac_name=["Kochi", "Patna Sahib"])
    assert list(search_rows(df, "patna")["ac_name"]) == ["Patna Sahib"]
    assert list(search_rows(df, "KER")["ac_name"]) == ["Kochi"]
    assert len(search_rows(df, "  ")) == 2
