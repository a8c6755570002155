from __future__ import annotations

import pandas as pd
import streamlit as st

from turnout_dashboard.data.aggregations import search_rows, trend_label
from turnout_dashboard.data.scoring import DEFAULT_WEIGHTS, ScoreWeights, compute_custom_scores
from turnout_dashboard.ui.components.charts import line_chart, render_plotly
from turnout_dashboard.ui.components.tables import render_table
from turnout_dashboard.ui.pages.context import PageContext

RANKED_COLUMNS = {
    "rank": "Rank",
    "ac_name": "Constituency",
    "state_name": "State",
    "avg_turnout": "Avg. Turnout",
    "turnout_change": "Change (pp)",
    "trend": "Trend",
    "turnout_volatility": "Volatility",
    "total_electors": "Electors",
    "turnout_factor": "Turnout Factor",
    "trend_factor": "Trend Factor",
    "volatility_factor": "Volatility Factor",
    "size_factor": "Size Factor",
    "custom_score": "Custom Score",
}

WEIGHT_SLIDERS = [
    ("turnout", "Low Average Turnout"),
    ("trend", "Negative Trend"),
    ("volatility", "High Volatility"),
    ("size", "Large Electorate Size"),
]


def _weights_ui() -> ScoreWeights:
    values = {}
    with st.expander("Adjust Weights", expanded=False):
        cols = st.columns(len(WEIGHT_SLIDERS))
        for col, (name, label) in zip(cols, WEIGHT_SLIDERS):
            with col:
                values[name] = st.slider(
                    label,
                    min_value=0,
                    max_value=100,
                    value=int(getattr(DEFAULT_WEIGHTS, name)),
                    step=1,
                    key=f"td_weight_{name}",
                )
    weights = ScoreWeights(**values)
    if weights.sums_to_100:
        st.success(f"Total: {weights.total:.0f}%")
    else:
        st.error(f"Total: {weights.total:.0f}% (weights should sum to 100%)")
    return weights


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Priority Scoring Model")
    st.caption(
        "A weighted composite index of low turnout, negative trends, high volatility and large "
        "electorates. Higher scores indicate higher urgency for targeted intervention."
    )
    weights = _weights_ui()
    st.markdown(
        f"**Formula:** Score = (Low Turnout Factor × {weights.turnout:.0f}%) + "
        f"(Negative Trend × {weights.trend:.0f}%) + (Volatility × {weights.volatility:.0f}%) + "
        f"(Size Penalty × {weights.size:.0f}%)"
    )

    if df.empty:
        st.warning("No constituencies match your current filter selection.")
        return

    ranked = compute_custom_scores(df, weights)
    ranked = ranked.assign(
        rank=range(1, len(ranked) + 1),
        trend=pd.to_numeric(ranked["turnout_change"], errors="coerce").fillna(0).map(trend_label),
    )

    search = st.text_input("Search constituency or state", key="td_priority_search")
    visible = search_rows(ranked, search)

    st.markdown("#### Ranked Constituencies")
    render_table(
        visible,
        columns=RANKED_COLUMNS,
        column_config={
            "avg_turnout": {"type": "percent"},
            "turnout_change": {"type": "number", "decimals": 2},
            "turnout_volatility": {"type": "number", "decimals": 2},
            "total_electors": {"type": "number"},
            "turnout_factor": {"type": "score"},
            "trend_factor": {"type": "score"},
            "volatility_factor": {"type": "score"},
            "size_factor": {"type": "score"},
            "custom_score": {"type": "score"},
        },
        highlight_cols=["turnout_change"],
        export_file_name=f"priority_ranking_{context.filters.year}.csv",
    )

    if visible.empty:
        return
    selected = st.selectbox(
        "Turnout history for",
        options=visible["ac_name"].drop_duplicates().tolist(),
        key="td_priority_history",
    )
    history = context.service.constituency_trend(selected)
    if not history.empty:
        yearly = history.groupby("year", sort=True)["turnout"].mean().reset_index()
        render_plotly(line_chart(yearly, x="year", y="turnout", title=f"{selected}: turnout by year", yaxis_title="Turnout %"))
