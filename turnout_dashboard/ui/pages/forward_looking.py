from __future__ import annotations

import pandas as pd
import streamlit as st

from turnout_dashboard.data.aggregations import most_volatile, risk_flag, steepest_declines, watchlist
from turnout_dashboard.ui.components.tables import render_table
from turnout_dashboard.ui.pages.context import PageContext

RISK_ICONS = {"Critical": "🔴", "High": "🟠", "Monitor": "🟡"}

BASE_COLUMNS = {
    "ac_name": "Constituency",
    "state_name": "State",
    "avg_turnout": "Avg. Turnout",
    "turnout_change": "Change (pp)",
    "turnout_volatility": "Volatility",
}
NUMBER_CONFIG = {
    "avg_turnout": {"type": "percent"},
    "turnout_change": {"type": "number", "decimals": 2},
    "turnout_volatility": {"type": "number", "decimals": 2},
    "priority_score": {"type": "score"},
}


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Early-Warning Signals")
    st.caption(
        "High volatility signals unpredictable engagement; large negative changes suggest eroding "
        "confidence or logistical barriers that need investigation."
    )
    if df.empty:
        st.warning("No constituencies match your current filter selection.")
        return

    col_left, col_right = st.columns(2)
    with col_left:
        st.markdown("#### Most Volatile Constituencies")
        render_table(most_volatile(df, 10), columns=BASE_COLUMNS, column_config=NUMBER_CONFIG, height=390)
    with col_right:
        st.markdown("#### Largest Recent Declines")
        render_table(
            steepest_declines(df, 10),
            columns=BASE_COLUMNS,
            column_config=NUMBER_CONFIG,
            highlight_cols=["turnout_change"],
            height=390,
        )

    st.markdown("#### High-Risk Watchlist")
    st.caption("Average turnout below 60% with a negative change, or volatility above 5 points.")
    flagged = watchlist(df, 15)
    if not flagged.empty:
        flags = flagged.apply(risk_flag, axis=1)
        flagged = flagged.assign(risk=[f"{RISK_ICONS[f]} {f}" for f in flags])
    render_table(
        flagged,
        columns={"risk": "Risk", **BASE_COLUMNS, "priority_score": "Priority Score"},
        column_config=NUMBER_CONFIG,
        export_file_name=f"watchlist_{context.filters.year}.csv",
    )
