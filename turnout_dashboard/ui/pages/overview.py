from __future__ import annotations

import pandas as pd
import streamlit as st

from turnout_dashboard.data.aggregations import overview_kpis, top_n
from turnout_dashboard.ui.components.formatting import format_number, format_percent
from turnout_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from turnout_dashboard.ui.components.tables import render_table
from turnout_dashboard.ui.pages.context import PageContext

PRIORITY_COLUMNS = {
    "ac_name": "Constituency",
    "state_name": "State",
    "turnout": "Turnout",
    "turnout_change": "Change (pp)",
    "avg_turnout": "Avg. Turnout",
    "priority_score": "Priority Score",
}


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Overview")
    if df.empty:
        st.warning(
            "No constituencies match your current filter selection. "
            "Try adjusting the state, constituency, or year filters."
        )
        return

    kpis = overview_kpis(df)
    render_kpi_cards(
        [
            KpiCard(
                label="Average Turnout",
                value_display=format_percent(kpis["avg_turnout"]),
                help_text=f"Year {context.filters.year}",
            ),
            KpiCard(
                label="Constituencies",
                value=kpis["constituencies"],
                help_text="Distinct state and constituency pairs in scope.",
            ),
            KpiCard(
                label="Declining Turnout",
                value_display=format_percent(kpis["declining_pct"], decimals=0),
                help_text=f"{format_number(kpis['declining'])} constituencies with a negative change.",
            ),
            KpiCard(
                label="Highest Priority",
                value_display=format_percent(kpis["highest_priority"] * 100),
                help_text="Maximum precomputed priority score.",
            ),
        ]
    )

    turnout = pd.to_numeric(df["turnout"], errors="coerce")
    below_50 = int((turnout < 50).sum())
    st.markdown(
        f"In {context.filters.year}, average turnout across "
        f"{format_number(kpis['constituencies'])} constituencies was "
        f"**{format_percent(kpis['avg_turnout'])}**. Turnout ranges from "
        f"{format_percent(turnout.min())} to {format_percent(turnout.max())}, with "
        f"**{format_number(below_50)} constituencies below 50%** participation."
    )

    st.markdown(f"#### Top 10 Priority Constituencies (Year {context.filters.year})")
    render_table(
        top_n(df, "priority_score", 10),
        columns=PRIORITY_COLUMNS,
        column_config={
            "turnout": {"type": "percent"},
            "avg_turnout": {"type": "percent"},
            "turnout_change": {"type": "number", "decimals": 2},
            "priority_score": {"type": "score"},
        },
        highlight_cols=["turnout_change"],
        height=390,
    )
