from __future__ import annotations

from typing import NamedTuple

import pandas as pd
import streamlit as st

from turnout_dashboard.data.aggregations import (
    correlation_direction,
    correlation_strength,
    pearson_correlation,
)
from turnout_dashboard.ui.components.charts import render_plotly, scatter_plot
from turnout_dashboard.ui.pages.context import PageContext


class Driver(NamedTuple):
    column: str
    label: str
    size: str
    note: str


DRIVERS = [
    Driver(
        "num_candidates",
        "Number of Candidates",
        "electors_k",
        "More candidates typically drive higher turnout through mobilization, though extreme "
        "fragmentation may dilute voter clarity. Bubble size: electorate (thousands).",
    ),
    Driver(
        "margin",
        "Victory Margin",
        "electors_k",
        "Close contests tend to mobilize voters; landslides can depress participation. "
        "Bubble size: electorate (thousands).",
    ),
    Driver(
        "electors_k",
        "Electorate (thousands)",
        "num_candidates",
        "Larger electorates can strain polling logistics. Bubble size: number of candidates.",
    ),
]


def _scatter_frame(df: pd.DataFrame) -> pd.DataFrame:
    working = df[["state_name", "ac_name", "turnout", "num_candidates", "margin", "total_electors"]].copy()
    for col in ("turnout", "num_candidates", "margin", "total_electors"):
        working[col] = pd.to_numeric(working[col], errors="coerce").astype("float64")
    working["electors_k"] = working["total_electors"] / 1000
    return working


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Understanding Turnout Drivers")
    if df.empty:
        st.warning("No constituencies match your current filter selection. Adjust filters to analyze turnout drivers.")
        return

    st.caption(
        "Relationships between turnout and electoral competition, constituency size and victory "
        f"margins in {context.filters.year}."
    )
    working = _scatter_frame(df)

    cols = st.columns(len(DRIVERS))
    for col, driver in zip(cols, DRIVERS):
        r = pearson_correlation(working, driver.column, "turnout")
        with col:
            st.markdown(f"#### Turnout vs. {driver.label}")
            plot_df = working.dropna(subset=[driver.column, "turnout"])
            plot_df = plot_df[plot_df[driver.size].fillna(0) > 0]
            render_plotly(
                scatter_plot(
                    plot_df,
                    x=driver.column,
                    y="turnout",
                    size=driver.size,
                    hover_data=["ac_name", "state_name"],
                    xaxis_title=driver.label,
                    yaxis_title="Turnout %",
                )
            )
            st.metric("Pearson r", f"{r:.3f}")
            st.caption(
                f"{correlation_strength(r).title()} {correlation_direction(r)} correlation. {driver.note}"
            )
