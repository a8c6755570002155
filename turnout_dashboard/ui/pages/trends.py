from __future__ import annotations

import pandas as pd
import streamlit as st

from turnout_dashboard.data.aggregations import (
    TURNOUT_BUCKETS,
    change_split,
    largest_changes,
    national_average_change,
    turnout_distribution,
    yearly_average,
)
from turnout_dashboard.ui.components.charts import bar_chart, change_bars, line_chart, render_plotly
from turnout_dashboard.ui.components.formatting import format_percent, format_signed_percent
from turnout_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from turnout_dashboard.ui.pages.context import PageContext


def _change_labels(rows: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "name": rows["ac_name"].astype(str).str.slice(0, 20) + " (" + rows["state_name"].astype(str) + ")",
            "value": pd.to_numeric(rows["turnout_change"], errors="coerce").round(2),
        }
    )


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Participation Over Time")
    st.caption(
        "Track how voter turnout evolves across election cycles and spot declining trends, "
        "growth patterns, and volatility."
    )

    split = change_split(df)
    yearly = yearly_average(context.scoped_df)
    overall_change = national_average_change(yearly)
    momentum = (
        "Widespread Decline"
        if split["decreasing_pct"] > split["increasing_pct"]
        else "Positive Momentum"
    )
    render_kpi_cards(
        [
            KpiCard(
                label="Increasing Turnout",
                value_display=format_percent(split["increasing_pct"]),
                help_text=f"{split['increasing']} constituencies showing growth",
            ),
            KpiCard(
                label="Decreasing Turnout",
                value_display=format_percent(split["decreasing_pct"]),
                help_text=f"{split['decreasing']} constituencies showing decline",
            ),
            KpiCard(label="Trend Analysis", value_display=momentum, help_text="Based on year-over-year change"),
            KpiCard(
                label="Average Change (first to last year)",
                value_display=format_signed_percent(overall_change),
            ),
        ]
    )

    col_left, col_right = st.columns(2)
    with col_left:
        if yearly.empty:
            st.info("No data available for selected filters.")
        else:
            render_plotly(
                line_chart(
                    yearly.assign(turnout=yearly["turnout"].round(2)),
                    x="year",
                    y="turnout",
                    title="Average Turnout by Year",
                    yaxis_title="Turnout %",
                )
            )
    with col_right:
        distribution = turnout_distribution(df)
        render_plotly(
            bar_chart(
                distribution,
                x="bucket",
                y="count",
                title=f"Turnout Distribution ({context.filters.year})",
                yaxis_title="Constituencies",
                category_orders={"bucket": TURNOUT_BUCKETS},
                text_auto=True,
            )
        )

    increases, decreases = largest_changes(df, n=10)
    col_up, col_down = st.columns(2)
    with col_up:
        st.markdown("#### Top 10 Increases")
        if increases.empty:
            st.info("No year-over-year changes in scope.")
        else:
            render_plotly(change_bars(_change_labels(increases), "name", "value"))
    with col_down:
        st.markdown("#### Top 10 Decreases")
        if decreases.empty:
            st.info("No year-over-year changes in scope.")
        else:
            render_plotly(change_bars(_change_labels(decreases), "name", "value"))
