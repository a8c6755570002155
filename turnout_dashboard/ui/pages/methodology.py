from __future__ import annotations

import pandas as pd
import streamlit as st

from turnout_dashboard.ui.components.formatting import format_number
from turnout_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from turnout_dashboard.ui.pages.context import PageContext


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Methodology & Data Quality")

    diagnostics = context.service.diagnostics
    cache = context.service.cache_info()
    failures = diagnostics.get("coercion_failures", {}) or {}
    violations = diagnostics.get("range_violations", {}) or {}
    render_kpi_cards(
        [
            KpiCard(label="Records Loaded", value=diagnostics.get("row_count", 0)),
            KpiCard(label="Unparseable Numbers", value=sum(failures.values())),
            KpiCard(label="Out-of-Range Values", value=sum(violations.values())),
            KpiCard(
                label="Query Cache",
                value_display=f"{cache['size']}/{cache['max_size']}",
                help_text=f"{format_number(cache['hits'])} hits, {format_number(cache['misses'])} misses",
            ),
        ]
    )

    st.markdown("#### Diagnostics Summary")
    if diagnostics:
        for key, value in diagnostics.items():
            st.write(f"- **{key.replace('_', ' ').title()}**: {value}")
    else:
        st.info("No diagnostics metadata available.")

    st.markdown("#### Metric Definitions")
    st.write(
        """
        - **Turnout**: Share of registered electors who cast a valid vote in a constituency-year.
        - **Turnout Change**: Percentage-point change from the constituency's previous election.
        - **Volatility**: Standard deviation of turnout across the constituency's elections.
        - **Priority Score**: Precomputed composite of low turnout, negative trend, volatility and
          electorate size on a 0-1 scale.
        - **Custom Score**: The same four factors normalised within the current filter scope and
          weighted by the sliders on the Prioritization tab.
        """
    )

    st.markdown("#### Current Assumptions")
    st.write(
        """
        - Turnout buckets are left-closed: exactly 50% counts as 50-60%, exactly 80% as >80%.
        - Correlations of constant or empty inputs are reported as 0 (no correlation).
        - Unparseable numeric cells are treated as missing unless `MISSING_NUMERIC=zero`.
        - The trend factor is scaled by the steepest decline in scope; rising turnout scores 0.
        """
    )
