"""
Layout helpers for the Streamlit application (page config, sidebar filters).
"""

from __future__ import annotations

from typing import List

import streamlit as st

from turnout_dashboard.data.filters import DEFAULT_FILTERS, GlobalFilters, prune_constituencies
from turnout_dashboard.data.service import DataService
from turnout_dashboard.ui.components.formatting import format_number

STATE_KEY = "td_states"
CONSTITUENCY_KEY = "td_constituencies"
YEAR_KEY = "td_year"


def setup_page() -> None:
    """Set Streamlit page configuration."""
    st.set_page_config(
        page_title="Election Turnout Analytics",
        layout="wide",
        page_icon=":ballot_box_with_ballot:",
    )


def _clear_state_prefixes(prefixes: List[str]) -> None:
    for prefix in prefixes:
        for key in list(st.session_state.keys()):
            if key.startswith(prefix):
                del st.session_state[key]


def sidebar_filters_ui(service: DataService, defaults: GlobalFilters = DEFAULT_FILTERS) -> GlobalFilters:
    """
    Render the sidebar filter controls and return the selected values.

    Constituency options follow the selected states; selections that drop out
    of scope when states change are removed before the widget renders.
    """
    st.sidebar.header("Filters")

    years = service.unique_years()
    year = None
    if years:
        default_year = defaults.year if defaults.year in years else years[0]
        year = st.sidebar.selectbox(
            "Election Year",
            options=years,
            index=years.index(default_year),
            key=YEAR_KEY,
        )

    states = st.sidebar.multiselect(
        "States",
        options=service.unique_states(),
        default=[s for s in defaults.states if s in service.unique_states()],
        key=STATE_KEY,
        help="Leave empty to include every state.",
    )

    available = service.unique_constituencies(states)
    if CONSTITUENCY_KEY in st.session_state:
        st.session_state[CONSTITUENCY_KEY] = prune_constituencies(
            st.session_state[CONSTITUENCY_KEY], available
        )
    constituencies = st.sidebar.multiselect(
        "Constituencies",
        options=available,
        key=CONSTITUENCY_KEY,
        help="Leave empty to include every constituency in the selected states.",
    )
    st.sidebar.caption(f"{format_number(len(available))} constituencies available")

    if st.sidebar.button("Reset Filters", key="td_reset_filters", type="primary"):
        _clear_state_prefixes([STATE_KEY, CONSTITUENCY_KEY, YEAR_KEY])
        st.rerun()

    return GlobalFilters(
        states=list(states),
        constituencies=list(constituencies),
        year=int(year) if year is not None else None,
    )


def active_filter_summary(filters: GlobalFilters, total_rows: int) -> None:
    badges = []
    if filters.year is not None:
        badges.append(f"Year: {filters.year}")
    if filters.states:
        badges.append("States: " + ", ".join(filters.states[:5]) + ("…" if len(filters.states) > 5 else ""))
    if filters.constituencies:
        badges.append(
            "Constituencies: "
            + ", ".join(filters.constituencies[:5])
            + ("…" if len(filters.constituencies) > 5 else "")
        )
    summary_text = "Active Filters: " + " | ".join(badges) if badges else "Active Filters: All data"
    st.markdown(f"**{summary_text}**")
    st.caption(f"Showing {format_number(total_rows, 0)} constituency records after filters.")
