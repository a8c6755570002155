import turnout_dashboard.bootstrap_env  # must be first to set env/secrets
import streamlit as st

from turnout_dashboard.config import TABS, configure_logging, load_settings
from turnout_dashboard.data.filters import serialize_filters
from turnout_dashboard.data.loader import LoadError
from turnout_dashboard.data.service import DataService
from turnout_dashboard.ui.layout import active_filter_summary, setup_page, sidebar_filters_ui
from turnout_dashboard.ui.pages import (
    drivers,
    forward_looking,
    methodology,
    overview,
    prioritization,
    trends,
)
from turnout_dashboard.ui.pages.context import PageContext


PAGE_RENDERERS = {
    "overview": overview.render,
    "trends": trends.render,
    "drivers": drivers.render,
    "prioritization": prioritization.render,
    "forward_looking": forward_looking.render,
    "methodology": methodology.render,
}


@st.cache_resource(show_spinner=False)
def get_service() -> DataService:
    settings = load_settings()
    configure_logging(settings.log_level)
    return DataService.from_settings(settings)


def main() -> None:
    setup_page()
    st.title("Election Turnout Analytics Dashboard")

    if st.sidebar.button("🔄 Refresh Data"):
        get_service.clear()  # type: ignore[attr-defined]

    service = get_service()
    try:
        with st.spinner("Loading constituency data…"):
            service.load()
    except LoadError as exc:
        st.error(f"Could not load the dataset: {exc}")
        st.caption("Check DATASET_SOURCE (or SPREADSHEET_ID) and try again.")
        if st.button("Retry"):
            st.rerun()
        return

    filters = sidebar_filters_ui(service)
    filtered_df = service.filtered_rows(filters.states, filters.constituencies, filters.year)
    st.session_state["td_active_filters"] = serialize_filters(filters)

    prev_count = st.session_state.get("td_prev_filtered_count")
    current_count = len(filtered_df)
    if prev_count is not None and prev_count != current_count:
        st.toast(f"Filters applied to {current_count:,} records", icon="🔎")
    st.session_state["td_prev_filtered_count"] = current_count

    active_filter_summary(filters, current_count)

    context = PageContext(
        service=service,
        filters=filters,
        scoped_df=service.scoped_rows(filters.states, filters.constituencies),
    )

    tab_labels = [tab.label for tab in TABS]
    streamlit_tabs = st.tabs(tab_labels)

    for streamlit_tab, tab_config in zip(streamlit_tabs, TABS):
        renderer = PAGE_RENDERERS.get(tab_config.key)
        if renderer is None:
            continue
        with streamlit_tab:
            renderer(filtered_df, context)


if __name__ == "__main__":
    main()
