"""
Reusable helpers for rendering data tables with consistent configuration.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from turnout_dashboard.ui.components.formatting import format_number, format_percent, format_score


def format_columns(df: pd.DataFrame, column_config: Dict[str, Dict[str, str]]) -> pd.DataFrame:
    """Return a copy with the configured columns rendered as display strings."""
    formatted_df = df.copy()
    for column, config in column_config.items():
        if column not in formatted_df.columns:
            continue
        fmt_type = config.get("type")
        decimals = config.get("decimals")
        if fmt_type == "percent":
            places = int(decimals if decimals is not None else 1)
            formatted_df[column] = formatted_df[column].apply(lambda v: format_percent(v, decimals=places))
        elif fmt_type == "number":
            places = int(decimals if decimals is not None else 0)
            formatted_df[column] = formatted_df[column].apply(lambda v: format_number(v, decimals=places))
        elif fmt_type == "score":
            places = int(decimals if decimals is not None else 3)
            formatted_df[column] = formatted_df[column].apply(lambda v: format_score(v, decimals=places))
    return formatted_df


def render_table(
    df: pd.DataFrame,
    columns: Optional[Dict[str, str]] = None,
    column_config: Optional[Dict[str, Dict[str, str]]] = None,
    height: int = 400,
    export_file_name: Optional[str] = None,
    highlight_cols: Optional[List[str]] = None,
) -> None:
    """Render ``df`` restricted to and renamed by ``columns`` (source -> label)."""
    if df.empty:
        st.info("No data to display.")
        return

    working = df
    if columns:
        working = df[[c for c in columns if c in df.columns]]

    formatted_df = format_columns(working, column_config or {})
    if columns:
        formatted_df = formatted_df.rename(columns=columns)

    dataframe_obj = formatted_df
    if highlight_cols:
        labels = [columns.get(c, c) if columns else c for c in highlight_cols]
        labels = [c for c in labels if c in formatted_df.columns]
        if labels:
            def _style_func(val):
                try:
                    if isinstance(val, str):
                        val = val.replace("%", "").replace(",", "")
                    num = float(val)
                except (TypeError, ValueError):
                    return ""
                if num > 0:
                    return "color: #059669;"
                if num < 0:
                    return "color: #dc2626;"
                return ""

            dataframe_obj = formatted_df.style.map(_style_func, subset=labels)

    st.dataframe(
        dataframe_obj,
        use_container_width=True,
        height=height,
        hide_index=True,
    )

    if export_file_name:
        csv_bytes = working.to_csv(index=False).encode("utf-8")
        st.download_button(
            "Download CSV",
            data=csv_bytes,
            file_name=export_file_name,
            mime="text/csv",
            key=f"download_{export_file_name}",
        )
