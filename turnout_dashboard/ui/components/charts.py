"""
Plotly chart factory functions with consistent styling for the dashboard.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st


DEFAULT_TEMPLATE = "plotly_white"
DEFAULT_COLOR_SEQUENCE = [
    "#2563eb",  # blue for turnout
    "#059669",  # green for increases
    "#dc2626",  # red for declines
    "#f59e0b",  # amber for priority
    "#7c3aed",
    "#64748b",
]
INCREASE_COLOR = "#059669"
DECREASE_COLOR = "#dc2626"


def _configure_layout(
    fig: go.Figure,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    xaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    hovermode: str = "x unified",
) -> go.Figure:
    fig.update_layout(
        template=DEFAULT_TEMPLATE,
        colorway=DEFAULT_COLOR_SEQUENCE,
        title=title,
        hovermode=hovermode,
        margin=dict(l=40, r=20, t=60, b=40),
    )
    if yaxis_title:
        fig.update_yaxes(title=yaxis_title)
    if xaxis_title:
        fig.update_xaxes(title=xaxis_title)
    if yaxis_tickformat:
        fig.update_yaxes(tickformat=yaxis_tickformat)
    fig.update_xaxes(showgrid=False)
    fig.update_yaxes(showgrid=True, zeroline=True)
    return fig


def render_plotly(fig: go.Figure) -> None:
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def line_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    markers: bool = True,
) -> go.Figure:
    fig = px.line(df, x=x, y=y, markers=markers)
    fig = _configure_layout(fig, title, yaxis_title)
    fig.update_xaxes(type="category")
    return fig


def bar_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    orientation: str = "v",
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    category_orders: Optional[Dict[str, List[str]]] = None,
    text_auto: bool = False,
) -> go.Figure:
    fig = px.bar(
        df,
        x=x,
        y=y,
        color=color,
        orientation=orientation,
        category_orders=category_orders,
        text_auto=text_auto,
    )
    fig = _configure_layout(fig, title, yaxis_title)
    if text_auto:
        fig.update_traces(textposition="outside", cliponaxis=False)
    return fig


def change_bars(df: pd.DataFrame, label: str, value: str, title: Optional[str] = None) -> go.Figure:
    """Horizontal bars coloured by sign, first row on top."""
    colors = [INCREASE_COLOR if v > 0 else DECREASE_COLOR for v in df[value]]
    fig = go.Figure(
        go.Bar(
            x=df[value],
            y=df[label],
            orientation="h",
            marker_color=colors,
        )
    )
    fig = _configure_layout(fig, title, hovermode="y unified")
    fig.update_yaxes(autorange="reversed", showgrid=False)
    fig.update_xaxes(title="Turnout change (pp)", showgrid=True)
    return fig


def scatter_plot(
    df: pd.DataFrame,
    x: str,
    y: str,
    size: Optional[str] = None,
    hover_data: Optional[List[str]] = None,
    title: Optional[str] = None,
    xaxis_title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
) -> go.Figure:
    fig = px.scatter(
        df,
        x=x,
        y=y,
        size=size,
        hover_data=hover_data,
        opacity=0.6,
    )
    fig = _configure_layout(fig, title, yaxis_title, xaxis_title, hovermode="closest")
    return fig
