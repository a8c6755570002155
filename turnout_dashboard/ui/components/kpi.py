"""
Metric tiles shown above each tab.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import streamlit as st

from turnout_dashboard.ui.components.formatting import format_number


@dataclass
class KpiCard:
    label: str
    value: Optional[float] = None
    value_display: Optional[str] = None  # preformatted text wins over value
    decimals: int = 0
    help_text: Optional[str] = None

    def display(self) -> str:
        if self.value_display is not None:
            return self.value_display
        return format_number(self.value, decimals=self.decimals)


def render_kpi_cards(cards: Sequence[KpiCard], per_row: int = 4) -> None:
    """Lay the cards out left to right, ``per_row`` to a row."""
    cards = list(cards)
    if not cards:
        st.info("No KPIs available for the current filters.")
        return

    per_row = max(per_row, 1)
    for start in range(0, len(cards), per_row):
        row = cards[start:start + per_row]
        for slot, card in zip(st.columns(len(row)), row):
            slot.metric(label=card.label, value=card.display(), help=card.help_text)
