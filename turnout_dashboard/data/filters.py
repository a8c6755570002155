"""
Filter state shared between the sidebar and the query engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class GlobalFilters:
    states: List[str] = field(default_factory=list)
    constituencies: List[str] = field(default_factory=list)
    year: Optional[int] = None


DEFAULT_FILTERS = GlobalFilters()


def prune_constituencies(selected: List[str], available: List[str]) -> List[str]:
    """Drop selected constituencies that are no longer offered for the chosen states."""
    offered = set(available)
    return [c for c in selected if c in offered]


def serialize_filters(filters: GlobalFilters) -> Dict[str, Any]:
    """
    Convert the GlobalFilters dataclass to a JSON-serialisable dictionary to be
    stored in session_state or used for logging/debugging.
    """
    return {
        "states": sorted(filters.states),
        "constituencies": sorted(filters.constituencies),
        "year": filters.year,
    }
