from __future__ import annotations

from typing import Dict, List

import pandas as pd
import pytest

from turnout_dashboard.data.loader import RECORD_FIELDS
from turnout_dashboard.data.service import DataService

HEADER = ",".join(RECORD_FIELDS)

SAMPLE_LINES = [
    "2019,State A,Alpha,1000,400,40.0,5.5,6,45.0,-4.0,42.0,2.0,0.8,0.6,0.3,0.2,0.55",
    "2019,State A,Beta,3000,2400,80.0,12.0,9,51.5,2.0,78.0,1.0,0.1,0.0,0.15,0.6,0.2",
    "2014,State A,Alpha,900,396,44.0,3.0,5,40.0,0.0,42.0,2.0,0.8,0.0,0.3,0.2,0.4",
    "2019,State B,Gamma,2000,1300,65.0,1.5,12,38.0,-1.0,66.0,4.0,0.4,0.15,0.6,0.4,0.35",
    "2014,State B,Gamma,1900,1273,67.0,4.0,10,41.0,0.0,66.0,4.0,0.4,0.0,0.6,0.4,0.3",
    "2019,State C,Delta,2500,1750,70.0,8.0,7,49.0,3.0,68.5,1.5,0.3,0.0,0.2,0.5,0.18",
]


def sample_text(lines: List[str] = None) -> str:
    return "\n".join([HEADER] + (SAMPLE_LINES if lines is None else lines)) + "\n"


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "constituency_level.csv"
    path.write_text(sample_text(), encoding="utf-8")
    return path


@pytest.fixture
def service(csv_path) -> DataService:
    svc = DataService(source=str(csv_path))
    svc.load()
    return svc


def make_rows(**columns: List) -> pd.DataFrame:
    """Build a frame with every record column, filling unspecified ones with defaults."""
    length = len(next(iter(columns.values())))
    defaults: Dict[str, List] = {
        "year": [2019] * length,
        "state_name": ["State A"] * length,
        "ac_name": [f"AC {i}" for i in range(length)],
        "total_electors": [1000] * length,
        "total_valid_votes": [600] * length,
        "turnout": [60.0] * length,
        "margin": [5.0] * length,
        "num_candidates": [8] * length,
        "winner_vote_share": [45.0] * length,
        "turnout_change": [0.0] * length,
        "avg_turnout": [60.0] * length,
        "turnout_volatility": [1.0] * length,
        "low_turnout_score": [0.5] * length,
        "negative_trend_score": [0.0] * length,
        "volatility_score": [0.2] * length,
        "large_electorate_penalty": [0.3] * length,
        "priority_score": [0.25] * length,
    }
    defaults.update(columns)
    return pd.DataFrame(defaults)
