from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from turnout_dashboard.data.filters import GlobalFilters
from turnout_dashboard.data.service import DataService


@dataclass
class PageContext:
    service: DataService
    filters: GlobalFilters
    scoped_df: pd.DataFrame  # every year, same state/constituency scope
