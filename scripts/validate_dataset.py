"""Quick validation script for the constituency dataset.

Run with `python scripts/validate_dataset.py [path-or-url]` to ensure the
dataset loads, expected columns are typed, and diagnostics look sane.
"""

from __future__ import annotations

import sys

from turnout_dashboard.config import DEFAULT_DATASET_SOURCE, configure_logging
from turnout_dashboard.data.loader import RECORD_FIELDS, LoadError
from turnout_dashboard.data.service import DataService


def main() -> None:
    configure_logging("INFO")
    source = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DATASET_SOURCE
    service = DataService(source=source)
    try:
        table = service.load()
    except LoadError as exc:
        raise SystemExit(f"Load failed: {exc}")

    missing = [col for col in RECORD_FIELDS if col not in table.columns]
    if missing:
        raise SystemExit(f"Missing required columns: {missing}")

    if str(table["year"].dtype) != "Int64":
        raise SystemExit(f"year should be a nullable integer column, got {table['year'].dtype}")
    if table["turnout"].dtype != "float64":
        raise SystemExit(f"turnout should be a float column, got {table['turnout'].dtype}")

    print("Dataset validation passed. Rows:", len(table))
    print("Years:", service.unique_years())
    print("States:", len(service.unique_states()))
    for key, value in service.diagnostics.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
