"""
Query engine over the loaded constituency table.

A ``DataService`` owns one immutable table and a bounded FIFO cache of
filtered views. The Streamlit app keeps a single instance per process; tests
build their own.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from concurrent.futures import Future
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from loguru import logger

from turnout_dashboard.config import DEFAULT_DATASET_SOURCE, DEFAULT_QUERY_CACHE_SIZE, DatasetSettings
from turnout_dashboard.data.enrichment import resolve_derived_fields
from turnout_dashboard.data.loader import RECORD_FIELDS, LoadError, load_table

CacheKey = Tuple[Tuple[str, ...], Tuple[str, ...], int]


def _empty_table() -> pd.DataFrame:
    return pd.DataFrame(columns=RECORD_FIELDS)


class DataService:
    def __init__(
        self,
        source: str = DEFAULT_DATASET_SOURCE,
        missing_numeric: str = "null",
        cache_size: int = DEFAULT_QUERY_CACHE_SIZE,
        spreadsheet_id: Optional[str] = None,
        sheet_name: Optional[str] = None,
        credentials_path: Optional[str] = None,
        loader: Optional[Callable[[], pd.DataFrame]] = None,
    ) -> None:
        self._loader = loader or partial(
            load_table,
            source,
            missing_numeric=missing_numeric,
            spreadsheet_id=spreadsheet_id,
            sheet_name=sheet_name,
            credentials_path=credentials_path,
        )
        self._cache_size = cache_size
        self._lock = threading.Lock()
        self._table = _empty_table()
        self._loaded = False
        self._inflight: Optional[Future] = None
        self._cache: "OrderedDict[CacheKey, pd.DataFrame]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_settings(cls, settings: DatasetSettings) -> "DataService":
        return cls(
            source=settings.source,
            missing_numeric=settings.missing_numeric,
            cache_size=settings.cache_size,
            spreadsheet_id=settings.spreadsheet_id,
            sheet_name=settings.sheet_name,
            credentials_path=settings.credentials_path,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> pd.DataFrame:
        """Load the table once.

        Callers arriving while a load is running wait for it and share its
        outcome. A failed load leaves the service empty so the next call
        fetches again from scratch.
        """
        with self._lock:
            if self._loaded:
                return self._table
            owner = self._inflight is None
            if owner:
                self._inflight = Future()
            future = self._inflight

        if not owner:
            return future.result()

        try:
            table = self._loader()
            if table.empty:
                raise LoadError("No data parsed from dataset")
            table = resolve_derived_fields(table)
        except Exception as exc:
            with self._lock:
                self._table = _empty_table()
                self._loaded = False
                self._inflight = None
            logger.error(f"Error loading dataset: {exc}")
            future.set_exception(exc)
            raise

        with self._lock:
            self._table = table
            self._loaded = True
            self._inflight = None
            self._cache.clear()
        logger.info(f"Successfully loaded {len(table)} records")
        future.set_result(table)
        return table

    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def table(self) -> pd.DataFrame:
        """The full loaded table. Shared, do not mutate."""
        return self._table

    @property
    def diagnostics(self) -> Dict[str, object]:
        return dict(self._table.attrs.get("diagnostics", {}))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @staticmethod
    def cache_key(states: Iterable[str], constituencies: Iterable[str], year: int) -> CacheKey:
        return (tuple(sorted(states)), tuple(sorted(constituencies)), int(year))

    def filtered_rows(
        self,
        states: Iterable[str],
        constituencies: Iterable[str],
        year: Optional[int],
    ) -> pd.DataFrame:
        """Rows for one year, optionally narrowed to states and constituencies.

        Results are cached and the same frame object is returned on a hit, so
        callers must treat it as read-only.
        """
        if not self._loaded or year is None:
            return self._table.iloc[0:0]

        states = list(states)
        constituencies = list(constituencies)
        key = self.cache_key(states, constituencies, year)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._hits += 1
                return cached
            self._misses += 1

            table = self._table
            filtered = table[table["year"].eq(int(year)).fillna(False).astype(bool)]
            if states:
                filtered = filtered[filtered["state_name"].isin(states)]
            if constituencies:
                filtered = filtered[filtered["ac_name"].isin(constituencies)]

            self._cache[key] = filtered
            if len(self._cache) > self._cache_size:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted query cache entry {evicted}")
        return filtered

    def scoped_rows(self, states: Iterable[str], constituencies: Iterable[str]) -> pd.DataFrame:
        """Rows across every year for the selected states and constituencies."""
        if not self._loaded:
            return self._table.iloc[0:0]
        states = list(states)
        constituencies = list(constituencies)
        scoped = self._table
        if states:
            scoped = scoped[scoped["state_name"].isin(states)]
        if constituencies:
            scoped = scoped[scoped["ac_name"].isin(constituencies)]
        return scoped

    def unique_states(self) -> List[str]:
        if not self._loaded:
            return []
        return sorted(set(self._table["state_name"]))

    def unique_constituencies(self, states: Optional[Iterable[str]] = None) -> List[str]:
        if not self._loaded:
            return []
        data = self._table
        states = list(states or [])
        if states:
            data = data[data["state_name"].isin(states)]
        return sorted(set(data["ac_name"]))

    def unique_years(self) -> List[int]:
        if not self._loaded:
            return []
        return sorted({int(y) for y in self._table["year"].dropna()}, reverse=True)

    def constituency_trend(self, ac_name: str) -> pd.DataFrame:
        """Every observation for one constituency, oldest year first."""
        if not self._loaded:
            return self._table.iloc[0:0]
        rows = self._table[self._table["ac_name"] == ac_name]
        return rows.sort_values("year", kind="stable")

    # ------------------------------------------------------------------
    # Cache introspection
    # ------------------------------------------------------------------
    def cache_info(self) -> Dict[str, int]:
        with self._lock:
            return {
                "size": len(self._cache),
                "max_size": self._cache_size,
                "hits": self._hits,
                "misses": self._misses,
            }

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
