# netquality_dash/session.py
"""
Session-scoped dashboard state.

One DashboardSession per browser session owns the record store, the
current filters, the role and the table sort state. Every change runs a
full recomputation and returns a fresh DashboardView; nothing is updated
incrementally.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from . import aggregation
from .analytics import kpis
from .geo_ops import geo_summaries
from .insights import InsightSelector
from .models import AreaSummary, GeoSummary, InsightItem, KPISnapshot
from .settings import DEFAULT_SETTINGS, Settings
from .store import FilterState, RecordStore
from .table import TableSortState, sort_area_summaries, totals

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DashboardView:
    """Everything the views render for one filter/sort/role state."""
    role: str
    filters: FilterState
    records: pd.DataFrame = field(repr=False)
    kpis: KPISnapshot
    charts: Dict[str, Any] = field(repr=False)
    geo: Tuple[GeoSummary, ...]
    table: Tuple[AreaSummary, ...]
    table_totals: Dict[str, float]
    sort: TableSortState
    insights: Tuple[InsightItem, ...]


class DashboardSession:
    def __init__(self, role: str = "user", settings: Settings = DEFAULT_SETTINGS,
                 store: Optional[RecordStore] = None):
        self.settings = settings
        self.store = store if store is not None else RecordStore(settings)
        self.filters = FilterState()
        self.sort = TableSortState()
        self.insights = InsightSelector(role)
        self.last_view: Optional[DashboardView] = None

    @property
    def role(self) -> str:
        return self.insights.role

    def load(self, records) -> int:
        """Load the dataset and return to an unfiltered view."""
        n = self.store.load(records)
        self.filters = FilterState()
        return n

    # ----------------------------
    # Events (single writer)
    # ----------------------------

    def set_role(self, role: str) -> DashboardView:
        self.insights.set_role(role)
        return self.recompute()

    def select(self, dim: str, value) -> DashboardView:
        self.filters = self.store.select(self.filters, dim, value)
        return self.recompute()

    def set_filters(self, filters: FilterState) -> DashboardView:
        self.filters = filters
        return self.recompute()

    def reset_filters(self) -> DashboardView:
        self.filters = FilterState()
        return self.recompute()

    def sort_by(self, column: str) -> DashboardView:
        self.sort = self.sort.request(column)
        return self.recompute()

    # ----------------------------
    # Recomputation
    # ----------------------------

    def options_for(self, dim: str) -> List[Any]:
        """Selector options for `dim` under the current filters."""
        return self.store.options_for(self.filters, dim)

    def recompute(self) -> DashboardView:
        frame = self.store.apply_filter(self.filters)
        snapshot = kpis(frame, self.settings)
        rows = aggregation.area_summaries(frame)
        table_rows = sort_area_summaries(rows, self.sort.column, self.sort.direction)
        view = DashboardView(
            role=self.role,
            filters=self.filters,
            records=frame,
            kpis=snapshot,
            charts=aggregation.chart_data(frame, self.role, self.settings),
            geo=tuple(geo_summaries(frame)),
            table=tuple(table_rows),
            table_totals=totals(table_rows),
            sort=self.sort,
            insights=self.insights.update_context(self.filters, snapshot),
        )
        self.last_view = view
        logger.debug("Recomputed view for %s: %d records", self.role, snapshot.total_records)
        return view
