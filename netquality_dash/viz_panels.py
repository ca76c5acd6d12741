# netquality_dash/viz_panels.py
from __future__ import annotations

from typing import Dict, Optional, Sequence

import altair as alt
import streamlit as st

from .analytics import score_label
from .insights import trend_display
from .models import AreaSummary, InsightItem, KPISnapshot
from .table import SORT_COLUMNS, TableSortState, export_delimited, summaries_frame


def kpi_header(snap: KPISnapshot, role: str) -> None:
    """Top-of-page KPI cards."""
    f = snap.formatted()
    if role == "admin":
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Avg Download (Mbps)", f["avg_download"])
        c2.metric("Avg Upload (Mbps)", f["avg_upload"])
        c3.metric("Avg Latency (ms)", f["avg_latency"])
        c4.metric("Network Score", score_label(snap.avg_score), help=f"Average confidence {f['avg_score']}")
    else:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Best Operator", snap.best_operator)
        c2.metric("Avg Download (Mbps)", f["avg_download"])
        c3.metric("Avg Upload (Mbps)", f["avg_upload"])
        c4.metric("Network Score", score_label(snap.avg_score), help=f"Average confidence {f['avg_score']}")
    st.caption(f"Records in view: **{f['total_records']}**")


def chart_grid(charts: Dict[str, Optional[alt.Chart]], ncols: int = 2) -> None:
    items = list(charts.items())
    for i in range(0, len(items), ncols):
        cols = st.columns(ncols)
        for col, (title, chart) in zip(cols, items[i:i + ncols]):
            with col:
                if chart is None:
                    st.info(f"{title}: no data for the selected filters.")
                else:
                    st.altair_chart(chart, use_container_width=True)


def insight_cards(items: Sequence[InsightItem], ncols: int = 3) -> None:
    if not items:
        st.info("No insights available.")
        return
    for i in range(0, len(items), ncols):
        cols = st.columns(ncols)
        for col, item in zip(cols, items[i:i + ncols]):
            _icon, trend_text = trend_display(item.trend)
            with col.container(border=True):
                st.markdown(f"**{item.title}**")
                st.write(item.text)
                st.caption(trend_text)


def area_table(rows: Sequence[AreaSummary], table_totals: Dict[str, float], sort: TableSortState,
               max_rows: int = 20) -> Optional[str]:
    """
    Area-wise table (first `max_rows` rows) with a totals line and CSV export.
    Returns the column the user asked to sort by, if any.
    """
    picked = None
    labels = {"area": "Area", "operator": "Operator", "download": "Download",
              "upload": "Upload", "score": "Score"}
    cols = st.columns(len(SORT_COLUMNS) + 1)
    cols[0].caption("Sort by")
    for col, key in zip(cols[1:], SORT_COLUMNS):
        arrow = (" ▼" if sort.direction == "desc" else " ▲") if key == sort.column else ""
        if col.button(labels[key] + arrow, key=f"sort_{key}", use_container_width=True):
            picked = key

    if not rows:
        st.info("No data available for selected filters.")
        return picked

    df = summaries_frame(list(rows)[:max_rows])
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.caption(
        f"**Total / Average** — Download {table_totals['avg_download']:.2f} Mbps • "
        f"Upload {table_totals['avg_upload']:.2f} Mbps • "
        f"Score {table_totals['avg_score']:.2f} ({score_label(table_totals['avg_score'])})"
    )

    st.download_button(
        label=f"⬇️ Export table ({len(rows):,} rows)",
        data=export_delimited(rows).encode("utf-8"),
        file_name="telecom_data.csv",
        mime="text/csv",
    )
    return picked
