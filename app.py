# app.py
# Telecom Network Quality Dashboard
# Streamlit shell that wires together data IO, the aggregation core, and viz modules.

import logging
import os

import streamlit as st
from dotenv import load_dotenv

from netquality_dash.charts import build_charts
from netquality_dash.docs import glossary_popover, methodology_expander
from netquality_dash.errors import DataLoadError
from netquality_dash.io_data import load_records
from netquality_dash.session import DashboardSession
from netquality_dash.settings import ALL, Settings
from netquality_dash.viz_map import build_map
from netquality_dash.viz_panels import area_table, chart_grid, insight_cards, kpi_header

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ----------------------------
# App config
# ----------------------------
st.set_page_config(page_title="Telecom Network Quality Dashboard", layout="wide")
load_dotenv()
S = Settings(data_path=os.getenv("NETQUALITY_DATA", Settings.data_path))

st.title("📶 Telecom Network Quality Dashboard")
glossary_popover()
methodology_expander()

# ----------------------------
# Load data (cached inside helper)
# ----------------------------
try:
    records = load_records(S.data_path)
except DataLoadError as exc:
    st.error(f"⚠️ Failed to load data: {exc}")
    st.stop()

if records is None:
    st.warning(
        "No data yet. Run:\n\n"
        "`python scripts/make_sample_dataset.py`\n\n"
        f"or point `NETQUALITY_DATA` at a JSON array of records (expected: `{S.data_path}`)."
    )
    st.stop()

# ----------------------------
# Session-scoped state (single writer: this script run)
# ----------------------------
session: DashboardSession = st.session_state.get("dashboard")
if session is None or not session.store.is_loaded:
    session = DashboardSession(role="user", settings=S)
    try:
        session.load(records)
    except DataLoadError as exc:
        st.error(f"⚠️ Failed to load data: {exc}")
        st.stop()
    st.session_state["dashboard"] = session

# ----------------------------
# Sidebar controls
# ----------------------------
role = st.sidebar.radio("View", list(S.roles), index=list(S.roles).index(session.role),
                        format_func=str.capitalize, horizontal=True)
if role != session.role:
    session.set_role(role)


def _select(label: str, dim: str) -> None:
    current = session.filters.value_of(dim)
    choices = [ALL] + [v for v in session.options_for(dim) if v != ALL]
    idx = choices.index(current) if current in choices else 0
    picked = st.sidebar.selectbox(label, choices, index=idx)
    if picked != current:
        session.select(dim, picked)
        st.rerun()


_select("State", "state")
_select("City", "city")
_select("Area", "area")
_select("Network type", "network_type")
_select("Operator", "operator")

if session.role == "admin":
    years = st.sidebar.multiselect("Years", session.options_for("years"), default=sorted(session.filters.years))
    if set(years) != set(session.filters.years):
        session.select("years", years)
        st.rerun()

    months = [ALL] + list(range(1, 13))
    cur_month = session.filters.month if session.filters.month is not None else ALL
    month = st.sidebar.selectbox("Month", months, index=months.index(cur_month))
    if month != cur_month:
        session.select("month", month)
        st.rerun()

map_base = st.sidebar.selectbox("Basemap", ["CartoDB Dark Matter", "CartoDB Positron", "OpenStreetMap"])
use_cluster = st.sidebar.checkbox("Cluster area markers", value=False)

if st.sidebar.button("Reset filters", use_container_width=True):
    session.reset_filters()
    st.rerun()

# ----------------------------
# Recompute everything for the current state
# ----------------------------
view = session.recompute()

st.caption(f"Showing **{view.kpis.total_records:,}** of {len(session.store):,} records "
           f"({session.role} view).")

# ----------------------------
# KPIs
# ----------------------------
st.subheader("📈 Summary")
kpi_header(view.kpis, view.role)

tab_charts, tab_map, tab_table, tab_insights = st.tabs(["Charts", "Map", "Area table", "Insights"])

with tab_charts:
    chart_grid(build_charts(view.charts, view.role, S))

with tab_map:
    if view.geo:
        build_map(list(view.geo), base=map_base, use_cluster=use_cluster)
    else:
        st.info("No areas match the current filters.")

with tab_table:
    picked = area_table(view.table, view.table_totals, view.sort, max_rows=S.table_rows)
    if picked:
        session.sort_by(picked)
        st.rerun()

with tab_insights:
    insight_cards(view.insights)
