"""Minneapolis Police Use of Force Dashboard."""

from __future__ import annotations

import streamlit as st
from streamlit_folium import st_folium

from dashboard.aggregate import RACE, SEX
from dashboard.client import CaseClient
from dashboard.render import FoliumMapService, PlotlyChartService, SessionPage
from dashboard.view import CHART_COLUMNS, CHART_ROWS, ViewOrchestrator, ViewState
from shared.config import get_settings
from shared.logging import setup_logging

CHART_TITLES = {
    RACE: "Subject Race",
    SEX: "Subject Sex",
}

# ── Page config ────────────────────────────────────────────────────────
st.set_page_config(
    page_title="MPLS Use of Force",
    page_icon="🚓",
    layout="wide",
)
st.title("Minneapolis Police Use of Force")

setup_logging()
settings = get_settings()


# ── View state ─────────────────────────────────────────────────────────
# The view objects live for the whole session; the HTTP client is opened
# per run so no connection outlives the script.
ss = st.session_state
if "view" not in ss:
    ss.view = ViewState()
    ss.page = SessionPage({})
    ss.map_service = FoliumMapService()
    ss.chart_service = PlotlyChartService()

page: SessionPage = ss.page
map_service: FoliumMapService = ss.map_service
chart_service: PlotlyChartService = ss.chart_service

with CaseClient(settings.api_url) as client:
    orchestrator = ViewOrchestrator(
        client, page, map_service, chart_service, state=ss.view,
    )

    # Retried on every rerun until the catalog loads once
    if not ss.get("years_loaded"):
        with st.spinner("Loading available years..."):
            orchestrator.start()
        ss.years_loaded = True

    # ── Sidebar settings ──────────────────────────────────────────────
    with st.sidebar.form("settings"):
        st.header("Settings")
        selected_year = st.selectbox(
            "Year", page.year_options,
            help="Pick a year to plot its cases, or None to clear the view",
        )
        submitted = st.form_submit_button("Apply settings")

    if submitted:
        with st.spinner("Loading cases..."):
            orchestrator.apply(selected_year)


# ── Map ───────────────────────────────────────────────────────────────
state = orchestrator.state
if state.year:
    n_markers = sum(len(layer.markers) for layer in map_service.layers)
    st.caption(f"{state.year}: {n_markers:,} cases with a location")

st_folium(
    map_service.make_map(settings.mapbox_token),
    height=600, use_container_width=True, returned_objects=[],
)


# ── Charts ────────────────────────────────────────────────────────────
if page.is_visible(CHART_ROWS):
    columns = st.columns(len(CHART_COLUMNS))
    for col, (dimension, container) in zip(columns, CHART_COLUMNS.items()):
        chart = chart_service.live.get(container)
        if chart is None or not page.is_visible(container):
            continue
        with col:
            st.subheader(CHART_TITLES[dimension])
            st.plotly_chart(chart.figure, use_container_width=True)
