"""Streamlit-side rendering services: folium map, plotly pie charts, page visibility."""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from dataclasses import dataclass, field

import folium
import pandas as pd
import plotly.express as px
from folium.plugins import MarkerCluster

from dashboard.aggregate import Tally
from dashboard.view import CHART_ROWS, NO_SELECTION, Marker

# ── Map ────────────────────────────────────────────────────────────────
MAP_CENTER = [44.9778, -93.265]
MAP_ZOOM = 13
MAPBOX_STYLE = "mapbox/streets-v11"
MAPBOX_ATTRIBUTION = (
    "© <a href='https://www.mapbox.com/about/maps/'>Mapbox</a> "
    "© <a href='http://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
    "<strong><a href='https://www.mapbox.com/map-feedback/' target='_blank'>"
    "Improve this map</a></strong>"
)


def street_tile_layer(mapbox_token: str | None = None) -> folium.TileLayer:
    """Mapbox streets when a token is configured, plain OpenStreetMap otherwise."""
    if not mapbox_token:
        return folium.TileLayer("OpenStreetMap", name="Streets")
    tiles = (
        f"https://api.mapbox.com/styles/v1/{MAPBOX_STYLE}/tiles/{{z}}/{{x}}/{{y}}"
        f"?access_token={mapbox_token}"
    )
    return folium.TileLayer(
        tiles=tiles,
        attr=MAPBOX_ATTRIBUTION,
        name="Streets",
        max_zoom=18,
        tile_size=512,
        zoom_offset=-1,
    )


@dataclass
class MarkerLayer:
    markers: list[Marker] = field(default_factory=list)

    def to_folium(self) -> MarkerCluster:
        cluster = MarkerCluster(name="Cases")
        for m in self.markers:
            folium.Marker(
                location=[m.latitude, m.longitude],
                popup=folium.Popup(m.popup_html, max_width=300),
            ).add_to(cluster)
        return cluster


class FoliumMapService:
    """Keeps the active marker layers; the folium map is rebuilt on every script run."""

    def __init__(self) -> None:
        self.layers: list[MarkerLayer] = []

    def create_layer(self, markers: list[Marker]) -> MarkerLayer:
        return MarkerLayer(list(markers))

    def add_layer(self, layer: MarkerLayer) -> None:
        self.layers.append(layer)

    def remove_layer(self, layer: MarkerLayer) -> None:
        if layer in self.layers:
            self.layers.remove(layer)

    def make_map(self, mapbox_token: str | None = None) -> folium.Map:
        m = folium.Map(location=MAP_CENTER, zoom_start=MAP_ZOOM, tiles=None)
        street_tile_layer(mapbox_token).add_to(m)
        for layer in self.layers:
            layer.to_folium().add_to(m)
        return m


# ── Charts ─────────────────────────────────────────────────────────────

class PieChart:
    def __init__(self, container: str, figure, on_dispose: Callable[[PieChart], None]) -> None:
        self.container = container
        self.figure = figure
        self._on_dispose = on_dispose

    @property
    def disposed(self) -> bool:
        return self.figure is None

    def dispose(self) -> None:
        if self.figure is None:
            return
        self.figure = None
        self._on_dispose(self)


class PlotlyChartService:
    """Creates one pie chart per container and tracks the live ones."""

    def __init__(self) -> None:
        self.live: dict[str, PieChart] = {}

    def create(self, container: str, tally: Tally) -> PieChart:
        df = pd.DataFrame(tally.records())
        fig = px.pie(
            df, values="count", names=tally.dimension,
            color_discrete_sequence=px.colors.qualitative.Set2,
        )
        fig.update_traces(textinfo="none")
        fig.update_layout(legend=dict(x=1.02, y=0.5, yanchor="middle"))

        previous = self.live.get(container)
        if previous is not None:
            previous.dispose()
        chart = PieChart(container, fig, self._release)
        self.live[container] = chart
        return chart

    def _release(self, chart: PieChart) -> None:
        if self.live.get(chart.container) is chart:
            del self.live[chart.container]


# ── Page ───────────────────────────────────────────────────────────────

class SessionPage:
    """Container visibility and select options, kept in a session mapping."""

    def __init__(self, store: MutableMapping) -> None:
        self.store = store
        store.setdefault("hidden", {CHART_ROWS})
        store.setdefault("year_options", [NO_SELECTION])

    def show(self, *containers: str) -> None:
        self.store["hidden"].difference_update(containers)

    def hide(self, *containers: str) -> None:
        self.store["hidden"].update(containers)

    def is_visible(self, container: str) -> bool:
        return container not in self.store["hidden"]

    def populate_years(self, years: list[str]) -> None:
        self.store["year_options"] = [NO_SELECTION, *years]

    @property
    def year_options(self) -> list[str]:
        return self.store["year_options"]
