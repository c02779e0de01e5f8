"""View orchestration: loading state, map markers, and pie chart lifecycle.

The orchestrator owns a ``ViewState`` and drives three rendering
collaborators (page visibility, map, charts) through the protocols below, so
the Streamlit app and the tests plug in their own implementations.

    Idle / Populated --apply(year)--> Loading --fetch ok--> Populated
    Idle / Populated --apply("None")--> Loading --> Idle
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from api.models import CaseWrapper
from dashboard.aggregate import RACE, SEX, Tally, TallyResult, aggregate

logger = logging.getLogger(__name__)

NO_SELECTION = "None"

# Container names
LOADING = "loading"
CHART_ROWS = "chart-rows"
CHART_COLUMNS = {
    RACE: "chart-race",
    SEX: "chart-sex",
}


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"


@dataclass(frozen=True)
class Marker:
    latitude: float
    longitude: float
    popup_html: str


# ── Collaborators ─────────────────────────────────────────────────────

class CaseSource(Protocol):
    def load_available_years(self) -> list[str]: ...

    def load_cases_by_year(self, year: str) -> list[CaseWrapper]: ...


class Page(Protocol):
    def show(self, *containers: str) -> None: ...

    def hide(self, *containers: str) -> None: ...

    def populate_years(self, years: list[str]) -> None: ...


class MapService(Protocol):
    def create_layer(self, markers: list[Marker]) -> Any: ...

    def add_layer(self, layer: Any) -> None: ...

    def remove_layer(self, layer: Any) -> None: ...


class Chart(Protocol):
    def dispose(self) -> None: ...


class ChartService(Protocol):
    def create(self, container: str, tally: Tally) -> Chart: ...


# ── State ─────────────────────────────────────────────────────────────

@dataclass
class ViewState:
    phase: Phase = Phase.IDLE
    year: str = ""
    available_years: list[str] = field(default_factory=list)
    marker_layer: Any = None
    charts: list[Chart] = field(default_factory=list)
    tallies: dict[str, TallyResult] = field(default_factory=dict)


def popup_html(wrapper: CaseWrapper) -> str:
    case = wrapper.case
    problem = html.escape(case.problem or "")
    date = html.escape(case.date or "")
    return f"<h3>{problem}</h3><hr>{date}"


def build_markers(cases: Iterable[CaseWrapper]) -> list[Marker]:
    """One marker per case that has both coordinates."""
    markers = []
    for wrapper in cases:
        case = wrapper.case
        if case.latitude and case.longitude:
            markers.append(Marker(case.latitude, case.longitude, popup_html(wrapper)))
    return markers


# ── Orchestrator ──────────────────────────────────────────────────────

class ViewOrchestrator:
    def __init__(
        self,
        source: CaseSource,
        page: Page,
        map_service: MapService,
        chart_service: ChartService,
        state: ViewState | None = None,
    ) -> None:
        self.source = source
        self.page = page
        self.map_service = map_service
        self.chart_service = chart_service
        self.state = state if state is not None else ViewState()

    def start(self) -> list[str]:
        """Load the year catalog into the select control."""
        self.page.show(LOADING)
        try:
            years = self.source.load_available_years()
            self.state.available_years = years
            self.page.populate_years(years)
        finally:
            self.page.hide(LOADING)
        return years

    def apply(self, selection: str | None) -> ViewState:
        """Handle an "Apply settings" submit for ``selection``.

        Everything from the previous selection is cleared first. Fetch errors
        propagate after the loading indicator is hidden.
        """
        self.page.show(LOADING)
        self.page.hide(CHART_ROWS)
        self.clear()
        self.state.phase = Phase.LOADING

        try:
            if selection and selection != NO_SELECTION:
                self._update_cases(selection)
                self.state.year = selection
                self.page.show(CHART_ROWS)
                self.state.phase = Phase.POPULATED
        finally:
            if self.state.phase is Phase.LOADING:
                self.state.phase = Phase.IDLE
            self.page.hide(LOADING)

        return self.state

    def clear(self) -> None:
        self.state.year = ""
        self.clear_charts()
        if self.state.marker_layer is not None:
            self.map_service.remove_layer(self.state.marker_layer)
            self.state.marker_layer = None
        self.state.tallies = {}
        self.state.phase = Phase.IDLE

    def clear_charts(self) -> None:
        for chart in self.state.charts:
            chart.dispose()
        self.state.charts = []

    def _update_cases(self, year: str) -> None:
        cases = self.source.load_cases_by_year(year)

        layer = self.map_service.create_layer(build_markers(cases))
        self.map_service.add_layer(layer)
        self.state.marker_layer = layer

        self.state.tallies = aggregate(cases)
        self._render_charts()

    def _render_charts(self) -> None:
        for dimension, result in self.state.tallies.items():
            container = CHART_COLUMNS[dimension]
            if isinstance(result, Tally):
                chart = self.chart_service.create(container, result)
                self.page.show(container)
                self.state.charts.append(chart)
            else:
                logger.info("hiding %s chart: %s", dimension, result.reason)
                self.page.hide(container)
