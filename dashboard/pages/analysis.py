from __future__ import annotations

import logging
from typing import Any, Optional

from nicegui import ui
from starlette.requests import Request
from starlette.responses import RedirectResponse

from clients.analytics_client import AnalyticsClient
from components.chart.binding import LifecycleBinding
from components.chart.host import ChartHost
from components.chart.orchestrator import ChartOrchestrator
from components.chart.surface import EChartSurface
from components.navbar_footer import nav, footer
from components.indicators import indicator_rows, indicators_table, oscillator_badge
from components.patterns import describe_result, pattern_badges, quote_summary
from config import settings
from demo.factories import create_demo_analysis
from schemas.analysis import AnalysisResponse, Dataset
from static.style import add_style, add_chart_style, change_colors
from utils.utils import normalize_symbol

logger = logging.getLogger(__name__)

ZOOM_IN_FACTOR = 0.5
ZOOM_OUT_FACTOR = 2.0


class AnalysisPage:
    """
    Pattern analysis page: price pane with band overlay and pattern markers,
    plus an oscillator pane sharing the time axis.

    Responsibilities:
    - Symbol input, refresh and zoom toolbar
    - Fetch analysis via AnalyticsClient (or the demo factory in DEMO_MODE)
    - Header with last price, change, signal score and pattern badges
    - Latest RSI next to the oscillator pane and the technical indicators table
    - Own the chart host, orchestrator and lifecycle binding for this client

    Notes:
    - UI is built lazily via `ui.timer(..., self._init_async, once=True)`
    - The binding is removed when the client is deleted; a websocket drop
      that reconnects keeps the chart bound
    """
    def __init__(self, request: Request, symbol: Optional[str] = None) -> None:
        """
        Create AnalysisPage instance and schedule async initialization.

        Args:
            request: Incoming HTTP request (NiceGUI/Starlette).
            symbol: Symbol to load right away, if any.
        """
        logger.info(f"AnalysisPage: init symbol={symbol!r}")

        self.request = request
        self.symbol = normalize_symbol(symbol)
        self.analytics_client = None if settings.DEMO_MODE else AnalyticsClient()

        self.header_card = None
        self.manage_card = None
        self.charts_card = None
        self.indicators_card = None
        self.oscillator_area = None
        self.indicators_area = None
        self.status_label = None
        self.summary_area = None
        self.badges_area = None
        self.empty_label = None
        self.symbol_inp = None

        self.host: Optional[ChartHost] = None
        self.orchestrator: Optional[ChartOrchestrator] = None
        self.binding: Optional[LifecycleBinding] = None

        ui.timer(0.01, self._init_async, once=True)

    async def _init_async(self) -> None:
        """
        Async initialization sequence.

        Steps:
        - Render navbar
        - Build UI + footer
        - Tie chart teardown to client deletion
        - Load the initial symbol, if given
        """
        logger.debug("AnalysisPage._init_async: start")
        nav('Analysis')
        self.build_ui()
        footer()

        client = ui.context.client
        client.on_disconnect(self._on_disconnect)
        client.on_delete(self._on_delete)

        if self.symbol:
            await self.analyze(self.symbol)

    def build_ui(self) -> None:
        """Build header, controls and chart cards."""
        with ui.column().classes("w-[100vw] gap-1"):
            self.header_card = ui.card().classes("elevated-card q-pa-sm q-mb-md") \
                .style("width:min(1600px,98vw); margin:0 auto 1px;")
            self.manage_card = ui.card().classes("elevated-card q-pa-sm q-mb-md") \
                .style("width:min(1600px,98vw); margin:0 auto 1px;")
            self.charts_card = ui.card().classes("elevated-card q-pa-sm q-mb-md") \
                .style("width:min(1600px,98vw); margin:0 auto 1px;")
            self.indicators_card = ui.card().classes("elevated-card q-pa-sm q-mb-md") \
                .style("width:min(1600px,98vw); margin:0 auto 1px;")

        self.render_header()
        self.render_manage()
        self.render_charts_shell()
        self.render_indicators_shell()

    def render_header(self) -> None:
        self.header_card.clear()
        with self.header_card:
            with ui.column().classes("w-full gap-2").style("padding: 6px 18px;"):
                with ui.row().classes("items-center justify-between w-full"):
                    ui.label("Pattern analysis").classes("header-title")
                    self.status_label = ui.label("Enter a symbol").classes("text-grey-6 text-sm")
                self.summary_area = ui.column().classes("w-full gap-1")
                self.badges_area = ui.column().classes("w-full gap-1")

    def render_manage(self) -> None:
        """
        Render the controls row:
        - symbol input + Analyze
        - Refresh
        - zoom in / zoom out / fit
        """
        self.manage_card.clear()
        with self.manage_card:
            with ui.row().classes("items-center justify-between w-full") \
                    .style("padding: 10px 18px; gap: 10px; flex-wrap: wrap;"):
                with ui.row().classes("items-center gap-2"):
                    self.symbol_inp = ui.input(
                        value=self.symbol,
                        label="Symbol",
                        placeholder="e.g. AAPL",
                    ).props("outlined dense clearable").classes("min-w-[220px]")

                    async def _on_analyze():
                        await self.analyze(self.symbol_inp.value)

                    self.symbol_inp.on("keydown.enter", _on_analyze)
                    ui.button("Analyze", icon="query_stats", on_click=_on_analyze) \
                        .props("unelevated color=primary")
                    ui.button("Refresh", icon="refresh", on_click=self.refresh).props("flat color=primary")

                with ui.row().classes("items-center gap-1"):
                    ui.button(icon="zoom_in", on_click=lambda: self.zoom(ZOOM_IN_FACTOR)) \
                        .props("flat round color=primary").tooltip("Zoom in")
                    ui.button(icon="zoom_out", on_click=lambda: self.zoom(ZOOM_OUT_FACTOR)) \
                        .props("flat round color=primary").tooltip("Zoom out")
                    ui.button(icon="fit_screen", on_click=self.fit) \
                        .props("flat round color=primary").tooltip("Fit to data")

    def render_charts_shell(self) -> None:
        """
        Render the chart container and wire the chart core to it.

        The container element is owned by the page; panes mount their
        surfaces inside it.
        """
        self.charts_card.clear()
        with self.charts_card:
            with ui.column().classes("w-full gap-2").style("padding: 12px 18px;"):
                self.empty_label = ui.label("No data to display").classes("muted")
                self.oscillator_area = ui.row().classes("w-full")
                element = ui.element("div").classes("chart-host")

        self.host = ChartHost(element)
        self.orchestrator = ChartOrchestrator(
            self.host,
            EChartSurface.create,
            price_height=settings.PRICE_PANE_HEIGHT,
            oscillator_height=settings.OSCILLATOR_PANE_HEIGHT,
            oscillator_upper=settings.OSCILLATOR_UPPER,
            oscillator_lower=settings.OSCILLATOR_LOWER,
        )
        self.binding = LifecycleBinding(self.orchestrator, self.host)
        self.binding.bind()
        self.host.observe()

    def render_indicators_shell(self) -> None:
        self.indicators_card.clear()
        with self.indicators_card:
            with ui.column().classes("w-full gap-2").style("padding: 12px 18px;"):
                ui.label("Technical indicators").classes("text-subtitle1")
                self.indicators_area = ui.column().classes("w-full")
        with self.indicators_area:
            indicators_table([])

    def _set_status(self, text: str) -> None:
        if self.status_label is not None:
            self.status_label.text = text
            self.status_label.update()

    async def _fetch(self, symbol: str) -> Optional[AnalysisResponse]:
        if settings.DEMO_MODE:
            return create_demo_analysis(symbol)
        return await self.analytics_client.get_analysis(symbol)

    async def analyze(self, symbol: Any) -> None:
        """
        Fetch and render analysis for `symbol`.

        A fetch superseded by a newer `analyze` call is dropped without
        touching the header or the chart.

        Args:
            symbol: Symbol typed by the user (normalized here).
        """
        symbol = normalize_symbol(symbol)
        if not symbol:
            ui.notify("Enter a symbol", type="warning")
            return

        self.symbol = symbol
        self._set_status(f"Loading {symbol}…")
        resolved: dict[str, Any] = {}

        async def _resolve() -> Optional[Dataset]:
            response = await self._fetch(symbol)
            dataset = response.to_dataset() if response is not None else None
            resolved.update(response=response, dataset=dataset)
            return dataset

        rendered = await self.binding.load(_resolve())
        if not rendered:
            logger.debug(f"AnalysisPage.analyze: result for {symbol!r} superseded")
            return
        self._show_response(symbol, resolved.get("response"), resolved.get("dataset"))

    async def refresh(self) -> None:
        if not self.symbol:
            ui.notify("Nothing to refresh", type="info")
            return
        await self.analyze(self.symbol)

    def zoom(self, factor: float) -> None:
        if self.orchestrator is not None:
            self.orchestrator.zoom(factor)

    def fit(self) -> None:
        if self.orchestrator is not None:
            self.orchestrator.fit_content()

    def _show_response(
        self,
        symbol: str,
        response: Optional[AnalysisResponse],
        dataset: Optional[Dataset],
    ) -> None:
        self.summary_area.clear()
        self.badges_area.clear()
        self.oscillator_area.clear()
        self.indicators_area.clear()

        status, empty_text = describe_result(symbol, response, dataset)
        self._set_status(status)
        if empty_text is not None:
            self.empty_label.text = empty_text
        self.empty_label.set_visibility(empty_text is not None)

        if response is None:
            ui.notify(f"Could not load analysis for {symbol}", type="negative")
            with self.indicators_area:
                indicators_table([])
            return

        with self.summary_area:
            quote_summary(response.symbol, response.current_price, response.price_change, response.signal_score)
        with self.badges_area:
            pattern_badges(response.patterns)
        if empty_text is None and dataset.oscillator_series is not None:
            with self.oscillator_area:
                oscillator_badge(response.indicators, settings.OSCILLATOR_UPPER, settings.OSCILLATOR_LOWER)
        with self.indicators_area:
            indicators_table(indicator_rows(
                response.indicators,
                response.current_price,
                settings.OSCILLATOR_UPPER,
                settings.OSCILLATOR_LOWER,
            ))

    def _on_disconnect(self) -> None:
        logger.info(f"AnalysisPage: client disconnected ({self.symbol!r}), waiting for reconnect")

    def _on_delete(self) -> None:
        logger.info(f"AnalysisPage: client deleted, unbinding chart ({self.symbol!r})")
        if self.binding is not None:
            self.binding.unbind()


def _page_setup() -> None:
    add_style()
    add_chart_style()
    change_colors()


@ui.page('/')
def index():
    return RedirectResponse(url='/analysis')


@ui.page('/analysis')
async def analysis_route(request: Request):
    _page_setup()
    AnalysisPage(request)


@ui.page('/analysis/{symbol}')
async def analysis_symbol_route(request: Request, symbol: str):
    _page_setup()
    AnalysisPage(request, symbol)
