from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional
import logging

from exceptions import ChartError
from schemas.analysis import Dataset, check_alignment
from .annotations import map_patterns
from .layers import CandleLayer, LineLayer, PaneLayers, ReferenceLine, TimeRange
from .pane import PaneController
from .series_adapter import to_band_layers, to_candle_layer, to_line_layer
from .surface import PaneOptions, SurfaceFactory

logger = logging.getLogger(__name__)

BAND_EDGE_COLOR = "#60a5fa"
BAND_MIDDLE_COLOR = "#94a3b8"
OSCILLATOR_COLOR = "#8b5cf6"
UPPER_THRESHOLD_COLOR = "#ef4444"
LOWER_THRESHOLD_COLOR = "#22c55e"

MIN_ZOOM_SPAN_S = 60.0


class PaneId(StrEnum):
    PRICE = "price"
    OSCILLATOR = "oscillator"


class ChartOrchestrator:
    """
    Owns the price and oscillator panes that share one time axis.

    Responsibilities:
    - Run one destroy-then-mount cycle per Dataset (`reconcile`)
    - Keep at most one mounted pane per PaneId
    - Mirror scroll/zoom between panes
    - Propagate container resize to every mounted pane

    Notes:
    - `offer()` records the latest known Dataset; `reconcile()` drops any
      Dataset that is not that one (stale fetch results).
    - Mount failures are per pane: a missing oscillator pane never prevents
      the price pane from rendering.
    """

    def __init__(
        self,
        container: Any,
        surface_factory: SurfaceFactory,
        *,
        price_height: int = 400,
        oscillator_height: int = 120,
        oscillator_upper: float = 70.0,
        oscillator_lower: float = 30.0,
    ) -> None:
        self.container = container
        self._factory = surface_factory
        self.price_height = price_height
        self.oscillator_height = oscillator_height
        self.oscillator_upper = oscillator_upper
        self.oscillator_lower = oscillator_lower

        self._panes: dict[PaneId, PaneController] = {}
        self._latest: Optional[Dataset] = None
        self._current: Optional[Dataset] = None
        self._mirroring = False

    @property
    def panes(self) -> dict[PaneId, PaneController]:
        """Currently mounted panes by id."""
        return {pid: pane for pid, pane in self._panes.items() if pane.is_mounted}

    @property
    def latest(self) -> Optional[Dataset]:
        return self._latest

    @property
    def current(self) -> Optional[Dataset]:
        """Dataset of the last completed cycle."""
        return self._current

    def offer(self, dataset: Optional[Dataset]) -> None:
        """Record `dataset` as the most recent one known to the chart."""
        self._latest = dataset

    def is_latest(self, dataset: Optional[Dataset]) -> bool:
        return dataset is self._latest

    def reconcile(self, dataset: Optional[Dataset]) -> bool:
        """
        Render `dataset`, replacing every pane of the previous cycle.

        Steps:
        - Ignore the call if `dataset` is not the latest offered one
        - Destroy all held panes
        - Absent or empty dataset: hold no pane
        - Misaligned series: skip rendering for this cycle
        - Mount price pane (candles, band, markers) and, when the series
          exists, the oscillator pane (line + threshold lines)
        - Fit the price pane to the full range and propagate it

        Args:
            dataset: Dataset to render, or None for "no data yet".

        Returns:
            True if the cycle ran, False if the dataset was stale.
        """
        if not self.is_latest(dataset):
            logger.debug("ChartOrchestrator.reconcile: stale dataset ignored")
            return False

        self._teardown()
        self._current = dataset

        if dataset is None or dataset.is_empty:
            logger.info("ChartOrchestrator.reconcile: no candles, nothing to render")
            return True

        problem = check_alignment(dataset)
        if problem:
            logger.warning(f"ChartOrchestrator.reconcile: skipping render of {dataset.symbol!r}: {problem}")
            return True

        has_oscillator = dataset.oscillator_series is not None

        price = self._mount_pane(
            PaneId.PRICE,
            PaneOptions(height=self.price_height, show_time_axis=True, show_slider=not has_oscillator),
            self._price_layers(dataset),
        )

        if not self.is_latest(dataset):
            logger.debug("ChartOrchestrator.reconcile: superseded during cycle, stopping")
            return True

        oscillator = None
        if has_oscillator:
            oscillator = self._mount_pane(
                PaneId.OSCILLATOR,
                PaneOptions(
                    height=self.oscillator_height,
                    show_time_axis=True,
                    show_slider=True,
                    value_min=0,
                    value_max=100,
                ),
                self._oscillator_layers(dataset),
            )

        self._fit_and_link(price, oscillator)

        logger.info(
            f"ChartOrchestrator.reconcile: {dataset.symbol!r} candles={len(dataset.candles)} "
            f"panes={[pid.value for pid in self.panes]}"
        )
        return True

    def resize(self, width: int) -> None:
        """Apply a container width to every mounted pane."""
        for pane in self.panes.values():
            try:
                pane.resize(width)
            except Exception:
                logger.exception(f"ChartOrchestrator: resize failed on {pane.pane_id} pane")
        logger.debug(f"ChartOrchestrator.resize: width={width} panes={len(self.panes)}")

    def fit_content(self) -> None:
        """Reset the viewport of every pane to the full data range."""
        lead = self._lead_pane()
        if lead is None:
            return
        rng = lead.fit_content()
        if rng is not None:
            self._mirror(lead, rng)

    def zoom(self, factor: float) -> None:
        """
        Zoom every pane around the centre of the current window.

        Args:
            factor: < 1 zooms in, > 1 zooms out. The window never exceeds
                    the data range.
        """
        lead = self._lead_pane()
        if lead is None or factor <= 0:
            return
        extent = lead.data_range
        if extent is None:
            return
        current = lead.visible_range or extent
        centre = (current.start + current.end) / 2
        half = max((current.end - current.start) * factor, MIN_ZOOM_SPAN_S) / 2
        rng = TimeRange(max(extent.start, centre - half), min(extent.end, centre + half))
        lead.set_visible_range(rng)
        self._mirror(lead, rng)

    def destroy(self) -> None:
        """Tear down every pane; the orchestrator can still run later cycles."""
        self._teardown()
        self._current = None

    def _lead_pane(self) -> Optional[PaneController]:
        panes = self.panes
        return panes.get(PaneId.PRICE) or panes.get(PaneId.OSCILLATOR)

    def _teardown(self) -> None:
        panes, self._panes = self._panes, {}
        for pane in panes.values():
            self._destroy_pane(pane)

    def _destroy_pane(self, pane: PaneController) -> None:
        try:
            pane.destroy()
        except Exception:
            logger.exception(f"ChartOrchestrator: error destroying {pane.pane_id} pane")

    def _mount_pane(self, pid: PaneId, options: PaneOptions, layers: PaneLayers) -> Optional[PaneController]:
        previous = self._panes.pop(pid, None)
        if previous is not None:
            self._destroy_pane(previous)

        pane = PaneController(pid.value, self._factory, options)
        try:
            pane.mount(self.container)
            pane.set_layers(layers)
        except ChartError as ex:
            logger.warning(f"ChartOrchestrator: {pid.value} pane not rendered this cycle: {ex}")
            self._destroy_pane(pane)
            return None
        except Exception:
            logger.exception(f"ChartOrchestrator: unexpected error mounting {pid.value} pane")
            self._destroy_pane(pane)
            return None
        pane.on_range_change = self._on_pane_range
        self._panes[pid] = pane
        return pane

    def _price_layers(self, dataset: Dataset) -> PaneLayers:
        series: list = [CandleLayer(to_candle_layer(dataset.candles))]
        if dataset.band_overlay:
            upper, middle, lower = to_band_layers(dataset.band_overlay)
            series += [
                LineLayer("band upper", upper, color=BAND_EDGE_COLOR, width=1, dashed=True),
                LineLayer("band middle", middle, color=BAND_MIDDLE_COLOR, width=1, dashed=True),
                LineLayer("band lower", lower, color=BAND_EDGE_COLOR, width=1, dashed=True),
            ]
        markers = ()
        if dataset.patterns:
            markers = tuple(map_patterns(dataset.patterns, dataset.last_time))
        return PaneLayers(series=tuple(series), markers=markers)

    def _oscillator_layers(self, dataset: Dataset) -> PaneLayers:
        return PaneLayers(
            series=(LineLayer("oscillator", to_line_layer(dataset.oscillator_series), color=OSCILLATOR_COLOR),),
            reference_lines=(
                ReferenceLine("upper threshold", self.oscillator_upper, color=UPPER_THRESHOLD_COLOR),
                ReferenceLine("lower threshold", self.oscillator_lower, color=LOWER_THRESHOLD_COLOR),
            ),
        )

    def _fit_and_link(self, price: Optional[PaneController], oscillator: Optional[PaneController]) -> None:
        lead = price or oscillator
        if lead is None:
            return
        try:
            rng = lead.fit_content()
        except Exception:
            logger.exception(f"ChartOrchestrator: fit failed on {lead.pane_id} pane")
            return
        if rng is not None:
            self._mirror(lead, rng)

    def _on_pane_range(self, source: PaneController, rng: TimeRange) -> None:
        self._mirror(source, rng)

    def _mirror(self, source: PaneController, rng: TimeRange) -> None:
        if self._mirroring:
            return
        self._mirroring = True
        try:
            for pane in self.panes.values():
                if pane is source:
                    continue
                try:
                    pane.set_visible_range(rng)
                except Exception:
                    logger.exception(f"ChartOrchestrator: range sync failed on {pane.pane_id} pane")
        finally:
            self._mirroring = False
