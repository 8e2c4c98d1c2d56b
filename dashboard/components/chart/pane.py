from __future__ import annotations

from enum import StrEnum
from typing import Any, Callable, Optional
import logging

from exceptions import MountError, PaneStateError
from .layers import PaneLayers, TimeRange
from .series_adapter import to_millis
from .surface import PaneOptions, Surface, SurfaceFactory, build_pane_option

logger = logging.getLogger(__name__)

RangeListener = Callable[["PaneController", TimeRange], None]


class PaneState(StrEnum):
    UNMOUNTED = "unmounted"
    MOUNTED = "mounted"


class PaneController:
    """
    Owns one rendering surface and the layers drawn on it.

    Lifecycle:
        UNMOUNTED --mount()--> MOUNTED --destroy()--> UNMOUNTED (terminal)

    Notes:
        - A failed mount (zero-width container) leaves the controller
          UNMOUNTED and mountable; a destroyed controller can never be
          mounted again, the owner creates a fresh one instead.
        - `set_layers` always replaces the full layer set and re-renders
          the complete option.
        - `destroy` may be called any number of times.
    """

    def __init__(
        self,
        pane_id: str,
        surface_factory: SurfaceFactory,
        options: Optional[PaneOptions] = None,
    ) -> None:
        self.pane_id = pane_id
        self.options = options or PaneOptions()
        self._factory = surface_factory
        self._surface: Optional[Surface] = None
        self._state = PaneState.UNMOUNTED
        self._destroyed = False
        self._layers = PaneLayers()
        self._visible_range: Optional[TimeRange] = None
        self.on_range_change: Optional[RangeListener] = None

    def __repr__(self) -> str:
        return f"PaneController({self.pane_id!r}, state={self._state.value})"

    @property
    def state(self) -> PaneState:
        return self._state

    @property
    def is_mounted(self) -> bool:
        return self._state is PaneState.MOUNTED

    @property
    def surface(self) -> Optional[Surface]:
        return self._surface

    @property
    def width(self) -> int:
        return self._surface.width if self._surface is not None else 0

    @property
    def layers(self) -> PaneLayers:
        return self._layers

    @property
    def visible_range(self) -> Optional[TimeRange]:
        return self._visible_range

    @property
    def data_range(self) -> Optional[TimeRange]:
        return self._layers.time_extent()

    def _require_mounted(self, op: str) -> Surface:
        if self._state is not PaneState.MOUNTED or self._surface is None:
            raise PaneStateError(f"{op}() on {self.pane_id} pane requires a mounted pane")
        return self._surface

    def mount(self, container: Any) -> None:
        """
        Allocate the surface inside `container`.

        The width is read from the container at call time; the height comes
        from the pane options.

        Args:
            container: Host container exposing a `width` in pixels.

        Raises:
            PaneStateError: If the pane is already mounted or was destroyed.
            MountError: If the container has no width yet.
        """
        if self._destroyed:
            raise PaneStateError(f"{self.pane_id} pane was destroyed and cannot be mounted again")
        if self._state is PaneState.MOUNTED:
            raise PaneStateError(f"{self.pane_id} pane is already mounted")

        width = int(getattr(container, "width", 0) or 0)
        if width <= 0:
            raise MountError(f"{self.pane_id} pane: container has no width yet")

        surface = self._factory(container, width, self.options.height)
        try:
            surface.on_range_change(self._on_surface_zoom)
        except Exception:
            surface.dispose()
            raise
        self._surface = surface
        self._state = PaneState.MOUNTED
        logger.info(f"PaneController.mount: {self.pane_id} {width}x{self.options.height}")

    def set_layers(self, layers: PaneLayers) -> None:
        """Replace every layer of the pane in one render."""
        self._require_mounted("set_layers")
        self._layers = layers
        self._render()

    def resize(self, width: int, auto_fit: bool = False) -> None:
        """
        Change the surface width.

        Args:
            width: New width in pixels; non-positive values are ignored.
            auto_fit: Fit the full data range instead of keeping the visible one.
        """
        surface = self._require_mounted("resize")
        if width <= 0:
            logger.debug(f"PaneController.resize: ignoring width={width} for {self.pane_id}")
            return
        if width != surface.width:
            surface.resize(width)
        if auto_fit:
            self.fit_content()
        elif self._visible_range is not None:
            surface.show_range(to_millis(self._visible_range.start), to_millis(self._visible_range.end))

    def fit_content(self) -> Optional[TimeRange]:
        """Show the full data range. Returns the applied range (None without data)."""
        self._require_mounted("fit_content")
        extent = self.data_range
        if extent is not None:
            self._apply_range(extent)
        return extent

    def set_visible_range(self, rng: TimeRange) -> bool:
        """
        Show `rng` on the surface.

        Returns:
            True if the range changed, False if it was already shown.
        """
        self._require_mounted("set_visible_range")
        if rng.close_to(self._visible_range, tolerance=self._tolerance()):
            return False
        self._apply_range(rng)
        return True

    def destroy(self) -> None:
        """Release the surface and all layers. Calling it again is a no-op."""
        if self._state is PaneState.UNMOUNTED:
            return
        surface, self._surface = self._surface, None
        self._state = PaneState.UNMOUNTED
        self._destroyed = True
        self._layers = PaneLayers()
        self._visible_range = None
        self.on_range_change = None
        if surface is not None:
            surface.dispose()
        logger.info(f"PaneController.destroy: {self.pane_id}")

    def _tolerance(self) -> float:
        extent = self.data_range
        if extent is None:
            return 0.5
        return max(0.5, (extent.end - extent.start) * 0.001)

    def _apply_range(self, rng: TimeRange) -> None:
        self._visible_range = rng
        if self._surface is not None:
            self._surface.show_range(to_millis(rng.start), to_millis(rng.end))

    def _render(self) -> None:
        option = build_pane_option(self._layers, self.options, self._visible_range)
        self._surface.render(option)
        logger.debug(
            f"PaneController._render: {self.pane_id} series={len(self._layers.series)} "
            f"refs={len(self._layers.reference_lines)} markers={len(self._layers.markers)}"
        )

    def _on_surface_zoom(self, start_pct: float, end_pct: float) -> None:
        """Viewport navigation on the surface, reported in percent of the data range."""
        if self._state is not PaneState.MOUNTED:
            return
        extent = self.data_range
        if extent is None:
            return
        span = extent.end - extent.start
        rng = TimeRange(extent.start + span * start_pct / 100.0, extent.start + span * end_pct / 100.0)
        if rng.close_to(self._visible_range, tolerance=self._tolerance()):
            return
        self._visible_range = rng
        if self.on_range_change is not None:
            self.on_range_change(self, rng)
