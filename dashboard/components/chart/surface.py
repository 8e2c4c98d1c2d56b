from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol
import logging

from nicegui import ui

from .annotations import MarkerSpec
from .layers import CandleLayer, LineLayer, PaneLayers, TimeRange
from .series_adapter import Points, to_millis

logger = logging.getLogger(__name__)

RangeHandler = Callable[[float, float], None]

MARKER_SYMBOLS = {
    "up": ("triangle", 0, 12),
    "down": ("triangle", 180, 12),
    "dot": ("circle", 0, 8),
}
MARKER_STEP_PX = 18


class Surface(Protocol):
    """One drawing surface owned by exactly one pane."""
    width: int
    height: int

    def render(self, option: dict) -> None: ...

    def resize(self, width: int) -> None: ...

    def show_range(self, start_ms: int, end_ms: int) -> None: ...

    def on_range_change(self, handler: RangeHandler) -> None: ...

    def dispose(self) -> None: ...


SurfaceFactory = Callable[[Any, int, int], Surface]


@dataclass(frozen=True)
class PaneOptions:
    """Visual options of one pane."""
    height: int = 400
    show_time_axis: bool = True
    show_slider: bool = False
    value_min: Optional[float] = None
    value_max: Optional[float] = None
    text_color: str = "#94a3b8"
    grid_color: str = "#1e293b"
    border_color: str = "#334155"


def _mark_points(markers: tuple[MarkerSpec, ...], candle_points: Points) -> list[dict]:
    """
    Build ECharts markPoint entries for markers on a candlestick series.

    Markers at the same anchor and position are stacked away from the bar,
    in input order, so later ones do not hide earlier ones.
    """
    if not candle_points:
        return []
    by_time = {row[0]: row for row in candle_points}
    stack: dict[tuple[int, str], int] = {}
    out: list[dict] = []

    for m in markers:
        t_ms = to_millis(m.time)
        row = by_time.get(t_ms) or candle_points[-1]
        below = m.position == "below"
        y = row[3] if below else row[4]

        k = stack.get((row[0], m.position), 0)
        stack[(row[0], m.position)] = k + 1

        symbol, rotate, size = MARKER_SYMBOLS.get(m.shape, MARKER_SYMBOLS["dot"])
        offset = 14 + k * MARKER_STEP_PX
        out.append({
            "name": m.text,
            "coord": [row[0], y],
            "symbol": symbol,
            "symbolRotate": rotate,
            "symbolSize": size,
            "symbolOffset": [0, offset if below else -offset],
            "itemStyle": {"color": m.color},
            "label": {
                "show": True,
                "formatter": m.text,
                "position": "bottom" if below else "top",
                "color": m.color,
                "fontSize": 10,
            },
        })
    return out


def build_pane_option(
    layers: PaneLayers,
    options: PaneOptions,
    visible_range: Optional[TimeRange] = None,
) -> dict:
    """
    Build the full ECharts option for one pane.

    The option is always complete: a pane never patches a previous option,
    it re-renders from its whole layer set.

    Args:
        layers: Layer set of the pane.
        options: Visual options (height, axes, value bounds).
        visible_range: Visible window in unix seconds; None shows everything.

    Returns:
        ECharts options dict ready to be passed into the chart component.
    """
    series: list[dict] = []
    extent = layers.time_extent()

    for layer in layers.series:
        if isinstance(layer, CandleLayer):
            s = {
                "name": layer.name,
                "type": "candlestick",
                "data": layer.points,
                "itemStyle": {
                    "color": layer.up_color,
                    "color0": layer.down_color,
                    "borderColor": layer.up_color,
                    "borderColor0": layer.down_color,
                },
            }
            mark_points = _mark_points(layers.markers, layer.points)
            if mark_points:
                s["markPoint"] = {"data": mark_points, "animation": False}
            series.append(s)
        elif isinstance(layer, LineLayer):
            series.append({
                "name": layer.name,
                "type": "line",
                "data": layer.points,
                "showSymbol": False,
                "lineStyle": {
                    "color": layer.color,
                    "width": layer.width,
                    "type": "dashed" if layer.dashed else "solid",
                },
                "itemStyle": {"color": layer.color},
            })

    if extent is not None:
        for ref in layers.reference_lines:
            series.append({
                "name": ref.name,
                "type": "line",
                "data": [[to_millis(extent.start), ref.value], [to_millis(extent.end), ref.value]],
                "showSymbol": False,
                "silent": True,
                "lineStyle": {"color": ref.color, "width": 1, "type": "dashed"},
                "itemStyle": {"color": ref.color},
                "tooltip": {"show": False},
            })

    zoom: list[dict] = [{"type": "inside", "xAxisIndex": 0, "filterMode": "none"}]
    if options.show_slider:
        zoom.append({"type": "slider", "xAxisIndex": 0, "height": 18, "bottom": 6, "filterMode": "none"})
    if visible_range is not None:
        for z in zoom:
            z["startValue"] = to_millis(visible_range.start)
            z["endValue"] = to_millis(visible_range.end)

    y_axis: dict = {
        "type": "value",
        "scale": True,
        "position": "right",
        "axisLine": {"lineStyle": {"color": options.border_color}},
        "splitLine": {"show": True, "lineStyle": {"color": options.grid_color}},
    }
    if options.value_min is not None:
        y_axis["min"] = options.value_min
    if options.value_max is not None:
        y_axis["max"] = options.value_max

    if options.show_slider:
        bottom = 40
    elif options.show_time_axis:
        bottom = 24
    else:
        bottom = 6

    return {
        "animation": False,
        "backgroundColor": "transparent",
        "textStyle": {"color": options.text_color},
        "tooltip": {"trigger": "axis", "axisPointer": {"type": "cross"}},
        "grid": {"left": 12, "right": 64, "top": 12, "bottom": bottom, "containLabel": False},
        "xAxis": {
            "type": "time",
            "show": options.show_time_axis,
            "axisLine": {"lineStyle": {"color": options.border_color}},
            "splitLine": {"show": True, "lineStyle": {"color": options.grid_color}},
        },
        "yAxis": y_axis,
        "dataZoom": zoom,
        "series": series,
    }


class EChartSurface:
    """
    Surface backed by a NiceGUI `ui.echart` element.

    The element is created inside the host container and removed from the
    page again on `dispose()`.
    """

    def __init__(self, host: Any, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._handlers: list[RangeHandler] = []

        with host.element:
            self.chart = ui.echart({}).style(self._style())
        self.chart.on("chart:datazoom", self._on_datazoom)
        logger.debug(f"EChartSurface: created c{self.chart.id} {width}x{height}")

    @classmethod
    def create(cls, host: Any, width: int, height: int) -> "EChartSurface":
        return cls(host, width, height)

    def _style(self) -> str:
        return f"width: {self.width}px; height: {self.height}px;"

    def render(self, option: dict) -> None:
        self.chart.options.clear()
        self.chart.options.update(option)
        self.chart.update()

    def resize(self, width: int) -> None:
        self.width = width
        self.chart.style(self._style())
        self.chart.run_chart_method("resize")

    def show_range(self, start_ms: int, end_ms: int) -> None:
        self.chart.run_chart_method(
            "dispatchAction",
            {"type": "dataZoom", "startValue": start_ms, "endValue": end_ms},
        )

    def on_range_change(self, handler: RangeHandler) -> None:
        self._handlers.append(handler)

    def dispose(self) -> None:
        self._handlers.clear()
        logger.debug(f"EChartSurface: disposing c{self.chart.id}")
        self.chart.delete()

    def _on_datazoom(self, e) -> None:
        args = e.args if isinstance(e.args, dict) else {}
        batch = args.get("batch")
        if batch:
            args = batch[0]
        start, end = args.get("start"), args.get("end")
        if start is None or end is None:
            return
        for handler in list(self._handlers):
            handler(float(start), float(end))
