from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

from .annotations import MarkerSpec
from .series_adapter import Points


class TimeRange(NamedTuple):
    """Visible time window in unix seconds."""
    start: float
    end: float

    def close_to(self, other: Optional["TimeRange"], tolerance: float = 0.5) -> bool:
        if other is None:
            return False
        return abs(self.start - other.start) <= tolerance and abs(self.end - other.end) <= tolerance


@dataclass(frozen=True)
class CandleLayer:
    points: Points
    name: str = "candles"
    up_color: str = "#22c55e"
    down_color: str = "#ef4444"


@dataclass(frozen=True)
class LineLayer:
    name: str
    points: Points
    color: str = "#8b5cf6"
    width: float = 2
    dashed: bool = False


@dataclass(frozen=True)
class ReferenceLine:
    """Horizontal line at a fixed value spanning the pane's data range."""
    name: str
    value: float
    color: str = "#94a3b8"


SeriesLayer = Union[CandleLayer, LineLayer]


@dataclass(frozen=True)
class PaneLayers:
    """The complete set of layers of one pane; always replaced as a whole."""
    series: tuple[SeriesLayer, ...] = ()
    reference_lines: tuple[ReferenceLine, ...] = ()
    markers: tuple[MarkerSpec, ...] = field(default=())

    @property
    def is_empty(self) -> bool:
        return not (self.series or self.reference_lines or self.markers)

    def time_extent(self) -> Optional[TimeRange]:
        """Min/max time (seconds) across all series points, or None without data."""
        starts = [layer.points[0][0] for layer in self.series if layer.points]
        ends = [layer.points[-1][0] for layer in self.series if layer.points]
        if not starts:
            return None
        return TimeRange(min(starts) / 1000, max(ends) / 1000)
