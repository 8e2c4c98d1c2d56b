from typing import Sequence

from schemas.analysis import BandPoint, CandlePoint, ScalarPoint

Points = list[list[float]]


def to_millis(seconds: int | float) -> int:
    """Unix seconds -> ECharts time-axis milliseconds."""
    return int(seconds * 1000)


def to_candle_layer(candles: Sequence[CandlePoint]) -> Points:
    """
    Convert candles into ECharts candlestick rows.

    ECharts expects `[time, open, close, lowest, highest]` on a time axis.

    Args:
        candles: Ordered candle points.

    Returns:
        List of rows; empty list for empty input.
    """
    return [[to_millis(c.time), c.open, c.close, c.low, c.high] for c in candles]


def to_line_layer(series: Sequence[ScalarPoint]) -> Points:
    """Convert a scalar series into `[time, value]` rows."""
    return [[to_millis(p.time), p.value] for p in series]


def to_band_layers(bands: Sequence[BandPoint]) -> tuple[Points, Points, Points]:
    """
    Split a band overlay into its three line layers.

    Args:
        bands: Ordered band points.

    Returns:
        (upper, middle, lower) rows, each `[time, value]`.
    """
    upper = [[to_millis(b.time), b.upper] for b in bands]
    middle = [[to_millis(b.time), b.middle] for b in bands]
    lower = [[to_millis(b.time), b.lower] for b in bands]
    return upper, middle, lower
