"""Series adapter: pydantic points -> ECharts rows."""

from components.chart.series_adapter import (
    to_band_layers,
    to_candle_layer,
    to_line_layer,
    to_millis,
)
from schemas.analysis import BandPoint, CandlePoint, ScalarPoint


class TestSeriesAdapter:
    """Conversion of series into renderable rows"""

    def test_to_millis(self):
        assert to_millis(1_700_000_000) == 1_700_000_000_000
        assert to_millis(1.5) == 1500

    def test_candle_rows_use_echarts_order(self):
        """ECharts candlestick rows are [time, open, close, low, high]"""
        candles = [CandlePoint(time=10, open=1.0, high=3.0, low=0.5, close=2.0)]
        assert to_candle_layer(candles) == [[10_000, 1.0, 2.0, 0.5, 3.0]]

    def test_line_rows(self):
        series = [ScalarPoint(time=1, value=55.5), ScalarPoint(time=2, value=60.0)]
        assert to_line_layer(series) == [[1000, 55.5], [2000, 60.0]]

    def test_band_split_keeps_order(self):
        bands = [
            BandPoint(time=1, upper=12, middle=10, lower=8),
            BandPoint(time=2, upper=13, middle=11, lower=9),
        ]
        upper, middle, lower = to_band_layers(bands)
        assert upper == [[1000, 12], [2000, 13]]
        assert middle == [[1000, 10], [2000, 11]]
        assert lower == [[1000, 8], [2000, 9]]

    def test_empty_input_gives_empty_layers(self):
        """Empty sequences are not an error"""
        assert to_candle_layer([]) == []
        assert to_line_layer([]) == []
        assert to_band_layers([]) == ([], [], [])
