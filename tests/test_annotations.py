"""Annotation mapper: pattern events -> marker specs."""

import pytest

from components.chart.annotations import (
    BEARISH_COLOR,
    BULLISH_COLOR,
    NEUTRAL_COLOR,
    map_patterns,
)
from schemas.analysis import PatternEvent

ANCHOR = 1_700_864_000


class TestMapPatterns:
    """Marker shape, position and ordering"""

    @pytest.mark.parametrize("classification, shape, position, color", [
        ("bullish", "up", "below", BULLISH_COLOR),
        ("bearish", "down", "above", BEARISH_COLOR),
        ("neutral", "dot", "above", NEUTRAL_COLOR),
    ])
    def test_classification_table(self, classification, shape, position, color):
        marker, = map_patterns([PatternEvent(label="X", classification=classification)], ANCHOR)
        assert (marker.shape, marker.position, marker.color) == (shape, position, color)
        assert marker.time == ANCHOR
        assert marker.text == "X"

    def test_one_marker_per_pattern_in_input_order(self):
        """Identical patterns are never merged"""
        patterns = [
            PatternEvent(label="Doji", classification="neutral"),
            PatternEvent(label="Head & Shoulders", classification="bearish"),
            PatternEvent(label="Doji", classification="neutral"),
            PatternEvent(label="Bull Flag", classification="bullish"),
        ]
        markers = map_patterns(patterns, ANCHOR)

        assert len(markers) == 4
        assert [m.text for m in markers] == ["Doji", "Head & Shoulders", "Doji", "Bull Flag"]
        assert [m.shape for m in markers] == ["dot", "down", "dot", "up"]
        assert all(m.time == ANCHOR for m in markers)

    def test_empty(self):
        assert map_patterns([], ANCHOR) == []
