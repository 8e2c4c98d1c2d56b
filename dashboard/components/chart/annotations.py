from dataclasses import dataclass
from typing import Sequence
import logging

from schemas.analysis import PatternClassification, PatternEvent

logger = logging.getLogger(__name__)

BULLISH_COLOR = "#22c55e"
BEARISH_COLOR = "#ef4444"
NEUTRAL_COLOR = "#f59e0b"

# classification -> (shape, position, color)
MARKER_STYLES = {
    PatternClassification.BULLISH: ("up", "below", BULLISH_COLOR),
    PatternClassification.BEARISH: ("down", "above", BEARISH_COLOR),
    PatternClassification.NEUTRAL: ("dot", "above", NEUTRAL_COLOR),
}


@dataclass(frozen=True)
class MarkerSpec:
    """One marker glyph drawn on the price pane."""
    time: int
    position: str
    shape: str
    color: str
    text: str


def map_patterns(patterns: Sequence[PatternEvent], anchor_time: int) -> list[MarkerSpec]:
    """
    Map detected patterns onto marker specs.

    Every marker is anchored to `anchor_time` (the last candle of the dataset),
    since pattern events carry no timestamp. Input order is kept and identical
    patterns are not merged; later markers are drawn on top.

    Args:
        patterns: Detected pattern events.
        anchor_time: Unix seconds of the dataset's last point.

    Returns:
        Exactly one MarkerSpec per input pattern, in input order.
    """
    markers: list[MarkerSpec] = []
    for pattern in patterns:
        shape, position, color = MARKER_STYLES[pattern.classification]
        markers.append(
            MarkerSpec(
                time=anchor_time,
                position=position,
                shape=shape,
                color=color,
                text=pattern.label,
            )
        )
    logger.debug(f"map_patterns: {len(markers)} markers anchored at {anchor_time}")
    return markers
