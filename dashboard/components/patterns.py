from typing import Optional, Sequence
import logging

from nicegui import ui

from schemas.analysis import (
    AnalysisResponse,
    Dataset,
    PatternClassification,
    PatternEvent,
    SignalScore,
    check_alignment,
)
from utils.utils import change_class, fmt_change, fmt_price, fmt_ts

logger = logging.getLogger(__name__)

BADGE_ICONS = {
    PatternClassification.BULLISH: 'trending_up',
    PatternClassification.BEARISH: 'trending_down',
    PatternClassification.NEUTRAL: 'remove',
}


def pattern_badges(patterns: Sequence[PatternEvent]) -> None:
    """
    Render one badge per detected pattern, in the order received.

    Args:
        patterns: Detected pattern events of the current dataset.
    """
    if not patterns:
        ui.label('No patterns detected').classes('muted')
        return
    with ui.row().classes('items-center gap-2').style('flex-wrap: wrap;'):
        for p in patterns:
            with ui.element('span').classes(f'pattern-badge pattern-{p.classification.value}'):
                ui.icon(BADGE_ICONS[p.classification]).style('font-size:14px')
                ui.label(p.label)
                ui.label(f'· {p.strength.value}').classes('muted')
    logger.debug(f"pattern_badges: {len(patterns)} badges")


def quote_summary(
    symbol: str,
    current_price: Optional[float],
    price_change: Optional[float],
    signal: Optional[SignalScore] = None,
) -> None:
    """
    Render symbol, last price, change and the signal score in one row.

    Missing values render as '—'.
    """
    with ui.row().classes('items-baseline gap-4').style('flex-wrap: wrap;'):
        ui.label(symbol).classes('header-title')
        ui.label(fmt_price(current_price)).classes('text-h6')
        ui.label(fmt_change(price_change)).classes(f'text-subtitle1 {change_class(price_change)}')
        if signal is not None:
            ui.label(
                f'Signal {signal.score:.0f} · {signal.direction.value} · confidence {signal.confidence:.0f}%'
            ).classes('muted')


def describe_result(
    symbol: str,
    response: Optional[AnalysisResponse],
    dataset: Optional[Dataset],
) -> tuple[str, Optional[str]]:
    """
    Status line and empty-state text for a resolved fetch.

    Args:
        symbol: Requested symbol.
        response: Backend payload, or None when the fetch failed.
        dataset: Dataset handed to the chart for this response.

    Returns:
        (status, empty_text); `empty_text` is None when the chart renders.
    """
    if response is None:
        return f'No data for {symbol}', 'No data to display'
    if dataset is None or dataset.is_empty:
        return f'No candles for {response.symbol}', 'No data to display'
    problem = check_alignment(dataset)
    if problem:
        return f'Series misaligned, chart skipped: {problem}', 'Series misaligned, chart skipped'
    first, last = dataset.time_range
    return f'{len(dataset.candles)} points · {fmt_ts(first)} – {fmt_ts(last)}', None
