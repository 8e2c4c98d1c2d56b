from typing import Optional
import logging

from nicegui import ui

from schemas.analysis import Indicators
from utils.utils import fmt_num

logger = logging.getLogger(__name__)

BULLISH = 'bullish'
BEARISH = 'bearish'
NEUTRAL = 'neutral'

INDICATOR_COLUMNS = [
    {'name': 'indicator', 'label': 'Indicator', 'field': 'indicator', 'align': 'left'},
    {'name': 'value', 'label': 'Value', 'field': 'value', 'align': 'right'},
    {'name': 'status', 'label': 'Status', 'field': 'status', 'align': 'left'},
]


def band_status(value: float, upper: float, lower: float, prefix: str = '') -> tuple[str, str]:
    """
    Classify an oscillator reading against its thresholds.

    Args:
        value: Oscillator value.
        upper: Overbought threshold.
        lower: Oversold threshold.
        prefix: Optional qualifier for the extreme labels (e.g. 'Extreme').

    Returns:
        (label, tone) where tone is one of bullish/bearish/neutral.
    """
    lead = f'{prefix} ' if prefix else ''
    if value < lower:
        return f'{lead}Oversold', BULLISH
    if value > upper:
        return f'{lead}Overbought', BEARISH
    return ('Normal' if prefix else 'Neutral'), NEUTRAL


def indicator_rows(
    indicators: Optional[Indicators],
    current_price: Optional[float] = None,
    upper: float = 70.0,
    lower: float = 30.0,
) -> list[dict]:
    """
    Build the rows of the technical indicators table.

    Blocks missing from the payload are skipped.

    Args:
        indicators: Indicator readings of the analysis payload.
        current_price: Last price, compared against the Bollinger bands.
        upper: RSI overbought threshold.
        lower: RSI oversold threshold.

    Returns:
        List of dicts with `indicator`, `value`, `status`, `tone`.
    """
    if indicators is None:
        return []

    rows: list[dict] = []

    def add(name: str, value: str, status: tuple[str, str]) -> None:
        rows.append({'indicator': name, 'value': value, 'status': status[0], 'tone': status[1]})

    if indicators.rsi is not None:
        add(f'RSI ({indicators.rsi.period})', fmt_num(indicators.rsi.value),
            band_status(indicators.rsi.value, upper, lower))
    if indicators.rsi2 is not None:
        add(f'RSI ({indicators.rsi2.period})', fmt_num(indicators.rsi2.value),
            band_status(indicators.rsi2.value, 90.0, 10.0, prefix='Extreme'))
    if indicators.macd is not None:
        m = indicators.macd
        add('MACD', f'{fmt_num(m.macd, 4)} / {fmt_num(m.signal, 4)}',
            ('Bullish', BULLISH) if m.histogram > 0 else ('Bearish', BEARISH))
    if indicators.bollinger_bands is not None:
        b = indicators.bollinger_bands
        if current_price is None:
            status = ('—', NEUTRAL)
        elif current_price < b.lower:
            status = ('Below Lower', BULLISH)
        elif current_price > b.upper:
            status = ('Above Upper', BEARISH)
        else:
            status = ('Within Bands', NEUTRAL)
        add('Bollinger Bands', f'U: {fmt_num(b.upper)} | M: {fmt_num(b.middle)} | L: {fmt_num(b.lower)}', status)
    if indicators.adx is not None:
        a = indicators.adx
        regime = a.regime or 'unknown'
        if a.suitable_for:
            regime = f"{regime} ({a.suitable_for.replace('_', ' ')})"
        add('ADX', fmt_num(a.value), (regime, NEUTRAL))
    if indicators.stoch_rsi is not None:
        s = indicators.stoch_rsi
        add('Stochastic RSI', f'K: {fmt_num(s.k)} / D: {fmt_num(s.d)}', band_status(s.k, 80.0, 20.0))
    return rows


def oscillator_badge(indicators: Optional[Indicators], upper: float = 70.0, lower: float = 30.0) -> None:
    """Latest RSI reading shown above the oscillator pane; nothing without an RSI block."""
    if indicators is None or indicators.rsi is None:
        return
    label, tone = band_status(indicators.rsi.value, upper, lower)
    with ui.row().classes('items-center gap-2'):
        ui.label(f'RSI ({indicators.rsi.period})').classes('text-subtitle2')
        with ui.element('span').classes(f'pattern-badge pattern-{tone}'):
            ui.label(f'{indicators.rsi.value:.1f} · {label}')


def indicators_table(rows: list[dict]) -> None:
    if not rows:
        ui.label('No indicator readings').classes('muted')
        return
    table = ui.table(columns=INDICATOR_COLUMNS, rows=rows, row_key='indicator') \
        .props('flat dense separator=horizontal hide-bottom') \
        .classes('w-full')
    table.add_slot('body-cell-status', '''
        <q-td :props="props">
            <span :class="'pattern-badge pattern-' + props.row.tone">{{ props.value }}</span>
        </q-td>
    ''')
    logger.debug(f"indicators_table: {len(rows)} rows")
