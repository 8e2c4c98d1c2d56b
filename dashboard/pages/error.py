import re
import logging

from nicegui import ui
from fastapi import Request

from static.style import add_style, add_chart_style
from utils.utils import normalize_symbol

logger = logging.getLogger(__name__)

ANALYSIS_PATH = re.compile(r'^/analysis/([^/?#]+)/?$')

STATUS_TITLES = {
    400: 'Bad request',
    401: 'Not authorized',
    404: 'Nothing here',
    500: 'The chart page failed',
}


def symbol_from_path(path: str | None) -> str:
    """
    Extract the symbol from an `/analysis/{symbol}` request path.

    Returns:
        Normalized symbol, or '' for any other path.
    """
    m = ANALYSIS_PATH.match(path or '')
    return normalize_symbol(m.group(1)) if m else ''


def back_link(symbol: str | None) -> tuple[str, str]:
    """
    Target and label of the error page's return button.

    Returns:
        (url, label): the symbol's analysis page when a symbol is known,
        the empty analysis page otherwise.
    """
    symbol = normalize_symbol(symbol)
    if symbol:
        return f'/analysis/{symbol}', f'Back to {symbol}'
    return '/analysis', 'Back to analysis'


def error_title(status_code: int) -> str:
    return STATUS_TITLES.get(status_code, 'Something went wrong')


def error_page(status_code: int, message: str, path: str = '', symbol: str = '') -> None:
    """
    Error view shown in place of the analysis page.

    Args:
        status_code: HTTP status reported to the browser.
        message: Error text.
        path: Request path that failed, shown for context.
        symbol: Symbol being analysed; the return button goes back to it.
    """
    add_style()
    add_chart_style()
    url, label = back_link(symbol or symbol_from_path(path))

    with ui.column().classes('items-center justify-center w-full').style('min-height: 70vh; padding: 30px'):
        with ui.card().classes('elevated-card q-pa-lg items-center text-center').style('width:min(560px,94vw)'):
            ui.label(str(status_code)).classes('text-h2 text-bold').style('color:#334155')
            ui.label(error_title(status_code)).classes('header-title')
            ui.label(message).classes('q-mt-sm text-body1')
            if path:
                ui.label(f'while loading {path}').classes('muted')
            ui.button(label, icon='query_stats', on_click=lambda: ui.navigate.to(url)) \
                .props('color=primary unelevated') \
                .classes('q-mt-lg')


@ui.page('/error')
def dynamic_error_page(request: Request):
    code = int(request.query_params.get('status', 500))
    message = request.query_params.get('message', 'Unexpected error')
    symbol = request.query_params.get('symbol', '')
    logger.info(f"dynamic_error_page: status={code} symbol={symbol!r}")
    error_page(code, message, symbol=symbol)
