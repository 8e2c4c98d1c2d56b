from __future__ import annotations

from itertools import count
from typing import Any, Callable, Optional
import logging

from nicegui import ui

logger = logging.getLogger(__name__)

ResizeCallback = Callable[[int], None]

OBSERVE_JS = """
(() => {{
    const el = getHtmlElement({element_id});
    if (!el || el.__chartHostObserver) return;
    let last = -1;
    el.__chartHostObserver = new ResizeObserver((entries) => {{
        const width = Math.round(entries[0].contentRect.width);
        if (width === last) return;
        last = width;
        emitEvent("{event}", {{ width: width }});
    }});
    el.__chartHostObserver.observe(el);
}})();
"""


class ResizeSignal:
    """
    Subscribe/unsubscribe capability for container width changes.

    Injected into the lifecycle binding instead of a window-level listener,
    so subscription and removal can be checked without a browser.
    """

    def __init__(self) -> None:
        self._subscribers: dict[int, ResizeCallback] = {}
        self._tokens = count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: ResizeCallback) -> int:
        token = next(self._tokens)
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: Optional[int]) -> None:
        if token is None:
            return
        self._subscribers.pop(token, None)

    def emit(self, width: int) -> None:
        for callback in list(self._subscribers.values()):
            callback(width)


class ChartHost:
    """
    The page element the chart panes are mounted into.

    The chart core only reads `width`; the element itself belongs to the
    page. The width is reported by the browser through a ResizeObserver
    (see `observe`), or set directly with `report_width`.
    """

    def __init__(self, element: Any = None, width: int = 0) -> None:
        self.element = element
        self.width = int(width)
        self.resized = ResizeSignal()
        self._observing = False

    def report_width(self, width: Any) -> None:
        try:
            width = int(width)
        except (TypeError, ValueError):
            logger.debug(f"ChartHost.report_width: ignoring {width!r}")
            return
        if width == self.width:
            return
        self.width = width
        self.resized.emit(width)

    def observe(self) -> None:
        """Start reporting the element's width from the browser (once per host)."""
        if self.element is None or self._observing:
            return
        self._observing = True
        event = f"chart_host_resize_{self.element.id}"

        def _on_resize(e) -> None:
            self.report_width(e.args.get("width") if isinstance(e.args, dict) else e.args)

        ui.on(event, _on_resize)
        ui.run_javascript(OBSERVE_JS.format(element_id=self.element.id, event=event))
        logger.debug(f"ChartHost.observe: element={self.element.id} event={event}")
