"""
Shared fixtures for chart tests.

The chart core only talks to surfaces through the Surface protocol, so these
tests run against in-memory fakes instead of a browser.
"""

from typing import Callable, Optional

import pytest

from components.chart.host import ChartHost
from schemas.analysis import (
    BandPoint,
    CandlePoint,
    Dataset,
    PatternEvent,
    ScalarPoint,
)

START = 1_700_000_000
DAY = 86400


class FakeSurface:
    """Records every call the pane makes on it."""

    def __init__(self, host, width: int, height: int) -> None:
        self.host = host
        self.width = width
        self.height = height
        self.options: list[dict] = []
        self.ranges: list[tuple[int, int]] = []
        self.resizes: list[int] = []
        self.handlers = []
        self.disposed = False

    @property
    def last_option(self) -> Optional[dict]:
        return self.options[-1] if self.options else None

    @property
    def last_range(self) -> Optional[tuple[int, int]]:
        return self.ranges[-1] if self.ranges else None

    def render(self, option: dict) -> None:
        assert not self.disposed, "render on disposed surface"
        self.options.append(option)

    def resize(self, width: int) -> None:
        assert not self.disposed, "resize on disposed surface"
        self.width = width
        self.resizes.append(width)

    def show_range(self, start_ms: int, end_ms: int) -> None:
        assert not self.disposed, "show_range on disposed surface"
        self.ranges.append((start_ms, end_ms))

    def on_range_change(self, handler) -> None:
        self.handlers.append(handler)

    def dispose(self) -> None:
        assert not self.disposed, "surface disposed twice"
        self.disposed = True
        self.handlers.clear()

    def user_zoom(self, start_pct: float, end_pct: float) -> None:
        """Simulate a datazoom gesture on this surface."""
        for handler in list(self.handlers):
            handler(start_pct, end_pct)


class SurfaceFactory:
    """
    Surface factory that keeps every surface it created.

    Args:
        fail_heights: Heights for which creation raises (simulated library failure).
        on_create: Hook called after each surface is created, before it is returned.
    """

    def __init__(self, fail_heights=(), on_create: Optional[Callable[[FakeSurface], None]] = None) -> None:
        self.created: list[FakeSurface] = []
        self.fail_heights = set(fail_heights)
        self.on_create = on_create

    def __call__(self, host, width: int, height: int) -> FakeSurface:
        if height in self.fail_heights:
            raise RuntimeError(f"surface creation failed for height {height}")
        surface = FakeSurface(host, width, height)
        self.created.append(surface)
        if self.on_create is not None:
            self.on_create(surface)
        return surface

    @property
    def live(self) -> list[FakeSurface]:
        return [s for s in self.created if not s.disposed]


def make_candles(n: int, start: int = START, step: int = DAY) -> tuple[CandlePoint, ...]:
    candles = []
    price = 100.0
    for i in range(n):
        open_ = price
        close = price + (1.0 if i % 2 == 0 else -0.5)
        candles.append(CandlePoint(
            time=start + i * step,
            open=open_,
            high=max(open_, close) + 1.0,
            low=min(open_, close) - 1.0,
            close=close,
        ))
        price = close
    return tuple(candles)


def make_dataset(
    n: int = 100,
    band: bool = True,
    oscillator: bool = True,
    patterns: tuple[PatternEvent, ...] = (),
    symbol: str = "TEST",
    start: int = START,
) -> Dataset:
    candles = make_candles(n, start=start)
    bands = tuple(
        BandPoint(time=c.time, upper=c.close + 2, middle=c.close, lower=c.close - 2) for c in candles
    )
    osc = tuple(ScalarPoint(time=c.time, value=float(40 + i % 30)) for i, c in enumerate(candles))
    return Dataset(
        symbol=symbol,
        candles=candles,
        band_overlay=bands if band else None,
        oscillator_series=osc if oscillator else None,
        patterns=patterns,
    )


@pytest.fixture
def factory():
    return SurfaceFactory()


@pytest.fixture
def host():
    return ChartHost(width=800)
