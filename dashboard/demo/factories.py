import math
import random
from typing import Optional

from schemas.analysis import (
    AdxReading,
    AnalysisResponse,
    BandReading,
    Indicators,
    MacdReading,
    RsiReading,
    SignalScore,
)

DAY = 86400


def _r(value: float) -> float:
    """Round for display-friendly demo prices."""
    return round(value, 2)


def create_demo_analysis(
    symbol: str = "DEMO",
    points: int = 120,
    start_time: int = 1_700_000_000,
    seed: Optional[int] = None,
    with_band: bool = True,
    with_oscillator: bool = True,
) -> "AnalysisResponse":
    """
    Build an AnalysisResponse with a synthetic daily price walk.

    The band and oscillator are shaped fixtures (an envelope around the close
    and a bounded wave), not computed indicators. The same `symbol`/`seed`
    always yields the same payload.
    """
    rng = random.Random(seed if seed is not None else symbol)

    candles, bands, osc = [], [], []
    close = 100.0
    for i in range(points):
        t = start_time + i * DAY
        open_ = close
        close = max(1.0, open_ * (1 + rng.uniform(-0.03, 0.03)))
        high = max(open_, close) * (1 + rng.uniform(0, 0.01))
        low = min(open_, close) * (1 - rng.uniform(0, 0.01))
        candles.append({
            "time": t, "open": _r(open_), "high": _r(high), "low": _r(low), "close": _r(close),
            "volume": rng.randint(100_000, 900_000),
        })
        bands.append({"time": t, "upper": _r(close * 1.04), "middle": _r(close), "lower": _r(close * 0.96)})
        osc.append({"time": t, "value": round(50 + 35 * math.sin(i / 7.0), 2)})

    first, last = candles[0]["close"], candles[-1]["close"]
    change = (last - first) / first * 100 if first else 0.0

    patterns = [
        {"name": "Bull Flag", "type": "bullish", "strength": "strong"},
        {"name": "Doji", "type": "neutral", "strength": "weak"},
    ]

    return AnalysisResponse(
        symbol=symbol.upper(),
        currentPrice=last,
        priceChange=round(change, 2),
        dataPoints=points,
        signalScore=SignalScore(
            score=62,
            direction="bullish" if change >= 0 else "bearish",
            confidence=55,
            signals=["Demo data"],
        ),
        candles=candles,
        bbSeries=bands if with_band else None,
        rsiSeries=osc if with_oscillator else None,
        indicators=Indicators(
            rsi=RsiReading(value=osc[-1]["value"], period=14),
            macd=MacdReading(macd=round(change / 10, 4), signal=round(change / 12, 4),
                             histogram=round(change / 60, 4)),
            bollingerBands=BandReading(**{k: bands[-1][k] for k in ("upper", "middle", "lower")}),
            adx=AdxReading(value=24.0, regime="trending", suitableFor="trend_following"),
        ),
        patterns=patterns,
    )
