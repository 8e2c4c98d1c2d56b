from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class PatternClassification(StrEnum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PatternStrength(StrEnum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class TimePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: int


class CandlePoint(TimePoint):
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_ohlc(self) -> "CandlePoint":
        if not (self.low <= min(self.open, self.close) and max(self.open, self.close) <= self.high):
            raise ValueError(
                f"inconsistent OHLC at {self.time}: "
                f"o={self.open} h={self.high} l={self.low} c={self.close}"
            )
        return self


class ScalarPoint(TimePoint):
    value: float


class BandPoint(TimePoint):
    upper: float
    middle: float
    lower: float

    @model_validator(mode="after")
    def _check_order(self) -> "BandPoint":
        if not (self.lower <= self.middle <= self.upper):
            raise ValueError(
                f"band out of order at {self.time}: "
                f"lower={self.lower} middle={self.middle} upper={self.upper}"
            )
        return self


class PatternEvent(BaseModel):
    """A detected pattern. Carries no time of its own; it is drawn on the last candle."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(validation_alias=AliasChoices("label", "name"))
    classification: PatternClassification = Field(
        default=PatternClassification.NEUTRAL,
        validation_alias=AliasChoices("classification", "type"),
    )
    strength: PatternStrength = PatternStrength.MODERATE


class Dataset(BaseModel):
    """
    One immutable render input, produced per fetch resolution.

    Identity matters: every fetch produces a new Dataset object and the chart
    core compares them with `is`, never with `==`.
    """
    model_config = ConfigDict(frozen=True)

    symbol: Optional[str] = None
    candles: tuple[CandlePoint, ...] = ()
    band_overlay: Optional[tuple[BandPoint, ...]] = None
    oscillator_series: Optional[tuple[ScalarPoint, ...]] = None
    patterns: tuple[PatternEvent, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.candles

    @property
    def last_time(self) -> Optional[int]:
        return self.candles[-1].time if self.candles else None

    @property
    def time_range(self) -> Optional[tuple[int, int]]:
        if not self.candles:
            return None
        return self.candles[0].time, self.candles[-1].time


def check_alignment(dataset: Dataset) -> Optional[str]:
    """
    Validate the shared time index of a dataset.

    Checks:
        - candle times are strictly increasing
        - band overlay and oscillator series (when present) have the same
          length and the same timestamps as the candles

    Args:
        dataset: Dataset to validate.

    Returns:
        A diagnostic message describing the first problem, or None if aligned.
    """
    times = [c.time for c in dataset.candles]
    for prev, cur in zip(times, times[1:]):
        if cur <= prev:
            return f"candle times not strictly increasing ({prev} -> {cur})"

    for name, series in (("band_overlay", dataset.band_overlay), ("oscillator_series", dataset.oscillator_series)):
        if series is None:
            continue
        if len(series) != len(times):
            return f"{name} has {len(series)} points, candles have {len(times)}"
        for idx, (point, t) in enumerate(zip(series, times)):
            if point.time != t:
                return f"{name}[{idx}].time={point.time} does not match candle time {t}"
    return None


class SignalScore(BaseModel):
    score: float = 0
    direction: PatternClassification = PatternClassification.NEUTRAL
    confidence: float = 0
    signals: list[str] = []


class RsiReading(BaseModel):
    value: float
    period: int = 14


class MacdReading(BaseModel):
    macd: float
    signal: float
    histogram: float


class BandReading(BaseModel):
    upper: float
    middle: float
    lower: float


class AdxReading(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: float
    regime: str = ""
    suitable_for: str = Field(default="", alias="suitableFor")


class StochRsiReading(BaseModel):
    k: float
    d: float


class Indicators(BaseModel):
    """Latest indicator readings computed by the backend. Every block is optional."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    rsi: Optional[RsiReading] = None
    rsi2: Optional[RsiReading] = None
    macd: Optional[MacdReading] = None
    bollinger_bands: Optional[BandReading] = Field(default=None, alias="bollingerBands")
    adx: Optional[AdxReading] = None
    stoch_rsi: Optional[StochRsiReading] = Field(default=None, alias="stochRSI")


class AnalysisResponse(BaseModel):
    """Payload of the analytics backend for one symbol."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    symbol: str
    current_price: Optional[float] = Field(default=None, alias="currentPrice")
    price_change: Optional[float] = Field(default=None, alias="priceChange")
    data_points: Optional[int] = Field(default=None, alias="dataPoints")
    signal_score: Optional[SignalScore] = Field(default=None, alias="signalScore")
    indicators: Optional[Indicators] = None
    candles: list[CandlePoint] = []
    bb_series: Optional[list[BandPoint]] = Field(default=None, alias="bbSeries")
    rsi_series: Optional[list[ScalarPoint]] = Field(default=None, alias="rsiSeries")
    patterns: list[PatternEvent] = []

    def to_dataset(self) -> Dataset:
        """Convert into a render Dataset; empty optional series become absent."""
        return Dataset(
            symbol=self.symbol,
            candles=tuple(self.candles),
            band_overlay=tuple(self.bb_series) if self.bb_series else None,
            oscillator_series=tuple(self.rsi_series) if self.rsi_series else None,
            patterns=tuple(self.patterns),
        )
