"""Technical indicators for signal generation.

Every function takes a full value sequence and returns a new list of the
same length, with ``None`` where the indicator is not yet defined (warm-up)
or where the input was missing. Rolling state lives in local variables
only, so repeated calls with the same input return identical output.

Internally values are held in float64 NumPy arrays with NaN as the absent
marker and converted back to ``float | None`` on the way out.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from signalcore.models.bar import Bar
from signalcore.models.config import IndicatorConfig
from signalcore.models.series import IndicatorPoint, to_points
from signalcore.normalizer import source_values

logger = logging.getLogger(__name__)


def _to_array(values: Sequence[float | None]) -> np.ndarray:
    """Convert a value sequence to float64 with NaN for anything absent."""
    arr = np.full(len(values), np.nan, dtype=np.float64)
    for i, v in enumerate(values):
        if v is None:
            continue
        try:
            arr[i] = float(v)
        except (TypeError, ValueError):
            continue
    arr[~np.isfinite(arr)] = np.nan
    return arr


def _to_optional(arr: np.ndarray) -> list[float | None]:
    return [None if np.isnan(v) else float(v) for v in arr]


@dataclass(slots=True)
class MacdSeries:
    """MACD line, signal line and histogram, aligned with the input."""

    line: list[float | None] = field(default_factory=list)
    signal: list[float | None] = field(default_factory=list)
    histogram: list[float | None] = field(default_factory=list)


@dataclass(slots=True)
class BollingerSeries:
    """Bollinger basis (SMA), upper and lower bands."""

    basis: list[float | None] = field(default_factory=list)
    upper: list[float | None] = field(default_factory=list)
    lower: list[float | None] = field(default_factory=list)


# =============================================================================
# Indicator functions
# =============================================================================

def ema(values: Sequence[float | None], period: int) -> list[float | None]:
    """
    Calculate Exponential Moving Average.

    The seed is the simple average of the first ``period`` defined values
    and is emitted at the index where the last of them sits. After the
    seed, absent inputs repeat the previous EMA instead of being skipped.

    Args:
        values: Sequence of values (None for absent)
        period: EMA period (clamped to >= 1)

    Returns:
        List of EMA values (same length as input, None before the seed)
    """
    period = max(1, int(period))
    arr = _to_array(values)
    result = np.full(len(arr), np.nan, dtype=np.float64)

    defined = np.flatnonzero(~np.isnan(arr))
    if len(defined) < period:
        return _to_optional(result)

    seed_idx = defined[period - 1]
    prev = float(np.mean(arr[defined[:period]]))
    result[seed_idx] = prev

    multiplier = 2.0 / (period + 1)
    for i in range(seed_idx + 1, len(arr)):
        v = arr[i]
        if not np.isnan(v):
            prev = (v - prev) * multiplier + prev
        result[i] = prev

    return _to_optional(result)


def sma(values: Sequence[float | None], period: int) -> list[float | None]:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of values (None for absent)
        period: SMA period (clamped to >= 1)

    Returns:
        List of SMA values; None until the window is full and wherever
        the trailing window contains an absent value
    """
    period = max(1, int(period))
    arr = _to_array(values)
    result = np.full(len(arr), np.nan, dtype=np.float64)

    for i in range(period - 1, len(arr)):
        window = arr[i - period + 1 : i + 1]
        if np.isnan(window).any():
            continue
        result[i] = np.mean(window)

    return _to_optional(result)


def rsi(values: Sequence[float | None], period: int = 14) -> list[float | None]:
    """
    Calculate Relative Strength Index with Wilder's smoothing.

    Average gain/loss are seeded from the first ``period`` deltas and the
    first RSI is emitted at index ``period``. A delta that touches an
    absent value counts as neither gain nor loss, and the output at an
    absent index is None.

    RSI = 100 when the average loss is exactly zero.

    Args:
        values: Sequence of values (None for absent)
        period: RSI period (clamped to >= 1)

    Returns:
        List of RSI values in [0, 100], or an empty list when fewer than
        ``period + 2`` values are given
    """
    period = max(1, int(period))
    n = len(values)
    if n < period + 2:
        return []

    arr = _to_array(values)
    deltas = np.diff(arr)
    deltas[np.isnan(deltas)] = 0.0
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    result = np.full(n, np.nan, dtype=np.float64)

    avg_gain = float(np.sum(gains[:period])) / period
    avg_loss = float(np.sum(losses[:period])) / period
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    result[np.isnan(arr)] = np.nan
    return _to_optional(result)


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def macd(
    values: Sequence[float | None],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MacdSeries:
    """
    Calculate MACD.

    line      = EMA(fast) - EMA(slow)     where both are defined
    signal    = EMA(line, signal_period)
    histogram = line - signal             where both are defined

    Args:
        values: Sequence of values (None for absent)
        fast_period: Fast EMA period
        slow_period: Slow EMA period
        signal_period: Signal line EMA period

    Returns:
        MacdSeries with three lists aligned with the input
    """
    fast = ema(values, fast_period)
    slow = ema(values, slow_period)

    line = [
        f - s if f is not None and s is not None else None
        for f, s in zip(fast, slow)
    ]
    signal = ema(line, signal_period)
    histogram = [
        m - sig if m is not None and sig is not None else None
        for m, sig in zip(line, signal)
    ]

    return MacdSeries(line=line, signal=signal, histogram=histogram)


def bollinger_bands(
    values: Sequence[float | None],
    period: int = 20,
    multiplier: float = 2.0,
) -> BollingerSeries:
    """
    Calculate Bollinger Bands.

    basis = SMA(period), upper/lower = basis +/- multiplier * population
    standard deviation over the same trailing window. The period is capped
    at the series length.

    Args:
        values: Sequence of values (None for absent)
        period: Window length
        multiplier: Standard deviation multiplier

    Returns:
        BollingerSeries aligned with the input, or three empty lists when
        the capped period is 1 or less
    """
    period = min(int(period), len(values))
    if period <= 1:
        return BollingerSeries()

    arr = _to_array(values)
    n = len(arr)
    basis = np.full(n, np.nan, dtype=np.float64)
    upper = np.full(n, np.nan, dtype=np.float64)
    lower = np.full(n, np.nan, dtype=np.float64)

    for i in range(period - 1, n):
        window = arr[i - period + 1 : i + 1]
        if np.isnan(window).any():
            continue
        mean = np.mean(window)
        std_dev = np.std(window)  # ddof=0: population
        basis[i] = mean
        upper[i] = mean + multiplier * std_dev
        lower[i] = mean - multiplier * std_dev

    return BollingerSeries(
        basis=_to_optional(basis),
        upper=_to_optional(upper),
        lower=_to_optional(lower),
    )


def _pad(series: list[float | None], length: int) -> list[float | None]:
    """Pad an empty/short result to ``length`` with None."""
    if len(series) >= length:
        return series
    return series + [None] * (length - len(series))


# =============================================================================
# IndicatorSet / IndicatorCalculator
# =============================================================================

@dataclass(slots=True)
class IndicatorSet:
    """All indicator series for one bar sequence, aligned by index."""

    times: list[int]
    ema_fast: list[float | None]
    ema_slow: list[float | None]
    sma: list[float | None]
    rsi: list[float | None]
    macd: MacdSeries
    bollinger: BollingerSeries

    def __len__(self) -> int:
        return len(self.times)

    def series(self) -> dict[str, list[float | None]]:
        """Flat name -> values mapping of every series."""
        return {
            "ema_fast": self.ema_fast,
            "ema_slow": self.ema_slow,
            "sma": self.sma,
            "rsi": self.rsi,
            "macd": self.macd.line,
            "macd_signal": self.macd.signal,
            "macd_histogram": self.macd.histogram,
            "bb_basis": self.bollinger.basis,
            "bb_upper": self.bollinger.upper,
            "bb_lower": self.bollinger.lower,
        }

    def points(self, name: str) -> list[IndicatorPoint]:
        """Named series as IndicatorPoints."""
        return to_points(self.times, self.series()[name])

    def to_dict(self) -> dict:
        return {
            name: [p.to_dict() for p in to_points(self.times, values)]
            for name, values in self.series().items()
        }


class IndicatorCalculator:
    """Calculator for all technical indicators used by signal fusion."""

    def __init__(self, config: IndicatorConfig | None = None):
        self.config = config or IndicatorConfig()

    def calculate_all(self, bars: Sequence[Bar]) -> IndicatorSet:
        """
        Calculate all indicators for the given bars.

        Args:
            bars: Normalized bars, ascending by time

        Returns:
            IndicatorSet whose every series has ``len(bars)`` entries
        """
        cfg = self.config
        n = len(bars)
        values = source_values(bars, cfg.source)

        macd_series = macd(values, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
        bb = bollinger_bands(values, cfg.bb_period, cfg.bb_multiplier)

        result = IndicatorSet(
            times=[b.time for b in bars],
            ema_fast=ema(values, cfg.ema_fast_period),
            ema_slow=ema(values, cfg.ema_slow_period),
            sma=sma(values, cfg.sma_period),
            rsi=_pad(rsi(values, cfg.rsi_period), n),
            macd=macd_series,
            bollinger=BollingerSeries(
                basis=_pad(bb.basis, n),
                upper=_pad(bb.upper, n),
                lower=_pad(bb.lower, n),
            ),
        )
        logger.debug(f"Calculated indicators for {n} bars (source={cfg.source})")
        return result

    def calculate_latest(self, bars: Sequence[Bar]) -> dict | None:
        """
        Calculate indicators for the latest bar only.

        Args:
            bars: Normalized bars (need enough history)

        Returns:
            Dict with indicator values for the latest bar, or None if the
            slow EMA is still warming up
        """
        if len(bars) < self.config.ema_slow_period:
            return None

        indicators = self.calculate_all(bars)
        return {name: values[-1] for name, values in indicators.series().items()}


def compute_indicators(bars: Sequence[Bar], config: IndicatorConfig | None = None) -> IndicatorSet:
    """Functional entry point for :class:`IndicatorCalculator`."""
    return IndicatorCalculator(config).calculate_all(bars)
