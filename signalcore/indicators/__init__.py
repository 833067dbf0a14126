"""Technical indicators (pure math, no I/O)."""

from signalcore.indicators.indicators import (
    ema,
    sma,
    rsi,
    macd,
    bollinger_bands,
    MacdSeries,
    BollingerSeries,
    IndicatorSet,
    IndicatorCalculator,
    compute_indicators,
)

__all__ = [
    "ema",
    "sma",
    "rsi",
    "macd",
    "bollinger_bands",
    "MacdSeries",
    "BollingerSeries",
    "IndicatorSet",
    "IndicatorCalculator",
    "compute_indicators",
]
