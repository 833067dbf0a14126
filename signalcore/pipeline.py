"""Batch analysis pipeline.

raw records -> normalize -> indicators -> divergences (bar highs/lows vs
RSI) -> signal fusion, with RSI and MACD alerts and crest resistance
levels computed alongside.

Every call recomputes from the full input; nothing is cached or persisted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from signalcore.alerts import evaluate_alerts, evaluate_macd_alerts
from signalcore.divergence import find_divergences, select_strong_divergences
from signalcore.fusion import fuse_signals
from signalcore.indicators import IndicatorSet, compute_indicators
from signalcore.levels import detect_resistance_levels
from signalcore.models.bar import Bar
from signalcore.models.config import AnalysisConfig
from signalcore.models.series import ResistanceLevels
from signalcore.models.signal import AlertEvent, Divergence, Signal
from signalcore.normalizer import normalize_bars, source_values
from signalcore.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalysisResult:
    """Everything computed for one bar series."""

    bars: list[Bar]
    indicators: IndicatorSet
    divergences: list[Divergence] = field(default_factory=list)
    strong_divergences: list[Divergence] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    alerts: list[AlertEvent] = field(default_factory=list)
    macd_alerts: list[AlertEvent] = field(default_factory=list)
    resistance: ResistanceLevels = field(default_factory=ResistanceLevels)

    def to_dict(self) -> dict:
        """Plain-data form for hand-off to storage or transport layers."""
        return {
            "bars": [b.model_dump() for b in self.bars],
            "indicators": self.indicators.to_dict(),
            "divergences": [d.model_dump(mode="json") for d in self.divergences],
            "strong_divergences": [d.model_dump(mode="json") for d in self.strong_divergences],
            "signals": [s.model_dump(mode="json") for s in self.signals],
            "alerts": [a.model_dump(mode="json") for a in self.alerts],
            "macd_alerts": [a.model_dump(mode="json") for a in self.macd_alerts],
            "resistance": self.resistance.to_dict(),
        }


def analyze(
    records: Iterable[Any],
    config: AnalysisConfig | None = None,
    now: int | None = None,
) -> AnalysisResult:
    """
    Run the full pipeline over raw bar records.

    Args:
        records: Bar-like records in any supported shape
        config: Analysis options; defaults plus the settings' divergence
            preset when omitted
        now: Fallback timestamp for undated records

    Returns:
        AnalysisResult
    """
    settings = get_settings()
    config = config or AnalysisConfig.from_options(preset=settings.divergence_preset)

    bars = normalize_bars(records, now=now)
    indicators = compute_indicators(bars, config.indicators)

    divergences = find_divergences(
        source_values(bars, "high"),
        indicators.rsi,
        config.divergence,
        low_series=source_values(bars, "low"),
    )
    strong = select_strong_divergences(
        divergences,
        min_score=settings.min_strong_score,
        min_price_delta_pct=settings.min_strong_price_delta_pct,
    )

    signals = fuse_signals(bars, indicators, divergences, config.signals)
    alerts = evaluate_alerts(indicators.rsi, config.alerts, times=indicators.times)
    macd_alerts = evaluate_macd_alerts(
        indicators.macd.line,
        indicators.macd.signal,
        indicators.macd.histogram,
        times=indicators.times,
    )
    resistance = detect_resistance_levels(
        bars,
        swing_len=config.resistance.swing_len,
        limit=config.resistance.limit,
        precision=config.resistance.precision,
    )

    logger.info(
        f"Analyzed {len(bars)} bars: {len(divergences)} divergences "
        f"({len(strong)} strong), {len(signals)} signals, "
        f"{len(alerts) + len(macd_alerts)} alerts"
    )
    return AnalysisResult(
        bars=bars,
        indicators=indicators,
        divergences=divergences,
        strong_divergences=strong,
        signals=signals,
        alerts=alerts,
        macd_alerts=macd_alerts,
        resistance=resistance,
    )
