"""Multi-indicator signal fusion.

Each bar is evaluated on its own from fully materialized indicator series:
every enabled indicator family votes with zero or more BUY/SELL reasons and
the side with more reasons wins.

- EMA cross:   (fast - slow) flips from < 0 to >= 0 -> BUY, > 0 to <= 0 -> SELL
- RSI:         <= oversold -> BUY, >= overbought -> SELL
- MACD:        (line - signal) flip like EMA, plus histogram beyond +/- threshold
- Bollinger:   close at/below lower -> BUY (below -> breakout too), mirrored
               for upper; band width under the squeeze threshold -> BUY
- Divergence:  a divergence whose later pivot is this bar

Ties emit nothing. Confidence = winning reason count / number of families
with a defined value at the bar, capped at 1.

The only sequential state is the previous (fast - slow) and
(line - signal) differences used for crossover detection.

This module is pure business logic with no I/O dependencies.
"""

import logging
from typing import Sequence

from signalcore.indicators import IndicatorSet
from signalcore.models.bar import Bar
from signalcore.models.config import SignalConfig
from signalcore.models.signal import Action, Divergence, DivergenceKind, Reason, Signal

logger = logging.getLogger(__name__)


def _at(values: Sequence[float | None], index: int) -> float | None:
    """Value at ``index``, treating out-of-range as absent."""
    if index < len(values):
        return values[index]
    return None


def _cross(prev_diff: float | None, diff: float, buy: Reason, sell: Reason) -> Reason | None:
    """Classify a sign flip of a difference series."""
    if prev_diff is None:
        return None
    if prev_diff < 0 and diff >= 0:
        return buy
    if prev_diff > 0 and diff <= 0:
        return sell
    return None


class SignalFusion:
    """Fuse indicator readings into BUY/SELL signals.

    An instance can be reused: :meth:`fuse` resets the crossover state at
    the start of every run.
    """

    def __init__(self, config: SignalConfig | None = None):
        self.config = config or SignalConfig()
        self._prev_ema_diff: float | None = None
        self._prev_macd_diff: float | None = None

    # ------------------------------------------------------------------
    # Per-family reason predicates
    # ------------------------------------------------------------------

    def _ema_reasons(self, fast: float | None, slow: float | None) -> tuple[bool, list[Reason]]:
        if fast is None or slow is None:
            return False, []
        diff = fast - slow
        reason = _cross(self._prev_ema_diff, diff, Reason.EMA_CROSS_BUY, Reason.EMA_CROSS_SELL)
        self._prev_ema_diff = diff
        return True, [reason] if reason else []

    def _rsi_reasons(self, value: float | None) -> tuple[bool, list[Reason]]:
        if value is None:
            return False, []
        reasons = []
        if value <= self.config.rsi_oversold:
            reasons.append(Reason.RSI_OVERSOLD)
        if value >= self.config.rsi_overbought:
            reasons.append(Reason.RSI_OVERBOUGHT)
        return True, reasons

    def _macd_reasons(
        self,
        line: float | None,
        signal: float | None,
        histogram: float | None,
    ) -> tuple[bool, list[Reason]]:
        if line is None or signal is None:
            return False, []
        reasons = []
        diff = line - signal
        reason = _cross(self._prev_macd_diff, diff, Reason.MACD_CROSS_BUY, Reason.MACD_CROSS_SELL)
        self._prev_macd_diff = diff
        if reason:
            reasons.append(reason)

        threshold = self.config.macd_histogram_threshold
        if histogram is not None:
            if histogram > threshold:
                reasons.append(Reason.MACD_HISTOGRAM_BUY)
            elif histogram < -threshold:
                reasons.append(Reason.MACD_HISTOGRAM_SELL)
        return True, reasons

    def _bollinger_reasons(
        self,
        close: float | None,
        basis: float | None,
        upper: float | None,
        lower: float | None,
    ) -> tuple[bool, list[Reason]]:
        if close is None or upper is None or lower is None:
            return False, []
        reasons = []
        if close <= lower:
            reasons.append(Reason.BB_LOWER_TOUCH)
            if close < lower:
                reasons.append(Reason.BB_LOWER_BREAKOUT)
        if close >= upper:
            reasons.append(Reason.BB_UPPER_TOUCH)
            if close > upper:
                reasons.append(Reason.BB_UPPER_BREAKOUT)

        squeeze = self.config.bb_squeeze_threshold
        if squeeze is not None and basis:
            width = (upper - lower) / abs(basis)
            if width < squeeze:
                reasons.append(Reason.BB_SQUEEZE)
        return True, reasons

    @staticmethod
    def _divergence_reasons(divergences: Sequence[Divergence]) -> tuple[bool, list[Reason]]:
        if not divergences:
            return False, []
        reasons = []
        kinds = {d.kind for d in divergences}
        if DivergenceKind.BULLISH in kinds:
            reasons.append(Reason.BULLISH_DIVERGENCE)
        if DivergenceKind.BEARISH in kinds:
            reasons.append(Reason.BEARISH_DIVERGENCE)
        return True, reasons

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------

    def evaluate_bar(
        self,
        index: int,
        bar: Bar,
        indicators: IndicatorSet,
        divergences: Sequence[Divergence] = (),
    ) -> Signal | None:
        """Evaluate one bar and return a signal if one side wins.

        Must be called in index order; crossover detection relies on the
        previous call. A bar with a malformed price never votes.
        """
        if not bar.is_valid:
            return None

        cfg = self.config
        values = {name: _at(series, index) for name, series in indicators.series().items()}

        families = []
        if cfg.use_ema:
            families.append(self._ema_reasons(values["ema_fast"], values["ema_slow"]))
        if cfg.use_rsi:
            families.append(self._rsi_reasons(values["rsi"]))
        if cfg.use_macd:
            families.append(
                self._macd_reasons(values["macd"], values["macd_signal"], values["macd_histogram"])
            )
        if cfg.use_bollinger:
            families.append(
                self._bollinger_reasons(
                    bar.close, values["bb_basis"], values["bb_upper"], values["bb_lower"]
                )
            )
        if cfg.use_divergence:
            families.append(self._divergence_reasons(divergences))

        active = sum(1 for is_active, _ in families if is_active)
        buy = [r for _, reasons in families for r in reasons if r.side == Action.BUY]
        sell = [r for _, reasons in families for r in reasons if r.side == Action.SELL]

        if len(buy) == len(sell):
            return None

        action, reasons = (Action.BUY, buy) if len(buy) > len(sell) else (Action.SELL, sell)
        if len(reasons) < cfg.min_reasons:
            return None

        confidence = min(1.0, len(reasons) / active)
        signal = Signal(
            time=bar.time,
            action=action,
            reasons=reasons,
            confidence=confidence,
            price=bar.close,
            context=values,
        )
        logger.debug(
            f"{action.value} @ {bar.close} t={bar.time} "
            f"reasons={[r.value for r in reasons]} confidence={confidence:.2f}"
        )
        return signal

    def fuse(
        self,
        bars: Sequence[Bar],
        indicators: IndicatorSet,
        divergences: Sequence[Divergence] = (),
    ) -> list[Signal]:
        """
        Evaluate every bar and collect the emitted signals.

        Args:
            bars: Normalized bars
            indicators: Indicator series aligned with ``bars``
            divergences: Divergences to vote with, keyed by their later pivot

        Returns:
            Signals in bar order
        """
        self._prev_ema_diff = None
        self._prev_macd_diff = None

        by_index: dict[int, list[Divergence]] = {}
        for d in divergences:
            by_index.setdefault(d.price_index2, []).append(d)

        signals = []
        for i, bar in enumerate(bars):
            signal = self.evaluate_bar(i, bar, indicators, by_index.get(i, ()))
            if signal is not None:
                signals.append(signal)

        logger.debug(f"Fused {len(bars)} bars into {len(signals)} signals")
        return signals


def fuse_signals(
    bars: Sequence[Bar],
    indicators: IndicatorSet,
    divergences: Sequence[Divergence] = (),
    config: SignalConfig | None = None,
) -> list[Signal]:
    """Functional entry point for :class:`SignalFusion`."""
    return SignalFusion(config).fuse(bars, indicators, divergences)
