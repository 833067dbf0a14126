"""Price/oscillator divergence detection.

Bearish: price makes a higher high while the oscillator makes a lower high.
Bullish: price makes a lower low while the oscillator makes a higher low.

Price and oscillator are pivot-detected independently with the same
window; each price pivot is then matched with the nearest oscillator pivot
of the same polarity within ``max_peak_distance`` bars.

This module is pure business logic with no I/O dependencies.
"""

import logging
from typing import Iterator, Sequence

from signalcore.models.config import DivergenceConfig
from signalcore.models.series import Pivot
from signalcore.models.signal import Divergence, DivergenceKind
from signalcore.pivots import find_pivots

logger = logging.getLogger(__name__)


def nearest_pivot(pivots: Sequence[Pivot], index: int, max_distance: int) -> Pivot | None:
    """Find the pivot closest to ``index`` within ``max_distance`` bars.

    On equal distance the first pivot found (lowest index) wins.
    """
    best = None
    best_distance = max_distance + 1
    for pivot in pivots:
        distance = abs(pivot.index - index)
        if distance < best_distance:
            best = pivot
            best_distance = distance
    return best


def _delta_base(value: float) -> float:
    return abs(value) or 1.0


def _pairs(pivots: Sequence[Pivot], config: DivergenceConfig) -> Iterator[tuple[Pivot, Pivot]]:
    """Yield chronological pivot pairs whose spacing is inside the configured range."""
    lo = config.min_bars_between_peaks
    hi = config.max_bars_between_peaks

    if config.consecutive_only:
        for p1, p2 in zip(pivots, pivots[1:]):
            bars_between = p2.index - p1.index
            if bars_between >= lo and (hi is None or bars_between <= hi):
                yield p1, p2
        return

    for i, p1 in enumerate(pivots):
        for p2 in pivots[i + 1 :]:
            bars_between = p2.index - p1.index
            if bars_between < lo:
                continue
            if hi is not None and bars_between > hi:
                break
            yield p1, p2


def _bearish(
    price_highs: Sequence[Pivot],
    osc_highs: Sequence[Pivot],
    config: DivergenceConfig,
) -> list[Divergence]:
    found = []
    for p1, p2 in _pairs(price_highs, config):
        # Price must make a materially higher high
        if p2.value <= p1.value * (1 + config.min_price_change_pct):
            continue

        r1 = nearest_pivot(osc_highs, p1.index, config.max_peak_distance)
        r2 = nearest_pivot(osc_highs, p2.index, config.max_peak_distance)
        if r1 is None or r2 is None:
            continue

        # Oscillator must make a materially lower high
        if r2.value >= r1.value * (1 - config.min_indicator_change_pct):
            continue

        if config.use_zones and not (r1.value >= config.zone_high or r2.value >= config.zone_high):
            continue

        price_delta = (p2.value - p1.value) / _delta_base(p1.value)
        indicator_delta = (r1.value - r2.value) / _delta_base(r1.value)
        found.append(_make(DivergenceKind.BEARISH, p1, p2, r1, r2, price_delta, indicator_delta))
    return found


def _bullish(
    price_lows: Sequence[Pivot],
    osc_lows: Sequence[Pivot],
    config: DivergenceConfig,
) -> list[Divergence]:
    found = []
    for p1, p2 in _pairs(price_lows, config):
        # Price must make a materially lower low
        if p2.value >= p1.value * (1 - config.min_price_change_pct):
            continue

        r1 = nearest_pivot(osc_lows, p1.index, config.max_peak_distance)
        r2 = nearest_pivot(osc_lows, p2.index, config.max_peak_distance)
        if r1 is None or r2 is None:
            continue

        # Oscillator must make a materially higher low
        if r2.value <= r1.value * (1 + config.min_indicator_change_pct):
            continue

        if config.use_zones and not (r1.value <= config.zone_low or r2.value <= config.zone_low):
            continue

        price_delta = (p1.value - p2.value) / _delta_base(p1.value)
        indicator_delta = (r2.value - r1.value) / _delta_base(r1.value)
        found.append(_make(DivergenceKind.BULLISH, p1, p2, r1, r2, price_delta, indicator_delta))
    return found


def _make(
    kind: DivergenceKind,
    p1: Pivot,
    p2: Pivot,
    r1: Pivot,
    r2: Pivot,
    price_delta: float,
    indicator_delta: float,
) -> Divergence:
    return Divergence(
        kind=kind,
        price_index1=p1.index,
        price_index2=p2.index,
        indicator_index1=r1.index,
        indicator_index2=r2.index,
        price_value1=p1.value,
        price_value2=p2.value,
        indicator_value1=r1.value,
        indicator_value2=r2.value,
        price_delta_pct=price_delta,
        indicator_delta_pct=indicator_delta,
        score=price_delta * indicator_delta,
    )


def find_divergences(
    price_series: Sequence,
    indicator_series: Sequence,
    config: DivergenceConfig | None = None,
    low_series: Sequence | None = None,
) -> list[Divergence]:
    """
    Find bearish and bullish divergences between price and an oscillator.

    Pairs are independent: a pivot may take part in several divergences
    and nothing is merged. Callers may rank by ``score``.

    Args:
        price_series: Price values searched for HIGH pivots (e.g. bar highs)
        indicator_series: Oscillator values aligned with price (e.g. RSI)
        config: Pairing and tolerance settings
        low_series: Price values searched for LOW pivots (e.g. bar lows);
            defaults to ``price_series``

    Returns:
        Bearish divergences followed by bullish ones
    """
    config = config or DivergenceConfig()
    if low_series is None:
        low_series = price_series

    window = config.peak_window
    price_highs = find_pivots(price_series, window).highs
    price_lows = find_pivots(low_series, window).lows
    osc = find_pivots(indicator_series, window)

    divergences = _bearish(price_highs, osc.highs, config) + _bullish(price_lows, osc.lows, config)

    logger.debug(
        f"Divergence scan: {len(price_highs)} price highs, {len(price_lows)} price lows, "
        f"{len(osc)} oscillator pivots -> {len(divergences)} divergences"
    )
    return divergences


def select_strong_divergences(
    divergences: Sequence[Divergence],
    min_score: float = 0.75,
    min_price_delta_pct: float = 0.01,
) -> list[Divergence]:
    """
    Keep divergences strong enough to hand to a signal store.

    A divergence qualifies when its score reaches ``min_score`` or its
    price move reaches ``min_price_delta_pct`` (fractions, 0.01 = 1%).
    """
    return [
        d for d in divergences
        if d.score >= min_score or abs(d.price_delta_pct) >= min_price_delta_pct
    ]
