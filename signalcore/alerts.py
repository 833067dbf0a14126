"""Threshold/alert evaluation on oscillator series.

Example (high=80, low=20):

    RSI:   45  52  68  81  77  48  32  18  25  41  55
    index:  0   1   2   3   4   5   6   7   8   9  10

    i=1   CROSS_UP_50
    i=3   OVERBOUGHT_ENTER
    i=5   CROSS_DOWN_50
    i=7   OVERSOLD_ENTER, PRE_OVERSOLD
    i=10  CROSS_UP_50

Edge detection compares each defined value with the last defined value
before it; absent values are skipped without resetting that state.
"""

import math
from typing import Sequence

from signalcore.models.config import AlertLevels
from signalcore.models.series import point_values
from signalcore.models.signal import AlertEvent, AlertType


def _defined(value) -> bool:
    return value is not None and not (isinstance(value, float) and math.isnan(value))


def _time_at(times: Sequence[int] | None, index: int) -> int | None:
    if times is None or index >= len(times):
        return None
    return times[index]


def evaluate_alerts(
    series: Sequence,
    levels: AlertLevels | None = None,
    times: Sequence[int] | None = None,
) -> list[AlertEvent]:
    """
    Detect level-crossing events on an oscillator series.

    Args:
        series: Oscillator values or IndicatorPoints (None for absent)
        levels: Alert levels
        times: Optional bar times; taken from IndicatorPoints when omitted

    Returns:
        Events ordered by index
    """
    levels = levels or AlertLevels()
    if times is None and series and hasattr(series[0], "time"):
        times = [p.time for p in series]
    values = point_values(series)

    alerts: list[AlertEvent] = []
    prev = None

    for i, cur in enumerate(values):
        if not _defined(cur):
            continue
        if prev is None:
            prev = cur
            continue

        def emit(alert_type: AlertType, level: float | None) -> None:
            alerts.append(
                AlertEvent(index=i, time=_time_at(times, i), type=alert_type, level=level, value=cur)
            )

        if prev < levels.high <= cur:
            emit(AlertType.OVERBOUGHT_ENTER, levels.high)

        if prev > levels.low >= cur:
            emit(AlertType.OVERSOLD_ENTER, levels.low)

        if levels.use_pre_low and prev > levels.pre_low >= cur:
            emit(AlertType.PRE_OVERSOLD, levels.pre_low)

        if levels.watch_midline:
            if prev < levels.midline <= cur:
                emit(AlertType.CROSS_UP_50, levels.midline)
            if prev > levels.midline >= cur:
                emit(AlertType.CROSS_DOWN_50, levels.midline)

        prev = cur

    return alerts


def evaluate_macd_alerts(
    line: Sequence[float | None],
    signal: Sequence[float | None],
    histogram: Sequence[float | None],
    times: Sequence[int] | None = None,
) -> list[AlertEvent]:
    """
    Detect MACD events between consecutive bars.

    - MACD_CROSS_UP / MACD_CROSS_DOWN: MACD line vs signal line
    - MACD_ZERO_UP / MACD_ZERO_DOWN: MACD line vs zero
    - MACD_HIST_FLIP_UP / MACD_HIST_FLIP_DOWN: histogram sign change

    Line/signal events need both values defined at ``i-1`` and ``i``;
    histogram flips need the histogram defined at both.

    Returns:
        Events ordered by index; ``value`` is the MACD line (or histogram
        for flips) at the event bar
    """
    alerts: list[AlertEvent] = []
    n = min(len(line), len(signal), len(histogram))

    for i in range(1, n):
        m_prev, m_cur = line[i - 1], line[i]
        s_prev, s_cur = signal[i - 1], signal[i]
        h_prev, h_cur = histogram[i - 1], histogram[i]
        time = _time_at(times, i)

        if all(_defined(v) for v in (m_prev, m_cur, s_prev, s_cur)):
            if m_prev <= s_prev and m_cur > s_cur:
                alerts.append(AlertEvent(index=i, time=time, type=AlertType.MACD_CROSS_UP, value=m_cur))
            if m_prev >= s_prev and m_cur < s_cur:
                alerts.append(AlertEvent(index=i, time=time, type=AlertType.MACD_CROSS_DOWN, value=m_cur))
            if m_prev <= 0 < m_cur:
                alerts.append(AlertEvent(index=i, time=time, type=AlertType.MACD_ZERO_UP, level=0.0, value=m_cur))
            if m_prev >= 0 > m_cur:
                alerts.append(AlertEvent(index=i, time=time, type=AlertType.MACD_ZERO_DOWN, level=0.0, value=m_cur))

        if _defined(h_prev) and _defined(h_cur):
            if h_prev <= 0 < h_cur:
                alerts.append(AlertEvent(index=i, time=time, type=AlertType.MACD_HIST_FLIP_UP, level=0.0, value=h_cur))
            if h_prev >= 0 > h_cur:
                alerts.append(AlertEvent(index=i, time=time, type=AlertType.MACD_HIST_FLIP_DOWN, level=0.0, value=h_cur))

    return alerts
