"""Pivot (local extremum) detection over any numeric series."""

import math
from typing import Sequence

from signalcore.models.series import Pivot, PivotKind, PivotSet, point_values


def _is_absent(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def find_pivots(series: Sequence, window: int = 3) -> PivotSet:
    """
    Find local highs and lows.

    Index ``i`` is a HIGH pivot when its value is strictly greater than all
    ``2 * window`` neighbors and a LOW pivot when strictly less than all of
    them. A tie with any neighbor disqualifies that side. Indices closer
    than ``window`` to either end are never evaluated, nor is an index
    whose value or any neighbor is absent.

    Args:
        series: Values or IndicatorPoints (None/NaN for absent)
        window: Neighbors on each side (clamped to >= 1)

    Returns:
        PivotSet with highs and lows ordered by index
    """
    values = point_values(series)
    window = max(1, int(window))
    n = len(values)
    result = PivotSet()

    for i in range(window, n - window):
        v = values[i]
        if _is_absent(v):
            continue

        is_high = True
        is_low = True
        for k in range(1, window + 1):
            left = values[i - k]
            right = values[i + k]
            if _is_absent(left) or _is_absent(right):
                is_high = is_low = False
                break
            if left >= v or right >= v:
                is_high = False
            if left <= v or right <= v:
                is_low = False
            if not is_high and not is_low:
                break

        if is_high:
            result.highs.append(Pivot(index=i, value=float(v), kind=PivotKind.HIGH))
        elif is_low:
            result.lows.append(Pivot(index=i, value=float(v), kind=PivotKind.LOW))

    return result
