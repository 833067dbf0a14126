"""Resistance levels from the crests (local highs) of the bar highs."""

import logging
from typing import Sequence

from signalcore.models.bar import Bar
from signalcore.models.series import Crest, LevelSegment, ResistanceLevels
from signalcore.normalizer import source_values
from signalcore.pivots import find_pivots

logger = logging.getLogger(__name__)


def detect_resistance_levels(
    bars: Sequence[Bar],
    swing_len: int = 1,
    limit: int = 3,
    precision: int = 4,
) -> ResistanceLevels:
    """
    Detect resistance levels at the highest crests of the bar highs.

    Crests are HIGH pivots of ``bar.high`` with ``swing_len`` neighbors on
    each side, ranked by value (ties keep index order). Values equal at
    ``precision`` decimals count as one level; the first crest seen for a
    level is the one its segment is drawn around.

    Args:
        bars: Normalized bars, ascending by time
        swing_len: Neighbors on each side (clamped to >= 1)
        limit: Maximum number of levels (clamped to >= 1)
        precision: Decimals used to merge near-identical levels

    Returns:
        ResistanceLevels with levels highest first, every crest ranked by
        value, and one segment per level spanning the bars either side of
        its crest
    """
    if not bars:
        return ResistanceLevels()

    limit = max(1, int(limit))
    precision = max(0, int(precision))
    last = len(bars) - 1

    highs = find_pivots(source_values(bars, "high"), swing_len).highs
    crests = sorted(
        (Crest(index=p.index, value=p.value, time=bars[p.index].time) for p in highs),
        key=lambda c: -c.value,
    )

    result = ResistanceLevels(crests=crests)
    seen: set[str] = set()
    for crest in crests:
        key = f"{crest.value:.{precision}f}"
        if key in seen:
            continue
        seen.add(key)
        result.levels.append(crest.value)
        result.segments.append(
            LevelSegment(
                level=crest.value,
                start=bars[max(crest.index - 1, 0)].time,
                end=bars[min(crest.index + 1, last)].time,
            )
        )
        if len(result.levels) >= limit:
            break

    logger.debug(f"Resistance: {len(crests)} crests -> levels {result.levels}")
    return result
