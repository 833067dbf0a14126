"""Series normalizer: heterogeneous bar records -> canonical Bar sequence.

Upstream providers disagree on field names (``close``/``c``/``Close``) and
timestamp encodings (epoch seconds, epoch milliseconds, ISO-8601 strings,
datetime objects). Everything downstream assumes ascending, unique,
integer-second times, so all of that is resolved here.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from signalcore.models.bar import Bar

logger = logging.getLogger(__name__)

# Epoch values above this are milliseconds
_MS_THRESHOLD = 1e12

TIME_FIELDS = ("time", "ts", "timestamp", "datetime", "date", "t")
OPEN_FIELDS = ("open", "o", "Open")
HIGH_FIELDS = ("high", "h", "High")
LOW_FIELDS = ("low", "l", "Low")
CLOSE_FIELDS = ("close", "c", "Close")
VOLUME_FIELDS = ("volume", "v", "Volume", "vol")


# =============================================================================
# Timestamp conversion helpers
# =============================================================================

def datetime_to_timestamp(dt: datetime) -> int:
    """Convert datetime to Unix timestamp in seconds (naive means UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return math.floor(dt.timestamp())


def _number_to_seconds(value: float) -> int | None:
    if not math.isfinite(value):
        return None
    if value > _MS_THRESHOLD:
        return math.floor(value / 1000)
    return math.floor(value)


def to_epoch_seconds(raw: Any) -> int | None:
    """Resolve a raw timestamp to integer epoch seconds.

    Returns None when the value cannot be interpreted.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return datetime_to_timestamp(raw)
    if isinstance(raw, (int, float)):
        return _number_to_seconds(float(raw))
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return _number_to_seconds(float(text))
        except ValueError:
            pass
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime_to_timestamp(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


# =============================================================================
# Field resolution
# =============================================================================

def _lookup(record: Any, names: Sequence[str]) -> Any:
    """Return the first non-None value among alternate field names."""
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def to_float(value: Any) -> float:
    """Coerce a raw price value to float; anything unusable becomes NaN."""
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        number = float(value)
    except (TypeError, ValueError):
        return math.nan
    return number if math.isfinite(number) else math.nan


def _to_volume(value: Any) -> float:
    volume = to_float(value)
    if math.isnan(volume) or volume < 0:
        return 0.0
    return volume


def normalize_bar(record: Any, now: int | None = None) -> Bar | None:
    """Normalize a single record.

    Args:
        record: Mapping, object with attributes, or Bar
        now: Fallback timestamp (seconds) for records without a usable time

    Returns:
        Bar, or None when no timestamp could be resolved and no fallback given
    """
    if isinstance(record, Bar):
        return record

    ts = to_epoch_seconds(_lookup(record, TIME_FIELDS))
    if ts is None:
        if now is None:
            return None
        ts = int(now)

    return Bar(
        time=ts,
        open=to_float(_lookup(record, OPEN_FIELDS)),
        high=to_float(_lookup(record, HIGH_FIELDS)),
        low=to_float(_lookup(record, LOW_FIELDS)),
        close=to_float(_lookup(record, CLOSE_FIELDS)),
        volume=_to_volume(_lookup(record, VOLUME_FIELDS)),
    )


def normalize_bars(records: Iterable[Any], now: int | None = None) -> list[Bar]:
    """Coerce bar-like records into an ascending, unique-time Bar list.

    When two records share a timestamp the one seen last wins.

    Args:
        records: Any iterable of bar-like records
        now: Optional fallback timestamp for undated records

    Returns:
        Bars sorted by time
    """
    by_time: dict[int, Bar] = {}
    dropped = 0
    total = 0

    for record in records or ():
        total += 1
        bar = normalize_bar(record, now=now)
        if bar is None:
            dropped += 1
            continue
        by_time[bar.time] = bar

    if dropped:
        logger.warning(f"Dropped {dropped}/{total} bar records without a usable timestamp")

    bars = [by_time[t] for t in sorted(by_time)]
    logger.debug(f"Normalized {total} records into {len(bars)} bars")
    return bars


def source_values(bars: Sequence[Bar], source: str = "close") -> list[float | None]:
    """Extract one price field per bar; non-finite values become None.

    Unknown source names fall back to ``close``.
    """
    if source not in ("open", "high", "low", "close", "volume"):
        source = "close"
    values: list[float | None] = []
    for bar in bars:
        v = getattr(bar, source)
        values.append(v if math.isfinite(v) else None)
    return values
