"""Tests for bar record normalization."""

import math
from datetime import datetime, timezone
from types import SimpleNamespace

from signalcore.models import Bar
from signalcore.normalizer import (
    datetime_to_timestamp,
    normalize_bar,
    normalize_bars,
    source_values,
    to_epoch_seconds,
)

# 2024-01-01 12:00:00 UTC
TS = 1704110400


class TestToEpochSeconds:
    """Tests for timestamp resolution."""

    def test_seconds(self):
        assert to_epoch_seconds(TS) == TS

    def test_milliseconds(self):
        assert to_epoch_seconds(TS * 1000) == TS

    def test_fractional_seconds_floored(self):
        assert to_epoch_seconds(TS + 0.9) == TS

    def test_numeric_string(self):
        assert to_epoch_seconds(str(TS)) == TS
        assert to_epoch_seconds(str(TS * 1000)) == TS

    def test_iso_string(self):
        assert to_epoch_seconds("2024-01-01T12:00:00Z") == TS
        assert to_epoch_seconds("2024-01-01T12:00:00+00:00") == TS
        assert to_epoch_seconds("2024-01-01T13:00:00+01:00") == TS

    def test_naive_iso_is_utc(self):
        assert to_epoch_seconds("2024-01-01T12:00:00") == TS

    def test_datetime(self):
        assert to_epoch_seconds(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)) == TS
        assert datetime_to_timestamp(datetime(2024, 1, 1, 12, 0)) == TS

    def test_unusable(self):
        assert to_epoch_seconds(None) is None
        assert to_epoch_seconds("") is None
        assert to_epoch_seconds("yesterday") is None
        assert to_epoch_seconds(True) is None
        assert to_epoch_seconds(float("nan")) is None
        assert to_epoch_seconds([TS]) is None


class TestNormalizeBar:
    """Tests for single record normalization."""

    def test_canonical_fields(self):
        bar = normalize_bar(
            {"time": TS, "open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 10}
        )

        assert bar == Bar(time=TS, open=1.0, high=2.0, low=0.5, close=1.5, volume=10.0)

    def test_short_aliases(self):
        bar = normalize_bar({"t": TS * 1000, "o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 3})

        assert bar.time == TS
        assert (bar.open, bar.high, bar.low, bar.close, bar.volume) == (1.0, 2.0, 0.5, 1.5, 3.0)

    def test_capitalized_aliases(self):
        bar = normalize_bar(
            {"timestamp": "2024-01-01T12:00:00Z", "Open": "1", "High": "2", "Low": "0.5", "Close": "1.5"}
        )

        assert bar.time == TS
        assert bar.close == 1.5
        assert bar.volume == 0.0

    def test_object_attributes(self):
        record = SimpleNamespace(ts=TS, open=1, high=2, low=0, close=1.5, volume=5)

        bar = normalize_bar(record)

        assert bar.time == TS
        assert bar.close == 1.5

    def test_bar_passes_through(self):
        bar = Bar(time=TS, open=1, high=2, low=0, close=1)

        assert normalize_bar(bar) is bar

    def test_malformed_prices_are_nan(self):
        bar = normalize_bar({"time": TS, "open": "x", "high": None, "low": 1, "close": "inf"})

        assert math.isnan(bar.open)
        assert math.isnan(bar.high)
        assert math.isnan(bar.close)
        assert bar.low == 1.0
        assert not bar.is_valid

    def test_bad_volume_is_zero(self):
        assert normalize_bar({"time": TS, "close": 1, "volume": -5}).volume == 0.0
        assert normalize_bar({"time": TS, "close": 1, "volume": "n/a"}).volume == 0.0

    def test_undated_dropped(self):
        assert normalize_bar({"close": 1}) is None

    def test_undated_uses_now(self):
        assert normalize_bar({"close": 1}, now=TS).time == TS


class TestNormalizeBars:
    """Tests for series normalization."""

    def test_sorted_ascending(self):
        records = [{"time": TS + 120, "close": 3}, {"time": TS, "close": 1}, {"time": TS + 60, "close": 2}]

        bars = normalize_bars(records)

        assert [b.time for b in bars] == [TS, TS + 60, TS + 120]
        assert [b.close for b in bars] == [1.0, 2.0, 3.0]

    def test_duplicate_time_last_wins(self):
        records = [{"time": TS, "close": 1}, {"time": TS * 1000, "close": 2}]

        bars = normalize_bars(records)

        assert len(bars) == 1
        assert bars[0].close == 2.0

    def test_undated_records_dropped(self, caplog):
        records = [{"time": TS, "close": 1}, {"close": 2}]

        with caplog.at_level("WARNING", logger="signalcore.normalizer"):
            bars = normalize_bars(records)

        assert len(bars) == 1
        assert "Dropped 1/2" in caplog.text

    def test_empty(self):
        assert normalize_bars([]) == []
        assert normalize_bars(None) == []

    def test_generator_input(self):
        bars = normalize_bars({"time": TS + i, "close": i} for i in range(5))

        assert len(bars) == 5


class TestSourceValues:
    """Tests for price source extraction."""

    def test_non_finite_is_absent(self):
        bars = [
            Bar(time=1, open=1, high=2, low=0, close=1),
            Bar(time=2, open=1, high=2, low=0, close=math.nan),
        ]

        assert source_values(bars) == [1.0, None]
        assert source_values(bars, "high") == [2.0, 2.0]

    def test_unknown_source_falls_back_to_close(self):
        bars = [Bar(time=1, open=1, high=2, low=0, close=1.5)]

        assert source_values(bars, "hl2") == [1.5]
